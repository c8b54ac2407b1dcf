from fxtrack.preferences.service import PreferencesService, default_watched_pairs

__all__ = ["PreferencesService", "default_watched_pairs"]
