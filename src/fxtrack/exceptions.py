"""Exceptions raised by fxtrack.

Storage errors are not wrapped: aiosqlite/sqlite3 errors propagate
unchanged from the stores.
"""


class FxTrackError(Exception):
    """Base exception for all fxtrack errors."""


class ProviderError(FxTrackError):
    """Raised when an upstream quote or news fetch fails.

    Covers non-2xx responses, transport errors and timeouts, and payloads
    that do not have the expected shape.
    """


class NotFoundOrUnauthorized(FxTrackError):
    """Raised when a mutation references a record that is missing or not owned by the caller."""


class Unauthenticated(FxTrackError):
    """Raised when an operation that requires an identity is called without one."""


class PruneFailed(FxTrackError):
    """Raised when a sample was stored but the follow-up prune of its pair failed.

    The sample stays persisted; the original storage error is the __cause__.
    """
