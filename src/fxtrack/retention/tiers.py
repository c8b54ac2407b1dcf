"""Fixed retention tiers for historical rate samples.

Each tier pairs a minimum spacing between retained samples with how long
samples of that resolution are meant to be kept. Two values are behaviourally
active: the finest spacing gates sampling (60 s floor) and the coarsest horizon
drives pruning (90 days). The intermediate tiers are carried so that sampling
decisions can report the resolution a sample qualified for; pruning does not
downsample within the 90-day window.
"""

from dataclasses import dataclass

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


@dataclass(frozen=True)
class RetentionTier:
    """A named sampling granularity and its retention horizon."""

    name: str
    spacing_ms: int
    horizon_ms: int


# Finest first.
TIERS: tuple[RetentionTier, ...] = (
    RetentionTier("minute", MINUTE_MS, HOUR_MS),
    RetentionTier("five_minutes", 5 * MINUTE_MS, DAY_MS),
    RetentionTier("hour", HOUR_MS, 7 * DAY_MS),
    RetentionTier("six_hours", 6 * HOUR_MS, 30 * DAY_MS),
    RetentionTier("day", DAY_MS, 90 * DAY_MS),
)

MIN_SAMPLE_SPACING_MS = TIERS[0].spacing_ms
MAX_RETENTION_MS = TIERS[-1].horizon_ms


def tier_for_elapsed(elapsed_ms: int) -> RetentionTier | None:
    """Coarsest tier whose spacing ``elapsed_ms`` satisfies, or None if below the floor.

    Tiers are checked day -> six_hours -> hour -> five_minutes -> minute, so
    any elapsed time of at least a minute qualifies for some tier.
    """
    for tier in reversed(TIERS):
        if elapsed_ms >= tier.spacing_ms:
            return tier
    return None
