"""Historical rate retention: tiers, sampling decisions, pruning and the daily sweep."""

from fxtrack.retention.pruner import RetentionPruner
from fxtrack.retention.sampler import SamplingEngine
from fxtrack.retention.scheduler import RetentionScheduler
from fxtrack.retention.tiers import TIERS, RetentionTier

__all__ = [
    "RetentionPruner",
    "RetentionScheduler",
    "RetentionTier",
    "SamplingEngine",
    "TIERS",
]
