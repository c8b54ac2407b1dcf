from fxtrack.alerts.evaluator import AlertEvaluator
from fxtrack.alerts.service import AlertService, require_identity

__all__ = ["AlertEvaluator", "AlertService", "require_identity"]
