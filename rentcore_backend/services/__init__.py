from .periods import Period
from .status import PaymentStatus, derive_status
from .store import RentStore
from .advance import AdvanceDistributor, DistributionResult, plan_distribution
from .reconciler import rank_defaulters, reconcile, summarize
from .notifications import build_notifier, notify_payments

__all__ = [
    "Period", "PaymentStatus", "derive_status", "RentStore",
    "AdvanceDistributor", "DistributionResult", "plan_distribution",
    "reconcile", "rank_defaulters", "summarize",
    "build_notifier", "notify_payments",
]
