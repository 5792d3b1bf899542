"""Single-flight scheduling of think-cycles.

The Celery application lives in ``scheduler.celery_app`` and is imported
only by the worker and by ``CeleryCycleQueue`` on first use.
"""

from .lease import CycleLease, LeaseState, new_owner_id
from .queue import CeleryCycleQueue, CycleQueue, InMemoryCycleQueue
from .service import CycleScheduler, SchedulerSettings

__all__ = [
    "CeleryCycleQueue",
    "CycleLease",
    "CycleQueue",
    "CycleScheduler",
    "InMemoryCycleQueue",
    "LeaseState",
    "SchedulerSettings",
    "new_owner_id",
]
