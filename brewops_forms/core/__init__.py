"""Core shared infrastructure for brewops-forms.

Contains the submission models, the scheduler abstraction and the
lifetime token shared by every form controller.
"""

from brewops_forms.core.lifetime import Lifetime
from brewops_forms.core.models import Notification, SubmissionOutcome, SubmissionStatus
from brewops_forms.core.scheduler import (
    ManualScheduler,
    ScheduledTask,
    Scheduler,
    ThreadingScheduler,
)

__all__ = [
    # Models
    "Notification",
    "SubmissionOutcome",
    "SubmissionStatus",
    # Scheduling
    "Lifetime",
    "ManualScheduler",
    "ScheduledTask",
    "Scheduler",
    "ThreadingScheduler",
]
