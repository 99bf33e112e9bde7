from localmr.models.context import EmissionContext, KeyGroup, Pair
from localmr.models.job import JobConfig, JobResult, JobStatus
from localmr.models.task import TaskStatus, TaskSummary, TaskType

__all__ = [
    "EmissionContext",
    "JobConfig",
    "JobResult",
    "JobStatus",
    "KeyGroup",
    "Pair",
    "TaskStatus",
    "TaskSummary",
    "TaskType",
]
