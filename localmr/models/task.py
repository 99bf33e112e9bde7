# Standard library imports for enumeration and datetime handling
from enum import Enum
from datetime import datetime

# Third-party imports for data validation and type hints
from typing import Optional
from pydantic import BaseModel


class TaskType(str, Enum):
    """
    Enumeration of MapReduce task types.

    - MAP: Tasks that feed one chunk of records to the user map logic
    - REDUCE: Tasks that feed one key group to the user reduce logic
    """
    MAP = "map"
    REDUCE = "reduce"


class TaskStatus(str, Enum):
    """
    Enumeration of possible task states during execution lifecycle.

    Task lifecycle flow:
    PENDING → RUNNING → COMPLETED/FAILED

    - PENDING: Task created but not yet executed
    - RUNNING: Task currently executing on a worker thread or the caller
    - COMPLETED: Every record or key group was processed without error
    - FAILED: User logic raised at least once; partial output is kept
    """
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskSummary(BaseModel):
    """
    Execution record of a single Map or Reduce task.

    Tasks own their summary and update it while running; the JobManager
    copies the summaries into the JobResult once the phase barrier is passed.
    """

    # === Task Identification ===
    task_id: str                                # e.g. "map-0003", stable per job
    task_type: TaskType                         # MAP or REDUCE task type
    index: int                                  # Creation order within the phase

    # === Task State Tracking ===
    status: TaskStatus = TaskStatus.PENDING     # Current execution state
    error_message: Optional[str] = None         # First user logic error, if any

    # === Volume ===
    records_processed: int = 0                  # Records (map) or key groups (reduce) fed to user logic
    failed_records: int = 0                     # Inputs for which user logic raised
    pairs_emitted: int = 0                      # Size of the task's emission context

    # === Timing Information ===
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def get_execution_time(self) -> Optional[float]:
        """Execution time in seconds, when the task has finished"""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def is_completed(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.FAILED)
