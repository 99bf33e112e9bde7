# Standard library imports for enumeration, UUID generation, and datetime handling
from enum import Enum
from datetime import datetime
import uuid

# Third-party imports for data validation and type hints
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

from localmr.models.context import Pair
from localmr.models.task import TaskStatus, TaskSummary
from localmr.utils.config import get_settings

# A user logic handle: either the callable itself or an import string
# of the form "package.module:attribute".
Handle = Union[str, Callable[..., Any]]


class JobStatus(str, Enum):
    """
    Enumeration of job states throughout the execution lifecycle.

    - PENDING: Job configured but not yet started
    - RUNNING: Job is executing one of its phases
    - COMPLETED: Every phase ran and the output was written
    - FAILED: A configuration, I/O or finalize error ended the job early
    """
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class JobConfig(BaseModel):
    """
    Immutable description of one MapReduce job.

    This model encapsulates everything the JobManager needs to run a job:
    - Job identification (id and human-readable name)
    - User logic handles for map, reduce and the optional combine/finalize hooks
    - Input/output paths and chunking
    - Execution mode and pool sizing

    Handles are not checked here so that a job with a missing handle can still
    be handed to the JobManager, which reports it as a configuration error
    before any phase runs. Defaults for chunk size and execution mode come
    from the engine settings.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # === Job Identification ===
    job_id: str = None                          # Unique identifier, auto-generated if not provided
    job_name: str = "untitled"                  # Human-readable name for the job

    # === User Logic ===
    mapper: Optional[Handle] = None             # mapper(record, emit)
    reducer: Optional[Handle] = None            # reducer(key, values, emit)
    combiner: Optional[Handle] = None           # combiner(key, values) -> values
    finalizer: Optional[Handle] = None          # finalizer(pairs) -> pairs

    # === Data Configuration ===
    input_paths: Tuple[str, ...] = ()
    output_path: Optional[str] = None
    chunk_size: int = Field(default_factory=lambda: get_settings().default_chunk_size, gt=0)

    # === Execution ===
    multi_threaded: bool = Field(default_factory=lambda: get_settings().multi_threaded)
    max_workers: Optional[int] = Field(default=None, gt=0)
    stateful_reducer: bool = False              # Serialize reducer calls behind one lock

    def __init__(self, **data):
        """
        Initialize JobConfig with automatic ID generation.

        Args:
            **data: Job configuration parameters
        """
        # Auto-generate unique job ID if not provided
        if data.get('job_id') is None:
            data['job_id'] = str(uuid.uuid4())

        super().__init__(**data)

    @field_validator("input_paths", mode="before")
    @classmethod
    def _single_path_to_tuple(cls, value):
        if isinstance(value, str):
            return (value,)
        return value


class JobResult(BaseModel):
    """
    Outcome of one job run.

    Carries the final ordered pairs, per-phase timing, and the summaries of
    every map and reduce task so callers can inspect partial failures.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    job_id: str
    job_name: str
    status: JobStatus = JobStatus.PENDING
    error_message: Optional[str] = None
    output_path: Optional[str] = None

    # === Output ===
    pairs: List[Pair] = Field(default_factory=list)

    # === Volume ===
    records_read: int = 0
    intermediate_pairs: int = 0
    key_groups: int = 0
    output_pairs: int = 0

    # === Tasks ===
    map_tasks: List[TaskSummary] = Field(default_factory=list)
    reduce_tasks: List[TaskSummary] = Field(default_factory=list)

    # === Timing Information ===
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    phase_durations: Dict[str, float] = Field(default_factory=dict)
    duration_seconds: float = 0.0

    metrics: Dict[str, Dict[str, float]] = Field(default_factory=dict)

    @property
    def failed_tasks(self) -> List[TaskSummary]:
        return [
            task for task in self.map_tasks + self.reduce_tasks
            if task.status == TaskStatus.FAILED
        ]

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.COMPLETED
