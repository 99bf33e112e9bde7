from datetime import datetime, timezone
from typing import List

from localmr.errors import TaskExecutionError
from localmr.models.context import EmissionContext
from localmr.models.task import TaskStatus, TaskSummary, TaskType
from localmr.utils.logger import get_logger


class TaskExecutor:
    """
    Common execution lifecycle of map and reduce tasks.

    A task runs exactly once. ``execute`` marks it running, feeds its input to
    user logic through ``_process``, closes the emission context and records
    the final status. User logic errors are captured per input with
    ``_record_error`` and never leave ``execute``: the task is marked failed,
    whatever was emitted stays in the context, and sibling tasks are unaffected.
    """

    task_type: TaskType

    def __init__(self, index: int):
        self.index = index
        self.task_id = f"{self.task_type.value}-{index:05d}"
        self.logger = get_logger(__name__)
        self.context = EmissionContext(owner=self.task_id)
        self.summary = TaskSummary(task_id=self.task_id, task_type=self.task_type, index=index)
        self.errors: List[TaskExecutionError] = []

    def execute(self) -> EmissionContext:
        """Run the task and return its closed emission context"""
        if self.summary.status != TaskStatus.PENDING:
            raise RuntimeError(f"Task {self.task_id} has already been executed")

        self.summary.status = TaskStatus.RUNNING
        self.summary.started_at = datetime.now(timezone.utc)
        try:
            self._process()
        finally:
            self.context.close()
            self.summary.pairs_emitted = len(self.context)
            self.summary.completed_at = datetime.now(timezone.utc)
            self.summary.status = TaskStatus.FAILED if self.errors else TaskStatus.COMPLETED

        if self.errors:
            self.logger.warning(
                f"Task {self.task_id} finished with {len(self.errors)} failed input(s), "
                f"{len(self.context)} pairs kept"
            )
        else:
            self.logger.debug(f"Task {self.task_id} emitted {len(self.context)} pairs")
        return self.context

    @property
    def failed(self) -> bool:
        return self.summary.status == TaskStatus.FAILED

    def _process(self):
        raise NotImplementedError

    def _record_error(self, position, error: Exception):
        message = f"{type(error).__name__}: {error}"
        self.errors.append(TaskExecutionError(message, task_id=self.task_id, position=position))
        self.summary.failed_records += 1
        if self.summary.error_message is None:
            self.summary.error_message = f"{position}: {message}"
        self.logger.warning(
            f"User logic failed in task {self.task_id} at {position}: {message}",
            exc_info=error,
        )
