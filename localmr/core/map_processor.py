from typing import Any, Callable, List, Optional

from localmr.core.task_executor import TaskExecutor
from localmr.models.task import TaskType


class MapTask(TaskExecutor):
    """
    Map phase task over one chunk of records.

    Each record is passed, in chunk order, to the user map logic together with
    the ``write`` method of this task's private emission context:

        mapper(record, emit)

    The mapper emits zero or more (key, value) pairs and returns nothing; any
    return value is ignored. If the mapper raises for one record the error is
    logged, the task is marked failed, and processing continues with the next
    record, so the context holds the pairs of every record that succeeded.
    """

    task_type = TaskType.MAP

    def __init__(self, index: int, chunk: List[str], mapper: Callable[[str, Callable[[Any, Any], None]], Any]):
        super().__init__(index)
        self.chunk: Optional[List[str]] = chunk
        self.mapper = mapper

    def _process(self):
        emit = self.context.write
        for position, record in enumerate(self.chunk, start=1):
            try:
                self.mapper(record, emit)
            except Exception as e:
                self._record_error(f"record {position}", e)
            self.summary.records_processed += 1

        # The chunk is owned by this task alone and is not needed past the map phase
        self.chunk = None
