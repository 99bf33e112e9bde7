import threading
from contextlib import nullcontext
from typing import Any, Callable, Optional

from localmr.core.task_executor import TaskExecutor
from localmr.models.context import KeyGroup
from localmr.models.task import TaskType


class ReduceTask(TaskExecutor):
    """
    Reduce phase task over one key group.

    The user reduce logic is called exactly once:

        reducer(key, values, emit)

    ``values`` is the ordered tuple of every value emitted for ``key`` during
    the map phase (after combining, if a combiner is configured). The reducer
    may emit any number of pairs under any key.

    Reduce tasks never share an emission context. When the job declares a
    stateful reducer, all tasks share one lock and the reducer call is made
    while holding it, which serializes reducers that touch state outside
    their context.
    """

    task_type = TaskType.REDUCE

    def __init__(
        self,
        index: int,
        key_group: KeyGroup,
        reducer: Callable[[Any, tuple, Callable[[Any, Any], None]], Any],
        lock: Optional[threading.Lock] = None,
    ):
        super().__init__(index)
        self.key_group = key_group
        self.reducer = reducer
        self.lock = lock

    def _process(self):
        key, values = self.key_group
        guard = self.lock if self.lock is not None else nullcontext()
        try:
            with guard:
                self.reducer(key, values, self.context.write)
        except Exception as e:
            self._record_error(f"key {key!r}", e)
        self.summary.records_processed = 1
