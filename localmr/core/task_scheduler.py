import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional, Sequence

import psutil

from localmr.core.task_executor import TaskExecutor
from localmr.models.context import EmissionContext
from localmr.utils.logger import get_logger
from localmr.utils.metrics import MetricsCollector


def default_pool_size() -> int:
    """Logical CPU count of the machine, at least 1"""
    return psutil.cpu_count(logical=True) or 1


class TaskScheduler:
    """
    Runs the tasks of one phase and blocks until all of them are done.

    Two execution modes:
    - Sequential: tasks run one after another on the calling thread, in
      creation order.
    - Parallel: a fixed-size thread pool is created for the phase, every task
      is submitted, and the pool is shut down after all futures finished.
      No pool outlives its phase, so phases never overlap.

    In both modes the returned contexts are in task creation order, not
    completion order, which keeps downstream stages deterministic.
    """

    def __init__(self, multi_threaded: bool = True, max_workers: Optional[int] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.multi_threaded = multi_threaded
        self.max_workers = max_workers or default_pool_size()
        self.metrics = metrics
        self.logger = get_logger(__name__)

    def run_phase(self, phase: str, tasks: Sequence[TaskExecutor]) -> List[EmissionContext]:
        """
        Execute every task of a phase.

        Args:
            phase (str): Phase name used in logs and metrics ("map", "reduce").
            tasks: Tasks in creation order.

        Returns:
            List[EmissionContext]: One closed context per task, in creation order.
        """
        if not tasks:
            self.logger.info(f"No {phase} tasks to run")
            return []

        if self.multi_threaded:
            workers = min(self.max_workers, len(tasks))
            self.logger.info(f"Running {len(tasks)} {phase} tasks on {workers} worker threads")
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"localmr-{phase}") as pool:
                futures = [pool.submit(self._run_task, phase, task) for task in tasks]
                wait(futures)
            # Re-raise engine errors (never user logic errors, those stay on the task)
            contexts = [future.result() for future in futures]
        else:
            self.logger.info(f"Running {len(tasks)} {phase} tasks sequentially")
            contexts = [self._run_task(phase, task) for task in tasks]

        failed = sum(1 for task in tasks if task.failed)
        if failed:
            self.logger.warning(f"{failed} of {len(tasks)} {phase} tasks recorded errors")
        return contexts

    def _run_task(self, phase: str, task: TaskExecutor) -> EmissionContext:
        start = time.perf_counter()
        context = task.execute()
        if self.metrics is not None:
            self.metrics.record_task(phase, task.failed, time.perf_counter() - start)
        return context
