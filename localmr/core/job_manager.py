# Standard library imports for timing, locking and type hints
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

# Internal imports for MapReduce stages, models and logging
from localmr.core.data_splitter import DataSplitter
from localmr.core.map_processor import MapTask
from localmr.core.merger import Merger
from localmr.core.reduce_processor import ReduceTask
from localmr.core.shuffler import Shuffler
from localmr.core.task_scheduler import TaskScheduler
from localmr.errors import ConfigurationError, LocalMRError
from localmr.models.job import JobConfig, JobResult, JobStatus
from localmr.services.handle_loader import HandleLoader, ResolvedHandles
from localmr.services.output_writer import OutputWriter
from localmr.utils.config import get_settings
from localmr.utils.logger import get_logger
from localmr.utils.metrics import MetricsCollector


class JobManager:
    """
    Central orchestrator of a MapReduce job run.

    This class drives the complete job lifecycle on the local machine:
    - Validation of the configuration and resolution of user logic handles
    - Input: reading input files into chunks of records
    - Map: one MapTask per chunk, run through the TaskScheduler
    - Shuffle/combine: grouping every emitted pair by key
    - Reduce: one ReduceTask per key group, run through the TaskScheduler
    - Merge: concatenating reduce output in task order, optional finalize hook
    - Output: writing the final pairs through the OutputWriter

    Phases run strictly in sequence and each one is a full barrier. User logic
    errors stay inside their task and are reported in the JobResult;
    configuration, I/O and finalize errors end the job before output is
    written.
    """

    def __init__(
        self,
        data_splitter: Optional[DataSplitter] = None,
        output_writer: Optional[OutputWriter] = None,
        handle_loader: Optional[HandleLoader] = None,
    ):
        """
        Initialize the JobManager with its collaborators.

        Args:
            data_splitter: Chunk source, defaults to DataSplitter()
            output_writer: Output sink, defaults to OutputWriter()
            handle_loader: User logic resolver, defaults to HandleLoader()
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)
        self.data_splitter = data_splitter or DataSplitter()
        self.output_writer = output_writer or OutputWriter()
        self.handle_loader = handle_loader or HandleLoader()

    def run_job(self, config: JobConfig, raise_on_failure: bool = False) -> JobResult:
        """
        Run one job from input files to output file.

        Args:
            config: Immutable job configuration
            raise_on_failure: Re-raise fatal errors after recording them on
                the result instead of only returning a failed JobResult

        Returns:
            JobResult: Status, final pairs, task summaries and timings.

        Raises:
            LocalMRError: Only when raise_on_failure is set and the job failed.
        """
        result = JobResult(
            job_id=config.job_id,
            job_name=config.job_name,
            output_path=config.output_path,
            started_at=datetime.now(timezone.utc),
        )
        metrics = MetricsCollector(enabled=self.settings.enable_metrics)
        job_start = time.perf_counter()

        self.logger.info(f"Job {config.job_id} submitted: '{config.job_name}'")
        result.status = JobStatus.RUNNING

        try:
            handles = self._validate(config)
            self._run_phases(config, handles, result, metrics)
            result.status = JobStatus.COMPLETED

        except LocalMRError as e:
            result.status = JobStatus.FAILED
            result.error_message = str(e)
            cause = f" cause: {e.__cause__!r}" if e.__cause__ is not None else ""
            self.logger.critical(
                f"Job {config.job_id} '{config.job_name}' failed: {type(e).__name__}: {e}{cause}"
            )
            if raise_on_failure:
                raise

        finally:
            result.duration_seconds = time.perf_counter() - job_start
            result.completed_at = datetime.now(timezone.utc)
            result.metrics = metrics.snapshot()

        if result.succeeded:
            self.logger.info(
                f"Completed Job: '{config.job_name}' to {config.output_path} "
                f"in {result.duration_seconds * 1000:.0f}ms "
                f"({result.output_pairs} pairs, {len(result.failed_tasks)} failed tasks, "
                f"{self._task_counts(result.metrics)})"
            )
        else:
            self.logger.error(
                f"Failed Job: '{config.job_name}' after {result.duration_seconds * 1000:.0f}ms, "
                f"no output written ({self._task_counts(result.metrics)})"
            )
        return result

    @staticmethod
    def _task_counts(snapshot) -> str:
        """Format per-phase task counters from a metrics snapshot"""
        completed = snapshot.get("localmr_tasks_completed_total", {})
        failed = snapshot.get("localmr_tasks_failed_total", {})
        phases = sorted(set(completed) | set(failed))
        if not phases:
            return "no task metrics"
        return ", ".join(
            f"{phase}: {completed.get(phase, 0):.0f} ok/{failed.get(phase, 0):.0f} failed"
            for phase in phases
        )

    def _validate(self, config: JobConfig) -> ResolvedHandles:
        """
        Fail fast on configuration problems before any phase runs.

        Raises:
            ConfigurationError: Missing handles, input paths or output path.
        """
        handles = self.handle_loader.load(config)
        if not config.input_paths:
            raise ConfigurationError("No input paths configured; set JobConfig(input_paths=[...])")
        if not config.output_path:
            raise ConfigurationError("No output path configured; set JobConfig(output_path=...)")
        return handles

    def _run_phases(self, config: JobConfig, handles: ResolvedHandles,
                    result: JobResult, metrics: MetricsCollector):
        scheduler = TaskScheduler(
            multi_threaded=config.multi_threaded,
            max_workers=config.max_workers or self.settings.max_workers,
            metrics=metrics,
        )

        with self._phase("input", result, metrics):
            chunks = self.data_splitter.split_all(config.input_paths, config.chunk_size)
            result.records_read = sum(len(chunk) for chunk in chunks)

        with self._phase("map", result, metrics):
            map_tasks = [MapTask(i, chunk, handles.mapper) for i, chunk in enumerate(chunks)]
            # Each chunk is now owned by its map task only
            del chunks
            map_contexts = scheduler.run_phase("map", map_tasks)
            result.map_tasks = [task.summary for task in map_tasks]
            result.intermediate_pairs = sum(len(context) for context in map_contexts)

        with self._phase("shuffle", result, metrics):
            key_groups = Shuffler().group(map_contexts, handles.combiner)
            result.key_groups = len(key_groups)
            del map_contexts

        with self._phase("reduce", result, metrics):
            lock = threading.Lock() if config.stateful_reducer else None
            reduce_tasks = [
                ReduceTask(i, group, handles.reducer, lock) for i, group in enumerate(key_groups)
            ]
            reduce_contexts = scheduler.run_phase("reduce", reduce_tasks)
            result.reduce_tasks = [task.summary for task in reduce_tasks]

        with self._phase("merge", result, metrics):
            pairs = Merger().merge(reduce_contexts, handles.finalizer)

        with self._phase("output", result, metrics):
            self.output_writer.write(config.output_path, pairs)

        result.pairs = pairs
        result.output_pairs = len(pairs)

    @contextmanager
    def _phase(self, name: str, result: JobResult, metrics: MetricsCollector) -> Iterator[None]:
        """Log a phase and record its wall-clock duration, also when it fails"""
        self.logger.info(f"Starting {name} phase...")
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            result.phase_durations[name] = duration
            metrics.record_phase(name, duration)
        self.logger.info(f"Finished {name} phase in {duration * 1000:.1f}ms")


def run_job(config: JobConfig, raise_on_failure: bool = False) -> JobResult:
    """Run a job with a default JobManager"""
    return JobManager().run_job(config, raise_on_failure=raise_on_failure)
