"""
LocalMR: a single-machine MapReduce engine.

    from localmr import JobConfig, run_job

    result = run_job(JobConfig(
        job_name="word-count",
        input_paths=["book.txt"],
        output_path="output/words.txt",
        mapper="localmr.jobs.word_count:map_words",
        reducer="localmr.jobs.word_count:sum_counts",
    ))
"""
from localmr.core.job_manager import JobManager, run_job
from localmr.core.merger import dedupe_pairs, sort_by_key
from localmr.errors import (
    ConfigurationError,
    InputReadError,
    LocalMRError,
    OutputWriteError,
)
from localmr.models import EmissionContext, JobConfig, JobResult, JobStatus, KeyGroup, Pair

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "EmissionContext",
    "InputReadError",
    "JobConfig",
    "JobManager",
    "JobResult",
    "JobStatus",
    "KeyGroup",
    "LocalMRError",
    "OutputWriteError",
    "Pair",
    "dedupe_pairs",
    "run_job",
    "sort_by_key",
]
