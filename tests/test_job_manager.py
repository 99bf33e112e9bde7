import logging
import os
import threading

import pytest

from conftest import collect_words, list_values, sum_values
from localmr.core.job_manager import JobManager, run_job
from localmr.core.merger import dedupe_pairs
from localmr.errors import ConfigurationError, InputReadError
from localmr.models.job import JobConfig, JobStatus
from localmr.models.task import TaskStatus


def word_job(input_path, output_path, **overrides):
    options = dict(
        job_name="words",
        input_paths=[input_path],
        output_path=output_path,
        mapper=collect_words,
        reducer=sum_values,
        chunk_size=2,
    )
    options.update(overrides)
    return JobConfig(**options)


def test_airport_scenario_writes_one_line_per_key(airport_input, tmp_path):
    output = tmp_path / "out" / "airports.txt"
    config = JobConfig(
        job_name="airports",
        input_paths=[airport_input],
        output_path=str(output),
        mapper="localmr.jobs.airports:map_record",
        reducer="localmr.jobs.airports:reduce_group",
        chunk_size=2,
    )

    result = JobManager().run_job(config)

    assert result.status == JobStatus.COMPLETED
    assert result.records_read == 2
    assert len(result.map_tasks) == 1
    assert result.intermediate_pairs == 2
    assert result.key_groups == 2
    assert [task.records_processed for task in result.reduce_tasks] == [1, 1]
    lines = output.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert all(line.startswith("Key: ") for line in lines)
    assert lines[0].startswith("Key: AAA Value: AIRPORT NAME: A")
    assert lines[1].startswith("Key: BBB Value: AIRPORT NAME: B")


def test_missing_mapper_aborts_before_any_phase(airport_input, tmp_path, caplog):
    output = tmp_path / "never.txt"
    config = JobConfig(
        input_paths=[airport_input],
        output_path=str(output),
        reducer="localmr.jobs.airports:reduce_group",
    )

    with caplog.at_level(logging.INFO, logger="localmr"):
        result = JobManager().run_job(config)

    assert result.status == JobStatus.FAILED
    assert "mapper" in result.error_message
    assert not output.exists()
    assert result.phase_durations == {}
    critical = [record for record in caplog.records if record.levelno == logging.CRITICAL]
    assert critical and "ConfigurationError" in critical[0].getMessage()
    assert "mapper" in critical[0].getMessage()


def test_raise_on_failure_reraises_configuration_error(airport_input, tmp_path):
    config = JobConfig(input_paths=[airport_input], output_path=str(tmp_path / "x.txt"),
                       mapper=collect_words)

    with pytest.raises(ConfigurationError):
        run_job(config, raise_on_failure=True)


def test_missing_input_paths_and_output_path_are_configuration_errors(airport_input):
    no_inputs = JobConfig(mapper=collect_words, reducer=sum_values, output_path="out.txt")
    no_output = JobConfig(mapper=collect_words, reducer=sum_values, input_paths=airport_input)

    assert "input paths" in JobManager().run_job(no_inputs).error_message
    assert "output path" in JobManager().run_job(no_output).error_message


def test_unreadable_input_fails_without_output(tmp_path):
    output = tmp_path / "out.txt"
    config = word_job(str(tmp_path / "missing.txt"), str(output))

    result = JobManager().run_job(config)

    assert result.status == JobStatus.FAILED
    assert not output.exists()
    with pytest.raises(InputReadError):
        JobManager().run_job(config, raise_on_failure=True)


def test_unwritable_output_fails_the_job(words_input, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    config = word_job(words_input, str(blocker / "out.txt"))

    result = JobManager().run_job(config)

    assert result.status == JobStatus.FAILED
    assert "Cannot write output" in result.error_message
    assert "output" in result.phase_durations


def test_sequential_and_parallel_modes_produce_identical_output(words_input, tmp_path):
    sequential = run_job(word_job(words_input, str(tmp_path / "seq.txt"), multi_threaded=False))
    parallel = run_job(word_job(words_input, str(tmp_path / "par.txt"),
                                multi_threaded=True, max_workers=4, reducer=list_values))
    parallel_sum = run_job(word_job(words_input, str(tmp_path / "par2.txt"),
                                    multi_threaded=True, max_workers=4))
    sequential_list = run_job(word_job(words_input, str(tmp_path / "seq2.txt"),
                                       multi_threaded=False, reducer=list_values))

    assert sequential.pairs == parallel_sum.pairs
    assert sequential_list.pairs == parallel.pairs
    assert (tmp_path / "seq.txt").read_text() == (tmp_path / "par2.txt").read_text()


def test_rerunning_a_job_is_idempotent(words_input, tmp_path):
    config = word_job(words_input, str(tmp_path / "out.txt"))

    first = run_job(config)
    first_text = (tmp_path / "out.txt").read_text()
    second = run_job(config)

    assert first.pairs == second.pairs
    assert (tmp_path / "out.txt").read_text() == first_text


def test_word_counts_and_value_order(words_input, tmp_path):
    result = run_job(word_job(words_input, str(tmp_path / "out.txt"), reducer=list_values))

    counts = {key: len(values) for key, values in result.pairs}
    assert counts["the"] == 5
    assert counts["dog"] == 3
    assert result.pairs[0].key == "the"
    assert result.records_read == 5
    assert len(result.map_tasks) == 3
    assert result.intermediate_pairs == sum(counts.values())


def test_combiner_does_not_change_output(words_input, tmp_path):
    plain = run_job(word_job(words_input, str(tmp_path / "plain.txt")))
    combined = run_job(word_job(words_input, str(tmp_path / "combined.txt"),
                                combiner="localmr.jobs.word_count:combine_counts"))

    assert combined.status == JobStatus.COMPLETED
    assert combined.pairs == plain.pairs


def test_map_task_error_keeps_partial_output_and_job_proceeds(write_input, tmp_path):
    path = write_input("r1\nr2\nr3\nr4\nr5\nr6\nr7\n")

    def fail_on_r3(record, emit):
        if record == "r3":
            raise ValueError("cannot parse r3")
        emit(record, 1)

    result = run_job(JobConfig(
        input_paths=[path], output_path=str(tmp_path / "out.txt"),
        mapper=fail_on_r3, reducer=sum_values, chunk_size=5,
    ))

    assert result.status == JobStatus.COMPLETED
    assert [task.status for task in result.map_tasks] == [TaskStatus.FAILED, TaskStatus.COMPLETED]
    assert result.map_tasks[0].pairs_emitted == 4
    assert [pair.key for pair in result.pairs] == ["r1", "r2", "r4", "r5", "r6", "r7"]
    assert len(result.failed_tasks) == 1


def test_reduce_task_error_does_not_affect_siblings(words_input, tmp_path):
    def picky(key, values, emit):
        if key == "dog":
            raise RuntimeError("no dogs")
        emit(key, sum(values))

    result = run_job(word_job(words_input, str(tmp_path / "out.txt"), reducer=picky))

    assert result.status == JobStatus.COMPLETED
    keys = [pair.key for pair in result.pairs]
    assert "dog" not in keys and "the" in keys
    failed = [task for task in result.reduce_tasks if task.status == TaskStatus.FAILED]
    assert len(failed) == 1


def test_finalize_hook_applied_before_output(write_input, tmp_path):
    path = write_input("a a\nb a\n")

    def emit_each(key, values, emit):
        for _ in values:
            emit(key, "x")

    result = run_job(JobConfig(
        input_paths=[path], output_path=str(tmp_path / "out.txt"),
        mapper=collect_words, reducer=emit_each, finalizer=dedupe_pairs,
    ))

    assert [tuple(pair) for pair in result.pairs] == [("a", "x"), ("b", "x")]
    assert (tmp_path / "out.txt").read_text() == "Key: a Value: x\nKey: b Value: x\n"


def test_failing_finalize_hook_is_fatal(words_input, tmp_path):
    def broken(pairs):
        raise ValueError("broken hook")

    output = tmp_path / "out.txt"
    result = run_job(word_job(words_input, str(output), finalizer=broken))

    assert result.status == JobStatus.FAILED
    assert not output.exists()


def test_stateful_reducer_runs_under_one_lock(words_input, tmp_path):
    seen = []
    active = []
    guard = threading.Lock()

    def stateful(key, values, emit):
        with guard:
            active.append(key)
            overlapping = len(active)
        seen.append(overlapping)
        emit(key, len(seen))
        with guard:
            active.remove(key)

    result = run_job(word_job(words_input, str(tmp_path / "out.txt"), reducer=stateful,
                              stateful_reducer=True, multi_threaded=True, max_workers=4))

    assert result.status == JobStatus.COMPLETED
    assert set(seen) == {1}
    assert sorted(value for _, value in result.pairs) == list(range(1, len(seen) + 1))


def test_result_reports_timings_and_metrics(words_input, tmp_path):
    result = run_job(word_job(words_input, str(tmp_path / "out.txt")))

    assert set(result.phase_durations) == {"input", "map", "shuffle", "reduce", "merge", "output"}
    assert result.duration_seconds >= sum(result.phase_durations.values()) * 0.99
    assert result.metrics["localmr_tasks_completed_total"]["map"] == 3
    assert result.metrics["localmr_tasks_completed_total"]["reduce"] == result.key_groups
    assert result.output_pairs == len(result.pairs) == result.key_groups
    assert os.path.exists(result.output_path)


class Unprintable:
    def __str__(self):
        raise ValueError("unprintable")


def test_unprintable_output_value_fails_the_job_without_output(words_input, tmp_path, caplog):
    def unprintable_dog(key, values, emit):
        emit(key, Unprintable() if key == "dog" else sum(values))

    output = tmp_path / "out.txt"
    with caplog.at_level(logging.INFO, logger="localmr"):
        result = run_job(word_job(words_input, str(output), reducer=unprintable_dog))

    assert result.status == JobStatus.FAILED
    assert "Cannot format pair" in result.error_message
    assert not output.exists()
    assert not any(entry.name.endswith(".tmp") for entry in tmp_path.iterdir())
    levels = [record.levelno for record in caplog.records]
    assert logging.CRITICAL in levels
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Failed Job: 'words'") for message in messages)
    assert not any(message.startswith("Completed Job") for message in messages)


def test_unhashable_map_key_is_a_task_error(write_input, tmp_path):
    path = write_input("ok\nbad\nfine\n")

    def list_key_for_bad(record, emit):
        emit([record] if record == "bad" else record, 1)

    result = run_job(JobConfig(
        input_paths=[path], output_path=str(tmp_path / "out.txt"),
        mapper=list_key_for_bad, reducer=sum_values,
    ))

    assert result.status == JobStatus.COMPLETED
    assert result.map_tasks[0].status == TaskStatus.FAILED
    assert result.map_tasks[0].failed_records == 1
    assert "record 2" in result.map_tasks[0].error_message
    assert [pair.key for pair in result.pairs] == ["ok", "fine"]


def test_summary_log_includes_task_counts(words_input, tmp_path, caplog):
    with caplog.at_level(logging.INFO, logger="localmr"):
        run_job(word_job(words_input, str(tmp_path / "out.txt")))

    summary = [record.getMessage() for record in caplog.records
               if record.getMessage().startswith("Completed Job")]
    assert len(summary) == 1
    assert "map: 3 ok/0 failed" in summary[0]
