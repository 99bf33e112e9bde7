import threading
import time

import pytest

from localmr.core.map_processor import MapTask
from localmr.core.task_scheduler import TaskScheduler, default_pool_size
from localmr.utils.metrics import MetricsCollector


def slow_then_fast(record, emit):
    # Earlier chunks sleep longer so they finish last in parallel mode
    delay = float(record)
    time.sleep(delay)
    emit(record, threading.current_thread().name)


def build_tasks():
    delays = ["0.04", "0.03", "0.02", "0.01", "0.0"]
    return [MapTask(i, [delay], slow_then_fast) for i, delay in enumerate(delays)]


@pytest.mark.parametrize("multi_threaded", [True, False])
def test_contexts_returned_in_creation_order(multi_threaded):
    tasks = build_tasks()

    contexts = TaskScheduler(multi_threaded=multi_threaded, max_workers=5).run_phase("map", tasks)

    assert [context.owner for context in contexts] == [task.task_id for task in tasks]
    assert [context.pairs[0].key for context in contexts] == ["0.04", "0.03", "0.02", "0.01", "0.0"]
    assert all(context.closed for context in contexts)


def test_sequential_mode_runs_on_calling_thread():
    contexts = TaskScheduler(multi_threaded=False).run_phase("map", build_tasks())

    caller = threading.current_thread().name
    assert {context.pairs[0].value for context in contexts} == {caller}


def test_parallel_mode_uses_worker_threads_and_waits_for_all():
    tasks = build_tasks()

    TaskScheduler(multi_threaded=True, max_workers=2).run_phase("map", tasks)

    assert all(task.summary.is_completed() for task in tasks)
    threads = {task.context.pairs[0].value for task in tasks}
    assert all(name.startswith("localmr-map") for name in threads)
    assert len(threads) <= 2


def test_failed_tasks_do_not_stop_the_phase():
    def fail_on_odd(record, emit):
        if int(record) % 2:
            raise ValueError(record)
        emit(record, 1)

    tasks = [MapTask(i, [str(i)], fail_on_odd) for i in range(6)]
    metrics = MetricsCollector()

    contexts = TaskScheduler(multi_threaded=True, max_workers=3, metrics=metrics).run_phase("map", tasks)

    assert [len(context) for context in contexts] == [1, 0, 1, 0, 1, 0]
    assert metrics.get_counter("tasks_failed", "map") == 3
    assert metrics.get_counter("tasks_completed", "map") == 3


def test_empty_phase_returns_no_contexts():
    assert TaskScheduler().run_phase("reduce", []) == []


def test_default_pool_size_is_positive():
    assert default_pool_size() >= 1
    assert TaskScheduler(max_workers=None).max_workers == default_pool_size()
