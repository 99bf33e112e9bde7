from typing import Dict
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


class MetricsCollector:
    """
    Prometheus metrics for one job run.

    Each instance owns its own CollectorRegistry so repeated jobs in one
    process never collide on metric names.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.registry = CollectorRegistry()
        self.tasks_completed = Counter(
            'localmr_tasks_completed', 'Tasks completed without error',
            ['phase'], registry=self.registry
        )
        self.tasks_failed = Counter(
            'localmr_tasks_failed', 'Tasks that recorded a user logic error',
            ['phase'], registry=self.registry
        )
        self.task_duration = Histogram(
            'localmr_task_duration_seconds', 'Task duration in seconds',
            ['phase'], registry=self.registry
        )
        self.phase_duration = Gauge(
            'localmr_phase_duration_seconds', 'Wall-clock duration of a phase',
            ['phase'], registry=self.registry
        )

    def record_task(self, phase: str, failed: bool, duration: float):
        """Count a finished task and observe its duration"""
        if not self.enabled:
            return
        if failed:
            self.tasks_failed.labels(phase=phase).inc()
        else:
            self.tasks_completed.labels(phase=phase).inc()
        self.task_duration.labels(phase=phase).observe(duration)

    def record_phase(self, phase: str, duration: float):
        if self.enabled:
            self.phase_duration.labels(phase=phase).set(duration)

    def get_counter(self, name: str, phase: str) -> float:
        """Current value of a task counter for one phase"""
        value = self.registry.get_sample_value(f"localmr_{name}_total", {"phase": phase})
        return value or 0.0

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Flatten the registry into {metric: {phase: value}} for logging"""
        result: Dict[str, Dict[str, float]] = {}
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name.endswith(("_bucket", "_created")):
                    continue
                phase = sample.labels.get("phase", "")
                result.setdefault(sample.name, {})[phase] = sample.value
        return result
