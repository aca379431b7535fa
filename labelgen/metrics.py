"""Run self-metrics using prometheus_client."""
from typing import Dict, Optional
import logging

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, write_to_textfile

from labelgen.aggregate import LabelAggregate

logger = logging.getLogger(__name__)


class SelfMetrics:
    """Self-monitoring metrics for generation runs.

    Lives in its own registry so batch runs can dump exactly these series to
    a node_exporter textfile.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, prefix: str = "labelgen_"):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.entries_total = Counter(
            f"{prefix}entries_total",
            "Total number of entries generated",
            ["label"],
            registry=registry
        )

        self.bytes_written_total = Counter(
            f"{prefix}bytes_written_total",
            "Total number of fixture bytes written",
            registry=registry
        )

        self.write_errors_total = Counter(
            f"{prefix}write_errors_total",
            "Total number of failed runs by write stage",
            ["stage"],
            registry=registry
        )

        self.run_duration_seconds = Histogram(
            f"{prefix}run_duration_seconds",
            "Duration of each generation run in seconds",
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0],
            registry=registry
        )

        self.labels_configured = Gauge(
            f"{prefix}labels_configured",
            "Number of labels in the active configuration",
            registry=registry
        )

    def record_report(self, report: Dict[str, LabelAggregate]):
        """Record per-label entry counts from a finished run."""
        for label, aggregate in report.items():
            self.entries_total.labels(label=label).inc(aggregate.values)

    def record_bytes(self, count: int):
        self.bytes_written_total.inc(count)

    def record_write_error(self, stage: str):
        self.write_errors_total.labels(stage=stage).inc()

    def record_run_duration(self, duration: float):
        self.run_duration_seconds.observe(duration)

    def set_labels_configured(self, count: int):
        self.labels_configured.set(count)

    def write_textfile(self, path: str):
        """Write all metrics in exposition format for the textfile collector."""
        write_to_textfile(path, self.registry)
        logger.info(f"Self-metrics written to {path}")
