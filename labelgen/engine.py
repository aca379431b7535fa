"""Generator engine: runs one fixture generation end to end."""
import time
import logging
from dataclasses import dataclass
from typing import BinaryIO, Dict, Optional

from labelgen.aggregate import LabelAggregate
from labelgen.config import GeneratorConfig
from labelgen.errors import WriteError
from labelgen.generator import StreamGenerator
from labelgen.metrics import SelfMetrics
from labelgen.sampler import Sampler, create_sampler

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of a completed generation run."""
    report: Dict[str, LabelAggregate]
    bytes_written: int
    entries: int
    seed: int
    duration_s: float


class GeneratorEngine:
    """Orchestrates seeding, generation and self-metrics for a run."""

    def __init__(self, config: GeneratorConfig, self_metrics: Optional[SelfMetrics] = None):
        self.config = config
        self.self_metrics = self_metrics

        if self.self_metrics:
            self.self_metrics.set_labels_configured(len(config.labels))

        logger.info(
            f"Generator engine initialized: {len(config.labels)} labels, "
            f"{config.min_values}-{config.max_values} entries, "
            f"values in [{config.min_val}, {config.max_val}]"
        )

    def run(self, out: BinaryIO, sampler: Optional[Sampler] = None) -> RunResult:
        """Generate one fixture stream into ``out``."""
        seed = self.config.resolve_seed()
        if sampler is None:
            sampler = create_sampler(seed)
            if self.config.time_seed:
                logger.info(f"Using time-derived seed {seed}")
            else:
                logger.info(f"Using seed {seed}")
            logger.debug(f"Sampler algorithm: {getattr(sampler, 'algorithm', type(sampler).__name__)}")

        start = time.time()
        generator = StreamGenerator(self.config, sampler)

        try:
            written = generator.write_to(out)
        except WriteError as e:
            logger.error(f"Generation aborted: {e}")
            if self.self_metrics:
                self.self_metrics.record_write_error(e.stage)
                self.self_metrics.record_bytes(e.bytes_written)
            raise

        duration = time.time() - start
        report = generator.report()

        if self.self_metrics:
            self.self_metrics.record_report(report)
            self.self_metrics.record_bytes(written)
            self.self_metrics.record_run_duration(duration)

        logger.info(
            f"Generated {generator.entry_count} entries ({written} bytes) in {duration:.3f}s"
        )

        return RunResult(
            report=report,
            bytes_written=written,
            entries=generator.entry_count,
            seed=seed,
            duration_s=duration,
        )
