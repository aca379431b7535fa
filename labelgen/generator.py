"""Single-pass fixture generation with simultaneous aggregation."""
from typing import BinaryIO, Dict, Iterator, Optional, Tuple

from labelgen.aggregate import LabelAggregate, RunningAggregate, adjust_value, build_report
from labelgen.config import GeneratorConfig
from labelgen.entry import Entry
from labelgen.errors import WriteError
from labelgen.sampler import Sampler, create_sampler

ENCODING = "utf-8"


class StreamGenerator:
    """Emits randomized entries for one run and tracks per-label aggregates.

    A generator is single use: the entry count is drawn when iteration starts
    and the running aggregate belongs to that one pass.
    """

    def __init__(self, config: GeneratorConfig, sampler: Sampler):
        self.config = config
        self.sampler = sampler
        self.running = RunningAggregate(len(config.labels))
        self.entry_count: Optional[int] = None
        self.bytes_written = 0

        # Pre-encode every token once
        self._encoded: Dict[str, bytes] = {
            token: token.encode(ENCODING)
            for token in (*config.labels, *config.delimiters, *config.separators)
        }

    def entries(self) -> Iterator[Entry]:
        """Yield entries while updating the running aggregate."""
        if self.entry_count is not None:
            raise RuntimeError("StreamGenerator has already been run")

        config = self.config
        labels = config.labels
        delimiters = config.delimiters
        separators = config.separators

        n = self.sampler.pick_count(config.min_values, config.max_values)
        self.entry_count = n

        for i in range(n):
            delimiter = delimiters[self.sampler.pick_index(len(delimiters))]
            label_index = self.sampler.pick_index(len(labels))
            separator = separators[self.sampler.pick_index(len(separators))]

            value = self.sampler.pick_value(config.min_val, config.max_val)
            if self.running.would_overflow(label_index, value):
                value = adjust_value(value)

            self.running.add(label_index, value)

            yield Entry(
                labels[label_index],
                delimiter,
                value,
                separator if i + 1 < n else None,
            )

    def write_to(self, out: BinaryIO) -> int:
        """Write all entries to a binary sink and return the byte count.

        Raises WriteError on the first failed or short write.
        """
        for entry in self.entries():
            self._write(out, "label", self._encoded[entry.label])
            self._write(out, "delimiter", self._encoded[entry.delimiter])
            self._write(out, "value", b"%d" % entry.value)
            if not entry.is_last:
                self._write(out, "separator", self._encoded[entry.separator])

        return self.bytes_written

    def report(self) -> Dict[str, LabelAggregate]:
        """Final per-label records for the entries generated so far."""
        return build_report(self.config.labels, self.running)

    def _write(self, out: BinaryIO, stage: str, data: bytes):
        try:
            n = out.write(data)
        except (OSError, ValueError) as e:
            raise WriteError(stage, self.bytes_written, str(e)) from e

        # Buffered sinks return None or the full length
        if n is None:
            n = len(data)
        self.bytes_written += n
        if n < len(data):
            raise WriteError(stage, self.bytes_written, f"short write ({n} of {len(data)} bytes)")


def generate(
    config: GeneratorConfig,
    out: BinaryIO,
    sampler: Optional[Sampler] = None
) -> Tuple[Dict[str, LabelAggregate], int]:
    """Write a randomized entry stream to ``out`` and return its ground truth.

    Args:
        config: Validated generator configuration
        out: Binary sink receiving the entries
        sampler: Draw source; defaults to a UniformSampler seeded from config

    Returns:
        Tuple of (per-label report, bytes written)
    """
    if sampler is None:
        sampler = create_sampler(config.resolve_seed())

    generator = StreamGenerator(config, sampler)
    written = generator.write_to(out)
    return generator.report(), written
