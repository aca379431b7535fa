"""Per-label running aggregates and the final ground-truth report."""
from typing import Dict, IO, List, Sequence
import json

import yaml
from pydantic import BaseModel

from labelgen.config import INT32_MAX


def narrow_i32(value: int) -> int:
    """Wrap an integer into signed 32-bit range (two's complement)."""
    value &= 0xFFFFFFFF
    if value > INT32_MAX:
        value -= 1 << 32
    return value


def adjust_value(value: int) -> int:
    """Overflow-avoidance adjustment applied before accumulating a value.

    Non-positive values are negated with 32-bit wraparound, positive values
    pass through unchanged, so a label's narrowed sum can still wrap when
    large positive values pile up.
    """
    if value <= 0:
        return narrow_i32(-value)
    return value


class RunningAggregate:
    """Widened per-label sums and counts for one generation run."""

    def __init__(self, size: int):
        self.sums: List[int] = [0] * size
        self.counts: List[int] = [0] * size

    def would_overflow(self, index: int, value: int) -> bool:
        """Whether adding ``value`` takes the label's sum past INT32_MAX."""
        return self.sums[index] + value > INT32_MAX

    def add(self, index: int, value: int):
        self.sums[index] += value
        self.counts[index] += 1


class LabelAggregate(BaseModel):
    """Ground truth for a single label."""
    values: int
    value: int


def build_report(labels: Sequence[str], running: RunningAggregate) -> Dict[str, LabelAggregate]:
    """Narrow the running aggregate into one record per label."""
    return {
        label: LabelAggregate(
            values=running.counts[index],
            value=narrow_i32(running.sums[index]),
        )
        for index, label in enumerate(labels)
    }


def report_to_dict(report: Dict[str, LabelAggregate]) -> Dict[str, Dict[str, int]]:
    """Plain mapping of the report, sorted by label for stable display."""
    return {label: report[label].model_dump() for label in sorted(report)}


def dump_report(report: Dict[str, LabelAggregate], stream: IO[str], fmt: str = "json"):
    """Serialize the report to a text stream as JSON or YAML."""
    data = report_to_dict(report)

    if fmt == "json":
        json.dump(data, stream, indent=2)
        stream.write("\n")
    elif fmt == "yaml":
        yaml.safe_dump(data, stream, default_flow_style=False, sort_keys=True)
    else:
        raise ValueError(f"Unknown aggregate format: {fmt}")
