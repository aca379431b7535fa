"""Test doubles shared by the test modules."""
import io
from typing import List, Optional, Sequence

from labelgen.sampler import Sampler


class StubSampler(Sampler):
    """Sampler that replays scripted draws.

    Index picks arrive in groups of three per entry (delimiter, label,
    separator); delimiter and separator indices default to 0.
    """

    def __init__(
        self,
        count: int,
        label_indices: Sequence[int],
        values: Sequence[int],
        delimiter_indices: Optional[Sequence[int]] = None,
        separator_indices: Optional[Sequence[int]] = None,
    ):
        self.count = count
        self.label_indices: List[int] = list(label_indices)
        self.values: List[int] = list(values)
        self.delimiter_indices: List[int] = list(delimiter_indices or [])
        self.separator_indices: List[int] = list(separator_indices or [])
        self._index_calls = 0

    def pick_index(self, n: int) -> int:
        slot = self._index_calls % 3
        self._index_calls += 1
        if slot == 1:
            return self.label_indices.pop(0)
        scripted = self.delimiter_indices if slot == 0 else self.separator_indices
        return scripted.pop(0) if scripted else 0

    def pick_count(self, lo: int, hi: int) -> int:
        return self.count

    def pick_value(self, lo: int, hi: int) -> int:
        return self.values.pop(0)


class FailingSink(io.BytesIO):
    """In-memory sink that raises once more than ``fail_after`` bytes are written."""

    def __init__(self, fail_after: int):
        super().__init__()
        self.fail_after = fail_after

    def write(self, data):
        if self.tell() + len(data) > self.fail_after:
            raise OSError("No space left on device")
        return super().write(data)


class ShortWriteSink(io.BytesIO):
    """Sink that accepts one byte less than requested."""

    def write(self, data):
        return super().write(bytes(data)[:-1])
