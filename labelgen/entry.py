"""Data structure for a single generated entry."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Entry:
    """One ``label delimiter value`` occurrence in the output stream."""
    label: str
    delimiter: str
    value: int
    separator: Optional[str] = None

    @property
    def is_last(self) -> bool:
        """The final entry of a stream carries no separator."""
        return self.separator is None

