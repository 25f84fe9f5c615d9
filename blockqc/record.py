"""
File:       blockqc/record.py
Brief:      The in-memory representation of a single sequencing read.
"""
# Standard library imports
from dataclasses import dataclass

# Third party library imports
import numpy as np


def to_scores(qual: str, offset: int) -> np.ndarray:
    """Convert quality characters into numeric scores, `ord(char) - offset` per position."""
    return np.frombuffer(qual.encode("ascii"), dtype=np.uint8).astype(np.int16) - offset


@dataclass(frozen=True, eq=False)
class Record:
    """ One read: its ID, bases, quality characters and numeric quality scores.

        `seq`, `qual` and `nqual` always have the same length.
        Trimming never modifies a record in place; `trimmed` returns a new, right-sized one.
    """
    id: str
    seq: str
    qual: str
    nqual: np.ndarray

    def __post_init__(self) -> None:
        if not len(self.seq) == len(self.qual) == len(self.nqual):
            raise ValueError(
                f"Record {self.id!r} has inconsistent lengths: "
                f"seq={len(self.seq)}, qual={len(self.qual)}, nqual={len(self.nqual)}"
            )

    @classmethod
    def from_fastq(cls, id_: str, seq: str, qual: str, offset: int) -> "Record":
        return cls(id_, seq, qual, to_scores(qual, offset))

    def __len__(self) -> int:
        return len(self.seq)

    def trimmed(self, start: int, end: int) -> "Record":
        """Return the `[start, end)` view of this record. Bounds must satisfy `0 <= start <= end <= len`."""
        if not 0 <= start <= end <= len(self):
            raise ValueError(f"Invalid trim bounds [{start}, {end}) for a read of length {len(self)}")
        if start == 0 and end == len(self):
            return self
        return Record(self.id, self.seq[start:end], self.qual[start:end], self.nqual[start:end])

    def head(self, length: int) -> "Record":
        """Keep only the first `length` positions."""
        return self.trimmed(0, length)
