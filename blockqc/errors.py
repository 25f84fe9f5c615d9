"""
File:       blockqc/errors.py
Brief:      Exception types.
"""
from typing import List


class BlockQcError(Exception):
    """Base class for all errors raised by this package"""


class ConfigError(BlockQcError):
    """Invalid or conflicting options. Reported before any processing starts."""


class MalformedRecordError(BlockQcError):
    """A truncated or inconsistent 4-line FASTQ unit. Fatal for the block that contains it."""


class PairDesyncError(BlockQcError):
    """Mate files don't hold the same number of records. Fatal for the block that contains them."""


class RunFailedError(BlockQcError):
    """One or more blocks failed, so the run's output would be incomplete and was not merged."""

    def __init__(self, failed: List) -> None:
        self.failed = failed
        details = ", ".join(f"block {result.ordinal} ({result.error_kind}: {result.error})" for result in failed)
        super().__init__(f"{len(failed)} block(s) failed: {details}")
