"""
File:       blockqc/filters.py
Brief:      The Filter Pipeline: fixed trimming, adapter, N and quality filters.
"""
# Standard library imports
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple

# Third party library imports
import numpy as np
from Bio.Seq import reverse_complement

# Local modules imports
from blockqc.config import FilterConfig, MIN_READ_LEN, WINDOW_LEN
from blockqc.record import Record
from blockqc.type_aliases import FilterResult

# Rejection reasons, in pipeline order.
REJECTED_BY_TRIM = "trim"
REJECTED_BY_ADAPTER = "adapter"
REJECTED_BY_N = "n"
REJECTED_BY_QUALITY = "quality"
REJECTION_REASONS = (REJECTED_BY_TRIM, REJECTED_BY_ADAPTER, REJECTED_BY_N, REJECTED_BY_QUALITY)


def fixed_trim(record: Record, trim5: int, trim3: int) -> Record:
    """Remove `trim3` positions from the tail, then `trim5` positions from the head."""
    end = max(len(record) - trim3, 0)
    start = min(trim5, end)
    return record.trimmed(start, end)


def contains_adapter(sequence: str, adapters: Iterable[str]) -> bool:
    """Return True if any of `adapters` occurs in `sequence`."""
    for adapter in adapters:
        if adapter in sequence:
            return True
    return False


def filter_out_by_adapters(sequence: str, adapters: Iterable[str]) -> bool:
    """ Return True if the record should be filtered out (discarded), otherwise False.

        Both orientations are checked: the sequence itself and its reverse complement.
    """
    adapters = tuple(adapters)
    if contains_adapter(sequence, adapters):
        return True
    return contains_adapter(reverse_complement(sequence), adapters)


def filter_out_by_n(sequence: str) -> bool:
    return "N" in sequence


class QualityFilter(ABC):
    """ Abstract Base Class for quality-adaptive trimming

        Implementations return the truncated record, or None if the record is rejected.
    """

    def __init__(self, threshold: int) -> None:
        self.threshold = threshold

    @abstractmethod
    def apply(self, record: Record) -> FilterResult:
        pass

    def _mean_passes(self, scores: np.ndarray) -> bool:
        return len(scores) > 0 and float(scores.mean()) > self.threshold


class StandardQualityFilter(QualityFilter):
    """ Mean check, 3' trim to the last good base, minimum length, and low-quality window check

        1. Reject unless the mean score is strictly greater than the threshold.
        2. Truncate after the last position whose score is at least the threshold.
        3. Reject if fewer than `MIN_READ_LEN` bases remain.
        4. Reject if any window of `WINDOW_LEN` consecutive scores lies entirely below the threshold.
    """

    def apply(self, record: Record) -> FilterResult:
        if not self._mean_passes(record.nqual):
            return None

        good = np.flatnonzero(record.nqual >= self.threshold)
        record = record.head(int(good[-1]) + 1)
        if len(record) < MIN_READ_LEN:
            return None

        low = record.nqual < self.threshold
        windows = np.lib.stride_tricks.sliding_window_view(low, WINDOW_LEN)
        if windows.all(axis=1).any():
            return None
        return record


class NewMethodQualityFilter(QualityFilter):
    """ Trim back to the rightmost run of three good bases, then check the mean

        Position `i` qualifies when scores `i-1`, `i` and `i+1` are all at least the threshold.
        The rightmost qualifying `i` with `i >= MIN_READ_LEN - 1` becomes the last kept position;
        without one, the read is rejected. The truncated read must then have a mean score
        strictly greater than the threshold.
    """

    def apply(self, record: Record) -> FilterResult:
        if len(record) < MIN_READ_LEN + 1:
            # The scan needs a qualifying center at index MIN_READ_LEN - 1 or later, plus one base after it.
            return None

        good = record.nqual >= self.threshold
        centers = np.flatnonzero(good[:-2] & good[1:-1] & good[2:]) + 1
        centers = centers[centers >= MIN_READ_LEN - 1]
        if len(centers) == 0:
            return None

        record = record.head(int(centers[-1]) + 1)
        if not self._mean_passes(record.nqual):
            return None
        return record


class FilterPipeline:
    """ Decides whether a read survives, and in what truncated form

        The stages run in order and the first rejection short-circuits the rest:
        fixed trim, adapter filter, N filter and quality filter.
        The pipeline is a pure function of the record and its `FilterConfig`.
    """

    def __init__(self, config: FilterConfig) -> None:
        self.config = config
        self.quality_filter: Optional[QualityFilter] = None
        if config.quality_threshold is not None:
            if config.use_new_method:
                self.quality_filter = NewMethodQualityFilter(config.quality_threshold)
            else:
                self.quality_filter = StandardQualityFilter(config.quality_threshold)

    def process_with_reason(self, record: Record) -> Tuple[FilterResult, Optional[str]]:
        """Return `(record, None)` for an accepted record, or `(None, reason)` for a rejected one."""
        config = self.config

        # Step 1: Fixed trim.
        trimmed = fixed_trim(record, config.trim5, config.trim3)
        if len(trimmed) == 0 and len(record) > 0:
            return None, REJECTED_BY_TRIM
        record = trimmed

        # Step 2: Filter by adapters, in both orientations.
        if config.strip_adapters and filter_out_by_adapters(record.seq, config.adapters):
            return None, REJECTED_BY_ADAPTER

        # Step 3: Filter by N.
        if config.no_n and filter_out_by_n(record.seq):
            return None, REJECTED_BY_N

        # Step 4: Quality trimming and filtering.
        if self.quality_filter is not None:
            record = self.quality_filter.apply(record)
            if record is None:
                return None, REJECTED_BY_QUALITY

        return record, None

    def process(self, record: Record) -> FilterResult:
        return self.process_with_reason(record)[0]
