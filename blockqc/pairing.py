"""
File:       blockqc/pairing.py
Brief:      The Pair Coordinator: routes filter outcomes to the SE, PE and PE2 streams.
"""
# Standard library imports
from enum import Enum
from itertools import zip_longest
from typing import NamedTuple, Optional

# Local modules imports
from blockqc.config import PE, PE2, SE
from blockqc.errors import PairDesyncError
from blockqc.record import Record
from blockqc.type_aliases import FilterResult, RecordPairs, Records, Routing


class PairKind(Enum):
    BOTH_ACCEPTED = "both"
    ONLY_FIRST = "first"
    ONLY_SECOND = "second"
    NEITHER_ACCEPTED = "neither"


class PairOutcome(NamedTuple):
    kind: PairKind
    first: Optional[Record] = None
    second: Optional[Record] = None


def pair_outcome(first: FilterResult, second: FilterResult) -> PairOutcome:
    """Combine the filter results of both mates into a single outcome."""
    if first is not None and second is not None:
        return PairOutcome(PairKind.BOTH_ACCEPTED, first, second)
    if first is not None:
        return PairOutcome(PairKind.ONLY_FIRST, first=first)
    if second is not None:
        return PairOutcome(PairKind.ONLY_SECOND, second=second)
    return PairOutcome(PairKind.NEITHER_ACCEPTED)


def route_outcome(outcome: PairOutcome) -> Routing:
    """ Return the `(stream, record)` destinations of a pair.

        Accepted pairs go to PE (mate 1) and PE2 (mate 2), where PE2 may be the very same stream as PE.
        A lone survivor goes to SE; nothing is written when both mates were rejected.
    """
    if outcome.kind is PairKind.BOTH_ACCEPTED:
        return [(PE, outcome.first), (PE2, outcome.second)]
    if outcome.kind is PairKind.ONLY_FIRST:
        return [(SE, outcome.first)]
    if outcome.kind is PairKind.ONLY_SECOND:
        return [(SE, outcome.second)]
    return []


def route_pair(first: FilterResult, second: FilterResult) -> Routing:
    return route_outcome(pair_outcome(first, second))


def route_single(record: FilterResult) -> Routing:
    return [] if record is None else [(SE, record)]


_MISSING = object()


def iter_pairs(first: Records, second: Records) -> RecordPairs:
    """ Yield mate pairs from two record streams read in lockstep.

        Raises `PairDesyncError` as soon as one stream runs out before the other.
    """
    for count, (mate1, mate2) in enumerate(zip_longest(first, second, fillvalue=_MISSING), 1):
        if mate2 is _MISSING:
            raise PairDesyncError(f"Mate 2 ended before mate 1: no mate for record #{count} ({mate1.id!r})")
        if mate1 is _MISSING:
            raise PairDesyncError(f"Mate 1 ended before mate 2: no mate for record #{count} ({mate2.id!r})")
        yield mate1, mate2
