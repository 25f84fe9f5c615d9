"""
File:       blockqc/worker.py
Brief:      The Block Worker: filters one block end-to-end, in isolation from all other blocks.
"""
# Standard library imports
import timeit
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

# Local modules imports
from blockqc.config import OPEN_PARAMS, PE, PE2, SE, RunConfig
from blockqc.errors import MalformedRecordError, PairDesyncError
from blockqc.fastq_reader import open_block, read_records
from blockqc.filters import FilterPipeline
from blockqc.pairing import iter_pairs, route_pair, route_single
from blockqc.partition import block_output_path
from blockqc.writer import write_record

FATAL_BLOCK_ERRORS = (MalformedRecordError, PairDesyncError, OSError)


@dataclass(frozen=True)
class Block:
    """A record-aligned slice of the input: one file, or two mate files in paired mode."""
    ordinal: str
    mate1: Path
    mate2: Optional[Path] = None

    @property
    def paired(self) -> bool:
        return self.mate2 is not None

    @property
    def inputs(self):
        return (self.mate1,) if self.mate2 is None else (self.mate1, self.mate2)


@dataclass
class BlockResult:
    """What a worker reports back to the scheduler when its block is done, successfully or not."""
    ordinal: str
    ok: bool = True
    elapsed: float = 0.0
    counts: Counter = field(default_factory=Counter)
    error_kind: Optional[str] = None
    error: Optional[str] = None


def output_paths(block: Block, config: RunConfig) -> Dict[str, Path]:
    """Block-scoped output files; PE and PE2 exist only in paired mode, PE2 only for separate output."""
    categories = [SE]
    if block.paired:
        categories.append(PE)
        if config.separate_pe_output:
            categories.append(PE2)
    return {category: block_output_path(config.work_dir, config.run_id, block.ordinal, category)
            for category in categories}


def _filter_single(block: Block, pipeline: FilterPipeline, config: RunConfig, streams, counts: Counter) -> None:
    offset = config.filters.quality_offset
    with open_block(block.mate1) as input_handle:
        for record in read_records(input_handle, offset):
            counts["records"] += 1
            result, reason = pipeline.process_with_reason(record)
            if reason is not None:
                counts[f"rejected_{reason}"] += 1
            for category, accepted in route_single(result):
                write_record(streams[category], accepted, config.output_format)
                counts[category] += 1


def _filter_paired(block: Block, pipeline: FilterPipeline, config: RunConfig, streams, counts: Counter) -> None:
    offset = config.filters.quality_offset
    with open_block(block.mate1) as handle1, open_block(block.mate2) as handle2:
        for mate1, mate2 in iter_pairs(read_records(handle1, offset), read_records(handle2, offset)):
            counts["records"] += 2
            result1, reason1 = pipeline.process_with_reason(mate1)
            result2, reason2 = pipeline.process_with_reason(mate2)
            for reason in (reason1, reason2):
                if reason is not None:
                    counts[f"rejected_{reason}"] += 1
            for category, accepted in route_pair(result1, result2):
                write_record(streams[category], accepted, config.output_format)
                counts[PE if category == PE2 and not config.separate_pe_output else category] += 1


def process_block(block: Block, config: RunConfig) -> BlockResult:
    """ Filter every record (or record pair) of `block` and write the survivors to block-scoped outputs.

        All files are closed on every exit path. On success the consumed input files are removed.
        On a fatal error the partial outputs are removed, the inputs are kept, and the error propagates.
    """
    start = timeit.default_timer()
    pipeline = FilterPipeline(config.filters)
    paths = output_paths(block, config)
    counts: Counter = Counter()

    try:
        with ExitStack() as stack:
            streams = {category: stack.enter_context(open(path, "wt", **OPEN_PARAMS))
                       for category, path in paths.items()}
            if block.paired and PE2 not in streams:
                streams[PE2] = streams[PE]
            if block.paired:
                _filter_paired(block, pipeline, config, streams, counts)
            else:
                _filter_single(block, pipeline, config, streams, counts)
    except FATAL_BLOCK_ERRORS:
        for path in paths.values():
            path.unlink(missing_ok=True)
        raise

    for path in block.inputs:
        path.unlink()
    counts["dropped"] = counts["records"] - counts[SE] - counts[PE] - counts[PE2]
    return BlockResult(block.ordinal, elapsed=timeit.default_timer() - start, counts=counts)


def run_block(block: Block, config: RunConfig) -> BlockResult:
    """ Worker-pool entry point

        A fatal error is not re-raised across the pool boundary; it comes back as a failed
        `BlockResult` that names the block, the error kind and the message.
    """
    start = timeit.default_timer()
    try:
        return process_block(block, config)
    except FATAL_BLOCK_ERRORS as error:
        return BlockResult(block.ordinal, ok=False, elapsed=timeit.default_timer() - start,
                           error_kind=type(error).__name__, error=str(error))
