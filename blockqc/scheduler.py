"""
File:       blockqc/scheduler.py
Brief:      The Block Scheduler: runs one Block Worker task per block on a bounded pool, then merges outputs.

Details:
            Blocks share nothing, so the only synchronization point is the join barrier after the last
            block finishes. Blocks may finish in any order; the merge restores input order from the ordinals.
            Two pool engines are available: "process" (concurrent.futures) and "dask" (distributed).
"""
# Standard library imports
import concurrent.futures
import timeit
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

# Third party library imports
from distributed import as_completed as dask_as_completed

# Local modules imports
from blockqc.config import PE, PE2, SE, STAT_SUFFIX, RunConfig
from blockqc.errors import PairDesyncError, RunFailedError
from blockqc.initialize import initialize_dask, shutdown_dask
from blockqc.partition import Merger, parse_ordinal
from blockqc.stats import write_stats
from blockqc.utils import format_elapsed, report, time_it
from blockqc.worker import Block, BlockResult, run_block


class SchedulerState(Enum):
    IDLE = "idle"
    LAUNCHING = "launching"
    AWAITING_COMPLETION = "awaiting completion"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunSummary:
    results: List[BlockResult]
    elapsed: float
    outputs: Dict[str, Path] = field(default_factory=dict)
    stats: Optional[Path] = None


class BlockScheduler:
    """ Discovers the blocks in the work directory, filters them concurrently and merges their outputs

        `jobs` bounds the number of blocks processed at the same time.
    """

    def __init__(self, config: RunConfig, *, dask_processes: bool = True) -> None:
        self.config = config
        self.dask_processes = dask_processes
        self.state = SchedulerState.IDLE
        self.results: List[BlockResult] = []

    def _mate_blocks(self, mate: int) -> Dict[str, Path]:
        pattern = f"{self.config.run_id}.{mate}.*"
        return {parse_ordinal(path.name): path for path in Path(self.config.work_dir).glob(pattern)
                if parse_ordinal(path.name) is not None and path.name.count(".") == 2}

    def discover_blocks(self) -> List[Block]:
        """Return all input blocks sorted by ordinal. In paired mode, mate blocks are matched by ordinal."""
        mate1 = self._mate_blocks(1)
        ordinals = sorted(mate1, key=int)
        if not self.config.paired:
            return [Block(ordinal, mate1[ordinal]) for ordinal in ordinals]

        mate2 = self._mate_blocks(2)
        unmatched = sorted(set(mate1) ^ set(mate2), key=int)
        if unmatched:
            raise PairDesyncError(f"Mate files were partitioned into different block counts; "
                                  f"unmatched block(s): {', '.join(unmatched)}")
        return [Block(ordinal, mate1[ordinal], mate2[ordinal]) for ordinal in ordinals]

    def categories(self) -> List[str]:
        categories = [SE]
        if self.config.paired:
            categories.append(PE)
            if self.config.separate_pe_output:
                categories.append(PE2)
        return categories

    def _run_processes(self, blocks: List[Block]) -> Iterator[BlockResult]:
        with concurrent.futures.ProcessPoolExecutor(max_workers=self.config.jobs) as executor:
            futures = [executor.submit(run_block, block, self.config) for block in blocks]
            self.state = SchedulerState.AWAITING_COMPLETION
            for future in concurrent.futures.as_completed(futures):
                yield future.result()

    def _run_dask(self, blocks: List[Block]) -> Iterator[BlockResult]:
        client = initialize_dask(self.config.jobs, processes=self.dask_processes)
        try:
            futures = client.map(run_block, blocks, config=self.config, pure=False)
            self.state = SchedulerState.AWAITING_COMPLETION
            for future in dask_as_completed(futures):
                yield future.result()
        finally:
            shutdown_dask(client)

    def _report(self, result: BlockResult) -> None:
        if result.ok:
            report(f"Block {result.ordinal} done in {format_elapsed(result.elapsed)}: "
                   f"{result.counts['records']} records in, {result.counts['dropped']} dropped")
        else:
            report(f"Block {result.ordinal} FAILED after {format_elapsed(result.elapsed)}: "
                   f"{result.error_kind}: {result.error}")

    @time_it
    def run(self, blocks: Optional[List[Block]] = None) -> RunSummary:
        """ Process all blocks, wait for every one of them, then merge the outputs in ordinal order.

            Raises `RunFailedError` after the join barrier if any block failed; nothing is merged then.
        """
        start = timeit.default_timer()
        if blocks is None:
            blocks = self.discover_blocks()

        self.state = SchedulerState.LAUNCHING
        report(f"Launching {len(blocks)} block(s) on {self.config.jobs} {self.config.engine} worker(s)...")
        self.results = []
        if blocks:
            run_blocks = self._run_dask if self.config.engine == "dask" else self._run_processes
            for result in run_blocks(blocks):
                self._report(result)
                self.results.append(result)
        self.state = SchedulerState.AWAITING_COMPLETION
        self.results.sort(key=lambda result: int(result.ordinal))

        config = self.config
        stats_path = Path(config.output_dir) / f"{config.run_id}.{STAT_SUFFIX}"
        write_stats(self.results, stats_path)

        failed = [result for result in self.results if not result.ok]
        if failed:
            self.state = SchedulerState.FAILED
            raise RunFailedError(failed)

        self.state = SchedulerState.MERGING
        merger = Merger(config.work_dir, config.output_dir, config.run_id,
                        compress=config.compress_output, threads=config.jobs)
        outputs = {category: merger.merge(category) for category in self.categories()}

        self.state = SchedulerState.DONE
        return RunSummary(self.results, timeit.default_timer() - start, outputs, stats_path)
