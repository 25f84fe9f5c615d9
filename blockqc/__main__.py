"""
File:       blockqc/__main__.py
Brief:      The high-level main business logic file.
"""
# Standard library imports
import argparse
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

# Local modules imports
from blockqc.config import DEFAULT_BLOCK_SIZE, DEFAULT_QUALITY_OFFSET, DEFAULT_RUN_ID, ENGINES, NUM_CPUS
from blockqc.config import OUTPUT_FORMATS, FilterConfig, RunConfig
from blockqc.errors import BlockQcError, ConfigError
from blockqc.partition import Partitioner
from blockqc.scheduler import BlockScheduler, RunSummary
from blockqc.utils import exit_program, format_elapsed, report, time_it


def parse_args(argv: Optional[List[str]] = None) -> RunConfig:
    """Build a `RunConfig` from command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="blockqc",
        description="Quality-trim and filter single or paired FASTQ files block by block, in parallel.")
    parser.add_argument("input1", type=Path, help="FASTQ file (mate 1 for paired input); may be gzipped")
    parser.add_argument("input2", type=Path, nargs="?", help="mate 2 FASTQ file for paired input")
    parser.add_argument("-b", "--block-size", type=int, default=DEFAULT_BLOCK_SIZE,
                        help="records per block (default: %(default)s)")
    parser.add_argument("--trim5", type=int, default=0, help="bases trimmed from the 5' end")
    parser.add_argument("--trim3", type=int, default=0, help="bases trimmed from the 3' end")
    parser.add_argument("-N", "--no-n", action="store_true", help="discard reads containing N")
    parser.add_argument("-q", "--quality-threshold", type=int, default=None,
                        help="enable quality trimming and filtering with this threshold")
    parser.add_argument("--use-new-method", action="store_true",
                        help="use the 3-base window quality algorithm instead of the standard one")
    parser.add_argument("-a", "--strip-adapters", action="store_true",
                        help="discard reads containing an adapter, in either orientation")
    parser.add_argument("--adapter", dest="adapters", action="append", metavar="SEQ",
                        help="adapter sequence; repeat to give several (default: built-in Illumina adapters)")
    parser.add_argument("--quality-offset", type=int, default=DEFAULT_QUALITY_OFFSET,
                        help="quality encoding offset (default: %(default)s)")
    parser.add_argument("-f", "--output-format", choices=OUTPUT_FORMATS, default="fasta")
    parser.add_argument("-s", "--separate-pe-output", action="store_true",
                        help="write mate 2 of accepted pairs to its own file")
    parser.add_argument("-w", "--work-dir", type=Path, default=Path("work"),
                        help="directory for intermediate block files")
    parser.add_argument("-d", "--output-dir", type=Path, default=Path("output_data"))
    parser.add_argument("-r", "--run-id", default=DEFAULT_RUN_ID, help="prefix of the final output files")
    parser.add_argument("-j", "--jobs", type=int, default=NUM_CPUS,
                        help="blocks processed concurrently (default: %(default)s)")
    parser.add_argument("--engine", choices=ENGINES, default="process")
    parser.add_argument("-z", "--compress-output", action="store_true", help="gzip the final output files")
    args = parser.parse_args(argv)

    filters = FilterConfig(trim5=args.trim5, trim3=args.trim3, no_n=args.no_n,
                           quality_threshold=args.quality_threshold, use_new_method=args.use_new_method,
                           strip_adapters=args.strip_adapters, quality_offset=args.quality_offset)
    if args.adapters:
        filters = replace(filters, adapters=tuple(args.adapters))
    return RunConfig(input1=args.input1, input2=args.input2, filters=filters, block_size=args.block_size,
                     output_format=args.output_format, separate_pe_output=args.separate_pe_output,
                     work_dir=args.work_dir, output_dir=args.output_dir, run_id=args.run_id,
                     jobs=args.jobs, engine=args.engine, compress_output=args.compress_output)


def prepare_work_dir(config: RunConfig) -> None:
    work_dir = Path(config.work_dir)
    work_dir.mkdir(parents=True, exist_ok=True)
    leftovers = sorted(work_dir.glob(f"{config.run_id}.*"))
    if leftovers:
        raise ConfigError(f"Work directory '{work_dir}' already holds files of run '{config.run_id}', "
                          f"e.g. '{leftovers[0].name}'; remove them or choose another run id")


@time_it
def main_logic(config: RunConfig, *, dask_processes: bool = True) -> RunSummary:
    """High-level implementation of the main filtering logic: partition, filter block by block, merge."""
    config.validate()
    prepare_work_dir(config)

    partitioner = Partitioner(config.work_dir, config.run_id, config.block_size)
    blocks = partitioner.split(config.input1, mate=1)
    report(f"'{config.input1}' split into {len(blocks)} block(s) of up to {config.block_size} records.")
    if config.paired:
        mate2_blocks = partitioner.split(config.input2, mate=2)
        report(f"'{config.input2}' split into {len(mate2_blocks)} block(s).")

    scheduler = BlockScheduler(config, dask_processes=dask_processes)
    summary = scheduler.run()

    report(f"Finished {len(summary.results)} block(s) in {format_elapsed(summary.elapsed)}.")
    for category, path in summary.outputs.items():
        report(f"  {category.upper()}: {path}")
    report(f"  Statistics: {summary.stats}")
    return summary


def main(argv: Optional[List[str]] = None) -> None:
    """Local main"""
    try:
        config = parse_args(argv)
        main_logic(config)
    except (BlockQcError, OSError) as error:
        exit_program(f"{type(error).__name__}: {error}")


if __name__ == "__main__":
    main()
