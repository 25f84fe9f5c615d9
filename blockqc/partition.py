"""
File:       blockqc/partition.py
Brief:      Splitting inputs into record-aligned blocks, and merging block outputs in block order.

Details:
            Block inputs are named "<run_id>.<mate>.<ordinal>" and block outputs "<run_id>.<ordinal>.<category>",
            where the ordinal is a zero-padded block number. Blocks are always ordered numerically by ordinal.
"""
# Standard library imports
import shutil
from itertools import islice
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

# Third party library imports
import pgzip

# Local modules imports
from blockqc.config import LINES_PER_RECORD, OPEN_PARAMS, ORDINAL_WIDTH
from blockqc.errors import ConfigError, MalformedRecordError
from blockqc.fastq_reader import UNREADABLE_INPUT_ERRORS, open_block


def format_ordinal(index: int) -> str:
    return f"{index:0{ORDINAL_WIDTH}d}"


def parse_ordinal(name: str) -> Optional[str]:
    """Return the ordinal part of a block file name, or None if the name has no numeric ordinal."""
    for part in reversed(Path(name).name.split(".")):
        if part.isdigit():
            return part
    return None


def block_input_path(work_dir: Path, run_id: str, mate: int, ordinal: str) -> Path:
    return Path(work_dir) / f"{run_id}.{mate}.{ordinal}"


def block_output_path(work_dir: Path, run_id: str, ordinal: str, category: str) -> Path:
    return Path(work_dir) / f"{run_id}.{ordinal}.{category}"


def _record_lines(handle: TextIO) -> Iterator[str]:
    """Yield the lines of `handle`, skipping blank lines where a record would start."""
    position = 0
    for line in handle:
        if position == 0 and not line.strip():
            continue
        yield line
        position = (position + 1) % LINES_PER_RECORD


class Partitioner:
    """ Splits an input FASTQ file into blocks of `block_size` records

        Every block but the last holds exactly `block_size` records. Two mate files partitioned with
        the same block size align record-for-record, block by block.
    """

    def __init__(self, work_dir: Path, run_id: str, block_size: int) -> None:
        if block_size <= 0:
            raise ConfigError(f"block_size must be a positive number of records, got {block_size}")
        self.work_dir = Path(work_dir)
        self.run_id = run_id
        self.block_size = block_size

    def split(self, input_path: Path, mate: int = 1) -> List[Path]:
        """ Write the blocks of `input_path` into the work directory and return their paths in order.

            Blank lines between records are dropped, as the reader does. On unreadable input
            the blocks written so far are removed and `MalformedRecordError` is raised.
        """
        self.work_dir.mkdir(parents=True, exist_ok=True)
        lines_per_block = self.block_size * LINES_PER_RECORD
        blocks: List[Path] = []
        try:
            with open_block(input_path) as input_handle:
                record_lines = _record_lines(input_handle)
                while True:
                    lines = list(islice(record_lines, lines_per_block))
                    if not lines:
                        break
                    path = block_input_path(self.work_dir, self.run_id, mate, format_ordinal(len(blocks)))
                    blocks.append(path)
                    with open(path, "wt", **OPEN_PARAMS) as block_handle:
                        block_handle.writelines(lines)
        except UNREADABLE_INPUT_ERRORS as error:
            for path in blocks:
                path.unlink(missing_ok=True)
            raise MalformedRecordError(f"Unreadable input '{input_path}': {error}") from error
        return blocks


class Merger:
    """ Concatenates block output files of one category into a single final file

        Files are concatenated in numeric ordinal order, whatever order the blocks finished in.
        With `compress`, the final file is written with *pgzip*.
    """

    def __init__(self, work_dir: Path, output_dir: Path, run_id: str, *,
                 compress: bool = False, threads: Optional[int] = None) -> None:
        self.work_dir = Path(work_dir)
        self.output_dir = Path(output_dir)
        self.run_id = run_id
        self.compress = compress
        self.threads = threads

    def block_outputs(self, category: str) -> List[Path]:
        paths = [path for path in self.work_dir.glob(f"{self.run_id}.*.{category}")
                 if parse_ordinal(path.stem) is not None]
        return sorted(paths, key=lambda path: int(parse_ordinal(path.stem)))

    def final_path(self, category: str) -> Path:
        name = f"{self.run_id}.{category}"
        if self.compress:
            name += ".gz"
        return self.output_dir / name

    def merge(self, category: str, *, remove: bool = True) -> Path:
        """Concatenate all block outputs of `category` and return the final file's path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        destination = self.final_path(category)
        sources = self.block_outputs(category)
        if self.compress:
            output_handle = pgzip.open(destination, "wb", thread=self.threads)
        else:
            output_handle = open(destination, "wb")
        with output_handle:
            for source in sources:
                with open(source, "rb") as source_handle:
                    shutil.copyfileobj(source_handle, output_handle)
        if remove:
            for source in sources:
                source.unlink()
        return destination
