"""
File:       blockqc/fastq_reader.py
Brief:      FASTQ input facilities.
"""
# Standard library imports
import gzip
import zlib
from pathlib import Path
from typing import TextIO

# Local modules imports
from blockqc.config import FASTQ_MARKER, OPEN_PARAMS
from blockqc.errors import MalformedRecordError
from blockqc.record import Record
from blockqc.type_aliases import Records

# Raised while decoding input: non-ASCII text, or a truncated or corrupt gzip stream.
UNREADABLE_INPUT_ERRORS = (UnicodeDecodeError, EOFError, zlib.error, gzip.BadGzipFile)


def open_block(path: Path) -> TextIO:
    """Open a FASTQ file for reading. Files ending in ".gz" are decompressed on the fly."""
    path = Path(path)
    if path.suffix == ".gz":
        return gzip.open(path, "rt", **OPEN_PARAMS)
    return open(path, "rt", **OPEN_PARAMS)


def _non_whitespace(line: str) -> str:
    return "".join(line.split())


def _readline(handle: TextIO, line_no: int) -> str:
    try:
        return handle.readline()
    except UNREADABLE_INPUT_ERRORS as error:
        raise MalformedRecordError(f"Unreadable data at or near line {line_no}: {error}") from error


def read_records(handle: TextIO, offset: int) -> Records:
    """ Lazily read records from `handle`, four lines at a time.

        Every record consumes exactly four lines: identifier, sequence, separator (discarded) and quality.
        The leading record marker is stripped from the identifier; sequence and quality lines are reduced
        to their non-whitespace characters. Quality characters are converted to scores by subtracting `offset`.

        Raises `MalformedRecordError` if the input ends in the middle of a record,
        or if a record's sequence and quality lengths differ.
    """
    line_no = 0
    while True:
        title = _readline(handle, line_no + 1)
        line_no += 1
        if not title:
            return
        if not title.strip():
            continue

        lines = []
        for _ in range(3):
            line = _readline(handle, line_no + len(lines) + 1)
            if not line:
                raise MalformedRecordError(
                    f"Truncated record {title.strip()!r} starting at line {line_no}: "
                    f"expected 4 lines, got {len(lines) + 1}"
                )
            lines.append(line)
        sequence, _, quality = lines

        id_ = title.rstrip("\r\n")
        if id_.startswith(FASTQ_MARKER):
            id_ = id_[1:]
        seq = _non_whitespace(sequence)
        qual = _non_whitespace(quality)
        if len(seq) != len(qual):
            raise MalformedRecordError(
                f"Record {id_!r} starting at line {line_no} has {len(seq)} bases but {len(qual)} quality values"
            )
        line_no += 3
        yield Record.from_fastq(id_, seq, qual, offset)


def read_fastq(input_path: Path, offset: int) -> Records:
    """Read all records from a FASTQ file, closing it when the records are exhausted."""
    with open_block(input_path) as handle:
        yield from read_records(handle, offset)
