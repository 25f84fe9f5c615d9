"""
File:       blockqc/writer.py
Brief:      FASTA and FASTQ output.
"""
# Standard library imports
from typing import TextIO

# Local modules imports
from blockqc.config import FASTA_MARKER, FASTQ_MARKER, NEWLINE, SEPARATOR_MARKER
from blockqc.errors import ConfigError
from blockqc.record import Record


def format_fasta(record: Record) -> str:
    return f"{FASTA_MARKER}{record.id}{NEWLINE}{record.seq}{NEWLINE}"


def format_fastq(record: Record) -> str:
    return (f"{FASTQ_MARKER}{record.id}{NEWLINE}{record.seq}{NEWLINE}"
            f"{SEPARATOR_MARKER}{record.id}{NEWLINE}{record.qual}{NEWLINE}")


_FORMATTERS = {
    "fasta": format_fasta,
    "fastq": format_fastq,
}


def write_record(stream: TextIO, record: Record, output_format: str) -> None:
    """ Serialize `record` to `stream` as FASTA or FASTQ.

        Quality characters are written as they are; the numeric scores play no part in the output.
    """
    try:
        formatter = _FORMATTERS[output_format]
    except KeyError:
        raise ConfigError(f"Unknown output format {output_format!r}") from None
    stream.write(formatter(record))
