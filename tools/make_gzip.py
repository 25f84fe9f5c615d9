#!/usr/bin/env python3
"""
File:       tools/make_gzip.py
Brief:      Script for making *gzip* copies of FASTQ files, e.g. to feed gzipped input to a run.

Details:
            Usage: make_gzip.py SOURCE [SOURCE ...]
            Every SOURCE is compressed to SOURCE.gz.
            Alternatively, the `compress_file` function can be called programmatically.
"""
# Standard library imports
import gzip
import os
import sys
from pathlib import Path

# Local modules imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), r".."))
from blockqc.config import OPEN_PARAMS  # noqa


def compress_file(source: Path, dst: Path) -> None:
    with open(source, "rt", **OPEN_PARAMS) as source_handle:
        with gzip.open(dst, "wt", **OPEN_PARAMS) as dst_handle:
            for line in source_handle:
                dst_handle.write(line)


if __name__ == "__main__":
    for name in sys.argv[1:]:
        compress_file(Path(name), Path(f"{name}.gz"))
