"""
File:       blockqc/config.py
Brief:      Program configuration and constants.
"""
import multiprocessing
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Final, Optional, Tuple

from blockqc.errors import ConfigError

DEBUG: Final[bool] = True
VERBOSE: Final[bool] = True

NUM_CPUS: Final[int] = multiprocessing.cpu_count()

NEWLINE: Final[str] = "\n"  # Data files' line ending character(s). FASTQ uses "\n".
LINES_PER_RECORD: Final[int] = 4
FASTQ_MARKER: Final[str] = "@"
FASTA_MARKER: Final[str] = ">"
SEPARATOR_MARKER: Final[str] = "+"

OPEN_PARAMS: Final[Dict[str, str]] = {
    "encoding": "ascii",
    "errors": "strict",
    "newline": NEWLINE,
}

# Illumina paired-end adapters 1 and 2, and the genomic DNA adapter.
ADAPTERS: Final[Tuple[str, ...]] = (
    "ACACTCTTTCCCTACACGACGCTCTTCCGATCT",
    "CTCGGCATTCCTGCTGAACCGCTCTTCCGATCT",
    "GATCGGAAGAGCTCGTATGCCGTCTTCTGCTTG",
)

MIN_READ_LEN: Final[int] = 31
WINDOW_LEN: Final[int] = 3
DEFAULT_QUALITY_OFFSET: Final[int] = 64  # Illumina 1.3+ encoding. Sanger/Illumina 1.8+ is 33.
DEFAULT_BLOCK_SIZE: Final[int] = 1_000_000
ORDINAL_WIDTH: Final[int] = 6

OUTPUT_FORMATS: Final[Tuple[str, ...]] = ("fasta", "fastq")
ENGINES: Final[Tuple[str, ...]] = ("process", "dask")

# Block output categories, in the order they are merged.
SE: Final[str] = "se"
PE: Final[str] = "pe"
PE2: Final[str] = "pe2"
STAT_SUFFIX: Final[str] = "stat.tsv"


# Data files
_WORK_DATA_DIR = Path("work")
_OUTPUT_DATA_DIR = Path("output_data")
DEFAULT_RUN_ID: Final[str] = "run"


@dataclass(frozen=True)
class FilterConfig:
    """Everything the Filter Pipeline needs to decide the fate of a single record."""
    trim5: int = 0
    trim3: int = 0
    no_n: bool = False
    quality_threshold: Optional[int] = None
    use_new_method: bool = False
    strip_adapters: bool = False
    adapters: Tuple[str, ...] = ADAPTERS
    quality_offset: int = DEFAULT_QUALITY_OFFSET

    def validate(self) -> None:
        if self.trim5 < 0 or self.trim3 < 0:
            raise ConfigError(f"trim5 and trim3 must not be negative, got {self.trim5} and {self.trim3}")
        if self.use_new_method and self.quality_threshold is None:
            raise ConfigError("use_new_method requires quality_threshold to be set")
        if self.strip_adapters and not self.adapters:
            raise ConfigError("strip_adapters requires at least one adapter")
        if not 0 < self.quality_offset < 128:
            raise ConfigError(f"quality_offset must be an ASCII code, got {self.quality_offset}")


@dataclass(frozen=True)
class RunConfig:
    """ Configuration of a whole run.

        The Block Scheduler and every Block Worker receive the same instance. It is frozen and picklable,
        so it travels to worker processes unchanged.
    """
    input1: Path
    input2: Optional[Path] = None
    filters: FilterConfig = field(default_factory=FilterConfig)
    block_size: int = DEFAULT_BLOCK_SIZE
    output_format: str = "fasta"
    separate_pe_output: bool = False
    work_dir: Path = _WORK_DATA_DIR
    output_dir: Path = _OUTPUT_DATA_DIR
    run_id: str = DEFAULT_RUN_ID
    jobs: int = NUM_CPUS
    engine: str = "process"
    compress_output: bool = False

    @property
    def paired(self) -> bool:
        return self.input2 is not None

    def with_options(self, **changes) -> "RunConfig":
        return replace(self, **changes)

    def validate(self) -> None:
        """Raise `ConfigError` for invalid or conflicting options, before any processing starts."""
        if isinstance(self.block_size, bool) or not isinstance(self.block_size, int) or self.block_size <= 0:
            raise ConfigError(f"block_size must be a positive number of records, got {self.block_size!r}")
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(f"output_format must be one of {OUTPUT_FORMATS}, got {self.output_format!r}")
        if self.engine not in ENGINES:
            raise ConfigError(f"engine must be one of {ENGINES}, got {self.engine!r}")
        if self.jobs < 1:
            raise ConfigError(f"jobs must be at least 1, got {self.jobs}")
        if self.separate_pe_output and not self.paired:
            raise ConfigError("separate_pe_output requires paired input")
        if not self.run_id or "." in self.run_id or "/" in self.run_id:
            raise ConfigError(f"run_id must be a non-empty name without '.' or '/', got {self.run_id!r}")
        self.filters.validate()
