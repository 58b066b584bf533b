from collections import Counter
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

FrequencyMap = Counter


@dataclass(slots=True)
class SequenceRecord:
    """Represents one row of the count table."""
    sequence: str
    count: int
    rpm: float | None = None


class OutputFormat(Enum):
    PARQUET = "parquet"
    CSV = "csv"
    TSV = "tsv"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def delimiter(self) -> str | None:
        """Field separator for the text formats, None for columnar output."""
        return {"csv": ",", "tsv": "\t"}.get(self.value)


@dataclass(slots=True)
class RunOptions:
    """Resolved configuration of one invocation."""
    output_dir: Path = Path(".")
    suffix: str = "_counts"
    format: OutputFormat = OutputFormat.PARQUET
    chunk_size: int = 0
    threads: int = 0
    quiet: bool = False
    compression: str = "snappy"
    rpm: bool = False
