import gzip
from pathlib import Path

import pytest

from seqtable import threads


@pytest.fixture(autouse=True)
def reset_global_pool(monkeypatch):
    """Give every test a process without a configured global pool."""
    monkeypatch.setattr(threads, "_global_pool", None)


def write_fastq(path: Path, sequences, compress: bool = False) -> Path:
    lines = []
    for idx, seq in enumerate(sequences, start=1):
        lines.append(f"@read{idx}\n{seq}\n+\n{'I' * len(seq)}\n")
    text = "".join(lines)
    if compress:
        with gzip.open(path, "wt", encoding="ascii") as handle:
            handle.write(text)
    else:
        path.write_text(text, encoding="ascii")
    return path


def write_fasta(path: Path, sequences, width: int | None = None) -> Path:
    lines = []
    for idx, seq in enumerate(sequences, start=1):
        lines.append(f">read{idx}\n")
        if width:
            for start in range(0, len(seq), width):
                lines.append(seq[start:start + width] + "\n")
        else:
            lines.append(seq + "\n")
    path.write_text("".join(lines), encoding="ascii")
    return path
