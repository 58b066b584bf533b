from pathlib import Path
from typing import Iterable, Iterator

# Coarse average size of one FASTA/FASTQ record on disk
BYTES_PER_RECORD = 100

# (largest estimated record count, chunk size); 0 disables chunking
CHUNK_SIZE_TIERS = (
    (10_000, 0),
    (100_000, 10_000),
    (1_000_000, 25_000),
    (10_000_000, 50_000),
)
LARGEST_CHUNK_SIZE = 100_000

_SEQUENCE_SUFFIXES = (".fastq", ".fq", ".fa")
_COMPRESSION_SUFFIXES = (".gz", ".bz2", ".xz")


def estimate_records(file_size: int, minimum: int = 100) -> int:
    """Estimate the number of records in a file of the given byte size."""
    return max(file_size // BYTES_PER_RECORD, minimum)


def calculate_chunk_size(file_size: int, requested: int = 0) -> int:
    """
    Choose a chunk size from the estimated number of records.

    :param file_size: Size of the input file in bytes.
    :param requested: Explicit chunk size, 0 for automatic.
    :returns: Number of sequences per chunk, or 0 for the sequential path.
    """
    if requested > 0:
        return requested

    estimated = estimate_records(file_size)
    for upper, chunk_size in CHUNK_SIZE_TIERS:
        if estimated <= upper:
            return chunk_size
    return LARGEST_CHUNK_SIZE


def iter_chunks(sequences: Iterable[str], chunk_size: int) -> Iterator[list[str]]:
    """Yield consecutive lists of at most chunk_size sequences in stream order."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    chunk: list[str] = []
    for sequence in sequences:
        chunk.append(sequence)
        if len(chunk) >= chunk_size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def output_stem(input_path: Path) -> str:
    """Return the input file name without compression and sequence extensions."""
    name = input_path.name
    for suffix in _COMPRESSION_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    stem = Path(name).stem or "output"
    for suffix in _SEQUENCE_SUFFIXES:
        stem = stem.replace(suffix, "")
    return stem or "output"


def output_path_for(input_path: Path, output_dir: Path, suffix: str, extension: str) -> Path:
    """Build the destination path for the count table of one input file."""
    return output_dir / f"{output_stem(Path(input_path))}{suffix}.{extension}"
