from pathlib import Path

import pytest

from seqtable.utils import (
    LARGEST_CHUNK_SIZE,
    calculate_chunk_size,
    estimate_records,
    iter_chunks,
    output_path_for,
    output_stem,
)


def test_estimate_records_has_floor():
    assert estimate_records(0) == 100
    assert estimate_records(50) == 100
    assert estimate_records(2_000_000) == 20_000
    assert estimate_records(50, minimum=1000) == 1000


def test_tiny_file_uses_sequential_path():
    """50 bytes is estimated as 100 records, well below the chunking threshold."""
    assert calculate_chunk_size(50) == 0
    assert calculate_chunk_size(1_000_000) == 0


def test_small_file_chunk_size():
    assert calculate_chunk_size(2_000_000) == 10_000


@pytest.mark.parametrize(
    "records, expected",
    [
        (10_000, 0),
        (10_001, 10_000),
        (100_000, 10_000),
        (100_001, 25_000),
        (1_000_000, 25_000),
        (1_000_001, 50_000),
        (10_000_000, 50_000),
        (10_000_001, LARGEST_CHUNK_SIZE),
    ],
)
def test_tier_boundaries(records, expected):
    assert calculate_chunk_size(records * 100) == expected


def test_requested_chunk_size_is_kept():
    assert calculate_chunk_size(50, requested=7) == 7
    assert calculate_chunk_size(10**12, requested=3) == 3


def test_iter_chunks_keeps_order_and_remainder():
    chunks = list(iter_chunks(["a", "b", "c", "d", "e"], 2))
    assert chunks == [["a", "b"], ["c", "d"], ["e"]]
    assert list(iter_chunks([], 3)) == []


def test_iter_chunks_rejects_zero():
    with pytest.raises(ValueError):
        list(iter_chunks(["a"], 0))


def test_output_stem():
    assert output_stem(Path("sample.fastq.gz")) == "sample"
    assert output_stem(Path("/data/reads.fq")) == "reads"
    assert output_stem(Path("genome.fa")) == "genome"
    assert output_stem(Path("genome.fasta")) == "genome"
    assert output_stem(Path("lane1.R1.fastq")) == "lane1.R1"


def test_output_path_for():
    path = output_path_for(Path("in/sample.fastq.gz"), Path("out"), "_counts", "parquet")
    assert path == Path("out/sample_counts.parquet")
