import bz2
import lzma

import pytest

from conftest import write_fasta, write_fastq
from seqtable.io import (
    FastAReader,
    FastQReader,
    SequenceFormatError,
    file_size,
    open_sequence_reader,
)


def test_fastq_reader(tmp_path):
    path = write_fastq(tmp_path / "reads.fastq", ["ACGT", "GGCC", "ACGT"])
    with FastQReader(path) as reader:
        assert list(reader) == ["ACGT", "GGCC", "ACGT"]
        assert reader.total == 3


def test_fasta_reader_joins_wrapped_lines(tmp_path):
    path = write_fasta(tmp_path / "reads.fa", ["ACGTACGTAC", "GG"], width=4)
    with FastAReader(path) as reader:
        assert list(reader) == ["ACGTACGTAC", "GG"]
        assert reader.total == 2


def test_sequences_are_not_normalized(tmp_path):
    """Case is preserved, so 'acgt' and 'ACGT' are different sequences."""
    path = write_fastq(tmp_path / "reads.fastq", ["acgt", "ACGT"])
    assert list(open_sequence_reader(path)) == ["acgt", "ACGT"]


def test_crlf_line_endings(tmp_path):
    path = tmp_path / "reads.fastq"
    path.write_bytes(b"@r1\r\nACGT\r\n+\r\nIIII\r\n")
    assert list(open_sequence_reader(path)) == ["ACGT"]


def test_detects_format_from_content(tmp_path):
    fasta = write_fasta(tmp_path / "reads.txt", ["AAA"])
    fastq = write_fastq(tmp_path / "other.txt", ["CCC"])
    assert isinstance(open_sequence_reader(fasta), FastAReader)
    assert isinstance(open_sequence_reader(fastq), FastQReader)


def test_gzip_input(tmp_path):
    path = write_fastq(tmp_path / "reads.fastq.gz", ["AAA", "CCG", "AAA"], compress=True)
    assert list(open_sequence_reader(path)) == ["AAA", "CCG", "AAA"]


def test_bzip2_and_xz_input(tmp_path):
    text = b">a\nAC\n>b\nGT\n"
    bz_path = tmp_path / "reads.fa.bz2"
    bz_path.write_bytes(bz2.compress(text))
    xz_path = tmp_path / "reads.fa.xz"
    xz_path.write_bytes(lzma.compress(text))
    assert list(open_sequence_reader(bz_path)) == ["AC", "GT"]
    assert list(open_sequence_reader(xz_path)) == ["AC", "GT"]


def test_empty_file_has_no_records(tmp_path):
    path = tmp_path / "empty.fastq"
    path.write_text("")
    reader = open_sequence_reader(path)
    assert list(reader) == []
    assert reader.total == 0


def test_truncated_fastq_record(tmp_path):
    path = tmp_path / "bad.fastq"
    path.write_text("@r1\nACGT\n+\nIIII\n@r2\nACGT\n")
    with pytest.raises(SequenceFormatError) as excinfo:
        list(open_sequence_reader(path))
    assert excinfo.value.record == 2
    assert excinfo.value.path == path
    assert str(path) in str(excinfo.value)


def test_quality_length_mismatch(tmp_path):
    path = tmp_path / "bad.fastq"
    path.write_text("@r1\nACGT\n+\nII\n")
    with pytest.raises(SequenceFormatError, match="quality"):
        list(open_sequence_reader(path))


def test_missing_separator(tmp_path):
    path = tmp_path / "bad.fastq"
    path.write_text("@r1\nACGT\nIIII\nIIII\n")
    with pytest.raises(SequenceFormatError, match="separator"):
        list(open_sequence_reader(path))


def test_unrecognized_format(tmp_path):
    path = tmp_path / "table.csv"
    path.write_text("sequence,count\nACGT,1\n")
    with pytest.raises(SequenceFormatError):
        open_sequence_reader(path)


def test_corrupt_gzip(tmp_path):
    path = tmp_path / "reads.fastq.gz"
    path.write_bytes(b"\x1f\x8b" + b"\x00" * 32)
    with pytest.raises(SequenceFormatError):
        list(open_sequence_reader(path))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_sequence_reader(tmp_path / "missing.fastq")


def test_file_size(tmp_path):
    path = tmp_path / "reads.fa"
    path.write_bytes(b">a\nACGT\n")
    assert file_size(path) == 8
