import bz2
import gzip
import logging
import lzma
import zlib
from pathlib import Path

logger = logging.getLogger(__name__)

_COMPRESSION_MAGIC = (
    (b"\x1f\x8b", gzip.open),
    (b"BZh", bz2.open),
    (b"\xfd7zXZ\x00", lzma.open),
)


class SequenceFormatError(ValueError):
    """Raised when a sequence file cannot be decoded."""

    def __init__(self, path, message: str, record: int | None = None):
        self.path = Path(path)
        self.record = record
        location = f" (record {record:,})" if record is not None else ""
        super().__init__(f"{self.path}{location}: {message}")


def file_size(path) -> int:
    """Return the size of a file in bytes."""
    return Path(path).stat().st_size


def open_text(path):
    """
    Open a possibly compressed sequence file for reading as text.

    Compression is detected from the leading magic bytes, not the file name.
    """
    with open(path, "rb") as probe:
        magic = probe.read(6)
    for prefix, opener in _COMPRESSION_MAGIC:
        if magic.startswith(prefix):
            return opener(path, "rt", encoding="utf-8", errors="replace", newline="")
    return open(path, "r", encoding="utf-8", errors="replace", newline="")


class _SequenceReader:
    """Shared plumbing for the FASTA and FASTQ readers."""

    def __init__(self, path):
        self.path = Path(path)
        self.total = 0

    def __iter__(self):
        with open_text(self.path) as handle:
            try:
                yield from self._records(handle)
            except (OSError, EOFError, lzma.LZMAError, zlib.error) as exc:
                raise SequenceFormatError(
                    self.path, f"failed to read input: {exc}", self.total + 1
                ) from exc

    def _records(self, handle):
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        pass


class FastQReader(_SequenceReader):
    """
    A FASTQ file reader that yields sequences.
    """

    def _records(self, handle):
        while True:
            header = handle.readline()
            if not header:
                break
            header = header.rstrip("\r\n")
            if not header:
                continue
            record = self.total + 1
            if not header.startswith("@"):
                raise SequenceFormatError(
                    self.path, f"expected '@' at start of header, found {header[:20]!r}", record
                )
            sequence = handle.readline()
            plus = handle.readline()
            quality = handle.readline()
            if not sequence or not plus or not quality:
                raise SequenceFormatError(self.path, "incomplete record", record)

            sequence = sequence.rstrip("\r\n")
            if not plus.startswith("+"):
                raise SequenceFormatError(self.path, "missing '+' separator line", record)
            if len(quality.rstrip("\r\n")) != len(sequence):
                raise SequenceFormatError(
                    self.path, "sequence and quality lengths differ", record
                )
            self.total += 1
            yield sequence


class FastAReader(_SequenceReader):
    """
    A FASTA file reader that yields sequences, joining wrapped lines.
    """

    def _records(self, handle):
        parts: list[str] | None = None
        for line in handle:
            line = line.rstrip("\r\n")
            if line.startswith(">"):
                if parts is not None:
                    self.total += 1
                    yield "".join(parts)
                parts = []
            elif parts is None:
                if not line.strip():
                    continue
                raise SequenceFormatError(
                    self.path, f"expected '>' at start of header, found {line[:20]!r}", 1
                )
            else:
                parts.append(line)
        if parts is not None:
            self.total += 1
            yield "".join(parts)


def detect_format(path) -> type[_SequenceReader] | None:
    """Return the reader class for a file, or None when the file holds no records."""
    with open_text(path) as handle:
        try:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                if stripped.startswith(">"):
                    return FastAReader
                if stripped.startswith("@"):
                    return FastQReader
                raise SequenceFormatError(
                    path, f"unrecognized sequence format, first line {stripped[:20]!r}"
                )
        except (OSError, EOFError, lzma.LZMAError, zlib.error) as exc:
            raise SequenceFormatError(path, f"failed to read input: {exc}") from exc
    return None


class _EmptyReader(_SequenceReader):
    def _records(self, handle):
        return iter(())


def open_sequence_reader(path) -> _SequenceReader:
    """
    Open a FASTA or FASTQ file (optionally gzip, bzip2 or xz compressed).

    :param path: Path to the sequence file.
    :returns: An iterable reader yielding one sequence string per record.
    :raises FileNotFoundError: If the path does not exist.
    :raises SequenceFormatError: If the content is not FASTA or FASTQ.
    """
    reader_cls = detect_format(path)
    if reader_cls is None:
        logger.debug("%s contains no records", path)
        return _EmptyReader(path)
    logger.debug("Reading %s as %s", path, reader_cls.__name__)
    return reader_cls(path)
