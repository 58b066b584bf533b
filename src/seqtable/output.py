import csv
import logging
from pathlib import Path
from typing import Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from .types import OutputFormat, SequenceRecord

logger = logging.getLogger(__name__)

WRITE_BUFFER_SIZE = 512 * 1024

PARQUET_CODECS = {
    "none": "none",
    "snappy": "snappy",
    "gzip": "gzip",
    "brotli": "brotli",
    "zstd": "zstd",
}
DEFAULT_CODEC = "snappy"


class OutputWriteError(OSError):
    """Raised when a count table cannot be written."""

    def __init__(self, path, message: str):
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


def has_rpm(records: Sequence[SequenceRecord]) -> bool:
    """Return True when the table carries an rpm column, judged from the first row."""
    return bool(records) and records[0].rpm is not None


def resolve_compression(name: str) -> str:
    """Map a codec name to a Parquet codec, falling back to snappy."""
    codec = PARQUET_CODECS.get(name.strip().lower())
    if codec is None:
        logger.warning("Unknown compression %r, using %s", name, DEFAULT_CODEC)
        return DEFAULT_CODEC
    return codec


def table_schema(include_rpm: bool) -> pa.Schema:
    fields = [
        pa.field("sequence", pa.large_string(), nullable=False),
        pa.field("count", pa.uint64(), nullable=False),
    ]
    if include_rpm:
        fields.append(pa.field("rpm", pa.float64(), nullable=False))
    return pa.schema(fields)


def save_parquet(
    records: Sequence[SequenceRecord], output_path: Path, compression: str = DEFAULT_CODEC
) -> None:
    """Write the count table as a single Parquet file."""
    include_rpm = has_rpm(records)
    schema = table_schema(include_rpm)

    columns = [
        pa.array([record.sequence for record in records], type=pa.large_string()),
        pa.array([record.count for record in records], type=pa.uint64()),
    ]
    if include_rpm:
        columns.append(pa.array([record.rpm for record in records], type=pa.float64()))
    table = pa.Table.from_arrays(columns, schema=schema)

    try:
        pq.write_table(table, str(output_path), compression=resolve_compression(compression))
    except (OSError, pa.ArrowException) as exc:
        raise OutputWriteError(output_path, f"failed to write Parquet: {exc}") from exc


def save_delimited(
    records: Sequence[SequenceRecord], output_path: Path, delimiter: str
) -> None:
    """Write the count table as delimited text with a header row."""
    include_rpm = has_rpm(records)
    try:
        with open(
            output_path, "w", newline="", encoding="utf-8", buffering=WRITE_BUFFER_SIZE
        ) as handle:
            writer = csv.writer(handle, delimiter=delimiter, lineterminator="\n")
            if include_rpm:
                writer.writerow(["sequence", "count", "rpm"])
                for record in records:
                    writer.writerow([record.sequence, str(record.count), f"{record.rpm:.2f}"])
            else:
                writer.writerow(["sequence", "count"])
                for record in records:
                    writer.writerow([record.sequence, str(record.count)])
    except OSError as exc:
        raise OutputWriteError(output_path, f"failed to write table: {exc}") from exc


def _save_csv(records, output_path, compression):
    save_delimited(records, output_path, ",")


def _save_tsv(records, output_path, compression):
    save_delimited(records, output_path, "\t")


_WRITERS = {
    OutputFormat.PARQUET: save_parquet,
    OutputFormat.CSV: _save_csv,
    OutputFormat.TSV: _save_tsv,
}


def save_output(
    records: Sequence[SequenceRecord],
    output_path: Path,
    fmt: OutputFormat,
    compression: str = DEFAULT_CODEC,
    quiet: bool = True,
) -> None:
    """
    Write the count table in the selected format.

    The destination is truncated if it exists. Whether an rpm column is
    written depends on the records, not on the format.

    :param records: Rows sorted by count.
    :param output_path: Destination file.
    :param fmt: Output format.
    :param compression: Parquet codec name, ignored by the text formats.
    :param quiet: Suppress the status line.
    :raises OutputWriteError: If the destination cannot be written.
    """
    if not quiet:
        print(f"   Saving {fmt.extension.upper()} to {output_path}")
    logger.debug("Writing %d records to %s", len(records), output_path)
    _WRITERS[fmt](records, Path(output_path), compression)


def read_parquet(path: Path) -> list[SequenceRecord]:
    table = pq.read_table(str(path))
    sequences = table.column("sequence").to_pylist()
    counts = table.column("count").to_pylist()
    if "rpm" in table.column_names:
        rpms = table.column("rpm").to_pylist()
    else:
        rpms = [None] * len(sequences)
    return [
        SequenceRecord(sequence=seq, count=count, rpm=rpm)
        for seq, count, rpm in zip(sequences, counts, rpms)
    ]


def read_delimited(path: Path, delimiter: str) -> list[SequenceRecord]:
    """Load a delimited count table written by save_delimited."""
    records: list[SequenceRecord] = []
    with open(path, "r", newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle, delimiter=delimiter)
        if reader.fieldnames is None:
            raise ValueError(f"Missing header in {path}")
        if reader.fieldnames not in (["sequence", "count"], ["sequence", "count", "rpm"]):
            raise ValueError(f"Unexpected columns in {path}: {reader.fieldnames}")
        for row in reader:
            rpm = float(row["rpm"]) if "rpm" in row else None
            records.append(
                SequenceRecord(sequence=row["sequence"], count=int(row["count"]), rpm=rpm)
            )
    return records


def read_output(path: Path, fmt: OutputFormat) -> list[SequenceRecord]:
    """Read a count table back from any supported format."""
    if fmt is OutputFormat.PARQUET:
        return read_parquet(Path(path))
    return read_delimited(Path(path), fmt.delimiter)
