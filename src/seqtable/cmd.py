import logging
import time
from collections import Counter
from pathlib import Path

import numpy as np
from tqdm import tqdm

from .counting import count_chunk, merge_counts
from .io import file_size, open_sequence_reader
from .output import save_output
from .threads import WorkerPool, current_pool
from .types import FrequencyMap, RunOptions, SequenceRecord
from .utils import calculate_chunk_size, estimate_records, iter_chunks, output_path_for

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10_000


def count_sequences_sequential(
    file_path: Path, show_progress: bool = False
) -> tuple[FrequencyMap, int]:
    """Count sequences in a single pass without chunking, for small files."""
    if show_progress:
        print("   Processing (sequential mode for small file)...")

    counts: FrequencyMap = Counter()
    with open_sequence_reader(file_path) as reader:
        for sequence in reader:
            counts[sequence] += 1
        total_records = reader.total

    if show_progress:
        print(f"   Total records: {total_records:,}")
    return counts, total_records


def read_chunks(
    file_path: Path, chunk_size: int, show_progress: bool = False
) -> tuple[list[list[str]], int]:
    """Buffer the whole sequence stream into chunks of chunk_size sequences."""
    progress = None
    if show_progress:
        progress = tqdm(
            total=estimate_records(file_size(file_path), minimum=1000),
            unit=" reads",
            leave=False,
        )

    chunks: list[list[str]] = []
    total_records = 0
    try:
        with open_sequence_reader(file_path) as reader:
            for chunk in iter_chunks(reader, chunk_size):
                chunks.append(chunk)
                if progress is not None:
                    before = total_records // PROGRESS_INTERVAL
                    after = (total_records + len(chunk)) // PROGRESS_INTERVAL
                    if after > before:
                        progress.update((after - before) * PROGRESS_INTERVAL)
                total_records += len(chunk)
    finally:
        if progress is not None:
            progress.close()
    return chunks, total_records


def count_sequences_chunked(
    file_path: Path,
    chunk_size: int,
    show_progress: bool = False,
    pool: WorkerPool | None = None,
) -> tuple[FrequencyMap, int]:
    """
    Count sequences by counting fixed-size chunks in parallel and merging.

    Reading is sequential; each chunk is then counted by one worker into its
    own map and the partial maps are merged pairwise. Any decoding error is
    raised before counting starts.

    :param file_path: FASTA/FASTQ input.
    :param chunk_size: Number of sequences per chunk, must be positive.
    :param show_progress: Print status lines and a progress bar.
    :param pool: Worker pool, the process-wide pool when omitted.
    :returns: The frequency map and the number of records read.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if pool is None:
        pool = current_pool()

    chunks, total_records = read_chunks(file_path, chunk_size, show_progress)
    logger.debug(
        "Read %d records into %d chunks of up to %d", total_records, len(chunks), chunk_size
    )

    if show_progress:
        print(f"   Total records: {total_records:,}")
        print(f"   Parallel processing ({len(chunks):,} chunks)...")

    partial_counts = pool.map(count_chunk, chunks)
    final_counts = pool.reduce(merge_counts, partial_counts, identity=Counter)
    return final_counts, total_records


def count_sequences(
    file_path: Path,
    chunk_size: int,
    show_progress: bool = False,
    pool: WorkerPool | None = None,
) -> tuple[FrequencyMap, int]:
    """Count sequences, choosing the sequential path when chunk_size is 0."""
    if chunk_size == 0:
        return count_sequences_sequential(file_path, show_progress)
    return count_sequences_chunked(file_path, chunk_size, show_progress, pool)


def prepare_records(
    counts: FrequencyMap, total_reads: int, include_rpm: bool
) -> list[SequenceRecord]:
    """
    Convert a frequency map into rows sorted by count, highest first.

    With include_rpm each row also carries its reads-per-million value. The
    order of rows with equal counts is unspecified.
    """
    if not counts:
        return []

    sequences = list(counts.keys())
    values = np.fromiter(counts.values(), dtype=np.uint64, count=len(sequences))
    order = np.argsort(values, kind="quicksort")[::-1]

    if include_rpm:
        rpms = (values.astype(np.float64) / float(total_reads)) * 1_000_000.0
        return [
            SequenceRecord(sequence=sequences[i], count=int(values[i]), rpm=float(rpms[i]))
            for i in order.tolist()
        ]
    return [
        SequenceRecord(sequence=sequences[i], count=int(values[i]))
        for i in order.tolist()
    ]


def process_file(
    input_path: Path, options: RunOptions, pool: WorkerPool | None = None
) -> Path:
    """Count one input file and write its table; return the output path."""
    start = time.time()
    input_path = Path(input_path)
    show_progress = not options.quiet

    if show_progress:
        print(f"Processing: {input_path}")

    output_path = output_path_for(
        input_path, options.output_dir, options.suffix, options.format.extension
    )

    chunk_size = calculate_chunk_size(file_size(input_path), options.chunk_size)
    if show_progress and options.chunk_size == 0:
        if chunk_size == 0:
            print("   Adaptive chunk size: disabled (small file)")
        else:
            print(f"   Adaptive chunk size: {chunk_size:,} sequences")
    logger.debug("Chunk size for %s: %d", input_path, chunk_size)

    counts, total_reads = count_sequences(input_path, chunk_size, show_progress, pool)
    records = prepare_records(counts, total_reads, options.rpm)
    save_output(
        records,
        output_path,
        options.format,
        compression=options.compression,
        quiet=options.quiet,
    )

    if show_progress:
        print(
            f"   {len(counts):,} unique sequences, {total_reads:,} total reads "
            f"-> {output_path}"
        )
        print(f"   Time elapsed: {time.time() - start:.2f} seconds")
    return output_path
