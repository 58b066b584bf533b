__version__ = "0.1.1"

from .cmd import (
    count_sequences,
    count_sequences_chunked,
    count_sequences_sequential,
    prepare_records,
    process_file,
)
from .counting import count_chunk, merge_counts
from .io import FastAReader, FastQReader, SequenceFormatError, open_sequence_reader
from .output import OutputWriteError, read_output, save_output
from .threads import (
    ThreadPoolConfigError,
    WorkerPool,
    build_global_pool,
    resolve_thread_count,
)
from .types import OutputFormat, RunOptions, SequenceRecord
from .utils import calculate_chunk_size
