import argparse
import logging
import sys
import time
from pathlib import Path

from . import __version__
from .cmd import process_file
from .io import SequenceFormatError
from .threads import ThreadPoolConfigError, build_global_pool, resolve_thread_count
from .types import OutputFormat, RunOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seqtable",
        description="High performance FASTA/FASTQ sequence count table generator",
    )
    parser.add_argument(
        "input",
        nargs="+",
        help="Input file path(s), FASTA/FASTQ optionally gzip, bzip2 or xz compressed",
    )
    parser.add_argument(
        "--output-dir", "-o", default=".", help="Output directory (default: current directory)"
    )
    parser.add_argument(
        "--suffix", "-s", default="_counts", help="Output filename suffix (default: _counts)"
    )
    parser.add_argument(
        "--format",
        "-f",
        default=OutputFormat.PARQUET.value,
        choices=[fmt.value for fmt in OutputFormat],
        help="Output format (default: parquet)",
    )
    parser.add_argument(
        "--chunk-size",
        "-c",
        type=int,
        default=0,
        help="Sequences per chunk for memory/speed tradeoff (0 = auto)",
    )
    parser.add_argument(
        "--threads",
        "-t",
        type=int,
        default=0,
        help="Number of threads to use (0 = auto-detect, considering parallel jobs)",
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="Disable progress output")
    parser.add_argument(
        "--compression",
        default="snappy",
        help="Compression for Parquet (none, snappy, gzip, brotli, zstd)",
    )
    parser.add_argument(
        "--rpm",
        action="store_true",
        help="Calculate and include an RPM (reads per million) column",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug messages")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def options_from_args(args: argparse.Namespace) -> RunOptions:
    return RunOptions(
        output_dir=Path(args.output_dir),
        suffix=args.suffix,
        format=OutputFormat(args.format),
        chunk_size=max(args.chunk_size, 0),
        threads=max(args.threads, 0),
        quiet=args.quiet,
        compression=args.compression,
        rpm=args.rpm,
    )


def run(options: RunOptions, inputs: list[str]) -> None:
    """Process every input file in turn with one shared worker pool."""
    start = time.time()
    pool = build_global_pool(resolve_thread_count(options.threads))
    options.output_dir.mkdir(parents=True, exist_ok=True)

    if not options.quiet:
        print(f"seqtable v{__version__}")
        print(f"Input files: {len(inputs):,}")
        print(f"Threads per file: {pool.num_threads}")
        print(f"Output format: {options.format.value}")
        if options.rpm:
            print("RPM calculation: enabled")
        if options.chunk_size == 0:
            print("Adaptive chunking: enabled")
        print()

    for input_file in inputs:
        process_file(Path(input_file), options, pool)
        if not options.quiet:
            print()

    if not options.quiet:
        print(f"All files processed in {time.time() - start:.2f} seconds.")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(options_from_args(args), args.input)
    except (OSError, SequenceFormatError, ThreadPoolConfigError) as exc:
        print(f"seqtable: error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
