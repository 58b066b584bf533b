import concurrent.futures
import logging
import os
import threading
from typing import Callable, Iterable, Mapping, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

THREADS_ENV_VAR = "SEQTABLE_NUM_THREADS"
# GNU parallel exports PARALLEL_SEQ for every job it launches
PARALLEL_MARKER_ENV_VAR = "PARALLEL_SEQ"
PARALLEL_JOBS_ENV_VAR = "PARALLEL"


class ThreadPoolConfigError(RuntimeError):
    """Raised when the process-wide worker pool cannot be (re)configured."""


def available_cores() -> int:
    """Return the number of logical cores this process may run on."""
    if hasattr(os, "sched_getaffinity"):
        return max(len(os.sched_getaffinity(0)), 1)
    return os.cpu_count() or 1


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def resolve_thread_count(
    requested: int = 0,
    environ: Mapping[str, str] | None = None,
    cpu_count: int | None = None,
) -> int:
    """
    Decide how many worker threads this process should use.

    An explicit request wins, then the SEQTABLE_NUM_THREADS override. Without
    either, the available cores are shared evenly between sibling jobs when
    the process runs under GNU parallel.

    :param requested: Thread count asked for by the caller, 0 for automatic.
    :param environ: Environment to consult, defaults to ``os.environ``.
    :param cpu_count: Number of cores, detected when not given.
    :returns: A thread count of at least 1.
    """
    if requested > 0:
        logger.debug("Using %d requested threads", requested)
        return requested

    if environ is None:
        environ = os.environ

    override = _parse_int(environ.get(THREADS_ENV_VAR))
    if override is not None and override > 0:
        logger.debug("Using %d threads from %s", override, THREADS_ENV_VAR)
        return override

    total_cores = cpu_count if cpu_count is not None else available_cores()
    total_cores = max(total_cores, 1)

    parallel_jobs = 1
    if PARALLEL_MARKER_ENV_VAR in environ:
        parallel_jobs = _parse_int(environ.get(PARALLEL_JOBS_ENV_VAR)) or 1

    if parallel_jobs > 1:
        threads = max(total_cores // parallel_jobs, 1)
        logger.debug(
            "Running as one of %d parallel jobs, using %d of %d cores",
            parallel_jobs, threads, total_cores,
        )
        return threads

    logger.debug("Using all %d cores", total_cores)
    return total_cores


class WorkerPool:
    """
    Fixed-size thread pool for data-parallel maps and reductions.

    Work items are plain callables over already materialized collections;
    nothing submitted to the pool blocks on I/O or on other work items.
    """

    def __init__(self, num_threads: int):
        if num_threads < 1:
            raise ValueError(f"num_threads must be positive, got {num_threads}")
        self.num_threads = num_threads
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=num_threads, thread_name_prefix="seqtable"
        )

    def map(self, func: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply func to every item in parallel, returning results in item order."""
        return list(self._executor.map(func, items))

    def reduce(
        self,
        func: Callable[[R, R], R],
        items: Iterable[R],
        identity: Callable[[], R],
    ) -> R:
        """
        Combine items with an associative, commutative func by pairwise rounds.

        Each round merges neighbouring pairs in parallel and halves the number
        of partial results. An empty input returns ``identity()``.
        """
        values = list(items)
        if not values:
            return identity()
        rounds = 0
        while len(values) > 1:
            pairs = [(values[i], values[i + 1]) for i in range(0, len(values) - 1, 2)]
            merged = self.map(lambda pair: func(*pair), pairs)
            if len(values) % 2:
                merged.append(values[-1])
            values = merged
            rounds += 1
        logger.debug("Reduced partial results in %d rounds", rounds)
        return values[0]

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


_global_pool: WorkerPool | None = None
_global_lock = threading.Lock()


def build_global_pool(num_threads: int) -> WorkerPool:
    """
    Create the process-wide worker pool.

    The pool can be configured exactly once per process. Calling this again,
    or after ``current_pool`` created a default pool, raises instead of
    silently keeping the old size.
    """
    global _global_pool
    with _global_lock:
        if _global_pool is not None:
            raise ThreadPoolConfigError(
                f"Global thread pool already initialized with "
                f"{_global_pool.num_threads} threads"
            )
        try:
            _global_pool = WorkerPool(num_threads)
        except (ValueError, RuntimeError) as exc:
            raise ThreadPoolConfigError("Failed to initialize thread pool") from exc
        return _global_pool


def current_pool() -> WorkerPool:
    """Return the process-wide pool, creating it with automatic sizing if needed."""
    global _global_pool
    with _global_lock:
        if _global_pool is None:
            _global_pool = WorkerPool(resolve_thread_count())
        return _global_pool
