# --- Purpose: Contains the execution kernels that fill output buffers. ---

import logging
from enum import Enum
from concurrent.futures import ThreadPoolExecutor, FIRST_EXCEPTION, wait
from typing import Callable, List, Optional, Tuple

import numpy as np

from . import config

logger = logging.getLogger(__name__)


class ExecutionMode(Enum):
    """How a node fills its output buffer."""
    AUTO = "auto"
    SERIES = "series"
    PARALLEL = "parallel"


def counter_pairs(total: int, start: int = 0, workers: Optional[int] = None) -> List[Tuple[int, int]]:
    """
    Splits the range [start, start + total) into contiguous half-open ranges,
    one per worker.

    With fewer elements than workers every element gets its own range.
    Otherwise the range is cut into `workers` equal chunks and the remainder
    is folded into the last one.
    """
    if workers is None:
        workers = config.MAX_WORKERS

    if total < workers:
        return [(start + i, start + i + 1) for i in range(total)]

    span = total // workers
    pairs = [(start + i * span, start + (i + 1) * span) for i in range(workers - 1)]
    pairs.append((start + (workers - 1) * span, start + total))
    return pairs


def _fill_block(target: np.ndarray, producer: Callable, rows: Tuple[int, int],
                cols: Optional[Tuple[int, int]] = None):
    """Fills one block row-major. This is what each thread runs."""
    if cols is None:
        for i in range(*rows):
            target[i] = producer(i)
        return

    for i in range(*rows):
        for j in range(*cols):
            target[i, j] = producer(i, j)


def _full_range(target: np.ndarray):
    if target.ndim == 1:
        return (0, target.shape[0]), None
    return (0, target.shape[0]), (0, target.shape[1])


def fill_series(target: np.ndarray, producer: Callable) -> np.ndarray:
    """Fills every cell on the calling thread in ascending row, then column, order."""
    rows, cols = _full_range(target)
    _fill_block(target, producer, rows, cols)
    return target


def _partition(target: np.ndarray):
    if target.ndim == 1:
        return [(pair, None) for pair in counter_pairs(target.shape[0])]

    rows, cols = target.shape
    # Split along the longer axis so each task gets the most contiguous work
    if rows <= cols:
        return [((0, rows), pair) for pair in counter_pairs(cols)]
    return [(pair, (0, cols)) for pair in counter_pairs(rows)]


def fill_parallel(target: np.ndarray, producer: Callable) -> np.ndarray:
    """
    Fills the target with one thread per partition and blocks until all of
    them finish.

    Partitions never overlap, so workers write into the shared buffer without
    locking. If a producer raises, partitions that have not started are
    cancelled and the first failure is re-raised once the running ones join.
    """
    blocks = _partition(target)
    if not blocks:
        return target

    logger.debug(f"Parallel fill of shape {target.shape} over {len(blocks)} partitions")

    # Use a ThreadPoolExecutor to manage a pool of worker threads.
    with ThreadPoolExecutor(max_workers=len(blocks)) as executor:
        futures = [
            executor.submit(_fill_block, target, producer, rows, cols)
            for rows, cols in blocks
        ]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()

        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()

    return target


def fill(target: np.ndarray, producer: Callable, mode: ExecutionMode = ExecutionMode.AUTO,
         cost: int = 1) -> np.ndarray:
    """
    Populates every cell of a 1-D or 2-D target exactly once.

    Args:
        target: Output buffer, written in place
        producer: `producer(i)` for 1-D targets, `producer(i, j)` for 2-D ones
        mode: Series, parallel, or automatic selection
        cost: Relative work per cell, used by automatic selection

    Returns:
        The filled target
    """
    if mode == ExecutionMode.SERIES:
        return fill_series(target, producer)
    if mode == ExecutionMode.PARALLEL:
        return fill_parallel(target, producer)

    total_cost = target.size * cost
    if total_cost < config.AUTO_PARALLEL_THRESHOLD:
        logger.debug(f"Auto fill: cost {total_cost} below threshold, running in series")
        return fill_series(target, producer)

    logger.debug(f"Auto fill: cost {total_cost} reaches threshold, running in parallel")
    return fill_parallel(target, producer)
