# mathq/config.py
"""
Centralized configuration for the mathq matrix library.
This module provides a single source of truth for all configurable parameters.
"""

import os

# Execution strategy parameters
AUTO_PARALLEL_THRESHOLD = 10_000  # cells * cost below this run in series


def _check_workers(workers) -> int:
    try:
        workers = int(workers)
    except (TypeError, ValueError):
        raise ValueError(f"Worker count must be an integer, got {workers!r}.") from None
    if workers < 1:
        raise ValueError("Worker count must be at least 1.")
    return workers


def _workers_from_env() -> int:
    """Worker pool size from MATHQ_MAX_WORKERS, else the CPU count."""
    value = os.environ.get("MATHQ_MAX_WORKERS", "").strip()
    if not value:
        return os.cpu_count() or 1
    try:
        return _check_workers(value)
    except ValueError as e:
        raise ValueError(f"Invalid MATHQ_MAX_WORKERS: {e}") from None


# Worker pool size, read once at import
MAX_WORKERS = _workers_from_env()


def set_max_workers(workers: int):
    """Override the worker count used by parallel fills (mainly for tests)."""
    global MAX_WORKERS
    MAX_WORKERS = _check_workers(workers)
