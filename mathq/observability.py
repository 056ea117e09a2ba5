"""
Observability utilities for the mathq library.

This module provides:
- Logging configuration for the `mathq` logger namespace
- A profiler that records every plan materialization (node kind, mode,
  result shape and duration)
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional, Dict, List, Tuple
from dataclasses import dataclass
from collections import defaultdict


# ============================================================================
# Logging Configuration
# ============================================================================

def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure logging for the mathq library.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs
    """
    log_level = getattr(logging, level.upper())

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    mathq_logger = logging.getLogger('mathq')
    mathq_logger.setLevel(log_level)

    # Reconfiguring replaces earlier handlers instead of stacking them
    for handler in list(mathq_logger.handlers):
        mathq_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    mathq_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        mathq_logger.addHandler(file_handler)

    mathq_logger.propagate = False
    return mathq_logger


# ============================================================================
# Materialization Profiling
# ============================================================================

@dataclass
class Materialization:
    """One `to_matrix()` call."""
    node: str
    mode: str
    shape: Optional[Tuple[int, int]] = None
    duration: Optional[float] = None
    failed: bool = False


class ExecutionProfiler:
    """
    Records how long plan materializations take, grouped by the kind of
    the outermost node.

    Example:
        profiler = get_profiler()
        profiler.enable()
        matrix.transpose().to_matrix()
        print(profiler.get_summary()["TransposeNode"])
    """

    def __init__(self, enabled: bool = True):
        self.records: List[Materialization] = []
        self._durations: Dict[str, List[float]] = defaultdict(list)
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @contextmanager
    def materialize(self, node):
        """
        Time the execution of `node`.

        Yields the Materialization being recorded, or None when disabled.
        The caller fills in `shape` once the result exists.
        """
        if not self._enabled:
            yield None
            return

        record = Materialization(node=type(node).__name__, mode=node.mode.name)
        start = time.perf_counter()
        try:
            yield record
        except Exception:
            record.failed = True
            raise
        finally:
            record.duration = time.perf_counter() - start
            self.records.append(record)
            self._durations[record.node].append(record.duration)

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """
        Aggregated timings per node kind.

        Returns:
            Dictionary mapping node class names to count/total/mean/min/max
        """
        summary = {}
        for node, durations in self._durations.items():
            summary[node] = {
                'count': len(durations),
                'total': sum(durations),
                'mean': sum(durations) / len(durations),
                'min': min(durations),
                'max': max(durations)
            }
        return summary

    def reset(self):
        """Clear all profiling data."""
        self.records.clear()
        self._durations.clear()

    def enable(self):
        self._enabled = True

    def disable(self):
        self._enabled = False


# Global profiler instance, off until a caller enables it
_global_profiler = ExecutionProfiler(enabled=False)

def get_profiler() -> ExecutionProfiler:
    """Get the global profiler instance."""
    return _global_profiler
