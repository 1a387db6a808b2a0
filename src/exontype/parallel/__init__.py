"""Parallelisation utilities for exontype.

Example:
    >>> from exontype.parallel import ParallelExecutor
    >>> executor = ParallelExecutor(n_workers=4, backend="threads")
    >>> results, stats = executor.map_items(func, items)
"""

from exontype.parallel.executor import (
    ExecutionStats,
    ExecutorBackend,
    ParallelExecutor,
    TaskFailedError,
    TaskResult,
    get_optimal_workers,
)

__all__ = [
    "ExecutorBackend",
    "ExecutionStats",
    "ParallelExecutor",
    "TaskFailedError",
    "TaskResult",
    "get_optimal_workers",
]
