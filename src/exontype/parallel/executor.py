"""Local parallel execution using threads or processes.

This module runs independent per-batch work, such as label aggregation
for a slice of query intervals, across a pool of workers.

Features:
    - Multiple execution backends (serial, threads, processes)
    - Progress callbacks
    - Per-task timing and execution statistics

Example:
    >>> from exontype.parallel.executor import ParallelExecutor, ExecutorBackend
    >>> executor = ParallelExecutor(n_workers=4, backend=ExecutorBackend.THREADS)
    >>> results, stats = executor.map_items(aggregate_batch, batches)
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from enum import Enum
from typing import Any, Callable, TypeVar

import attrs

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# Enums
# =============================================================================


class ExecutorBackend(Enum):
    """Available execution backends."""

    SERIAL = "serial"
    THREADS = "threads"
    PROCESSES = "processes"


# =============================================================================
# Data Structures
# =============================================================================


@attrs.define(slots=True)
class TaskResult:
    """Result from a parallel task."""

    task_id: str
    success: bool
    result: Any | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "task_id": self.task_id,
            "success": self.success,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@attrs.define(slots=True)
class ExecutionStats:
    """Statistics from parallel execution."""

    total_tasks: int
    successful: int
    failed: int
    total_duration: float
    mean_task_duration: float
    max_task_duration: float

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total_tasks": self.total_tasks,
            "successful": self.successful,
            "failed": self.failed,
            "total_duration": round(self.total_duration, 3),
            "mean_task_duration": round(self.mean_task_duration, 3),
            "max_task_duration": round(self.max_task_duration, 3),
        }


@attrs.define
class _Task:
    """An item tagged with a task id."""

    task_id: str
    item: Any


class TaskFailedError(RuntimeError):
    """Raised when a task fails and execution does not continue on error."""

    def __init__(self, task_id: str, error: str) -> None:
        self.task_id = task_id
        self.error = error
        super().__init__(f"Task {task_id} failed: {error}")


def _run_task(func: Callable[[Any], Any], task: _Task) -> TaskResult:
    """Run one task, capturing timing and any exception."""
    start_time = time.time()
    try:
        result = func(task.item)
    except Exception as e:
        return TaskResult(
            task_id=task.task_id,
            success=False,
            error=f"{type(e).__name__}: {e}",
            duration_seconds=time.time() - start_time,
        )
    return TaskResult(
        task_id=task.task_id,
        success=True,
        result=result,
        duration_seconds=time.time() - start_time,
    )


# =============================================================================
# Parallel Executor
# =============================================================================


class ParallelExecutor:
    """Execute independent tasks in parallel.

    Example:
        >>> executor = ParallelExecutor(n_workers=4, backend="threads")
        >>> results, stats = executor.map_items(func, items)
        >>> print(f"Processed {stats.successful}/{stats.total_tasks} tasks")
    """

    def __init__(
        self,
        n_workers: int = 1,
        backend: ExecutorBackend | str = ExecutorBackend.THREADS,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            n_workers: Number of parallel workers (1 = serial).
            backend: Execution backend.
            progress_callback: Called with (completed, total, task_id).
        """
        self.n_workers = max(1, n_workers)
        self.backend = (
            ExecutorBackend(backend) if isinstance(backend, str) else backend
        )
        self.progress_callback = progress_callback

        # Auto-select serial if n_workers=1
        if self.n_workers == 1:
            self.backend = ExecutorBackend.SERIAL

    def map_items(
        self,
        func: Callable[[T], R],
        items: list[T],
        desc: str = "Processing",
        continue_on_error: bool = True,
    ) -> tuple[list[TaskResult], ExecutionStats]:
        """Apply a function to each item.

        With the processes backend, ``func`` and the items must be
        picklable.

        Args:
            func: Function to apply to each item.
            items: Items to process.
            desc: Description for logging.
            continue_on_error: If False, raise TaskFailedError on the
                first failed task.

        Returns:
            Tuple of (results in item order, execution stats).
        """
        if not items:
            return [], ExecutionStats(
                total_tasks=0,
                successful=0,
                failed=0,
                total_duration=0.0,
                mean_task_duration=0.0,
                max_task_duration=0.0,
            )

        tasks = [_Task(f"task_{i:06d}", item) for i, item in enumerate(items)]

        logger.debug(
            f"{desc}: {len(tasks)} tasks with {self.n_workers} workers "
            f"(backend={self.backend.value})"
        )

        start_time = time.time()
        if self.backend == ExecutorBackend.SERIAL:
            results = self._execute_serial(func, tasks, continue_on_error)
        elif self.backend == ExecutorBackend.THREADS:
            with ThreadPoolExecutor(max_workers=self.n_workers) as pool:
                results = self._execute_pool(pool, func, tasks, continue_on_error)
        else:
            with ProcessPoolExecutor(max_workers=self.n_workers) as pool:
                results = self._execute_pool(pool, func, tasks, continue_on_error)

        results.sort(key=lambda r: r.task_id)

        total_duration = time.time() - start_time
        successful = sum(1 for r in results if r.success)
        durations = [r.duration_seconds for r in results]

        stats = ExecutionStats(
            total_tasks=len(results),
            successful=successful,
            failed=len(results) - successful,
            total_duration=total_duration,
            mean_task_duration=sum(durations) / len(durations),
            max_task_duration=max(durations),
        )

        logger.debug(
            f"{desc}: completed {successful}/{len(tasks)} tasks, "
            f"duration={total_duration:.2f}s"
        )

        return results, stats

    def _execute_serial(
        self,
        func: Callable,
        tasks: list[_Task],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Serial execution with progress tracking."""
        results = []
        total = len(tasks)

        for i, task in enumerate(tasks):
            task_result = _run_task(func, task)
            results.append(task_result)

            if not task_result.success and not continue_on_error:
                logger.error(f"Task {task.task_id} failed: {task_result.error}")
                raise TaskFailedError(task.task_id, task_result.error or "")

            if self.progress_callback:
                self.progress_callback(i + 1, total, task.task_id)

        return results

    def _execute_pool(
        self,
        pool: Executor,
        func: Callable,
        tasks: list[_Task],
        continue_on_error: bool,
    ) -> list[TaskResult]:
        """Execution on a thread or process pool."""
        results = []
        total = len(tasks)
        completed = 0
        results_lock = threading.Lock()

        futures: dict[Future, _Task] = {
            pool.submit(_run_task, func, task): task for task in tasks
        }

        for future in as_completed(futures):
            completed += 1
            task_result = future.result()
            with results_lock:
                results.append(task_result)

            if not task_result.success and not continue_on_error:
                logger.error(f"Task {task_result.task_id} failed: {task_result.error}")
                for pending in futures:
                    pending.cancel()
                raise TaskFailedError(task_result.task_id, task_result.error or "")

            if self.progress_callback:
                self.progress_callback(completed, total, task_result.task_id)

        return results


# =============================================================================
# Utility Functions
# =============================================================================


def get_optimal_workers(max_workers: int | None = None) -> int:
    """Determine the number of workers based on available CPUs.

    Args:
        max_workers: Maximum workers (defaults to CPU count).

    Returns:
        Number of workers, at least 1.
    """
    cpu_count = os.cpu_count() or 1
    if max_workers is None:
        max_workers = cpu_count
    return max(1, min(max_workers, cpu_count))
