"""
Parallel Executor

Data-parallel fan-out for per-individual work (fitness evaluation, mutation).
Each call is a barrier: it returns only once every item has been processed.
"""

import concurrent.futures
import logging
from typing import Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ParallelExecutor:
    """
    Thread pool wrapper for map-style fan-out.

    Results keep the order of the input. A failure in any worker is re-raised
    in the caller once the batch has been joined; nothing is skipped.

    Attributes:
        max_workers: Number of worker threads. 1 runs everything inline;
            None lets ``ThreadPoolExecutor`` pick its default.
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Initialize parallel executor.

        Args:
            max_workers: Maximum number of concurrent workers
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers

    @property
    def sequential(self) -> bool:
        return self.max_workers == 1

    def map(self, func: Callable[[T], R], items: Iterable[T]) -> List[R]:
        """
        Apply ``func`` to every item and wait for all of them.

        Args:
            func: Function applied to each item
            items: Items to process

        Returns:
            List of results in input order
        """
        items = list(items)
        if self.sequential or len(items) < 2:
            return [func(item) for item in items]

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(func, item) for item in items]
            concurrent.futures.wait(futures)

        results = []
        for index, future in enumerate(futures):
            error = future.exception()
            if error is not None:
                logger.error(f"Parallel task {index} failed: {error}")
                raise error
            results.append(future.result())
        return results

    def for_each(self, func: Callable[[T], object], items: Iterable[T]) -> None:
        """Apply ``func`` to every item for its side effects."""
        self.map(func, items)
