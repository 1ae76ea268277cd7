"""
Population container

A population is a multiset of individuals bound to one environment. Every
insertion path evaluates the incoming individuals first, so every member
always carries a fitness computed by the population's environment.

Two backings are provided:

- UnorderedPopulation: insertion order, O(1) add, linear best/top-N scan.
- OrderedPopulation: a list kept sorted by the environment's comparator, O(1)
  best/worst, O(log n) lookup and O(n) insertion.

Both return the same individual as ``best()`` for identical contents.
"""

import bisect
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional

import numpy as np

from evolab.core.environment import Environment, FitnessValue
from evolab.core.individual import Individual
from evolab.exceptions import (
    EmptyPopulationError,
    PopulationIndexError,
    validate_count,
)
from evolab.stats import PopulationStats

logger = logging.getLogger(__name__)


class Population(ABC):
    """
    Base population.

    Attributes:
        environment: Environment evaluating every member
        capacity: Advisory size limit (0 = unbounded). Insertion may exceed it;
            the algorithm enforces it at generation boundaries.
    """

    def __init__(
        self,
        environment: Environment,
        capacity: int = 0,
        individuals: Optional[Iterable[Individual]] = None,
    ):
        """
        Args:
            environment: Evaluating environment (required)
            capacity: Capacity hint, 0 for unbounded
            individuals: Optional initial members

        Raises:
            ValueError: If environment is None
            InvalidCountError: If capacity < 0
        """
        if environment is None:
            raise ValueError("Population requires an environment")
        validate_count(capacity, "capacity", minimum=0)
        self._environment = environment
        self.capacity = capacity
        if individuals is not None:
            self.add_all(individuals)

    @property
    def environment(self) -> Environment:
        return self._environment

    # ------------------------------------------------------------------
    # Backing store
    # ------------------------------------------------------------------

    @abstractmethod
    def _insert(self, individual: Individual) -> bool:
        """Insert an evaluated individual; return whether the store changed."""

    @abstractmethod
    def _delete(self, individual: Individual) -> bool:
        """Remove one occurrence (by identity); return whether it was present."""

    @abstractmethod
    def _members(self) -> List[Individual]:
        """Members in iteration order (the live list, do not mutate)."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every member."""

    @abstractmethod
    def best(self) -> Individual:
        """Best member under the environment's order."""

    @abstractmethod
    def worst(self) -> Individual:
        """Worst member under the environment's order."""

    @abstractmethod
    def top(self, n: int) -> List[Individual]:
        """The ``n`` best members, best first; empty when ``n <= 0``."""

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def add(self, individual: Individual) -> bool:
        """
        Evaluate ``individual`` if needed, then insert it.

        Returns:
            Whether the population changed
        """
        self._environment.evaluate(individual)
        return self._insert(individual)

    def add_all(self, individuals: Iterable[Individual]) -> bool:
        """
        Evaluate (in parallel) every unevaluated individual, then insert all.

        Returns:
            Whether the population changed
        """
        individuals = list(individuals)
        self._environment.evaluate_all(individuals)
        changed = False
        for individual in individuals:
            changed = self._insert(individual) or changed
        return changed

    def replace_all(self, individuals: Iterable[Individual]) -> bool:
        """Clear the population, then ``add_all``."""
        individuals = list(individuals)
        self.clear()
        return self.add_all(individuals)

    def remove(self, individual: Individual) -> None:
        """Remove ``individual``; raise KeyError if it is not a member."""
        if not self._delete(individual):
            raise KeyError(f"Individual {individual.id} is not in the population")

    def discard(self, individual: Individual) -> bool:
        """Remove ``individual`` if present; return whether it was."""
        return self._delete(individual)

    def switch_environment(self, environment: Environment) -> None:
        """
        Bind a new environment and re-evaluate every member under it.

        Subclasses that depend on the order re-sort after re-evaluation.
        """
        logger.info(
            f"Switching population environment from {self._environment!r} to {environment!r}"
        )
        self._environment = environment
        environment.evaluate_all(self._members())

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._members())

    def __iter__(self) -> Iterator[Individual]:
        return iter(list(self._members()))

    def __contains__(self, individual: object) -> bool:
        return any(member is individual for member in self._members())

    def __bool__(self) -> bool:
        return len(self) > 0

    def get(self, index: int) -> Individual:
        """
        Positional access over the iteration order.

        Raises:
            PopulationIndexError: If ``index`` is outside [0, len)
        """
        members = self._members()
        if index < 0 or index >= len(members):
            raise PopulationIndexError(index, len(members))
        return members[index]

    def __getitem__(self, index: int) -> Individual:
        return self.get(index)

    def _require_members(self, operation: str) -> List[Individual]:
        members = self._members()
        if not members:
            raise EmptyPopulationError(operation)
        return members

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def best_fitness(self) -> FitnessValue:
        return self.best().fitness

    def _fitness_array(self) -> np.ndarray:
        return np.array([float(ind.fitness) for ind in self._members()], dtype=np.float64)

    def fitness_sum(self) -> float:
        return float(self._fitness_array().sum())

    def mean(self) -> float:
        """Mean fitness."""
        self._require_members("mean")
        return float(self._fitness_array().mean())

    def sample_std(self) -> float:
        """Sample standard deviation of fitness (0.0 with fewer than two members)."""
        values = self._fitness_array()
        if len(values) < 2:
            return 0.0
        return float(np.std(values, ddof=1))

    def distinct_count(self) -> int:
        """Number of distinct individual objects (identity, not genome)."""
        return len({id(ind) for ind in self._members()})

    def statistics(self) -> PopulationStats:
        """Read-only snapshot of the aggregate statistics."""
        members = self._require_members("statistics")
        values = self._fitness_array()
        best = self.best()
        worst = self.worst()
        return PopulationStats(
            size=len(members),
            distinct=self.distinct_count(),
            best_fitness=float(best.fitness),
            worst_fitness=float(worst.fitness),
            mean_fitness=float(values.mean()),
            std_fitness=self.sample_std(),
            fitness_sum=float(values.sum()),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} size={len(self)} capacity={self.capacity}>"


class UnorderedPopulation(Population):
    """Population kept in insertion order."""

    def __init__(
        self,
        environment: Environment,
        capacity: int = 0,
        individuals: Optional[Iterable[Individual]] = None,
    ):
        self._individuals: List[Individual] = []
        super().__init__(environment, capacity, individuals)

    def _insert(self, individual: Individual) -> bool:
        self._individuals.append(individual)
        return True

    def _delete(self, individual: Individual) -> bool:
        for index, member in enumerate(self._individuals):
            if member is individual:
                del self._individuals[index]
                return True
        return False

    def _members(self) -> List[Individual]:
        return self._individuals

    def clear(self) -> None:
        self._individuals.clear()

    def best(self) -> Individual:
        return max(self._require_members("best"), key=self._environment.sort_key)

    def worst(self) -> Individual:
        return min(self._require_members("worst"), key=self._environment.sort_key)

    def top(self, n: int) -> List[Individual]:
        return self._environment.rank(self._individuals, n)


class OrderedPopulation(Population):
    """
    Population kept sorted by the environment's comparator.

    Members are stored worst to best, so the best individual is the last one
    and positional access follows that order. The same object is never held
    twice: a second insertion returns False.

    The store is a plain list maintained with ``bisect``. ``best`` and ``worst``
    are O(1), ``top(n)`` is O(n) in the slice length and locating a member is
    O(log n), but each insertion or removal shifts the list and costs O(n).
    """

    def __init__(
        self,
        environment: Environment,
        capacity: int = 0,
        individuals: Optional[Iterable[Individual]] = None,
    ):
        self._sorted: List[Individual] = []
        super().__init__(environment, capacity, individuals)

    def _locate(self, individual: Individual) -> int:
        key = self._environment.sort_key
        index = bisect.bisect_left(self._sorted, key(individual), key=key)
        if index < len(self._sorted) and self._sorted[index] is individual:
            return index
        return -1

    def _insert(self, individual: Individual) -> bool:
        if self._locate(individual) >= 0:
            return False
        bisect.insort(self._sorted, individual, key=self._environment.sort_key)
        return True

    def _delete(self, individual: Individual) -> bool:
        if individual.evaluated_by is not self._environment:
            return False
        index = self._locate(individual)
        if index < 0:
            return False
        del self._sorted[index]
        return True

    def _members(self) -> List[Individual]:
        return self._sorted

    def __contains__(self, individual: object) -> bool:
        if not isinstance(individual, Individual):
            return False
        if individual.evaluated_by is not self._environment:
            return False
        return self._locate(individual) >= 0

    def clear(self) -> None:
        self._sorted.clear()

    def best(self) -> Individual:
        return self._require_members("best")[-1]

    def worst(self) -> Individual:
        return self._require_members("worst")[0]

    def top(self, n: int) -> List[Individual]:
        if n <= 0:
            return []
        return self._sorted[:-n - 1:-1]

    def switch_environment(self, environment: Environment) -> None:
        super().switch_environment(environment)
        self._sorted.sort(key=environment.sort_key)
