"""
Environment (fitness evaluator)

An environment is the objective function plus its optimization direction. It
computes fitness values, caches them on the individuals it evaluates, and
defines the total order used by populations and selectors.
"""

import functools
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from numbers import Number
from typing import Callable, Iterable, List, Optional, Union

from evolab.core.individual import Individual
from evolab.exceptions import InvalidFitnessError
from evolab.utils.parallel import ParallelExecutor

logger = logging.getLogger(__name__)


FitnessValue = Union[int, float, Decimal, Fraction]


class Mode(Enum):
    """Optimization direction

    Attributes:
        MAXIMIZE: Larger fitness is better
        MINIMIZE: Smaller fitness is better
    """
    MAXIMIZE = "maximize"
    MINIMIZE = "minimize"


def _sign(x: FitnessValue, y: FitnessValue) -> int:
    return (x > y) - (x < y)


def validate_fitness(value: object) -> FitnessValue:
    """Reject values that cannot take part in a total order."""
    if isinstance(value, bool) or not isinstance(value, Number) or isinstance(value, complex):
        raise InvalidFitnessError(value)
    if value != value:  # NaN
        raise InvalidFitnessError(value)
    return value


class Environment(ABC):
    """
    Fitness function with a fixed optimization mode.

    Subclasses implement ``fitness``. It must be a pure function of the
    individual's genes so that ``evaluate_all`` can run it concurrently on
    disjoint individuals.

    The comparator is oriented so that ``compare(a, b) > 0`` means ``a`` is
    better than ``b``. Equal fitness falls back to the id: the older individual
    (smaller id) ranks higher. Only an individual compared with itself yields 0.

    Attributes:
        mode: Maximize or minimize
        executor: Fan-out used by ``evaluate_all``
    """

    def __init__(
        self,
        mode: Mode = Mode.MAXIMIZE,
        executor: Optional[ParallelExecutor] = None,
    ):
        """Initialize the environment

        Args:
            mode: Optimization direction, MAXIMIZE by default
            executor: Parallel executor for batch evaluation; a default thread
                pool is used when omitted
        """
        self.mode = mode
        self.executor = executor or ParallelExecutor()
        self._key = functools.cmp_to_key(self.compare)

    @abstractmethod
    def fitness(self, individual: Individual) -> FitnessValue:
        """Objective function. Must not modify the individual."""

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, individual: Individual) -> FitnessValue:
        """
        Evaluate an individual and cache the result on it.

        Re-evaluation by the same environment is a no-op returning the cached
        value.

        Args:
            individual: Complete individual to evaluate

        Returns:
            The fitness value

        Raises:
            IncompleteIndividualError: If the individual has unassigned loci
            InvalidFitnessError: If ``fitness`` returns NaN or a non-number
        """
        if individual.is_evaluated_by(self):
            return individual.fitness
        individual.require_complete()
        value = validate_fitness(self.fitness(individual))
        individual.set_fitness(value, self)
        return value

    def evaluate_all(self, individuals: Iterable[Individual]) -> int:
        """
        Evaluate, in parallel, every individual not yet evaluated by this
        environment.

        Args:
            individuals: Individuals to evaluate

        Returns:
            Number of individuals that were actually evaluated
        """
        pending = [ind for ind in individuals if not ind.is_evaluated_by(self)]
        if pending:
            self.executor.for_each(self.evaluate, pending)
            logger.debug(f"Evaluated {len(pending)} individuals")
        return len(pending)

    def _fitness_of(self, individual: Individual) -> FitnessValue:
        if individual.is_evaluated_by(self):
            return individual.fitness
        # lazy: compute without caching so an unevaluated operand stays mutable
        individual.require_complete()
        return validate_fitness(self.fitness(individual))

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def compare_fitness(self, x: FitnessValue, y: FitnessValue) -> int:
        """
        Compare two raw fitness values honoring the mode.

        Returns:
            1 if ``x`` is better, -1 if worse, 0 if equal
        """
        if self.mode is Mode.MINIMIZE:
            return _sign(y, x)
        return _sign(x, y)

    def compare(self, first: Individual, second: Individual) -> int:
        """
        Total order over individuals.

        Unevaluated operands are evaluated on the fly. Ties in fitness are
        broken by id, smaller id first.

        Returns:
            1 if ``first`` is better, -1 if ``second`` is better, 0 only when
            both are the same object
        """
        if first is second:
            return 0
        result = self.compare_fitness(self._fitness_of(first), self._fitness_of(second))
        if result == 0:
            return _sign(second.id, first.id)
        return result

    def inverse_compare(self, first: Individual, second: Individual) -> int:
        return self.compare(second, first)

    @property
    def sort_key(self) -> Callable[[Individual], object]:
        """Key function for ``sorted``/``max``: ascending means worst to best."""
        return self._key

    def is_better(self, first: Individual, second: Individual) -> bool:
        return self.compare(first, second) > 0

    def best_of(self, individuals: Iterable[Individual]) -> Individual:
        return max(individuals, key=self._key)

    def rank(self, individuals: Iterable[Individual], n: Optional[int] = None) -> List[Individual]:
        """Return individuals from best to worst, truncated to ``n`` if given.

        A non-positive ``n`` yields an empty list.
        """
        ranked = sorted(individuals, key=self._key, reverse=True)
        return ranked if n is None else ranked[:max(n, 0)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mode={self.mode.value})"


class FunctionEnvironment(Environment):
    """Environment wrapping a plain callable as its objective function."""

    def __init__(
        self,
        function: Callable[[Individual], FitnessValue],
        mode: Mode = Mode.MAXIMIZE,
        executor: Optional[ParallelExecutor] = None,
    ):
        super().__init__(mode, executor)
        self.function = function

    def fitness(self, individual: Individual) -> FitnessValue:
        return self.function(individual)
