"""
Selection operator

Selectors decide which individuals reproduce (``parents``) and which carry
over into the next generation (``survivors``). Tournament selection is built
on ``best_among_random``: draw a random sample without replacement and keep
its best members.
"""

from abc import abstractmethod
from typing import List, Optional

from evolab.core.individual import Individual
from evolab.core.population import Population
from evolab.exceptions import SampleSizeError, validate_count
from evolab.operators.base import Operator
from evolab.utils import rng


def best_among_random(population: Population, n_best: int, n_sample: int) -> List[Individual]:
    """
    Keep the ``n_best`` best of ``n_sample`` distinct random members.

    Args:
        population: Population to sample from
        n_best: Number of individuals returned
        n_sample: Number of distinct members drawn

    Returns:
        ``n_best`` members of the population, best first

    Raises:
        SampleSizeError: If n_best > n_sample, or n_sample exceeds the
            population size
    """
    validate_count(n_best, "number of best individuals")
    validate_count(n_sample, "sample size")
    if n_best > n_sample:
        raise SampleSizeError(n_best, n_sample, "sample")
    if n_sample > len(population):
        raise SampleSizeError(n_sample, len(population), "population")
    indices = rng.distinct_indices(n_sample, 0, len(population) - 1)
    sample = [population.get(index) for index in indices]
    return population.environment.rank(sample, n_best)


class Selector(Operator):
    """Abstract selector."""

    @abstractmethod
    def parents(self) -> List[Individual]:
        """Mating pool for the next recombination pass."""

    @abstractmethod
    def survivors(self) -> List[Individual]:
        """Members that carry over into the next generation."""

    def best_among_random(self, n_best: int, n_sample: int) -> List[Individual]:
        """``best_among_random`` over the bound algorithm's population."""
        return best_among_random(self.population, n_best, n_sample)


class TournamentSelector(Selector):
    """
    Tournament selection.

    Each parent is the winner of an independent tournament among
    ``tournament_size`` distinct random members (clamped to the population
    size). A member may win several tournaments.

    Attributes:
        tournament_size: Participants per tournament (k)
        n_parents: Mating pool size, or None to derive it from the population
            size rounded up to a multiple of the recombinator's partner count
    """

    def __init__(self, tournament_size: int = 3, n_parents: Optional[int] = None):
        super().__init__()
        validate_count(tournament_size, "tournament size")
        if n_parents is not None:
            validate_count(n_parents, "number of parents")
        self.tournament_size = tournament_size
        self.n_parents = n_parents

    def _pool_size(self) -> int:
        if self.n_parents is not None:
            return self.n_parents
        size = len(self.population)
        recombinator = self.algorithm.recombinator
        k = recombinator.partner_count if recombinator is not None else 1
        return -(-size // k) * k

    def tournament(self) -> Individual:
        """Run one tournament and return its winner."""
        size = min(self.tournament_size, len(self.population))
        return self.best_among_random(1, size)[0]

    def parents(self) -> List[Individual]:
        return [self.tournament() for _ in range(self._pool_size())]

    def survivors(self) -> List[Individual]:
        population = self.population
        return population.top(population.capacity or len(population))
