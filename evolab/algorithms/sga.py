"""
Simple genetic algorithm

Generational replacement: select a mating pool, recombine it, mutate the
offspring and replace the whole population, optionally carrying the best
members of the previous generation over unchanged.
"""

import itertools
import logging
from typing import List, Optional

from evolab.algorithms.base import EvolutionaryAlgorithm
from evolab.core.individual import Individual
from evolab.exceptions import validate_count

logger = logging.getLogger(__name__)


class SimpleGA(EvolutionaryAlgorithm):
    """
    Simple genetic algorithm.

    Requires a generator, a selector, a recombinator and a mutator. When
    recombination gates groups off, the missing offspring are clones of the
    mating pool so the generation size stays constant.

    Attributes:
        elitism: Number of best members copied into the next generation
    """

    def __init__(self, name: Optional[str] = None, elitism: int = 0, **kwargs):
        super().__init__(name=name, **kwargs)
        validate_count(elitism, "elitism", minimum=0)
        self.elitism = elitism

    def generation_size(self) -> int:
        """Population capacity, or the current size when unbounded."""
        population = self.require_population()
        return population.capacity or len(population)

    def step(self) -> None:
        population = self.require_population()
        selector = self.require_selector()
        recombinator = self.require_recombinator()
        mutator = self.require_mutator()

        size = self.generation_size()
        elite = population.top(min(self.elitism, size))
        needed = size - len(elite)

        parents = selector.parents()
        offspring = recombinator.recombine_all(parents)[:needed]
        if not offspring and needed:
            logger.warning(f"{self.name}: recombination produced no offspring")
        if len(offspring) < needed:
            offspring.extend(self._clones(parents, needed - len(offspring)))
        mutator.mutate_all(offspring)

        population.replace_all(elite + offspring)

    def _clones(self, parents: List[Individual], count: int) -> List[Individual]:
        generator = self.require_generator()
        if not parents:
            parents = self.require_population().top(count)
        logger.debug(f"{self.name}: back-filling {count} offspring with clones")
        return [
            generator.clone(parent)
            for parent in itertools.islice(itertools.cycle(parents), count)
        ]
