"""
Differential evolution

Each generation builds one trial vector per member: the DE mutator writes a
base vector perturbed by scaled differences of random members into an empty
trial, then the DE recombinator crosses the trial with a random target,
evaluates the result and keeps the better of the two. Targets are removed
from the population as they are used, so every member meets exactly one
trial.

Overflowing loci saturate to the gene bounds: above the upper bound a locus
becomes the largest value strictly below it, below the lower bound it becomes
the lower bound.
"""

import logging
from abc import abstractmethod
from typing import List, Optional, Sequence, Tuple

from evolab.algorithms.base import EvolutionaryAlgorithm
from evolab.core.individual import Individual
from evolab.core.population import Population
from evolab.exceptions import validate_count, validate_probability
from evolab.operators.mutation import Mutator
from evolab.operators.recombination import Recombinator, discrete_recombination
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor

logger = logging.getLogger(__name__)


class DEMutator(Mutator):
    """
    Differential mutation.

    Every trial is mutated; the mutation probability is fixed at 1.

    Attributes:
        n_differences: Number of difference pairs added to the base vector
        perturbation_factor: Scale factor F of the differences
    """

    def __init__(
        self,
        n_differences: int = 1,
        perturbation_factor: float = 0.5,
        executor: Optional[ParallelExecutor] = None,
    ):
        """
        Args:
            n_differences: Difference pairs per trial, at least 1
            perturbation_factor: Scale factor F
            executor: Parallel executor for ``mutate_all``

        Raises:
            InvalidCountError: If n_differences < 1
        """
        super().__init__(1.0, executor)
        validate_count(n_differences, "difference count")
        self.n_differences = n_differences
        self.perturbation_factor = perturbation_factor

    def decide(self, individual: Individual) -> bool:
        return True

    @abstractmethod
    def select_vectors(self, population: Population) -> Tuple[Individual, List[Individual]]:
        """
        Pick the base vector and ``2 * n_differences`` difference vectors.

        Returns:
            (base, vectors) where consecutive vectors form the pairs
        """

    def _difference_vectors(self, population: Population, indices: Sequence[int]) -> List[Individual]:
        return [population.get(index) for index in indices]

    def mutate(self, individual: Individual) -> None:
        """
        Write ``base + F * sum(a - b)`` into ``individual``, locus by locus.

        Raises:
            SampleSizeError: If the population holds too few members
        """
        base, vectors = self.select_vectors(self.population)
        pairs = list(zip(vectors[0::2], vectors[1::2]))
        for locus, base_gene in enumerate(base):
            difference = sum(a[locus].value - b[locus].value for a, b in pairs)
            gene = base_gene.copy()
            gene.clamp(base_gene.value + self.perturbation_factor * difference)
            individual.set_gene(locus, gene)


class BestMutator(DEMutator):
    """DE/best: the base vector is the current best member."""

    def select_vectors(self, population: Population) -> Tuple[Individual, List[Individual]]:
        count = 2 * self.n_differences
        indices = rng.distinct_indices(count, 0, len(population) - 1)
        return population.best(), self._difference_vectors(population, indices)


class RandMutator(DEMutator):
    """DE/rand: the base vector is a random member, distinct from the pairs."""

    def select_vectors(self, population: Population) -> Tuple[Individual, List[Individual]]:
        count = 2 * self.n_differences + 1
        indices = rng.distinct_indices(count, 0, len(population) - 1)
        return population.get(indices[0]), self._difference_vectors(population, indices[1:])


class DERecombinator(Recombinator):
    """
    Trial/target crossover fused with one-to-one survivor selection.

    Each single-partner group is a trial. A random target is drawn from the
    population and removed from it; the crossed vector is evaluated and the
    better of it and the target is returned.

    Attributes:
        crossover_probability: Crossover rate CR
    """

    def __init__(self, crossover_probability: float = 0.9):
        super().__init__(1.0, partner_count=1)
        validate_probability(crossover_probability, "crossover probability")
        self.crossover_probability = crossover_probability

    def decide(self, partners: Sequence[Individual]) -> bool:
        # every trial must meet a target
        return True

    @abstractmethod
    def cross(self, donor: Individual, target: Individual) -> Individual:
        """Build the experimental vector from ``donor`` and ``target``."""

    def recombine(self, partners: Sequence[Individual]) -> List[Individual]:
        (donor,) = partners
        population = self.population
        environment = self.environment
        target = population.get(rng.uniform_index(len(population)))
        experimental = self.cross(donor, target)
        environment.evaluate(experimental)
        population.remove(target)
        if environment.compare(experimental, target) > 0:
            return [experimental]
        return [target]


class BinomialRecombinator(DERecombinator):
    """Binomial crossover: each locus comes from the donor with probability CR."""

    def cross(self, donor: Individual, target: Individual) -> Individual:
        (child,) = discrete_recombination(
            donor, target, self.generator, 1, self.crossover_probability
        )
        return child


class ExponentialRecombinator(DERecombinator):
    """
    Exponential crossover.

    A contiguous block of donor loci, starting at a random locus and wrapping
    around, is extended while a Bernoulli trial with CR succeeds. The block
    holds at least one locus; the rest come from the target.
    """

    def block(self, length: int) -> List[int]:
        start = rng.uniform_index(length)
        size = 1
        while size < length and rng.bernoulli(self.crossover_probability):
            size += 1
        return [(start + offset) % length for offset in range(size)]

    def cross(self, donor: Individual, target: Individual) -> Individual:
        length = len(donor)
        from_donor = set(self.block(length))
        child = self.generator.get()
        for locus in range(length):
            source = donor if locus in from_donor else target
            child.set_gene_copy(locus, source[locus])
        return child


class DifferentialEvolution(EvolutionaryAlgorithm):
    """
    Differential evolution driver.

    Requires a generator, a DE mutator and a DE recombinator.
    """

    def step(self) -> None:
        population = self.require_population()
        generator = self.require_generator()
        mutator = self.require_mutator()
        recombinator = self.require_recombinator()

        trials = generator.get_n(len(population))
        mutator.mutate_all(trials)
        survivors = recombinator.recombine_all(trials)
        population.replace_all(survivors)
        logger.debug(f"{self.name}: {len(survivors)} survivors from {len(trials)} trials")
