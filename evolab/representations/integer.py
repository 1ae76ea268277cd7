"""
Integer representation

Vectors of bounded integers. Every gene carries half-open bounds
``[lower, upper)``; random resetting redraws a locus uniformly within them.
"""

from typing import Optional

from evolab.core.gene import Gene
from evolab.core.individual import IdSequence, Individual
from evolab.exceptions import InvalidBoundsError, validate_count, validate_probability
from evolab.operators.generator import Generator
from evolab.operators.mutation import Mutator
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor


class IntegerGene(Gene):
    """Integer in ``[lower, upper)``."""

    __slots__ = ("_value",)

    def __init__(self, value: int, lower: int, upper: int):
        super().__init__(lower, upper)
        self.check_bounds(value)
        self._value = int(value)

    @property
    def value(self) -> int:
        return self._value

    def set_value(self, value: int) -> None:
        """
        Raises:
            BoundsViolationError: If value is outside [lower, upper)
            EvaluatedIndividualError: If the owner has been evaluated
        """
        self._ensure_mutable()
        self.check_bounds(value)
        self._value = int(value)

    def copy(self) -> "IntegerGene":
        return IntegerGene(self._value, self._lower, self._upper)


class IntegerIndividual(Individual):
    """Fixed-length vector of bounded integers."""


class IntegerGenerator(Generator):
    """
    Creates integer vectors with every locus in ``[lower, upper)``.

    Attributes:
        size: Number of loci
        lower: Inclusive lower bound
        upper: Exclusive upper bound
    """

    def __init__(
        self,
        size: int,
        lower: int,
        upper: int,
        sequence: Optional[IdSequence] = None,
    ):
        super().__init__(sequence)
        validate_count(size, "gene count")
        if upper <= lower:
            raise InvalidBoundsError(lower, upper, "integer gene bounds")
        self.size = size
        self.lower = lower
        self.upper = upper

    def get(self) -> IntegerIndividual:
        return IntegerIndividual(self.size, sequence=self.sequence)

    def get_random(self) -> IntegerIndividual:
        genes = [
            IntegerGene(rng.uniform_int(self.lower, self.upper), self.lower, self.upper)
            for _ in range(self.size)
        ]
        return IntegerIndividual(self.size, genes, self.sequence)


def random_resetting(individual: Individual, probability: Optional[float] = None) -> int:
    """
    Redraw loci uniformly within their bounds.

    Args:
        individual: Unevaluated integer individual
        probability: Per-locus probability, ``1/len`` when None

    Returns:
        Number of loci redrawn
    """
    if probability is None:
        probability = 1.0 / len(individual)
    reset = 0
    for gene in individual:
        if rng.bernoulli(probability):
            gene.set_value(rng.uniform_int(gene.lower, gene.upper))
            reset += 1
    return reset


class RandomResetMutator(Mutator):
    """Random resetting mutation."""

    def __init__(
        self,
        probability: float = 1.0,
        gene_probability: Optional[float] = None,
        executor: Optional[ParallelExecutor] = None,
    ):
        super().__init__(probability, executor)
        if gene_probability is not None:
            validate_probability(gene_probability, "reset probability")
        self.gene_probability = gene_probability

    def mutate(self, individual: Individual) -> None:
        random_resetting(individual, self.gene_probability)
