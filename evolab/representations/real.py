"""
Real-valued representation

Vectors of bounded floats. Writing a value outside ``[lower, upper)`` is
rejected; saturation is a separate, explicit operation (``clamp``,
``maximize``, ``minimize``) used by overflow handling in differential
evolution.
"""

import sys
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from evolab.core.gene import Gene
from evolab.core.individual import IdSequence, Individual
from evolab.exceptions import InvalidBoundsError, validate_count, validate_probability
from evolab.operators.generator import Generator
from evolab.operators.mutation import Mutator
from evolab.operators.recombination import Recombinator, check_parents
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor

Bound = Union[float, Sequence[float]]


class RealGene(Gene):
    """
    Float in ``[lower, upper)``.

    Without explicit bounds the gene spans the finite float range.
    """

    __slots__ = ("_value",)

    def __init__(
        self,
        value: float,
        lower: float = -sys.float_info.max,
        upper: float = sys.float_info.max,
    ):
        super().__init__(lower, upper)
        self.check_bounds(value)
        self._value = float(value)

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        """
        Raises:
            BoundsViolationError: If value is outside [lower, upper)
            EvaluatedIndividualError: If the owner has been evaluated
        """
        self._ensure_mutable()
        self.check_bounds(value)
        self._value = float(value)

    def maximize(self) -> None:
        """Set the largest float strictly below the upper bound."""
        self._ensure_mutable()
        self._value = float(np.nextafter(self._upper, self._lower))

    def minimize(self) -> None:
        """Set the lower bound."""
        self._ensure_mutable()
        self._value = float(self._lower)

    def clamp(self, value: float) -> None:
        """Set ``value``, saturating to the bounds instead of rejecting it."""
        if value >= self._upper:
            self.maximize()
        elif value < self._lower:
            self.minimize()
        else:
            self.set_value(value)

    def copy(self) -> "RealGene":
        return RealGene(self._value, self._lower, self._upper)


class RealIndividual(Individual):
    """Fixed-length vector of bounded floats."""

    def to_array(self) -> np.ndarray:
        return np.array(self.values, dtype=float)


def _per_locus(bound: Bound, size: int, name: str) -> List[float]:
    if isinstance(bound, (int, float)):
        return [float(bound)] * size
    bounds = [float(value) for value in bound]
    if len(bounds) != size:
        raise ValueError(f"Expected {size} {name} bounds, got {len(bounds)}")
    return bounds


class RealGenerator(Generator):
    """
    Creates real vectors uniformly within per-locus bounds.

    Attributes:
        size: Number of loci
        lower: Inclusive lower bound of every locus
        upper: Exclusive upper bound of every locus
    """

    def __init__(
        self,
        size: int,
        lower: Bound,
        upper: Bound,
        sequence: Optional[IdSequence] = None,
    ):
        """
        Args:
            size: Number of loci
            lower: Lower bound, a scalar or one value per locus
            upper: Upper bound, a scalar or one value per locus
            sequence: Id source for created individuals

        Raises:
            InvalidBoundsError: If some upper bound is not above its lower bound
        """
        super().__init__(sequence)
        validate_count(size, "gene count")
        self.size = size
        self.lower = _per_locus(lower, size, "lower")
        self.upper = _per_locus(upper, size, "upper")
        for low, high in zip(self.lower, self.upper):
            if high <= low:
                raise InvalidBoundsError(low, high, "real gene bounds")

    def get(self) -> RealIndividual:
        return RealIndividual(self.size, sequence=self.sequence)

    def get_random(self) -> RealIndividual:
        genes = [
            RealGene(rng.uniform(low, high), low, high)
            for low, high in zip(self.lower, self.upper)
        ]
        return RealIndividual(self.size, genes, self.sequence)

    def from_values(self, values: Sequence[float]) -> RealIndividual:
        genes = [
            RealGene(value, low, high)
            for value, low, high in zip(values, self.lower, self.upper)
        ]
        return RealIndividual(self.size, genes, self.sequence)


def uniform_mutation(individual: Individual, probability: Optional[float] = None) -> int:
    """
    Redraw loci uniformly within their bounds.

    Args:
        individual: Unevaluated real individual with finite bounds
        probability: Per-locus probability, ``1/len`` when None

    Returns:
        Number of loci redrawn
    """
    if probability is None:
        probability = 1.0 / len(individual)
    redrawn = 0
    for gene in individual:
        if rng.bernoulli(probability):
            gene.set_value(rng.uniform(gene.lower, gene.upper))
            redrawn += 1
    return redrawn


class UniformMutator(Mutator):
    """Uniform mutation."""

    def __init__(
        self,
        probability: float = 1.0,
        gene_probability: Optional[float] = None,
        executor: Optional[ParallelExecutor] = None,
    ):
        super().__init__(probability, executor)
        if gene_probability is not None:
            validate_probability(gene_probability, "uniform mutation probability")
        self.gene_probability = gene_probability

    def mutate(self, individual: Individual) -> None:
        uniform_mutation(individual, self.gene_probability)


def simple_arithmetic_recombination(
    parent1: Individual,
    parent2: Individual,
    generator: Generator,
    alpha: float = 0.5,
    k: Optional[int] = None,
) -> Tuple[Individual, Individual]:
    """
    Simple arithmetic recombination.

    Loci below ``k`` are copied from the child's own parent. From ``k`` on,
    child1 takes ``alpha * parent2 + (1 - alpha) * parent1`` and child2 the
    mirror combination; each new gene keeps the bounds of the gene it replaces.

    Args:
        parent1: First parent
        parent2: Second parent
        generator: Source of skeleton children
        alpha: Weight of the other parent, in [0, 1]
        k: First recombined locus; drawn uniformly from [0, len) when None

    Returns:
        The two unevaluated children
    """
    check_parents(parent1, parent2)
    validate_probability(alpha, "alpha")
    length = len(parent1)
    if k is None:
        k = rng.uniform_index(length)
    elif k < 0 or k >= length:
        raise ValueError(f"Recombination point must be in [0, {length}), got {k}")

    child1, child2 = generator.get(), generator.get()
    child1.set_genes_copy(0, parent1.genes, 0, k)
    child2.set_genes_copy(0, parent2.genes, 0, k)
    for locus in range(k, length):
        gene1, gene2 = parent1[locus], parent2[locus]
        value1, value2 = gene1.value, gene2.value
        low, high = min(value1, value2), max(value1, value2)
        mixed1 = _between(alpha * value2 + (1 - alpha) * value1, low, high)
        mixed2 = _between(alpha * value1 + (1 - alpha) * value2, low, high)
        child1.set_gene(locus, RealGene(mixed1, gene1.lower, gene1.upper))
        child2.set_gene(locus, RealGene(mixed2, gene2.lower, gene2.upper))
    return child1, child2


def _between(value: float, low: float, high: float) -> float:
    # Rounding can push a convex combination past either parent value.
    return min(max(value, low), high)


def whole_arithmetic_recombination(
    parent1: Individual,
    parent2: Individual,
    generator: Generator,
    alpha: float = 0.5,
) -> Tuple[Individual, Individual]:
    """Arithmetic recombination of every locus."""
    return simple_arithmetic_recombination(parent1, parent2, generator, alpha, 0)


class SimpleArithmeticRecombination(Recombinator):
    """
    Simple arithmetic recombination.

    Attributes:
        alpha: Weight of the other parent
        k: Fixed recombination point, or None to draw one per pair
    """

    def __init__(self, probability: float = 1.0, alpha: float = 0.5, k: Optional[int] = None):
        super().__init__(probability, partner_count=2)
        validate_probability(alpha, "alpha")
        self.alpha = alpha
        self.k = k

    def recombine(self, partners: Sequence[Individual]) -> List[Individual]:
        parent1, parent2 = partners
        return list(
            simple_arithmetic_recombination(parent1, parent2, self.generator, self.alpha, self.k)
        )


class WholeArithmeticRecombination(SimpleArithmeticRecombination):
    """Arithmetic recombination of every locus."""

    def __init__(self, probability: float = 1.0, alpha: float = 0.5):
        super().__init__(probability, alpha, k=0)
