"""
Permutation representation

An individual over ``(lower, upper)`` holds every integer of
``range(lower, upper)`` exactly once. Operators here preserve that property:
swap mutation exchanges two loci and partially mapped crossover (PMX)
resolves value conflicts through the parents' position mapping.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from evolab.core.gene import Gene
from evolab.core.individual import IdSequence, Individual
from evolab.exceptions import (
    InvalidBoundsError,
    MissingComponentError,
    RepresentationError,
    SampleSizeError,
)
from evolab.operators.generator import Generator
from evolab.operators.mutation import Mutator
from evolab.operators.recombination import Recombinator
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor


class PermutationGene(Gene):
    """One element of a permutation. Positions change, values never do."""

    __slots__ = ("_value",)

    def __init__(self, value: int):
        super().__init__()
        self._value = int(value)

    @property
    def value(self) -> int:
        return self._value

    def copy(self) -> "PermutationGene":
        return PermutationGene(self._value)


class PermutationIndividual(Individual):
    """Ordering of a fixed set of integers."""


def is_valid_permutation(
    individual: Individual,
    lower: Optional[int] = None,
    upper: Optional[int] = None,
) -> bool:
    """
    True if every locus is assigned and no value repeats.

    With ``lower`` and ``upper`` the values must be exactly
    ``range(lower, upper)``.
    """
    if not individual.complete:
        return False
    values = individual.values
    if lower is not None and upper is not None:
        return sorted(values) == list(range(lower, upper))
    return len(set(values)) == len(values)


class PermutationGenerator(Generator):
    """
    Creates permutations of ``range(lower, upper)``.

    Attributes:
        lower: First value (inclusive)
        upper: Last value (exclusive)
    """

    def __init__(self, lower: int, upper: int, sequence: Optional[IdSequence] = None):
        super().__init__(sequence)
        if upper <= lower:
            raise InvalidBoundsError(lower, upper, "permutation range")
        self.lower = lower
        self.upper = upper

    @property
    def size(self) -> int:
        return self.upper - self.lower

    def get(self) -> PermutationIndividual:
        return PermutationIndividual(self.size, sequence=self.sequence)

    def get_random(self) -> PermutationIndividual:
        values = rng.shuffled(list(range(self.lower, self.upper)))
        return self.from_values(values)

    def from_values(self, values: Sequence[int]) -> PermutationIndividual:
        return PermutationIndividual(
            len(values), [PermutationGene(value) for value in values], self.sequence
        )


def swap_mutation(individual: Individual) -> Tuple[int, int]:
    """
    Exchange two distinct random loci.

    Returns:
        The swapped loci, or (0, 0) for a single-locus individual
    """
    if len(individual) < 2:
        return 0, 0
    i, j = rng.distinct_indices(2, 0, len(individual) - 1)
    individual.swap(i, j)
    return i, j


class SwapMutator(Mutator):
    """Swap mutation."""

    def __init__(self, probability: float = 1.0, executor: Optional[ParallelExecutor] = None):
        super().__init__(probability, executor)

    def mutate(self, individual: Individual) -> None:
        swap_mutation(individual)


def pmx(
    parent1: Individual,
    parent2: Individual,
    generator: Generator,
    cut1: int,
    cut2: int,
) -> Individual:
    """
    Partially mapped crossover producing one child.

    The child receives ``parent1[cut1:cut2 + 1]`` in place. Every value of
    ``parent2``'s segment that is missing from that segment is then placed by
    following the mapping: start at its own locus, and while the locus is
    taken by a ``parent1`` segment value, jump to where ``parent2`` holds that
    value. Loci still empty afterwards take ``parent2``'s gene.

    Args:
        parent1: Donor of the segment
        parent2: Donor of the mapping and the remaining loci
        generator: Source of the skeleton child
        cut1: First locus of the segment (inclusive)
        cut2: Last locus of the segment (inclusive)

    Returns:
        The unevaluated child

    Raises:
        RepresentationError: If the parents are not permutations of the same
            values
    """
    length = len(parent1)
    if len(parent2) != length or not 0 <= cut1 <= cut2 < length:
        raise ValueError(f"Invalid PMX cut points ({cut1}, {cut2}) for length {length}")
    values1, values2 = parent1.values, parent2.values
    if sorted(values1) != sorted(values2) or len(set(values1)) != length:
        raise RepresentationError(
            "PMX parents must be permutations of the same values",
            "Use PMX only on permutation individuals",
        )

    position2: Dict[int, int] = {value: locus for locus, value in enumerate(values2)}
    segment = set(values1[cut1:cut2 + 1])
    taken: List[bool] = [False] * length
    child = generator.get()

    for locus in range(cut1, cut2 + 1):
        child.set_gene_copy(locus, parent1[locus])
        taken[locus] = True

    for locus in range(cut1, cut2 + 1):
        value = values2[locus]
        if value in segment:
            continue
        target = locus
        while taken[target]:
            target = position2[values1[target]]
        child.set_gene_copy(target, parent2[locus])
        taken[target] = True

    for locus in range(length):
        if not taken[locus]:
            child.set_gene_copy(locus, parent2[locus])
    return child


def pmx_crossover(
    parent1: Individual,
    parent2: Individual,
    generator: Generator,
    cut1: Optional[int] = None,
    cut2: Optional[int] = None,
) -> Tuple[Individual, Individual]:
    """
    PMX in both directions with the same cut points.

    Cut points default to two distinct random loci in ascending order.
    """
    if cut1 is None or cut2 is None:
        cut1, cut2 = _random_cuts(0, len(parent1) - 1)
    return (
        pmx(parent1, parent2, generator, cut1, cut2),
        pmx(parent2, parent1, generator, cut1, cut2),
    )


def _random_cuts(lower: int, upper: int) -> Tuple[int, int]:
    if lower == upper:
        return lower, upper
    first, second = sorted(rng.distinct_indices(2, lower, upper))
    return first, second


class PartiallyMappedCrossover(Recombinator):
    """
    PMX recombinator.

    Cut points are drawn over the whole genome unless limits are active: then
    they are drawn within ``[lower, upper]``, or used as given when the limits
    are fixed or collapse to a single locus.
    """

    def __init__(self, probability: float = 1.0):
        super().__init__(probability, partner_count=2)
        self._limits: Optional[Tuple[int, int]] = None
        self._fixed = False
        self._limits_active = False

    @property
    def limits(self) -> Optional[Tuple[int, int]]:
        return self._limits

    @property
    def limits_active(self) -> bool:
        return self._limits_active

    def set_limits(self, lower: int, upper: int, fixed: bool = False) -> None:
        """
        Restrict the cut points to ``[lower, upper]`` and activate the limits.

        Raises:
            InvalidBoundsError: If lower < 0 or upper < lower
        """
        if lower < 0 or upper < lower:
            raise InvalidBoundsError(lower, upper, "crossover limits")
        self._limits = (lower, upper)
        self._fixed = fixed
        self._limits_active = True

    def activate_limits(self) -> None:
        if self._limits is None:
            raise MissingComponentError("crossover limits", type(self).__name__)
        self._limits_active = True

    def deactivate_limits(self) -> None:
        self._limits_active = False

    def cut_points(self, length: int) -> Tuple[int, int]:
        """Cut points for a genome of ``length`` loci."""
        if not self._limits_active:
            return _random_cuts(0, length - 1)
        lower, upper = self._limits
        if upper >= length:
            raise SampleSizeError(upper + 1, length, "genome")
        if self._fixed:
            return lower, upper
        return _random_cuts(lower, upper)

    def recombine(self, partners: Sequence[Individual]) -> List[Individual]:
        parent1, parent2 = partners
        cut1, cut2 = self.cut_points(len(parent1))
        return list(pmx_crossover(parent1, parent2, self.generator, cut1, cut2))
