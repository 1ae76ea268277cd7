"""
Recombination operator

A recombinator combines groups of ``partner_count`` parents into offspring.
``recombine_all`` partitions a mating pool into groups in encounter order,
gates each group with a Bernoulli trial and concatenates the children.

The generic crossover algorithms are free functions over individuals so they
can be used by any representation; they only need a generator that produces
skeleton children of the right species.
"""

import logging
from abc import abstractmethod
from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from evolab.core.individual import Individual
from evolab.exceptions import (
    RepresentationError,
    validate_count,
    validate_partition,
    validate_probability,
)
from evolab.operators.base import Operator
from evolab.utils import rng

if TYPE_CHECKING:
    from evolab.operators.generator import Generator

logger = logging.getLogger(__name__)


def check_parents(parent1: Individual, parent2: Individual) -> None:
    """Raise RepresentationError unless both parents share species and length."""
    if len(parent1) != len(parent2) or not parent1.is_compatible(parent2):
        raise RepresentationError(
            f"Cannot recombine {parent1.species} of length {len(parent1)} "
            f"with {parent2.species} of length {len(parent2)}",
            "Recombine individuals of the same representation and length",
        )


def _resolve_cut(cut: Optional[int], length: int) -> int:
    if cut is None:
        return rng.uniform_index(length)
    if cut < 0 or cut >= length:
        raise ValueError(f"Cut point must be in [0, {length}), got {cut}")
    return cut


def one_point_crossover(
    parent1: Individual,
    parent2: Individual,
    generator: "Generator",
    cut: Optional[int] = None,
) -> Tuple[Individual, Individual]:
    """
    One-point crossover.

    child1 = parent1[:cut] + parent2[cut:], child2 = parent2[:cut] + parent1[cut:].
    Genes are copied, never shared with the parents.

    Args:
        parent1: First parent
        parent2: Second parent
        generator: Source of skeleton children
        cut: Cut index in [0, len); drawn uniformly when None

    Returns:
        The two children, unevaluated
    """
    check_parents(parent1, parent2)
    cut = _resolve_cut(cut, len(parent1))
    genes1, genes2 = parent1.genes, parent2.genes

    child1 = generator.get()
    child1.set_genes_copy(0, genes1, 0, cut)
    child1.set_genes_copy(cut, genes2, cut)

    child2 = generator.get()
    child2.set_genes_copy(0, genes2, 0, cut)
    child2.set_genes_copy(cut, genes1, cut)
    return child1, child2


def _fill_without_repeats(head: Sequence, donor: Sequence, cut: int, length: int) -> list:
    genes = list(head)
    # scan the donor from the cut, wrapping around to its start
    for gene in list(donor[cut:]) + list(donor[:cut]):
        if len(genes) == length:
            break
        if gene not in genes:
            genes.append(gene)
    return genes


def one_point_crossover_no_repeat(
    parent1: Individual,
    parent2: Individual,
    generator: "Generator",
    cut: Optional[int] = None,
) -> Tuple[Individual, Individual]:
    """
    One-point crossover that never repeats a gene value.

    Each child keeps its own parent's head up to ``cut`` and is completed with
    the other parent's genes, scanned from ``cut`` with wrap-around, skipping
    values already placed. Permutation parents yield permutation children.

    Raises:
        IncompleteIndividualError: If the parents do not hold the same values
    """
    check_parents(parent1, parent2)
    length = len(parent1)
    cut = _resolve_cut(cut, length)
    genes1, genes2 = parent1.genes, parent2.genes

    children = []
    for head, donor in ((genes1[:cut], genes2), (genes2[:cut], genes1)):
        child = generator.get()
        child.set_genes_copy(0, _fill_without_repeats(head, donor, cut, length))
        child.require_complete()
        children.append(child)
    return children[0], children[1]


def discrete_recombination(
    parent1: Individual,
    parent2: Individual,
    generator: "Generator",
    n_children: int = 2,
    alpha: float = 0.5,
) -> List[Individual]:
    """
    Discrete recombination.

    For every locus of every child, a weighted coin chooses the donor:
    ``parent1`` with probability ``alpha``, otherwise ``parent2``.

    Args:
        parent1: First parent
        parent2: Second parent
        generator: Source of skeleton children
        n_children: Number of children to produce
        alpha: Probability that a locus is copied from ``parent1``

    Returns:
        ``n_children`` unevaluated children
    """
    check_parents(parent1, parent2)
    validate_count(n_children, "number of children")
    validate_probability(alpha, "alpha")
    children = generator.get_n(n_children)
    for locus in range(len(parent1)):
        for child in children:
            donor = parent1 if rng.bernoulli(alpha) else parent2
            child.set_gene_copy(locus, donor[locus])
    return children


def uniform_crossover(
    parent1: Individual,
    parent2: Individual,
    generator: "Generator",
    alpha: float = 0.5,
) -> Tuple[Individual, Individual]:
    """Uniform crossover: discrete recombination producing two children."""
    child1, child2 = discrete_recombination(parent1, parent2, generator, 2, alpha)
    return child1, child2


class Recombinator(Operator):
    """
    Abstract recombinator.

    Attributes:
        probability: Probability that a group of partners is recombined
        partner_count: Number of parents per recombination
    """

    def __init__(self, probability: float, partner_count: int = 2):
        """
        Args:
            probability: Recombination probability in [0, 1]
            partner_count: Parents per group, at least 1

        Raises:
            InvalidProbabilityError: If probability is outside [0, 1]
            InvalidCountError: If partner_count < 1
        """
        super().__init__()
        validate_count(partner_count, "partner count")
        self.probability = probability
        self.partner_count = partner_count

    @property
    def probability(self) -> float:
        return self._probability

    @probability.setter
    def probability(self, value: float) -> None:
        validate_probability(value, "recombination probability")
        self._probability = value

    @abstractmethod
    def recombine(self, partners: Sequence[Individual]) -> List[Individual]:
        """Combine exactly ``partner_count`` partners into offspring."""

    def decide(self, partners: Sequence[Individual]) -> bool:
        """Bernoulli trial with the recombination probability."""
        return rng.bernoulli(self._probability)

    def recombine_all(self, pool: Iterable[Individual]) -> List[Individual]:
        """
        Recombine a mating pool group by group.

        Args:
            pool: Parents, partitioned into consecutive groups of
                ``partner_count``

        Returns:
            The concatenated offspring of every group that passed ``decide``

        Raises:
            PoolSizeError: If the pool size is not a multiple of partner_count
        """
        pool = list(pool)
        validate_partition(len(pool), self.partner_count)
        k = self.partner_count
        offspring: List[Individual] = []
        groups = 0
        for start in range(0, len(pool), k):
            partners = pool[start:start + k]
            if self.decide(partners):
                offspring.extend(self.recombine(partners))
                groups += 1
        logger.debug(
            f"Recombined {groups} of {len(pool) // k} groups into {len(offspring)} children"
        )
        return offspring


class OnePointCrossover(Recombinator):
    """
    One-point crossover between two parents.

    Attributes:
        cut: Fixed cut index, or None to draw one per recombination
        no_repeat: Use the duplicate-free variant (for permutations)
    """

    def __init__(
        self,
        probability: float = 1.0,
        cut: Optional[int] = None,
        no_repeat: bool = False,
    ):
        super().__init__(probability, partner_count=2)
        self.cut = cut
        self.no_repeat = no_repeat

    def recombine(self, partners: Sequence[Individual]) -> List[Individual]:
        parent1, parent2 = partners
        crossover = one_point_crossover_no_repeat if self.no_repeat else one_point_crossover
        return list(crossover(parent1, parent2, self.generator, self.cut))


class UniformCrossover(Recombinator):
    """Uniform (discrete) crossover between two parents."""

    def __init__(self, probability: float = 1.0, alpha: float = 0.5):
        super().__init__(probability, partner_count=2)
        validate_probability(alpha, "alpha")
        self.alpha = alpha

    def recombine(self, partners: Sequence[Individual]) -> List[Individual]:
        parent1, parent2 = partners
        return list(uniform_crossover(parent1, parent2, self.generator, self.alpha))
