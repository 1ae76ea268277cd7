"""
Individual generator

A generator creates new individuals of one representation, either as empty
skeletons (``get``) for callers that assign genes themselves, or fully
randomized (``get_random``) for seeding populations.
"""

from abc import abstractmethod
from typing import List, Optional

from evolab.core.individual import DEFAULT_SEQUENCE, IdSequence, Individual
from evolab.exceptions import validate_count
from evolab.operators.base import Operator


class Generator(Operator):
    """
    Abstract generator.

    Attributes:
        sequence: Id source for created individuals
    """

    def __init__(self, sequence: Optional[IdSequence] = None):
        super().__init__()
        self.sequence = sequence or DEFAULT_SEQUENCE

    @abstractmethod
    def get(self) -> Individual:
        """Cheap skeleton individual; the caller assigns its genes."""

    @abstractmethod
    def get_random(self) -> Individual:
        """Fully randomized individual."""

    def get_n(self, n: int) -> List[Individual]:
        validate_count(n, "number of individuals", minimum=0)
        return [self.get() for _ in range(n)]

    def get_n_random(self, n: int) -> List[Individual]:
        validate_count(n, "number of individuals", minimum=0)
        return [self.get_random() for _ in range(n)]

    def clone(self, individual: Individual) -> Individual:
        """Fresh, unevaluated individual with copies of ``individual``'s genes."""
        child = self.get()
        child.set_genes_copy(0, individual.genes)
        return child
