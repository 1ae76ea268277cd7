"""
Binary representation

Bit-string individuals: each locus holds 0 or 1. Mutation flips bits
independently; decoding reads the bits most significant first.
"""

from typing import List, Optional, Sequence

from evolab.core.gene import Gene
from evolab.core.individual import IdSequence, Individual
from evolab.exceptions import BoundsViolationError, validate_count, validate_probability
from evolab.operators.generator import Generator
from evolab.operators.mutation import Mutator
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor


def bits_to_int(bits: Sequence[int]) -> int:
    """Decode bits, most significant first. An empty sequence decodes to 0."""
    value = 0
    for bit in bits:
        value = (value << 1) | int(bit)
    return value


def random_bits(n: int) -> List[int]:
    """``n`` independent fair bits."""
    return [int(bit) for bit in rng.get_rng().integers(0, 2, size=n)]


class BinaryGene(Gene):
    """Single bit, bounded to [0, 2)."""

    __slots__ = ("_value",)

    def __init__(self, value: int = 0):
        super().__init__(0, 2)
        if value not in (0, 1):
            raise BoundsViolationError(value, 0, 2)
        self._value = int(value)

    @property
    def value(self) -> int:
        return self._value

    def set_value(self, value: int) -> None:
        self._ensure_mutable()
        if value not in (0, 1):
            raise BoundsViolationError(value, 0, 2)
        self._value = int(value)

    def flip(self) -> None:
        self._ensure_mutable()
        self._value ^= 1

    def copy(self) -> "BinaryGene":
        return BinaryGene(self._value)


class BinaryIndividual(Individual):
    """Fixed-length bit string."""

    @property
    def bits(self) -> List[int]:
        return self.values

    def to_int(self) -> int:
        return bits_to_int(self.values)

    @classmethod
    def from_bits(cls, bits: Sequence[int], sequence: Optional[IdSequence] = None) -> "BinaryIndividual":
        return cls(len(bits), [BinaryGene(bit) for bit in bits], sequence)


class BinaryGenerator(Generator):
    """Creates bit strings of a fixed length."""

    def __init__(self, size: int, sequence: Optional[IdSequence] = None):
        super().__init__(sequence)
        validate_count(size, "gene count")
        self.size = size

    def get(self) -> BinaryIndividual:
        return BinaryIndividual(self.size, sequence=self.sequence)

    def get_random(self) -> BinaryIndividual:
        return BinaryIndividual.from_bits(random_bits(self.size), self.sequence)


def bit_flip(individual: Individual, probability: Optional[float] = None) -> int:
    """
    Flip every bit independently.

    Args:
        individual: Unevaluated binary individual
        probability: Per-bit flip probability, ``1/len`` when None

    Returns:
        Number of bits flipped
    """
    if probability is None:
        probability = 1.0 / len(individual)
    flipped = 0
    for gene in individual:
        if rng.bernoulli(probability):
            gene.flip()
            flipped += 1
    return flipped


class BitFlipMutator(Mutator):
    """
    Bit-flip mutation.

    Attributes:
        gene_probability: Per-bit probability, ``1/len`` when None
    """

    def __init__(
        self,
        probability: float = 1.0,
        gene_probability: Optional[float] = None,
        executor: Optional[ParallelExecutor] = None,
    ):
        super().__init__(probability, executor)
        if gene_probability is not None:
            validate_probability(gene_probability, "bit flip probability")
        self.gene_probability = gene_probability

    def mutate(self, individual: Individual) -> None:
        bit_flip(individual, self.gene_probability)
