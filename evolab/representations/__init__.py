"""
Concrete representations: binary, integer, permutation and real vectors.
"""

from .binary import (
    BinaryGene,
    BinaryGenerator,
    BinaryIndividual,
    BitFlipMutator,
    bit_flip,
    bits_to_int,
    random_bits,
)
from .integer import (
    IntegerGene,
    IntegerGenerator,
    IntegerIndividual,
    RandomResetMutator,
    random_resetting,
)
from .permutation import (
    PartiallyMappedCrossover,
    PermutationGene,
    PermutationGenerator,
    PermutationIndividual,
    SwapMutator,
    is_valid_permutation,
    pmx,
    pmx_crossover,
    swap_mutation,
)
from .real import (
    RealGene,
    RealGenerator,
    RealIndividual,
    SimpleArithmeticRecombination,
    UniformMutator,
    WholeArithmeticRecombination,
    simple_arithmetic_recombination,
    uniform_mutation,
    whole_arithmetic_recombination,
)

__all__ = [
    "BinaryGene",
    "BinaryGenerator",
    "BinaryIndividual",
    "BitFlipMutator",
    "bit_flip",
    "bits_to_int",
    "random_bits",
    "IntegerGene",
    "IntegerGenerator",
    "IntegerIndividual",
    "RandomResetMutator",
    "random_resetting",
    "PartiallyMappedCrossover",
    "PermutationGene",
    "PermutationGenerator",
    "PermutationIndividual",
    "SwapMutator",
    "is_valid_permutation",
    "pmx",
    "pmx_crossover",
    "swap_mutation",
    "RealGene",
    "RealGenerator",
    "RealIndividual",
    "SimpleArithmeticRecombination",
    "UniformMutator",
    "WholeArithmeticRecombination",
    "simple_arithmetic_recombination",
    "uniform_mutation",
    "whole_arithmetic_recombination",
]
