"""
Core data model: genes, individuals, environments and populations.
"""

from .gene import Gene
from .individual import DEFAULT_SEQUENCE, IdSequence, Individual
from .environment import (
    Environment,
    FitnessValue,
    FunctionEnvironment,
    Mode,
    validate_fitness,
)
from .population import OrderedPopulation, Population, UnorderedPopulation

__all__ = [
    "Gene",
    "DEFAULT_SEQUENCE",
    "IdSequence",
    "Individual",
    "Environment",
    "FitnessValue",
    "FunctionEnvironment",
    "Mode",
    "validate_fitness",
    "OrderedPopulation",
    "Population",
    "UnorderedPopulation",
]
