"""
Generational drivers.
"""

from .base import AlgorithmState, EvolutionaryAlgorithm
from .sga import SimpleGA
from .de import (
    BestMutator,
    BinomialRecombinator,
    DEMutator,
    DERecombinator,
    DifferentialEvolution,
    ExponentialRecombinator,
    RandMutator,
)

__all__ = [
    "AlgorithmState",
    "EvolutionaryAlgorithm",
    "SimpleGA",
    "BestMutator",
    "BinomialRecombinator",
    "DEMutator",
    "DERecombinator",
    "DifferentialEvolution",
    "ExponentialRecombinator",
    "RandMutator",
]
