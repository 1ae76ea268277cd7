"""
Operator contracts and the generic crossover algorithms.
"""

from .base import Operator
from .generator import Generator
from .mutation import Mutator
from .recombination import (
    OnePointCrossover,
    Recombinator,
    UniformCrossover,
    discrete_recombination,
    one_point_crossover,
    one_point_crossover_no_repeat,
    uniform_crossover,
)
from .selection import Selector, TournamentSelector, best_among_random

__all__ = [
    "Operator",
    "Generator",
    "Mutator",
    "Recombinator",
    "OnePointCrossover",
    "UniformCrossover",
    "discrete_recombination",
    "one_point_crossover",
    "one_point_crossover_no_repeat",
    "uniform_crossover",
    "Selector",
    "TournamentSelector",
    "best_among_random",
]
