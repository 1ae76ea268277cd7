"""
Population-based optimization engine

Genetic algorithms, differential evolution and related generational search
over pluggable representations.
"""

from .exceptions import (
    EvolutionError,
    ConfigurationError,
    PreconditionError,
    RepresentationError,
)

from .core import (
    Gene,
    IdSequence,
    Individual,
    Environment,
    FunctionEnvironment,
    Mode,
    OrderedPopulation,
    Population,
    UnorderedPopulation,
)

from .operators import (
    Generator,
    Mutator,
    Recombinator,
    Selector,
    OnePointCrossover,
    UniformCrossover,
    TournamentSelector,
)

from .algorithms import (
    AlgorithmState,
    EvolutionaryAlgorithm,
    SimpleGA,
    DifferentialEvolution,
    BestMutator,
    RandMutator,
    BinomialRecombinator,
    ExponentialRecombinator,
)

from .stats import (
    PopulationStats,
    GenerationStats,
    EvolutionHistory,
    AlgorithmReport,
)

from .config import EvolutionConfig

from .engine import (
    build_simple_ga,
    build_differential_evolution,
)

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "EvolutionError",
    "ConfigurationError",
    "PreconditionError",
    "RepresentationError",
    # Core
    "Gene",
    "IdSequence",
    "Individual",
    "Environment",
    "FunctionEnvironment",
    "Mode",
    "OrderedPopulation",
    "Population",
    "UnorderedPopulation",
    # Operators
    "Generator",
    "Mutator",
    "Recombinator",
    "Selector",
    "OnePointCrossover",
    "UniformCrossover",
    "TournamentSelector",
    # Algorithms
    "AlgorithmState",
    "EvolutionaryAlgorithm",
    "SimpleGA",
    "DifferentialEvolution",
    "BestMutator",
    "RandMutator",
    "BinomialRecombinator",
    "ExponentialRecombinator",
    # Statistics
    "PopulationStats",
    "GenerationStats",
    "EvolutionHistory",
    "AlgorithmReport",
    # Configuration
    "EvolutionConfig",
    "build_simple_ga",
    "build_differential_evolution",
]
