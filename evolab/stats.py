"""
Statistics snapshots

Read-only records consumed by external reporting: per-population aggregates,
per-generation history and an end-of-run report. Nothing here formats text.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class PopulationStats:
    """Aggregate fitness statistics of a population.

    Attributes:
        size: Number of members
        distinct: Number of distinct individual objects
        best_fitness: Fitness of the best member
        worst_fitness: Fitness of the worst member
        mean_fitness: Mean fitness
        std_fitness: Sample standard deviation of fitness
        fitness_sum: Sum of fitness values
    """
    size: int
    distinct: int
    best_fitness: float
    worst_fitness: float
    mean_fitness: float
    std_fitness: float
    fitness_sum: float


@dataclass(frozen=True)
class GenerationStats:
    """Statistics recorded after one generation.

    Attributes:
        iteration: Generation number (0 is the initial population)
        best_fitness: Best fitness in the population
        mean_fitness: Mean fitness
        worst_fitness: Worst fitness
        std_fitness: Sample standard deviation
        size: Population size
        distinct: Distinct individuals
        stagnation: Consecutive generations without strict improvement
        best_values: Genome values of the best individual
    """
    iteration: int
    best_fitness: float
    mean_fitness: float
    worst_fitness: float
    std_fitness: float
    size: int
    distinct: int
    stagnation: int
    best_values: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class EvolutionHistory:
    """History of a run, one entry per generation."""
    generations: List[GenerationStats] = field(default_factory=list)

    def append(self, stats: GenerationStats) -> None:
        self.generations.append(stats)

    def __len__(self) -> int:
        return len(self.generations)

    @property
    def best_fitness_curve(self) -> List[float]:
        return [stats.best_fitness for stats in self.generations]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per generation, indexed by iteration."""
        columns = [
            "iteration", "best_fitness", "mean_fitness", "worst_fitness",
            "std_fitness", "size", "distinct", "stagnation",
        ]
        rows = [
            {name: getattr(stats, name) for name in columns}
            for stats in self.generations
        ]
        return pd.DataFrame(rows, columns=columns).set_index("iteration")


@dataclass(frozen=True)
class AlgorithmReport:
    """End-of-run accessors gathered in one record.

    Attributes:
        name: Algorithm name
        state: Final state name
        elapsed_seconds: Wall-clock run time
        iterations: Generations executed
        stagnation: Final stagnation count
        best_fitness: Fitness of the best-ever individual
        best_values: Genome values of the best-ever individual
        population: Population statistics at the end of the run
        mutation_probability: Configured mutation probability, if any
        recombination_probability: Configured recombination probability, if any
    """
    name: str
    state: str
    elapsed_seconds: float
    iterations: int
    stagnation: int
    best_fitness: Optional[float]
    best_values: List[Any]
    population: Optional[PopulationStats]
    mutation_probability: Optional[float] = None
    recombination_probability: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
