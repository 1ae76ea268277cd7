"""
Algorithm builders

Wire an environment, a population and operators into a ready-to-run
algorithm from an ``EvolutionConfig``. Operators not passed explicitly get
the canonical defaults of the generator's representation.
"""

import logging
from typing import Callable, Optional, Union

from evolab.algorithms.base import ProgressCallback
from evolab.algorithms.de import (
    BestMutator,
    BinomialRecombinator,
    DEMutator,
    DERecombinator,
    DifferentialEvolution,
    ExponentialRecombinator,
    RandMutator,
)
from evolab.algorithms.sga import SimpleGA
from evolab.config import EvolutionConfig
from evolab.core.environment import Environment, FitnessValue, FunctionEnvironment
from evolab.core.individual import Individual
from evolab.core.population import OrderedPopulation, Population, UnorderedPopulation
from evolab.exceptions import ConfigurationError, validate_count
from evolab.operators.generator import Generator
from evolab.operators.mutation import Mutator
from evolab.operators.recombination import OnePointCrossover, Recombinator
from evolab.operators.selection import Selector, TournamentSelector
from evolab.representations.binary import BinaryGenerator, BitFlipMutator
from evolab.representations.integer import IntegerGenerator, RandomResetMutator
from evolab.representations.permutation import (
    PartiallyMappedCrossover,
    PermutationGenerator,
    SwapMutator,
)
from evolab.representations.real import RealGenerator, UniformMutator
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor

logger = logging.getLogger(__name__)

Objective = Union[Environment, Callable[[Individual], FitnessValue]]


def _prepare(config: Optional[EvolutionConfig]) -> EvolutionConfig:
    config = config or EvolutionConfig()
    config.validate()
    if config.seed is not None:
        rng.seed(config.seed)
    return config


def make_environment(objective: Objective, config: EvolutionConfig) -> Environment:
    """Use ``objective`` as is, or wrap a plain callable with the config's mode."""
    if isinstance(objective, Environment):
        return objective
    return FunctionEnvironment(objective, config.mode, ParallelExecutor(config.max_workers))


def make_population(
    environment: Environment,
    generator: Generator,
    size: int,
    config: EvolutionConfig,
    ordered: bool = False,
) -> Population:
    """Seed a population with ``size`` random individuals."""
    validate_count(size, "population size")
    population_class = OrderedPopulation if ordered else UnorderedPopulation
    return population_class(
        environment,
        capacity=config.capacity,
        individuals=generator.get_n_random(size),
    )


def default_mutator(generator: Generator, config: EvolutionConfig) -> Mutator:
    """Canonical mutation of the generator's representation."""
    executor = ParallelExecutor(config.max_workers)
    probability = config.mutation_probability
    if isinstance(generator, BinaryGenerator):
        return BitFlipMutator(probability, executor=executor)
    if isinstance(generator, IntegerGenerator):
        return RandomResetMutator(probability, executor=executor)
    if isinstance(generator, PermutationGenerator):
        return SwapMutator(probability, executor=executor)
    if isinstance(generator, RealGenerator):
        return UniformMutator(probability, executor=executor)
    raise ConfigurationError(
        f"No default mutator for {type(generator).__name__}",
        "Pass a mutator explicitly",
    )


def default_recombinator(generator: Generator, config: EvolutionConfig) -> Recombinator:
    """Canonical two-parent crossover of the generator's representation."""
    if config.partner_count != 2:
        raise ConfigurationError(
            f"Default recombinators take 2 partners, config asks for {config.partner_count}",
            "Pass a recombinator with the desired partner count",
        )
    if isinstance(generator, PermutationGenerator):
        return PartiallyMappedCrossover(config.recombination_probability)
    return OnePointCrossover(config.recombination_probability)


def build_simple_ga(
    objective: Objective,
    generator: Generator,
    population_size: int,
    config: Optional[EvolutionConfig] = None,
    mutator: Optional[Mutator] = None,
    recombinator: Optional[Recombinator] = None,
    selector: Optional[Selector] = None,
    ordered: bool = False,
    name: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> SimpleGA:
    """
    Build a READY simple genetic algorithm.

    Args:
        objective: Environment, or a fitness callable wrapped with the config's mode
        generator: Generator of the representation
        population_size: Initial population size
        config: Evolution configuration, defaults to ``EvolutionConfig()``
        mutator: Mutator, defaults to the representation's canonical mutation
        recombinator: Recombinator, defaults to one-point crossover (PMX for
            permutations)
        selector: Selector, defaults to tournament selection
        ordered: Keep the population sorted by fitness
        name: Algorithm name
        progress_callback: Called with (iteration, stats) every generation

    Returns:
        The wired algorithm

    Raises:
        ConfigurationError: If the config is invalid
    """
    config = _prepare(config)
    environment = make_environment(objective, config)
    population = make_population(environment, generator, population_size, config, ordered)

    algorithm = SimpleGA(
        name=name,
        elitism=config.elitism,
        environment=environment,
        population=population,
        max_iterations=config.max_iterations,
        max_stagnation=config.max_stagnation,
        target_fitness=config.target_fitness,
        progress_callback=progress_callback,
    )
    algorithm.generator = generator
    algorithm.mutator = mutator or default_mutator(generator, config)
    algorithm.recombinator = recombinator or default_recombinator(generator, config)
    algorithm.selector = selector or TournamentSelector(config.tournament_size)
    logger.info(f"Built {algorithm.name} with population {population_size}")
    return algorithm


def build_differential_evolution(
    objective: Objective,
    generator: RealGenerator,
    population_size: int,
    config: Optional[EvolutionConfig] = None,
    strategy: str = "best",
    crossover: str = "binomial",
    ordered: bool = True,
    name: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> DifferentialEvolution:
    """
    Build a READY differential evolution.

    Args:
        objective: Environment, or a fitness callable wrapped with the config's mode
        generator: Real-vector generator
        population_size: Population size
        config: Evolution configuration, defaults to ``EvolutionConfig()``
        strategy: Base vector, "best" or "rand"
        crossover: Trial/target crossover, "binomial" or "exponential"
        ordered: Keep the population sorted by fitness
        name: Algorithm name
        progress_callback: Called with (iteration, stats) every generation

    Returns:
        The wired algorithm

    Raises:
        ConfigurationError: If the config or a strategy name is invalid
    """
    config = _prepare(config)
    executor = ParallelExecutor(config.max_workers)

    mutators = {"best": BestMutator, "rand": RandMutator}
    recombinators = {"binomial": BinomialRecombinator, "exponential": ExponentialRecombinator}
    if strategy not in mutators:
        raise ConfigurationError(f"Unknown DE strategy: {strategy!r}", "Use 'best' or 'rand'")
    if crossover not in recombinators:
        raise ConfigurationError(
            f"Unknown DE crossover: {crossover!r}", "Use 'binomial' or 'exponential'"
        )

    environment = make_environment(objective, config)
    population = make_population(environment, generator, population_size, config, ordered)

    algorithm = DifferentialEvolution(
        name=name,
        environment=environment,
        population=population,
        max_iterations=config.max_iterations,
        max_stagnation=config.max_stagnation,
        target_fitness=config.target_fitness,
        progress_callback=progress_callback,
    )
    mutator: DEMutator = mutators[strategy](
        config.n_differences, config.perturbation_factor, executor
    )
    recombinator: DERecombinator = recombinators[crossover](config.crossover_probability)
    algorithm.generator = generator
    algorithm.mutator = mutator
    algorithm.recombinator = recombinator
    logger.info(f"Built {algorithm.name} ({strategy}/{config.n_differences}/{crossover})")
    return algorithm
