"""
Shared fixtures: a OneMax environment, generators and a seeded random source.
"""

import pytest

from evolab.core import FunctionEnvironment, IdSequence, Mode, UnorderedPopulation
from evolab.representations import BinaryGenerator, RealGenerator
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor


def onemax(individual):
    return sum(individual.values)


@pytest.fixture
def seeded():
    """Reseed the random source so a test run is reproducible."""
    rng.seed(20240601)
    yield
    rng.seed()


@pytest.fixture
def sequence():
    return IdSequence()


@pytest.fixture
def onemax_env():
    """Maximize the number of ones."""
    return FunctionEnvironment(onemax, Mode.MAXIMIZE, ParallelExecutor(2))


@pytest.fixture
def binary_generator(sequence):
    return BinaryGenerator(8, sequence)


@pytest.fixture
def real_generator(sequence):
    return RealGenerator(3, -5.0, 5.0, sequence)


@pytest.fixture
def binary_population(onemax_env, binary_generator):
    """Ten random bit strings of length 8."""
    return UnorderedPopulation(onemax_env, individuals=binary_generator.get_n_random(10))
