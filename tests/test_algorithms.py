"""
Tests for the generational driver, the simple GA and differential evolution.
"""

import logging

import numpy as np
import pytest

from evolab.algorithms import (
    AlgorithmState,
    BestMutator,
    BinomialRecombinator,
    DEMutator,
    DifferentialEvolution,
    EvolutionaryAlgorithm,
    ExponentialRecombinator,
    RandMutator,
    SimpleGA,
)
from evolab.config import EvolutionConfig
from evolab.core import FunctionEnvironment, IdSequence, Mode, OrderedPopulation, UnorderedPopulation
from evolab.engine import build_differential_evolution, build_simple_ga
from evolab.exceptions import (
    AlreadyAssignedError,
    EmptyPopulationError,
    InvalidCountError,
    InvalidIterationCountError,
    InvalidStateError,
    MissingComponentError,
    SampleSizeError,
)
from evolab.operators import OnePointCrossover, TournamentSelector
from evolab.representations import BinaryGenerator, BitFlipMutator, RealGenerator


def value_of(individual):
    return individual.values[0]


def sphere(individual):
    return float(np.sum(np.square(individual.values)))


class Idle(EvolutionaryAlgorithm):
    """Generations that change nothing."""

    def step(self):
        pass


class Scripted(EvolutionaryAlgorithm):
    """Adds one individual per generation with the next scripted value."""

    def __init__(self, script, **kwargs):
        super().__init__(**kwargs)
        self.script = list(script)
        self.source = RealGenerator(1, -1000.0, 1000.0, IdSequence())

    def step(self):
        self.population.add(self.source.from_values([self.script[self.iteration]]))


def scalar_population(values, mode=Mode.MAXIMIZE):
    generator = RealGenerator(1, -1000.0, 1000.0, IdSequence())
    environment = FunctionEnvironment(value_of, mode)
    return UnorderedPopulation(
        environment, individuals=[generator.from_values([v]) for v in values]
    )


def scripted(script, initial=(1.0,), **kwargs):
    population = scalar_population(list(initial))
    return Scripted(
        script, environment=population.environment, population=population, **kwargs
    )


class TestLifecycle:
    """State machine and wiring of the driver."""

    def test_unconfigured_until_wired(self):
        algorithm = Idle()
        assert algorithm.state is AlgorithmState.UNCONFIGURED
        population = scalar_population([1.0])
        algorithm.environment = population.environment
        assert algorithm.state is AlgorithmState.UNCONFIGURED
        algorithm.population = population
        assert algorithm.state is AlgorithmState.READY

    def test_run_without_components(self):
        with pytest.raises(MissingComponentError):
            Idle().run()

    def test_environment_assigned_once(self):
        population = scalar_population([1.0])
        algorithm = Idle(environment=population.environment, population=population)
        with pytest.raises(AlreadyAssignedError):
            algorithm.environment = FunctionEnvironment(value_of)
        with pytest.raises(AlreadyAssignedError):
            algorithm.population = scalar_population([2.0])

    def test_population_adopts_algorithm_environment(self):
        population = scalar_population([1.0, 2.0])
        environment = FunctionEnvironment(lambda ind: -value_of(ind))
        Idle(environment=environment, population=population)
        assert population.environment is environment
        assert all(ind.is_evaluated_by(environment) for ind in population)

    def test_run_twice_requires_reset(self):
        population = scalar_population([1.0])
        algorithm = Idle(environment=population.environment, population=population, max_iterations=2)
        algorithm.run()
        assert algorithm.state is AlgorithmState.FINISHED
        with pytest.raises(InvalidStateError):
            algorithm.run()
        algorithm.reset()
        assert algorithm.state is AlgorithmState.READY
        algorithm.run()
        assert algorithm.iteration == 2

    def test_reset_only_from_finished(self):
        population = scalar_population([1.0])
        algorithm = Idle(environment=population.environment, population=population)
        with pytest.raises(InvalidStateError):
            algorithm.reset()

    def test_missing_operator_surfaces_from_step(self):
        population = scalar_population([1.0, 2.0])
        algorithm = SimpleGA(
            environment=population.environment, population=population, max_iterations=1
        )
        with pytest.raises(MissingComponentError):
            algorithm.run()
        assert algorithm.state is AlgorithmState.FINISHED

    def test_empty_population(self):
        population = UnorderedPopulation(FunctionEnvironment(value_of))
        algorithm = Idle(environment=population.environment, population=population)
        with pytest.raises(EmptyPopulationError):
            algorithm.run()

    def test_negative_iteration_cap(self):
        with pytest.raises(InvalidIterationCountError):
            Idle(max_iterations=-1)


class TestRunLoop:
    """Iteration cap, stagnation, stopping conditions and best tracking."""

    def test_zero_iterations(self):
        population = scalar_population([3.0, 7.0, 5.0])
        algorithm = Idle(environment=population.environment, population=population, max_iterations=0)
        best = algorithm.run()
        assert algorithm.iteration == 0
        assert best is population.best()
        assert best.fitness == 7.0
        assert algorithm.state is AlgorithmState.FINISHED
        assert len(algorithm.history) == 1

    def test_stagnation_counts_idle_generations(self):
        population = scalar_population([1.0, 2.0])
        algorithm = Idle(environment=population.environment, population=population, max_iterations=5)
        algorithm.run()
        assert algorithm.iteration == 5
        assert algorithm.stagnation == 5
        assert [g.stagnation for g in algorithm.history.generations] == [0, 1, 2, 3, 4, 5]

    def test_improvement_resets_stagnation(self):
        algorithm = scripted([1.0, 3.0, 2.0, 0.5], max_iterations=4)
        algorithm.run()
        assert [g.stagnation for g in algorithm.history.generations] == [0, 1, 0, 1, 2]
        assert algorithm.best_ever.fitness == 3.0

    def test_listeners_see_every_new_best(self):
        algorithm = scripted([1.0, 3.0, 2.0, 4.0], max_iterations=4)
        calls = []
        algorithm.add_best_listener(lambda previous, new: calls.append((previous, new)))
        algorithm.run()

        assert len(calls) == 3
        assert calls[0][0] is None
        assert [new.fitness for _, new in calls] == [1.0, 3.0, 4.0]
        assert calls[1][0] is calls[0][1]
        assert calls[2][0] is calls[1][1]

    def test_tie_does_not_replace_best(self):
        algorithm = scripted([1.0], max_iterations=1)
        first = algorithm.population.best()
        algorithm.run()
        assert algorithm.best_ever is first

    def test_removed_listener_is_silent(self):
        algorithm = scripted([5.0], max_iterations=1)
        calls = []
        listener = lambda previous, new: calls.append(new)  # noqa: E731
        algorithm.add_best_listener(listener)
        algorithm.remove_best_listener(listener)
        algorithm.run()
        assert calls == []

    def test_max_stagnation_stops(self):
        population = scalar_population([1.0])
        algorithm = Idle(
            environment=population.environment, population=population, max_stagnation=3
        )
        algorithm.run()
        assert algorithm.iteration == 3

    def test_target_fitness_stops(self):
        algorithm = scripted([1.0, 3.0, 2.0, 9.0], target_fitness=3.0, max_iterations=4)
        algorithm.run()
        assert algorithm.iteration == 2
        assert algorithm.best_ever.fitness == 3.0

    def test_target_fitness_minimize(self):
        population = scalar_population([4.0, -1.0], Mode.MINIMIZE)
        algorithm = Idle(
            environment=population.environment,
            population=population,
            target_fitness=0.0,
            max_iterations=10,
        )
        algorithm.run()
        assert algorithm.iteration == 0

    def test_stop_from_progress_callback(self):
        population = scalar_population([1.0])
        algorithm = Idle(environment=population.environment, population=population)

        def on_progress(iteration, stats):
            if iteration == 3:
                algorithm.stop()

        algorithm.progress_callback = on_progress
        algorithm.run()
        assert algorithm.iteration == 3
        assert algorithm.stop_requested

    def test_members_age_each_generation(self):
        population = scalar_population([1.0, 2.0])
        algorithm = Idle(environment=population.environment, population=population, max_iterations=3)
        algorithm.run()
        assert all(ind.age == 3 for ind in population)

    def test_switch_environment_reevaluates(self):
        population = scalar_population([1.0, 5.0])
        algorithm = Idle(environment=population.environment, population=population, max_iterations=1)
        algorithm.run()
        negated = FunctionEnvironment(lambda ind: -value_of(ind))
        algorithm.switch_environment(negated)
        assert algorithm.environment is negated
        assert all(ind.is_evaluated_by(negated) for ind in population)
        assert algorithm.best_ever.is_evaluated_by(negated)
        assert population.best().fitness == -1.0


class TestResults:
    """History and report accessors."""

    def test_history_dataframe(self):
        algorithm = scripted([2.0, 4.0], max_iterations=2)
        algorithm.run()
        frame = algorithm.history.to_dataframe()
        assert list(frame.index) == [0, 1, 2]
        assert frame.index.name == "iteration"
        assert list(frame["best_fitness"]) == [1.0, 2.0, 4.0]
        assert list(frame["size"]) == [1, 2, 3]
        assert algorithm.history.best_fitness_curve == [1.0, 2.0, 4.0]

    def test_report(self):
        algorithm = scripted([2.0], max_iterations=1, name="scripted")
        algorithm.run()
        report = algorithm.report()
        assert report.name == "scripted"
        assert report.state == "FINISHED"
        assert report.iterations == 1
        assert report.best_fitness == 2.0
        assert report.best_values == [2.0]
        assert report.population.size == 2
        assert report.mutation_probability is None
        assert report.elapsed_seconds >= 0.0
        assert report.to_dict()["population"]["size"] == 2

    def test_report_before_run(self):
        report = Idle().report()
        assert report.best_fitness is None
        assert report.population is None


class TestSimpleGA:
    """Generational replacement on OneMax."""

    def _onemax(self, elitism=1, **overrides):
        config = EvolutionConfig(**{"max_iterations": 25, "elitism": elitism, "seed": 7, **overrides})
        return build_simple_ga(lambda ind: sum(ind.values), BinaryGenerator(16), 20, config)

    def test_elitism_keeps_best_non_decreasing(self):
        algorithm = self._onemax()
        algorithm.run()
        curve = algorithm.history.best_fitness_curve
        assert all(later >= earlier for earlier, later in zip(curve, curve[1:]))
        assert algorithm.best_ever.fitness == curve[-1]

    def test_population_size_is_constant(self):
        algorithm = self._onemax(elitism=2)
        sizes = []
        algorithm.progress_callback = lambda iteration, stats: sizes.append(stats.size)
        algorithm.run()
        assert sizes == [20] * 26

    def test_no_offspring_backfills_with_clones(self, caplog):
        algorithm = self._onemax(elitism=0, recombination_probability=0.0, max_iterations=2)
        with caplog.at_level(logging.WARNING, logger="evolab.algorithms.sga"):
            algorithm.run()
        assert "recombination produced no offspring" in caplog.text
        assert len(algorithm.population) == 20

    def test_negative_elitism(self):
        with pytest.raises(InvalidCountError):
            SimpleGA(elitism=-1)

    def test_manual_wiring(self, seeded):
        generator = BinaryGenerator(10)
        environment = FunctionEnvironment(lambda ind: sum(ind.values))
        population = UnorderedPopulation(environment, individuals=generator.get_n_random(8))
        algorithm = SimpleGA(
            elitism=1, environment=environment, population=population, max_iterations=5
        )
        algorithm.generator = generator
        algorithm.mutator = BitFlipMutator(0.5)
        algorithm.recombinator = OnePointCrossover(0.8)
        algorithm.selector = TournamentSelector(2)
        best = algorithm.run()
        assert algorithm.iteration == 5
        assert len(population) == 8
        assert best.fitness >= algorithm.history.generations[0].best_fitness


class SaturatingMutator(DEMutator):
    """Fixed base and difference vectors."""

    def __init__(self, base, a, b, perturbation_factor=1.0):
        super().__init__(1, perturbation_factor)
        self.vectors = (base, [a, b])

    def select_vectors(self, population):
        return self.vectors


class TestDifferentialEvolution:
    """Differential mutation, trial/target crossover and the DE driver."""

    def _wired(self, values, mutator=None, recombinator=None, mode=Mode.MAXIMIZE):
        generator = RealGenerator(1, 0.0, 10.0, IdSequence())
        environment = FunctionEnvironment(value_of, mode)
        population = OrderedPopulation(
            environment, individuals=[generator.from_values([v]) for v in values]
        )
        algorithm = DifferentialEvolution(environment=environment, population=population)
        algorithm.generator = generator
        if mutator is not None:
            algorithm.mutator = mutator
        if recombinator is not None:
            algorithm.recombinator = recombinator
        return algorithm, generator

    def test_overflow_saturates_below_upper(self):
        generator = RealGenerator(1, 0.0, 10.0)
        mutator = SaturatingMutator(
            generator.from_values([5.0]), generator.from_values([7.0]), generator.from_values([0.0])
        )
        algorithm, _ = self._wired([1.0, 2.0], mutator=mutator)
        trial = algorithm.generator.get()
        mutator.mutate(trial)
        assert trial.values == [float(np.nextafter(10.0, 0.0))]

    def test_underflow_saturates_to_lower(self):
        generator = RealGenerator(1, 0.0, 10.0)
        mutator = SaturatingMutator(
            generator.from_values([1.0]), generator.from_values([0.0]), generator.from_values([5.0])
        )
        algorithm, _ = self._wired([1.0, 2.0], mutator=mutator)
        trial = algorithm.generator.get()
        mutator.mutate(trial)
        assert trial.values == [0.0]

    def test_difference_is_scaled(self):
        generator = RealGenerator(1, 0.0, 10.0)
        mutator = SaturatingMutator(
            generator.from_values([4.0]),
            generator.from_values([6.0]),
            generator.from_values([2.0]),
            perturbation_factor=0.5,
        )
        algorithm, _ = self._wired([1.0, 2.0], mutator=mutator)
        trial = algorithm.generator.get()
        mutator.mutate(trial)
        assert trial.values == [6.0]

    def test_best_mutator_uses_current_best(self, seeded):
        mutator = BestMutator(1, 0.5)
        algorithm, _ = self._wired([1.0, 2.0, 8.0], mutator=mutator)
        base, vectors = mutator.select_vectors(algorithm.population)
        assert base.fitness == 8.0
        assert len(vectors) == 2
        assert vectors[0] is not vectors[1]

    def test_rand_mutator_draws_distinct_vectors(self, seeded):
        mutator = RandMutator(2, 0.5)
        algorithm, _ = self._wired([1.0, 2.0, 3.0, 4.0, 5.0], mutator=mutator)
        base, vectors = mutator.select_vectors(algorithm.population)
        chosen = [base] + vectors
        assert len(chosen) == 5
        assert len({id(ind) for ind in chosen}) == 5

    def test_too_few_members_for_differences(self, seeded):
        mutator = RandMutator(1, 0.5)
        algorithm, _ = self._wired([1.0, 2.0], mutator=mutator)
        with pytest.raises(SampleSizeError):
            mutator.select_vectors(algorithm.population)

    def test_invalid_difference_count(self):
        with pytest.raises(InvalidCountError):
            BestMutator(0)

    def test_recombinator_meets_every_target_once(self, seeded):
        recombinator = BinomialRecombinator(1.0)
        algorithm, generator = self._wired([1.0, 2.0, 3.0], recombinator=recombinator)
        targets = list(algorithm.population)
        trials = [generator.from_values([v]) for v in (9.0, 0.5, 2.5)]
        survivors = recombinator.recombine_all(trials)
        assert len(survivors) == 3
        assert len(algorithm.population) == 0
        assert all(s in targets or s.fitness in (9.0, 0.5, 2.5) for s in survivors)
        assert max(s.fitness for s in survivors) == 9.0

    def test_worse_trial_keeps_target(self, seeded):
        recombinator = BinomialRecombinator(1.0)
        algorithm, generator = self._wired([5.0], recombinator=recombinator)
        (target,) = list(algorithm.population)
        (survivor,) = recombinator.recombine([generator.from_values([2.0])])
        assert survivor is target

    def test_better_trial_replaces_target(self, seeded):
        recombinator = BinomialRecombinator(1.0)
        algorithm, generator = self._wired([5.0], recombinator=recombinator)
        (target,) = list(algorithm.population)
        (survivor,) = recombinator.recombine([generator.from_values([7.0])])
        assert survivor is not target
        assert survivor.fitness == 7.0
        assert survivor.is_evaluated_by(algorithm.environment)

    @pytest.mark.parametrize("length", [1, 2, 7])
    @pytest.mark.parametrize("crossover_probability", [0.0, 0.5, 1.0])
    def test_exponential_block_is_contiguous(self, seeded, length, crossover_probability):
        recombinator = ExponentialRecombinator(crossover_probability)
        for _ in range(50):
            block = recombinator.block(length)
            assert 1 <= len(block) <= length
            assert len(set(block)) == len(block)
            assert all(
                (later - earlier) % length == 1
                for earlier, later in zip(block, block[1:])
            )
            if crossover_probability == 0.0:
                assert len(block) == 1
            if crossover_probability == 1.0:
                assert len(block) == length

    @pytest.mark.parametrize("strategy", ["best", "rand"])
    @pytest.mark.parametrize("crossover", ["binomial", "exponential"])
    def test_run_never_worsens_best(self, strategy, crossover):
        config = EvolutionConfig(mode=Mode.MINIMIZE, max_iterations=30, seed=11, max_workers=2)
        algorithm = build_differential_evolution(
            sphere, RealGenerator(3, -5.0, 5.0), 12, config, strategy, crossover
        )
        sizes = []
        algorithm.progress_callback = lambda iteration, stats: sizes.append(stats.size)
        best = algorithm.run()

        curve = algorithm.history.best_fitness_curve
        assert all(later <= earlier for earlier, later in zip(curve, curve[1:]))
        assert sizes == [12] * 31
        assert best.fitness == curve[-1]
        assert all(-5.0 <= value < 5.0 for value in best.values)
