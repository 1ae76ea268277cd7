"""
Generational driver

The driver owns the environment, the population and the four operator slots,
runs the generation loop and tracks the best individual ever recorded. Every
concrete algorithm only implements ``step``: one generation of selection,
recombination, mutation and replacement.

State machine::

    UNCONFIGURED --(environment + population set)--> READY
    READY --run()--> RUNNING --(stopping condition or iteration cap)--> FINISHED
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from enum import Enum
from typing import Callable, List, Optional

from evolab.core.environment import Environment, FitnessValue
from evolab.core.individual import Individual
from evolab.core.population import Population
from evolab.exceptions import (
    AlreadyAssignedError,
    InvalidStateError,
    MissingComponentError,
    validate_count,
    validate_iteration_count,
)
from evolab.operators.base import Operator
from evolab.operators.generator import Generator
from evolab.operators.mutation import Mutator
from evolab.operators.recombination import Recombinator
from evolab.operators.selection import Selector
from evolab.stats import AlgorithmReport, EvolutionHistory, GenerationStats

logger = logging.getLogger(__name__)

BestListener = Callable[[Optional[Individual], Individual], None]
ProgressCallback = Callable[[int, GenerationStats], None]


class AlgorithmState(Enum):
    """Driver lifecycle

    Attributes:
        UNCONFIGURED: Environment or population missing
        READY: Wired and waiting for ``run``
        RUNNING: Inside the generation loop
        FINISHED: Loop exited; results are final
    """
    UNCONFIGURED = "unconfigured"
    READY = "ready"
    RUNNING = "running"
    FINISHED = "finished"


class EvolutionaryAlgorithm(ABC):
    """
    Base generational driver.

    Environment and population are assigned once; afterwards the environment
    can only change through ``switch_environment``, which re-evaluates the
    population. Operators are bound to this algorithm when assigned and are
    required only when ``step`` uses them.

    Attributes:
        name: Name used in logs and reports
        max_iterations: Iteration cap, None for unbounded
        max_stagnation: Stop once this many generations pass without
            improvement, None to disable
        target_fitness: Stop once the best-ever fitness reaches this value
            under the environment's mode, None to disable
        progress_callback: Called with (iteration, stats) after every
            recorded generation
    """

    def __init__(
        self,
        name: Optional[str] = None,
        environment: Optional[Environment] = None,
        population: Optional[Population] = None,
        max_iterations: Optional[int] = None,
        max_stagnation: Optional[int] = None,
        target_fitness: Optional[FitnessValue] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.name = name or type(self).__name__
        self._environment: Optional[Environment] = None
        self._population: Optional[Population] = None
        self._generator: Optional[Generator] = None
        self._mutator: Optional[Mutator] = None
        self._recombinator: Optional[Recombinator] = None
        self._selector: Optional[Selector] = None
        self._state = AlgorithmState.UNCONFIGURED

        self.max_iterations = max_iterations
        if max_stagnation is not None:
            validate_count(max_stagnation, "max stagnation")
        self.max_stagnation = max_stagnation
        self.target_fitness = target_fitness
        self.progress_callback = progress_callback

        self._iteration = 0
        self._stagnation = 0
        self._best_ever: Optional[Individual] = None
        self._elapsed = 0.0
        self._history = EvolutionHistory()
        self._best_listeners: List[BestListener] = []
        self._stop_event = threading.Event()

        if environment is not None:
            self.environment = environment
        if population is not None:
            self.population = population

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    @property
    def state(self) -> AlgorithmState:
        return self._state

    def _refresh_state(self) -> None:
        if (
            self._state is AlgorithmState.UNCONFIGURED
            and self._environment is not None
            and self._population is not None
        ):
            self._state = AlgorithmState.READY

    @property
    def environment(self) -> Optional[Environment]:
        return self._environment

    @environment.setter
    def environment(self, environment: Environment) -> None:
        if self._environment is not None:
            raise AlreadyAssignedError("environment", "Use switch_environment() to replace it")
        if environment is None:
            raise ValueError("environment must not be None")
        self._environment = environment
        if self._population is not None and self._population.environment is not environment:
            self._population.switch_environment(environment)
        self._refresh_state()

    @property
    def population(self) -> Optional[Population]:
        return self._population

    @population.setter
    def population(self, population: Population) -> None:
        if self._population is not None:
            raise AlreadyAssignedError("population")
        if population is None:
            raise ValueError("population must not be None")
        if self._environment is not None and population.environment is not self._environment:
            population.switch_environment(self._environment)
        self._population = population
        self._refresh_state()

    def switch_environment(self, environment: Environment) -> None:
        """
        Replace the environment and re-evaluate the whole population.

        The best-ever individual is re-evaluated too, so later comparisons
        never mix fitness values from two objectives.
        """
        if environment is None:
            raise ValueError("environment must not be None")
        self._environment = environment
        if self._population is not None:
            self._population.switch_environment(environment)
        if self._best_ever is not None:
            environment.evaluate(self._best_ever)
        logger.info(f"{self.name}: switched environment to {environment!r}")
        self._refresh_state()

    def require_environment(self) -> Environment:
        if self._environment is None:
            raise MissingComponentError("environment", self.name)
        return self._environment

    def require_population(self) -> Population:
        if self._population is None:
            raise MissingComponentError("population", self.name)
        return self._population

    # ------------------------------------------------------------------
    # Operator slots
    # ------------------------------------------------------------------

    def _bind(self, operator: Optional[Operator]) -> None:
        if operator is not None:
            operator.bind(self)

    @property
    def generator(self) -> Optional[Generator]:
        return self._generator

    @generator.setter
    def generator(self, generator: Optional[Generator]) -> None:
        self._bind(generator)
        self._generator = generator

    @property
    def mutator(self) -> Optional[Mutator]:
        return self._mutator

    @mutator.setter
    def mutator(self, mutator: Optional[Mutator]) -> None:
        self._bind(mutator)
        self._mutator = mutator

    @property
    def recombinator(self) -> Optional[Recombinator]:
        return self._recombinator

    @recombinator.setter
    def recombinator(self, recombinator: Optional[Recombinator]) -> None:
        self._bind(recombinator)
        self._recombinator = recombinator

    @property
    def selector(self) -> Optional[Selector]:
        return self._selector

    @selector.setter
    def selector(self, selector: Optional[Selector]) -> None:
        self._bind(selector)
        self._selector = selector

    def require_generator(self) -> Generator:
        if self._generator is None:
            raise MissingComponentError("generator", self.name)
        return self._generator

    def require_mutator(self) -> Mutator:
        if self._mutator is None:
            raise MissingComponentError("mutator", self.name)
        return self._mutator

    def require_recombinator(self) -> Recombinator:
        if self._recombinator is None:
            raise MissingComponentError("recombinator", self.name)
        return self._recombinator

    def require_selector(self) -> Selector:
        if self._selector is None:
            raise MissingComponentError("selector", self.name)
        return self._selector

    # ------------------------------------------------------------------
    # Best-individual listeners
    # ------------------------------------------------------------------

    def add_best_listener(self, listener: BestListener) -> None:
        """Subscribe ``listener(previous, new)`` to new best-ever records."""
        self._best_listeners.append(listener)

    def remove_best_listener(self, listener: BestListener) -> None:
        """
        Raises:
            ValueError: If the listener is not subscribed
        """
        self._best_listeners.remove(listener)

    def _record_best(self, individual: Individual) -> None:
        previous = self._best_ever
        self._best_ever = individual
        logger.debug(
            f"{self.name}: new best at iteration {self._iteration}, "
            f"fitness={individual.fitness}"
        )
        for listener in list(self._best_listeners):
            listener(previous, individual)

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    @property
    def max_iterations(self) -> Optional[int]:
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value: Optional[int]) -> None:
        validate_iteration_count(value)
        self._max_iterations = value

    @abstractmethod
    def step(self) -> None:
        """Run one generation, leaving the next generation in the population."""

    def stopping_condition(self) -> bool:
        """
        Convergence test evaluated before every generation.

        Never true unless ``max_stagnation`` or ``target_fitness`` is set.
        """
        if self.max_stagnation is not None and self._stagnation >= self.max_stagnation:
            return True
        if self.target_fitness is not None and self._best_ever is not None:
            environment = self.require_environment()
            return environment.compare_fitness(self._best_ever.fitness, self.target_fitness) >= 0
        return False

    def stop(self) -> None:
        """Request the loop to exit before the next generation. Thread safe."""
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def on_start(self) -> None:
        """Hook called after the initial evaluation, before the first step."""

    def on_finish(self) -> None:
        """Hook called after the last step."""

    def reset(self) -> None:
        """Return a FINISHED algorithm to READY so it can run again."""
        if self._state is not AlgorithmState.FINISHED:
            raise InvalidStateError(self._state.name, AlgorithmState.FINISHED.name)
        self._state = AlgorithmState.READY
        self._stop_event.clear()

    def _below_cap(self) -> bool:
        return self._max_iterations is None or self._iteration < self._max_iterations

    def _should_continue(self) -> bool:
        return (
            not self._stop_event.is_set()
            and not self.stopping_condition()
            and self._below_cap()
        )

    def run(self) -> Individual:
        """
        Run the generation loop until the stopping condition holds or the
        iteration cap is reached.

        Returns:
            The best individual ever recorded

        Raises:
            MissingComponentError: If environment or population is missing
            InvalidStateError: If the algorithm is not READY
            EmptyPopulationError: If the population is empty
        """
        environment = self.require_environment()
        population = self.require_population()
        if self._state is not AlgorithmState.READY:
            raise InvalidStateError(self._state.name, AlgorithmState.READY.name)

        self._state = AlgorithmState.RUNNING
        self._iteration = 0
        self._stagnation = 0
        self._best_ever = None
        self._history = EvolutionHistory()
        logger.info(
            f"Starting {self.name}: population={len(population)}, "
            f"max_iterations={self._max_iterations}"
        )

        start = time.perf_counter()
        try:
            environment.evaluate_all(population)
            self._record_best(population.best())
            previous = self._best_ever
            self._record_generation()
            self.on_start()

            while self._should_continue():
                self.step()
                self._iteration += 1
                environment = self.require_environment()
                current = population.best()

                improved = environment.compare_fitness(
                    environment.evaluate(current), environment.evaluate(previous)
                ) > 0
                if not improved:
                    self._stagnation += 1
                else:
                    self._stagnation = 0
                    if environment.compare(current, self._best_ever) > 0:
                        self._record_best(current)
                previous = current

                for member in {id(ind): ind for ind in population}.values():
                    member.grow_older()
                self._record_generation()

            self.on_finish()
        finally:
            self._elapsed = time.perf_counter() - start
            self._state = AlgorithmState.FINISHED

        logger.info(
            f"{self.name} finished after {self._iteration} iterations "
            f"in {self._elapsed:.3f}s, best fitness={self._best_ever.fitness}"
        )
        return self._best_ever

    def _record_generation(self) -> None:
        population = self.require_population()
        stats = population.statistics()
        generation = GenerationStats(
            iteration=self._iteration,
            best_fitness=stats.best_fitness,
            mean_fitness=stats.mean_fitness,
            worst_fitness=stats.worst_fitness,
            std_fitness=stats.std_fitness,
            size=stats.size,
            distinct=stats.distinct,
            stagnation=self._stagnation,
            best_values=population.best().values,
        )
        self._history.append(generation)
        logger.debug(
            f"{self.name} iteration {self._iteration}: best={stats.best_fitness:.6g}, "
            f"mean={stats.mean_fitness:.6g}, stagnation={self._stagnation}"
        )
        if self.progress_callback is not None:
            self.progress_callback(self._iteration, generation)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def stagnation(self) -> int:
        return self._stagnation

    @property
    def best_ever(self) -> Optional[Individual]:
        return self._best_ever

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed

    @property
    def elapsed(self) -> timedelta:
        return timedelta(seconds=self._elapsed)

    @property
    def history(self) -> EvolutionHistory:
        return self._history

    def report(self) -> AlgorithmReport:
        """Snapshot of everything an external reporter reads."""
        population = self._population
        best = self._best_ever
        return AlgorithmReport(
            name=self.name,
            state=self._state.name,
            elapsed_seconds=self._elapsed,
            iterations=self._iteration,
            stagnation=self._stagnation,
            best_fitness=None if best is None else float(best.fitness),
            best_values=[] if best is None else best.values,
            population=population.statistics() if population else None,
            mutation_probability=self._mutator.probability if self._mutator is not None else None,
            recombination_probability=(
                self._recombinator.probability if self._recombinator is not None else None
            ),
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} name={self.name!r} state={self._state.name} "
            f"iteration={self._iteration}>"
        )
