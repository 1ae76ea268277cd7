"""
Evolution configuration

Every construction input of the engine gathered in one dataclass, validated
against the engine's error taxonomy.
"""

from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, Optional

from evolab.core.environment import Mode
from evolab.exceptions import (
    ConfigurationError,
    validate_count,
    validate_iteration_count,
    validate_probability,
)


@dataclass
class EvolutionConfig:
    """Evolution configuration

    Attributes:
        mode: Optimization direction
        max_iterations: Iteration cap, None for unbounded
        mutation_probability: Probability that an individual is mutated
        recombination_probability: Probability that a parent group recombines
        partner_count: Parents per recombination group
        crossover_probability: DE crossover rate CR
        n_differences: DE difference pairs per trial
        perturbation_factor: DE scale factor F
        capacity: Population capacity hint, 0 for unbounded
        elitism: Best members carried over by the simple GA
        tournament_size: Participants per tournament
        max_workers: Parallel fan-out width, 1 for sequential, None for the
            thread pool default
        seed: Seed of the random source, None for fresh entropy
        max_stagnation: Stop after this many generations without improvement
        target_fitness: Stop once the best fitness reaches this value
    """
    mode: Mode = Mode.MAXIMIZE
    max_iterations: Optional[int] = None
    mutation_probability: float = 0.1
    recombination_probability: float = 0.9
    partner_count: int = 2
    crossover_probability: float = 0.9
    n_differences: int = 1
    perturbation_factor: float = 0.5
    capacity: int = 0
    elitism: int = 0
    tournament_size: int = 3
    max_workers: Optional[int] = None
    seed: Optional[int] = None
    max_stagnation: Optional[int] = None
    target_fitness: Optional[float] = None

    def validate(self) -> None:
        """Validate every field.

        Raises:
            ConfigurationError: The specific error of the first invalid field
        """
        if not isinstance(self.mode, Mode):
            raise ConfigurationError(
                f"Unknown optimization mode: {self.mode!r}",
                "Use Mode.MAXIMIZE or Mode.MINIMIZE",
            )
        validate_iteration_count(self.max_iterations)
        validate_probability(self.mutation_probability, "mutation probability")
        validate_probability(self.recombination_probability, "recombination probability")
        validate_count(self.partner_count, "partner count")
        validate_probability(self.crossover_probability, "crossover probability")
        validate_count(self.n_differences, "difference count")
        validate_count(self.capacity, "capacity", minimum=0)
        validate_count(self.elitism, "elitism", minimum=0)
        validate_count(self.tournament_size, "tournament size")
        if self.max_workers is not None:
            validate_count(self.max_workers, "max workers")
        if self.max_stagnation is not None:
            validate_count(self.max_stagnation, "max stagnation")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvolutionConfig":
        """Build a validated config from a plain mapping.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                f"Valid keys are: {', '.join(sorted(known))}",
            )
        values = dict(data)
        if "mode" in values and not isinstance(values["mode"], Mode):
            try:
                values["mode"] = Mode(values["mode"])
            except ValueError as exc:
                raise ConfigurationError(
                    f"Unknown optimization mode: {values['mode']!r}",
                    "Use 'maximize' or 'minimize'",
                ) from exc
        config = cls(**values)
        config.validate()
        return config
