"""
Evolutionary Engine Exception Classes

This module defines the exceptions raised by the population-based search
engine. Every error here is a programmer or configuration error: none is
retried, and none is expected under correct wiring.

The hierarchy has three branches:

- ConfigurationError: a bad value or a bad assignment at construction time.
- PreconditionError: an operation called in a state where it cannot run.
- RepresentationError: a genome was written in a way its encoding forbids.
"""

import math
from typing import Optional, Any


class EvolutionError(Exception):
    """Base exception class for all engine errors."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.suggestion:
            return f"{self.message}. Suggestion: {self.suggestion}"
        return self.message


class ConfigurationError(EvolutionError):
    """Raised when a component is constructed or wired with invalid values."""


class PreconditionError(EvolutionError):
    """Raised when an operation is invoked in a state that cannot support it."""


class RepresentationError(EvolutionError):
    """Raised when a genome is modified in a way its representation forbids."""


# =============================================================================
# Configuration Errors
# =============================================================================

class InvalidProbabilityError(ConfigurationError):
    """
    Raised when a probability is outside [0, 1].

    Applies to mutation, recombination and DE crossover probabilities.
    """

    MIN_PROBABILITY = 0.0
    MAX_PROBABILITY = 1.0

    def __init__(self, name: str, value: float):
        self.name = name
        self.value = value
        message = f"Invalid {name}: {value}"
        suggestion = (
            f"{name} must be between {self.MIN_PROBABILITY} and {self.MAX_PROBABILITY}"
        )
        super().__init__(message, suggestion)


class InvalidCountError(ConfigurationError):
    """
    Raised when a count parameter is below its minimum.

    Partner counts, difference counts, tournament sizes and gene counts must be
    at least 1; capacity hints and elitism must be at least 0.
    """

    def __init__(self, name: str, value: int, minimum: int = 1):
        self.name = name
        self.value = value
        self.minimum = minimum
        message = f"Invalid {name}: {value}"
        suggestion = f"{name} must be an integer greater than or equal to {minimum}"
        super().__init__(message, suggestion)


class InvalidIterationCountError(ConfigurationError):
    """Raised when the iteration cap is negative."""

    def __init__(self, max_iterations: int):
        self.max_iterations = max_iterations
        message = f"Invalid iteration cap: {max_iterations}"
        suggestion = "Use a value >= 0, or None for no cap"
        super().__init__(message, suggestion)


class InvalidAgeError(ConfigurationError):
    """Raised when an individual is given a negative age."""

    def __init__(self, age: int):
        self.age = age
        super().__init__(f"Invalid age: {age}", "Age must be greater than or equal to zero")


class InvalidBoundsError(ConfigurationError):
    """Raised when a lower bound exceeds its upper bound."""

    def __init__(self, lower: Any, upper: Any, what: str = "bounds"):
        self.lower = lower
        self.upper = upper
        message = f"Invalid {what}: lower {lower} is greater than upper {upper}"
        super().__init__(message, "Swap the values so that lower <= upper")


class AlreadyAssignedError(ConfigurationError):
    """
    Raised when a one-shot slot is assigned a second time.

    Environments and populations are assigned once per algorithm; replacing
    the environment goes through ``switch_environment``. Operators are bound
    to exactly one algorithm.
    """

    def __init__(self, slot: str, alternative: Optional[str] = None):
        self.slot = slot
        super().__init__(f"{slot} is already assigned", alternative)


class GeneOwnershipError(ConfigurationError):
    """Raised when a gene owned by one individual is attached to another."""

    def __init__(self, gene: Any, locus: Optional[int] = None):
        self.gene = gene
        self.locus = locus
        if locus is None:
            message = f"Gene {gene!r} already belongs to another individual"
        else:
            message = f"Gene {gene!r} is already held at locus {locus}"
        suggestion = "Assign a copy of the gene instead (set_gene_copy)"
        super().__init__(message, suggestion)


# =============================================================================
# Precondition Errors
# =============================================================================

class MissingComponentError(PreconditionError):
    """Raised when a required component has not been provided."""

    def __init__(self, component: str, owner: str = "algorithm"):
        self.component = component
        self.owner = owner
        message = f"No {component} set on the {owner}"
        suggestion = f"Assign a {component} before running"
        super().__init__(message, suggestion)


class InvalidStateError(PreconditionError):
    """Raised when an algorithm is driven from a state that forbids it."""

    def __init__(self, state: Any, expected: Any):
        self.state = state
        self.expected = expected
        super().__init__(f"Algorithm is {state}, expected {expected}")


class PoolSizeError(PreconditionError):
    """Raised when a recombination pool is not divisible by the partner count."""

    def __init__(self, pool_size: int, partner_count: int):
        self.pool_size = pool_size
        self.partner_count = partner_count
        message = (
            f"Pool of {pool_size} individuals is not divisible by the "
            f"partner count {partner_count}"
        )
        suggestion = f"Select a multiple of {partner_count} parents"
        super().__init__(message, suggestion)


class SampleSizeError(PreconditionError):
    """Raised when a sample request cannot be satisfied."""

    def __init__(self, requested: int, available: int, what: str = "sample"):
        self.requested = requested
        self.available = available
        message = f"Requested {requested} from a {what} of {available}"
        super().__init__(message, f"Request at most {available}")


class PopulationIndexError(PreconditionError, IndexError):
    """Raised when a population is indexed out of bounds."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        PreconditionError.__init__(
            self,
            f"Index {index} out of bounds for a population of {size}",
        )


class EmptyPopulationError(PreconditionError):
    """Raised when a query needs at least one individual."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot compute {operation} of an empty population")


# =============================================================================
# Representation Errors
# =============================================================================

class BoundsViolationError(RepresentationError):
    """
    Raised when a gene value is outside its bounds.

    Bounds are half open: lower <= value < upper. Values are rejected, never
    clamped; clamping is a separate explicit operation.
    """

    def __init__(self, value: Any, lower: Any, upper: Any):
        self.value = value
        self.lower = lower
        self.upper = upper
        message = f"Value {value} is outside bounds [{lower}, {upper})"
        suggestion = "Use clamp(), maximize() or minimize() for saturation"
        super().__init__(message, suggestion)


class EvaluatedIndividualError(RepresentationError):
    """Raised when the genome of an evaluated individual is modified."""

    def __init__(self, individual_id: int):
        self.individual_id = individual_id
        message = f"Individual {individual_id} has been evaluated and cannot be modified"
        suggestion = "Remove it from its population and insert a fresh individual"
        super().__init__(message, suggestion)


class IncompleteIndividualError(RepresentationError):
    """Raised when an individual with unassigned loci is used as complete."""

    def __init__(self, individual_id: int, missing: int):
        self.individual_id = individual_id
        self.missing = missing
        super().__init__(f"Individual {individual_id} has {missing} unassigned loci")


class InvalidFitnessError(RepresentationError):
    """Raised when an environment produces a non-numeric or NaN fitness."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(
            f"Invalid fitness value: {value!r}",
            "Environments must return a real number that is not NaN",
        )


# =============================================================================
# Utility Functions
# =============================================================================

def validate_probability(value: float, name: str = "probability") -> None:
    """Validate a probability is within [0, 1]."""
    if (
        value is None
        or math.isnan(value)
        or value < InvalidProbabilityError.MIN_PROBABILITY
        or value > InvalidProbabilityError.MAX_PROBABILITY
    ):
        raise InvalidProbabilityError(name, value)


def validate_count(value: int, name: str, minimum: int = 1) -> None:
    """Validate a count is an integer at or above ``minimum``."""
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        raise InvalidCountError(name, value, minimum)


def validate_iteration_count(max_iterations: Optional[int]) -> None:
    """Validate an iteration cap (None means unbounded)."""
    if max_iterations is not None and max_iterations < 0:
        raise InvalidIterationCountError(max_iterations)


def validate_age(age: int) -> None:
    """Validate an age is non-negative."""
    if age < 0:
        raise InvalidAgeError(age)


def validate_bounds(value: Any, lower: Any, upper: Any) -> None:
    """Validate ``lower <= value < upper`` for bounds that are not None."""
    if lower is not None and value < lower:
        raise BoundsViolationError(value, lower, upper)
    if upper is not None and value >= upper:
        raise BoundsViolationError(value, lower, upper)


def validate_partition(pool_size: int, partner_count: int) -> None:
    """Validate a pool splits evenly into groups of ``partner_count``."""
    if pool_size % partner_count != 0:
        raise PoolSizeError(pool_size, partner_count)
