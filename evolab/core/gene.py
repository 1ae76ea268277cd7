"""
Gene (locus) base class.

A gene is one coordinate of a candidate solution. It exposes a numeric
expression value, optional half-open bounds ``[lower, upper)`` and a value
copy. A gene belongs to at most one individual; the owner link is never
copied.
"""

from abc import ABC, abstractmethod
from numbers import Number
from typing import Any, Optional, TYPE_CHECKING

from evolab.exceptions import (
    EvaluatedIndividualError,
    GeneOwnershipError,
    InvalidBoundsError,
    validate_bounds,
)

if TYPE_CHECKING:
    from evolab.core.individual import Individual


class Gene(ABC):
    """
    One locus of a representation.

    Subclasses store their own value and implement ``value`` and ``copy``.
    Bounds are optional; when present every stored value satisfies
    ``lower <= value < upper``.

    Attributes:
        lower: Inclusive lower bound, or None
        upper: Exclusive upper bound, or None
    """

    __slots__ = ("_lower", "_upper", "_owner")

    def __init__(self, lower: Optional[Number] = None, upper: Optional[Number] = None):
        if lower is not None and upper is not None and upper < lower:
            raise InvalidBoundsError(lower, upper, "gene bounds")
        self._lower = lower
        self._upper = upper
        self._owner: Optional["Individual"] = None

    @property
    @abstractmethod
    def value(self) -> Any:
        """Numeric expression of this gene."""

    @abstractmethod
    def copy(self) -> "Gene":
        """
        Return a new, unowned gene equal by value to this one.

        Returns:
            A distinct instance with ``copy == self``
        """

    @property
    def lower(self) -> Optional[Number]:
        return self._lower

    @property
    def upper(self) -> Optional[Number]:
        return self._upper

    @property
    def bounded(self) -> bool:
        return self._lower is not None or self._upper is not None

    @property
    def owner(self) -> Optional["Individual"]:
        """Individual currently holding this gene."""
        return self._owner

    def attach(self, individual: "Individual") -> None:
        """
        Bind this gene to an individual.

        Re-attaching to the same individual is allowed.

        Raises:
            GeneOwnershipError: If the gene already belongs to another individual
        """
        if self._owner is not None and self._owner is not individual:
            raise GeneOwnershipError(self)
        self._owner = individual

    def detach(self) -> None:
        self._owner = None

    def check_bounds(self, value: Any) -> None:
        """Raise BoundsViolationError if ``value`` is outside this gene's bounds."""
        validate_bounds(value, self._lower, self._upper)

    def _ensure_mutable(self) -> None:
        # the genome of an evaluated individual is frozen
        if self._owner is not None and self._owner.fitness is not None:
            raise EvaluatedIndividualError(self._owner.id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Gene) or type(other) is not type(self):
            return NotImplemented
        return self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"

    def __str__(self) -> str:
        return str(self.value)
