"""
Operator binding

Every operator is bound to exactly one algorithm when it is assigned to one of
the algorithm's slots. The population, environment and sibling operators are
resolved through that binding at call time, so operators can be swapped
between generations.
"""

from abc import ABC
from typing import Optional, TYPE_CHECKING

from evolab.exceptions import AlreadyAssignedError, MissingComponentError

if TYPE_CHECKING:
    from evolab.algorithms.base import EvolutionaryAlgorithm
    from evolab.core.environment import Environment
    from evolab.core.population import Population
    from evolab.operators.generator import Generator


class Operator(ABC):
    """Base class for generators, mutators, recombinators and selectors."""

    def __init__(self) -> None:
        self._algorithm: Optional["EvolutionaryAlgorithm"] = None

    def bind(self, algorithm: "EvolutionaryAlgorithm") -> None:
        """
        Bind this operator to ``algorithm``.

        Raises:
            AlreadyAssignedError: If already bound to a different algorithm
        """
        if self._algorithm is not None and self._algorithm is not algorithm:
            raise AlreadyAssignedError(
                f"{type(self).__name__} algorithm binding",
                "Create a separate operator instance per algorithm",
            )
        self._algorithm = algorithm

    @property
    def bound(self) -> bool:
        return self._algorithm is not None

    @property
    def algorithm(self) -> "EvolutionaryAlgorithm":
        if self._algorithm is None:
            raise MissingComponentError("algorithm", type(self).__name__)
        return self._algorithm

    @property
    def population(self) -> "Population":
        return self.algorithm.require_population()

    @property
    def environment(self) -> "Environment":
        return self.algorithm.require_environment()

    @property
    def generator(self) -> "Generator":
        return self.algorithm.require_generator()
