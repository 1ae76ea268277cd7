"""
Mutation operator

A mutator perturbs the genes of unevaluated individuals. ``decide`` performs
the per-individual Bernoulli trial; ``mutate`` applies the representation
specific perturbation unconditionally; ``mutate_all`` does both over a batch
in parallel.
"""

import logging
from abc import abstractmethod
from typing import Iterable, List, Optional

from evolab.core.individual import Individual
from evolab.exceptions import validate_probability
from evolab.operators.base import Operator
from evolab.utils import rng
from evolab.utils.parallel import ParallelExecutor

logger = logging.getLogger(__name__)


class Mutator(Operator):
    """
    Abstract mutator.

    Attributes:
        probability: Probability that ``decide`` selects an individual
        executor: Fan-out for ``mutate_all``
    """

    def __init__(
        self,
        probability: float,
        executor: Optional[ParallelExecutor] = None,
    ):
        """
        Args:
            probability: Mutation probability in [0, 1]
            executor: Parallel executor; a default thread pool when omitted

        Raises:
            InvalidProbabilityError: If probability is outside [0, 1]
        """
        super().__init__()
        self.probability = probability
        self.executor = executor or ParallelExecutor()

    @property
    def probability(self) -> float:
        return self._probability

    @probability.setter
    def probability(self, value: float) -> None:
        validate_probability(value, "mutation probability")
        self._probability = value

    @abstractmethod
    def mutate(self, individual: Individual) -> None:
        """Perturb ``individual`` in place."""

    def decide(self, individual: Individual) -> bool:
        """Bernoulli trial with the mutation probability. Thread safe."""
        return rng.bernoulli(self._probability)

    def _mutate_if_selected(self, individual: Individual) -> bool:
        if self.decide(individual):
            self.mutate(individual)
            return True
        return False

    def mutate_all(self, individuals: Iterable[Individual]) -> List[Individual]:
        """
        Mutate, in parallel, the individuals selected by ``decide``.

        Returns:
            The individuals that were mutated
        """
        individuals = list(individuals)
        selected = self.executor.map(self._mutate_if_selected, individuals)
        mutated = [ind for ind, hit in zip(individuals, selected) if hit]
        logger.debug(f"Mutated {len(mutated)} of {len(individuals)} individuals")
        return mutated

    def __call__(self, individual: Individual) -> None:
        self.mutate(individual)
