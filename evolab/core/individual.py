"""
Individual (candidate solution)

An individual is a fixed-length sequence of genes plus an identity-stable id,
an age counter and a fitness value tagged with the environment that computed
it.

Individuals compare by identity only. Two individuals with the same genome are
still distinct members of a population.
"""

import itertools
import threading
from typing import Iterator, List, Optional, Sequence, TYPE_CHECKING

from evolab.core.gene import Gene
from evolab.exceptions import (
    EvaluatedIndividualError,
    GeneOwnershipError,
    IncompleteIndividualError,
    InvalidCountError,
    validate_age,
)

if TYPE_CHECKING:
    from evolab.core.environment import Environment, FitnessValue


class IdSequence:
    """
    Monotonic id source for individuals.

    Thread safe. Generators own a reference to a sequence; the module-level
    ``DEFAULT_SEQUENCE`` is used when none is given, which keeps ids unique for
    the lifetime of the process.
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()
        self._issued = 0

    def next_id(self) -> int:
        with self._lock:
            self._issued += 1
            return next(self._counter)

    @property
    def issued(self) -> int:
        """Number of ids handed out so far."""
        return self._issued


DEFAULT_SEQUENCE = IdSequence()


class Individual:
    """
    Candidate solution.

    Created empty (all loci None) or fully assigned, evaluated at most once per
    environment, aged once per generation by the driver. Once a fitness value
    is set the genome is frozen.

    Attributes:
        id: Unique id, ascending in creation order
        age: Number of generations survived
        fitness: Fitness value, or None if not evaluated
        evaluated_by: Environment that produced ``fitness``
    """

    def __init__(
        self,
        size: int,
        genes: Optional[Sequence[Gene]] = None,
        sequence: Optional[IdSequence] = None,
    ):
        """
        Args:
            size: Number of loci, fixed for the lifetime of the individual
            genes: Optional initial genes, attached without copying
            sequence: Id source; defaults to ``DEFAULT_SEQUENCE``

        Raises:
            InvalidCountError: If size < 1
        """
        if size < 1:
            raise InvalidCountError("gene count", size)
        self.id: int = (sequence or DEFAULT_SEQUENCE).next_id()
        self._genes: List[Optional[Gene]] = [None] * size
        self._age = 0
        self._fitness: Optional["FitnessValue"] = None
        self._evaluated_by: Optional["Environment"] = None
        if genes is not None:
            self.set_genes(0, genes)

    # ------------------------------------------------------------------
    # Genome
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._genes)

    def __iter__(self) -> Iterator[Optional[Gene]]:
        return iter(self._genes)

    def __getitem__(self, index: int) -> Optional[Gene]:
        return self._genes[index]

    @property
    def genes(self) -> tuple:
        """Read-only view of the genes (the gene objects themselves)."""
        return tuple(self._genes)

    @property
    def values(self) -> list:
        """Numeric expression of every locus."""
        return [None if gene is None else gene.value for gene in self._genes]

    @property
    def complete(self) -> bool:
        return all(gene is not None for gene in self._genes)

    def genes_copy(self) -> List[Gene]:
        """Return unowned copies of every gene."""
        return [gene.copy() for gene in self._genes]

    def _ensure_mutable(self) -> None:
        if self._fitness is not None:
            raise EvaluatedIndividualError(self.id)

    def set_gene(self, index: int, gene: Gene) -> None:
        """
        Attach ``gene`` at ``index`` without copying.

        Raises:
            EvaluatedIndividualError: If this individual has been evaluated
            GeneOwnershipError: If the gene belongs to another individual or
                is already held at another locus
        """
        self._ensure_mutable()
        if gene.owner is self:
            for locus, held in enumerate(self._genes):
                if held is gene and locus != index:
                    raise GeneOwnershipError(gene, locus)
        gene.attach(self)
        previous = self._genes[index]
        self._genes[index] = gene
        if previous is not None and previous is not gene and not self._holds(previous):
            previous.detach()

    def _holds(self, gene: Gene) -> bool:
        return any(held is gene for held in self._genes)

    def set_genes(self, start: int, genes: Sequence[Gene]) -> None:
        """Attach ``genes`` starting at ``start``, without copying."""
        for offset, gene in enumerate(genes):
            self.set_gene(start + offset, gene)

    def set_gene_copy(self, index: int, gene: Gene) -> None:
        """Attach a copy of ``gene`` at ``index``."""
        self.set_gene(index, gene.copy())

    def set_genes_copy(
        self,
        start: int,
        genes: Sequence[Gene],
        begin: int = 0,
        end: Optional[int] = None,
    ) -> None:
        """
        Attach copies of ``genes[begin:end]`` starting at ``start``.

        Args:
            start: First locus written in this individual
            genes: Source genes
            begin: First source index (inclusive)
            end: Last source index (exclusive), defaults to ``len(genes)``
        """
        for offset, gene in enumerate(genes[begin:end]):
            self.set_gene_copy(start + offset, gene)

    def swap(self, i: int, j: int) -> None:
        """Exchange the genes at loci ``i`` and ``j``."""
        self._ensure_mutable()
        self._genes[i], self._genes[j] = self._genes[j], self._genes[i]

    # ------------------------------------------------------------------
    # Age
    # ------------------------------------------------------------------

    @property
    def age(self) -> int:
        return self._age

    @age.setter
    def age(self, value: int) -> None:
        validate_age(value)
        self._age = value

    def grow_older(self) -> int:
        """Increment the age by one generation and return it."""
        self._age += 1
        return self._age

    # ------------------------------------------------------------------
    # Fitness
    # ------------------------------------------------------------------

    @property
    def fitness(self) -> Optional["FitnessValue"]:
        return self._fitness

    @property
    def evaluated_by(self) -> Optional["Environment"]:
        return self._evaluated_by

    def is_evaluated_by(self, environment: "Environment") -> bool:
        return self._evaluated_by is not None and self._evaluated_by is environment

    def set_fitness(self, value: "FitnessValue", environment: "Environment") -> None:
        """
        Record a fitness value computed by ``environment``.

        A fitness from a different environment may be overwritten; this is how
        an environment switch re-evaluates a population.
        """
        if environment is None:
            raise ValueError("environment must not be None")
        self._fitness = value
        self._evaluated_by = environment

    def require_complete(self) -> None:
        missing = sum(1 for gene in self._genes if gene is None)
        if missing:
            raise IncompleteIndividualError(self.id, missing)

    # ------------------------------------------------------------------
    # Species
    # ------------------------------------------------------------------

    @property
    def species(self) -> str:
        """Name of the representation class deriving directly from Individual."""
        cls = type(self)
        while Individual not in cls.__bases__ and cls is not Individual:
            cls = next(base for base in cls.__bases__ if issubclass(base, Individual))
        return f"{cls.__module__}.{cls.__qualname__}"

    def is_compatible(self, *others: "Individual") -> bool:
        """True if every other individual belongs to the same species."""
        return all(other.species == self.species for other in others)

    def __repr__(self) -> str:
        values = " ".join("null" if gene is None else str(gene) for gene in self._genes)
        fitness = "null" if self._fitness is None else self._fitness
        return f"<{type(self).__name__} #{self.id} age={self._age} fitness={fitness} [{values}]>"
