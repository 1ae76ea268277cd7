"""
Tests for the operator contracts and the generic crossover algorithms.
"""

import pytest
from hypothesis import given, settings, strategies as st

from evolab.algorithms import SimpleGA
from evolab.core import UnorderedPopulation
from evolab.exceptions import (
    AlreadyAssignedError,
    IncompleteIndividualError,
    InvalidCountError,
    InvalidProbabilityError,
    MissingComponentError,
    PoolSizeError,
    RepresentationError,
)
from evolab.operators import (
    OnePointCrossover,
    Recombinator,
    UniformCrossover,
    discrete_recombination,
    one_point_crossover,
    one_point_crossover_no_repeat,
)
from evolab.representations import (
    BinaryGenerator,
    BinaryIndividual,
    BitFlipMutator,
    PermutationGenerator,
    RealGenerator,
    is_valid_permutation,
)
from evolab.utils.parallel import ParallelExecutor


class PassThrough(Recombinator):
    """Returns clones of the first partner."""

    def __init__(self, probability, partner_count, generator):
        super().__init__(probability, partner_count)
        self._source = generator

    def recombine(self, partners):
        return [self._source.clone(partners[0])]


class TestOnePointCrossover:
    """Cut-and-swap crossover between two parents."""

    def test_midpoint_scenario(self, onemax_env):
        generator = BinaryGenerator(8)
        parent1 = BinaryIndividual.from_bits([1, 1, 1, 1, 0, 0, 0, 0])
        parent2 = BinaryIndividual.from_bits([0, 0, 0, 0, 1, 1, 1, 1])
        population = UnorderedPopulation(
            onemax_env, individuals=[parent1, parent2] + generator.get_n_random(2)
        )
        assert len(population) == 4

        child1, child2 = one_point_crossover(parent1, parent2, generator, cut=4)
        assert child1.values == [1, 1, 1, 1, 1, 1, 1, 1]
        assert child2.values == [0, 0, 0, 0, 0, 0, 0, 0]
        assert onemax_env.evaluate(child1) == 8
        assert onemax_env.evaluate(child2) == 0

    @given(
        bits1=st.lists(st.integers(0, 1), min_size=1, max_size=24),
        data=st.data(),
    )
    @settings(max_examples=100)
    def test_round_trip_restores_parents(self, bits1, data):
        length = len(bits1)
        bits2 = data.draw(st.lists(st.integers(0, 1), min_size=length, max_size=length))
        cut = data.draw(st.integers(0, length - 1))
        generator = BinaryGenerator(length)
        parent1 = BinaryIndividual.from_bits(bits1)
        parent2 = BinaryIndividual.from_bits(bits2)

        child1, child2 = one_point_crossover(parent1, parent2, generator, cut)
        back1, back2 = one_point_crossover(child1, child2, generator, cut)
        assert back1.values == bits1
        assert back2.values == bits2

    def test_children_do_not_share_genes(self):
        generator = BinaryGenerator(4)
        parent1, parent2 = generator.get_random(), generator.get_random()
        child1, child2 = one_point_crossover(parent1, parent2, generator)
        parent_genes = {id(gene) for gene in parent1.genes + parent2.genes}
        assert not parent_genes & {id(gene) for gene in child1.genes + child2.genes}

    def test_cut_out_of_range(self):
        generator = BinaryGenerator(4)
        with pytest.raises(ValueError):
            one_point_crossover(generator.get_random(), generator.get_random(), generator, 4)

    def test_incompatible_parents(self):
        with pytest.raises(RepresentationError):
            one_point_crossover(
                BinaryGenerator(3).get_random(),
                RealGenerator(3, 0.0, 1.0).get_random(),
                BinaryGenerator(3),
            )


class TestNoRepeatCrossover:
    """One-point crossover that keeps permutations valid."""

    def test_fills_from_other_parent_with_wraparound(self):
        generator = PermutationGenerator(0, 5)
        parent1 = generator.from_values([0, 1, 2, 3, 4])
        parent2 = generator.from_values([4, 3, 2, 1, 0])
        child1, child2 = one_point_crossover_no_repeat(parent1, parent2, generator, cut=2)
        assert child1.values == [0, 1, 2, 4, 3]
        assert child2.values == [4, 3, 2, 0, 1]

    @given(size=st.integers(2, 12), data=st.data())
    @settings(max_examples=60)
    def test_children_are_permutations(self, size, data):
        generator = PermutationGenerator(0, size)
        values1 = data.draw(st.permutations(list(range(size))))
        values2 = data.draw(st.permutations(list(range(size))))
        cut = data.draw(st.integers(0, size - 1))
        children = one_point_crossover_no_repeat(
            generator.from_values(values1), generator.from_values(values2), generator, cut
        )
        assert all(is_valid_permutation(child, 0, size) for child in children)

    def test_parents_with_different_values_fail(self):
        generator = BinaryGenerator(3)
        with pytest.raises(IncompleteIndividualError):
            one_point_crossover_no_repeat(
                BinaryIndividual.from_bits([1, 1, 1]),
                BinaryIndividual.from_bits([1, 1, 1]),
                generator,
                cut=1,
            )


class TestDiscreteRecombination:
    """Per-locus weighted choice of the donor."""

    def test_alpha_one_copies_first_parent(self):
        generator = BinaryGenerator(6)
        parent1 = BinaryIndividual.from_bits([1, 0, 1, 0, 1, 0])
        parent2 = BinaryIndividual.from_bits([0, 1, 0, 1, 0, 1])
        children = discrete_recombination(parent1, parent2, generator, 3, alpha=1.0)
        assert len(children) == 3
        assert all(child.values == parent1.values for child in children)

    def test_alpha_zero_copies_second_parent(self):
        generator = BinaryGenerator(4)
        parent1 = BinaryIndividual.from_bits([1, 1, 1, 1])
        parent2 = BinaryIndividual.from_bits([0, 0, 0, 0])
        (child,) = discrete_recombination(parent1, parent2, generator, 1, alpha=0.0)
        assert child.values == [0, 0, 0, 0]

    @given(
        bits1=st.lists(st.integers(0, 1), min_size=1, max_size=16),
        data=st.data(),
    )
    @settings(max_examples=50)
    def test_every_locus_comes_from_a_parent(self, bits1, data):
        bits2 = data.draw(st.lists(st.integers(0, 1), min_size=len(bits1), max_size=len(bits1)))
        generator = BinaryGenerator(len(bits1))
        children = discrete_recombination(
            BinaryIndividual.from_bits(bits1), BinaryIndividual.from_bits(bits2), generator
        )
        for child in children:
            for locus, value in enumerate(child.values):
                assert value in (bits1[locus], bits2[locus])

    def test_invalid_alpha(self):
        with pytest.raises(InvalidProbabilityError):
            UniformCrossover(alpha=1.5)


class TestRecombineAll:
    """Batch driver: partition, gate and concatenate."""

    def test_pool_not_divisible_by_partner_count(self):
        generator = BinaryGenerator(4)
        recombinator = PassThrough(1.0, 2, generator)
        with pytest.raises(PoolSizeError):
            recombinator.recombine_all(generator.get_n_random(5))

    @pytest.mark.parametrize("partner_count", [1, 2, 3])
    def test_one_output_per_group(self, partner_count):
        generator = BinaryGenerator(4)
        recombinator = PassThrough(1.0, partner_count, generator)
        pool = generator.get_n_random(6 if partner_count != 3 else 9)
        offspring = recombinator.recombine_all(pool)
        assert len(offspring) == len(pool) // partner_count
        for group, child in enumerate(offspring):
            assert child.values == pool[group * partner_count].values

    def test_probability_zero_produces_nothing(self):
        generator = BinaryGenerator(4)
        assert PassThrough(0.0, 2, generator).recombine_all(generator.get_n_random(4)) == []

    @given(groups=st.integers(1, 10), probability=st.floats(0.0, 1.0))
    @settings(max_examples=50)
    def test_at_most_one_recombination_per_group(self, groups, probability):
        generator = BinaryGenerator(4)
        recombinator = OnePointCrossover(probability)
        algorithm = SimpleGA()
        algorithm.generator = generator
        algorithm.recombinator = recombinator
        offspring = recombinator.recombine_all(generator.get_n_random(2 * groups))
        assert len(offspring) <= 2 * groups
        assert len(offspring) % 2 == 0

    def test_invalid_configuration(self):
        with pytest.raises(InvalidProbabilityError):
            OnePointCrossover(-0.1)
        with pytest.raises(InvalidCountError):
            PassThrough(0.5, 0, BinaryGenerator(1))


class TestMutator:
    """Probability validation and the parallel batch form."""

    @pytest.mark.parametrize("probability", [-0.01, 1.01, float("nan")])
    def test_probability_out_of_range(self, probability):
        with pytest.raises(InvalidProbabilityError):
            BitFlipMutator(probability)

    def test_probability_one_mutates_everything(self):
        individuals = [BinaryIndividual.from_bits([0] * 5) for _ in range(8)]
        mutator = BitFlipMutator(1.0, gene_probability=1.0, executor=ParallelExecutor(4))
        mutated = mutator.mutate_all(individuals)
        assert len(mutated) == 8
        assert all(ind.values == [1] * 5 for ind in individuals)

    def test_probability_zero_mutates_nothing(self):
        individuals = [BinaryIndividual.from_bits([0, 1]) for _ in range(4)]
        assert BitFlipMutator(0.0, gene_probability=1.0).mutate_all(individuals) == []
        assert all(ind.values == [0, 1] for ind in individuals)

    def test_failure_propagates(self, onemax_env):
        individual = BinaryIndividual.from_bits([0, 1])
        onemax_env.evaluate(individual)
        mutator = BitFlipMutator(1.0, gene_probability=1.0)
        with pytest.raises(RepresentationError):
            mutator.mutate_all([BinaryIndividual.from_bits([0]), individual])


class TestBinding:
    """Operators are bound to one algorithm and resolve collaborators lazily."""

    def test_unbound_operator_has_no_population(self):
        with pytest.raises(MissingComponentError):
            OnePointCrossover().population

    def test_second_algorithm_rejected(self):
        recombinator = OnePointCrossover()
        SimpleGA().recombinator = recombinator
        with pytest.raises(AlreadyAssignedError):
            SimpleGA().recombinator = recombinator

    def test_rebinding_same_algorithm_allowed(self):
        recombinator = OnePointCrossover()
        algorithm = SimpleGA()
        algorithm.recombinator = recombinator
        algorithm.recombinator = recombinator
        assert recombinator.algorithm is algorithm

    def test_population_missing_on_algorithm(self):
        mutator = BitFlipMutator()
        SimpleGA().mutator = mutator
        with pytest.raises(MissingComponentError):
            mutator.population
