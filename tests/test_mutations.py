"""Tests for the mutation fold, display names and the size-to-shape table."""

import random

import pytest

from chatlife import config
from chatlife.mutations import (
    add_mutation,
    build_name,
    compound,
    roll_mutation,
    shape_for_size,
    stack_summary,
)


class TestCompound:
    def test_empty_stack_is_neutral(self):
        traits = compound({})
        assert (traits.speed, traits.size, traits.health, traits.decay, traits.glow) == (1.0, 1.0, 1.0, 1.0, 0.0)

    def test_counts_raise_multipliers_to_power(self):
        traits = compound({"Swift": 2, "Tank": 1})
        assert traits.speed == pytest.approx(1.5 ** 2 * 0.7)
        assert traits.size == pytest.approx(0.8 ** 2 * 1.3)
        assert traits.health == pytest.approx(1.5)

    def test_glow_is_additive(self):
        assert compound({"Regen": 3}).glow == pytest.approx(60.0)

    def test_insertion_order_does_not_matter(self):
        forward = {"Swift": 2, "Tank": 1, "Titan": 3, "Micro": 1}
        backward = dict(reversed(list(forward.items())))
        assert compound(forward) == compound(backward)

    def test_unknown_names_are_ignored(self):
        assert compound({"Wings": 4}) == compound({})


class TestStackHelpers:
    def test_add_mutation_returns_copy(self):
        stack = {"Swift": 1}
        updated = add_mutation(stack, config.MUTATIONS[0])
        assert updated == {"Swift": 2}
        assert stack == {"Swift": 1}

    def test_roll_respects_chance(self):
        rng = random.Random(3)
        assert all(roll_mutation(rng, 0.0) is None for _ in range(200))
        assert all(roll_mutation(rng, 1.0) in config.MUTATIONS for _ in range(200))

    def test_summary_uses_catalog_order(self):
        assert stack_summary({"Regen": 1, "Swift": 2}) == "Swift x2, Regen"


class TestBuildName:
    def test_root_spawn_is_just_lineage(self):
        assert build_name("Alice", {}, 0) == "Alice"

    def test_full_name(self):
        assert build_name("Alice", {"Regen": 1, "Swift": 2}, 3) == "Swift x2, Regen Alice G3"

    def test_generation_suffix_without_mutations(self):
        assert build_name("Bob", {}, 1) == "Bob G1"


class TestShapeForSize:
    @pytest.mark.parametrize(
        "size, sides",
        [(5, 3), (14.9, 3), (15, 4), (24.99, 5), (34, 7), (42, 9), (48.9, 11), (49, 12), (60, 12)],
    )
    def test_breakpoints(self, size, sides):
        assert shape_for_size(size)[0] == sides

    def test_shape_names(self):
        assert shape_for_size(10) == (3, "triangle")
        assert shape_for_size(55) == (12, "dodecagon")
