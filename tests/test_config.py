"""Tests for configuration validation and live updates."""

import math

import pytest

from chatlife.config import (
    Config,
    ConfigurationError,
    EntitySettings,
    chatter_spawn_chance,
    validate_config,
)


class TestValidateConfig:
    def test_defaults_are_valid(self):
        validate_config(Config())

    def test_reports_every_problem(self):
        cfg = Config(entity=EntitySettings(max_health=0.0, mutation_chance=2.0))
        with pytest.raises(ConfigurationError) as info:
            validate_config(cfg)
        assert len(info.value.problems) == 2

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_config(Config(entity=EntitySettings(min_size=80.0)))

    def test_rejects_non_finite_fields(self):
        with pytest.raises(ConfigurationError, match="entity.health_decay_rate must be a finite number"):
            validate_config(Config(entity=EntitySettings(health_decay_rate=float("nan"))))


class TestUpdated:
    def test_returns_new_config(self):
        base = Config()
        changed = base.updated({"entity": {"health_decay_rate": 3}})
        assert changed.entity.health_decay_rate == 3.0
        assert base.entity.health_decay_rate == 1.5
        assert changed.entity.base_size == base.entity.base_size

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError, match="unknown section"):
            Config().updated({"gravity": {"strength": 1}})

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="unknown key"):
            Config().updated({"entity": {"wings": 2}})

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError, match="wrong type"):
            Config().updated({"weather": {"enabled": "yes"}})

    def test_out_of_range(self):
        with pytest.raises(ConfigurationError):
            Config().updated({"energy": {"min_energy": 150}})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), 10**400])
    def test_non_finite_numbers(self, value):
        with pytest.raises(ConfigurationError, match="wrong type"):
            Config().updated({"entity": {"health_decay_rate": value}})

    def test_inf_for_an_integer_setting(self):
        with pytest.raises(ConfigurationError):
            Config().updated({"voting": {"food_batch": float("inf")}})

    def test_batch_sizes_are_bounded(self):
        with pytest.raises(ConfigurationError, match="voting food batch"):
            Config().updated({"voting": {"food_batch": 500}})

    def test_to_dict(self):
        data = Config().to_dict()
        assert data["entity"]["base_size"] == 15.0
        assert data["voting"]["spawn_count"] == 3


class TestChatterSpawnChance:
    @pytest.mark.parametrize(
        "count, chance",
        [(0, 1.0), (9, 1.0), (10, 0.8), (49, 0.8), (99, 0.5), (499, 0.3), (500, 0.15), (10_000, 0.15)],
    )
    def test_tiers(self, count, chance):
        assert chatter_spawn_chance(count) == chance

    def test_custom_tiers(self):
        assert chatter_spawn_chance(3, ((2, 0.9), (math.inf, 0.1))) == 0.1
