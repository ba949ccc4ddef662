"""Shared fixtures: seeded randomness and quiet, deterministic worlds."""

import random

import pytest

from chatlife.config import Config
from chatlife.world import Population


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def neutral_config():
    """Weather, events and biomes off; no mutations and no death cam."""
    return Config().updated(
        {
            "weather": {"enabled": False},
            "events": {"enabled": False},
            "biomes": {"enabled": False},
            "entity": {"mutation_chance": 0.0},
            "effects": {"death_cam_chance": 0.0},
        }
    )


@pytest.fixture
def make_world(neutral_config):
    """Factory for an empty world: no starting organisms, food or respawn floor."""

    def factory(changes=None, seed=7, **kwargs):
        cfg = neutral_config.updated(
            {
                "world": {"initial_organisms": 0},
                "food": {"initial_count": 0, "spawn_amount": 0},
                "energy": {"population_floor": 0},
            }
        )
        if changes:
            cfg = cfg.updated(changes)
        return Population(cfg, random.Random(seed), **kwargs)

    return factory
