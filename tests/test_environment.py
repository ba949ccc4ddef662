"""Tests for the weather cycle, biome zones and world events."""

import random

import pytest

from chatlife import config
from chatlife.config import BiomeSettings, EventSettings, WeatherSettings
from chatlife.environment import (
    NEUTRAL_WEATHER,
    BiomeSystem,
    EventSystem,
    WeatherEffects,
    WeatherSystem,
    Zone,
)


class TestWeather:
    def test_starts_clear(self, rng):
        weather = WeatherSystem(WeatherSettings(), rng)
        assert weather.current == config.WEATHER_CLEAR
        assert weather.multipliers() == WeatherEffects.of(config.WEATHER_CLEAR)

    def test_never_repeats_previous_state(self):
        settings = WeatherSettings()
        weather = WeatherSystem(settings, random.Random(99))
        for _ in range(50):
            previous = weather.current
            weather.update(settings.change_duration)
            assert weather.is_transitioning
            assert weather.pending != previous
            weather.update(settings.transition_duration)
            assert not weather.is_transitioning
            assert weather.current != previous

    def test_transition_blends_multipliers(self, rng):
        settings = WeatherSettings()
        weather = WeatherSystem(settings, rng)
        weather.begin_change(config.WEATHER_DROUGHT)
        weather.update(settings.transition_duration / 2)
        clear = WeatherEffects.of(config.WEATHER_CLEAR)
        drought = WeatherEffects.of(config.WEATHER_DROUGHT)
        assert weather.multipliers().hunger == pytest.approx((clear.hunger + drought.hunger) / 2)

    def test_disabled_weather_is_neutral(self, rng):
        weather = WeatherSystem(WeatherSettings(enabled=False), rng)
        weather.begin_change(config.WEATHER_FOG)
        weather.update(1.0)
        assert weather.current == config.WEATHER_CLEAR
        assert weather.multipliers() == NEUTRAL_WEATHER

    def test_unknown_target_rejected(self, rng):
        with pytest.raises(ValueError):
            WeatherSystem(WeatherSettings(), rng).begin_change("HAIL")


class TestBiomes:
    def test_generates_one_zone_per_kind(self, rng):
        biomes = BiomeSystem(BiomeSettings(), 1200, 800, rng)
        assert [z.kind for z in biomes.zones] == [config.BIOME_SAFE, config.BIOME_DANGER, config.BIOME_FERTILE]
        for zone in biomes.zones:
            assert 200 <= zone.x <= 1000
            assert 200 <= zone.y <= 600
            assert 120 <= zone.radius <= 180

    def test_small_world_uses_center(self, rng):
        biomes = BiomeSystem(BiomeSettings(), 300, 300, rng)
        assert all((z.x, z.y) == (150.0, 150.0) for z in biomes.zones)

    def test_overlap_resolves_to_first_zone(self, rng):
        biomes = BiomeSystem(BiomeSettings(), 1200, 800, rng)
        biomes.zones = [Zone(100, 100, 50, config.BIOME_SAFE), Zone(120, 100, 50, config.BIOME_DANGER)]
        assert biomes.zone_at(110, 100).kind == config.BIOME_SAFE
        assert biomes.zone_at(160, 100).kind == config.BIOME_DANGER
        assert biomes.zone_at(500, 500) is None

    def test_point_queries(self, rng):
        biomes = BiomeSystem(BiomeSettings(), 1200, 800, rng)
        biomes.zones = [Zone(100, 100, 50, config.BIOME_FERTILE)]
        assert biomes.food_spawn_mult_at(100, 100) == 2.0
        assert biomes.growth_mult_at(100, 100) == 1.5
        assert biomes.hunger_mult_at(900, 700) == 1.0

    def test_disabled_biomes_have_no_zones(self, rng):
        biomes = BiomeSystem(BiomeSettings(enabled=False), 1200, 800, rng)
        assert biomes.active_zones() == ()
        assert biomes.zone_at(600, 400) is None

    def test_configure_regenerates_on_count_change(self, rng):
        biomes = BiomeSystem(BiomeSettings(), 1200, 800, rng)
        biomes.configure(BiomeSettings(count=5))
        assert len(biomes.zones) == 5


class TestEvents:
    def test_trigger_applies_effects(self, rng):
        events = EventSystem(EventSettings(), rng)
        events.trigger(config.EVENT_BLOOD_MOON)
        assert events.active
        assert events.collision_damage_mult() == 3.0
        assert events.mutation_mult() == 1.0

    def test_famine_blocks_food(self, rng):
        events = EventSystem(EventSettings(), rng)
        events.trigger(config.EVENT_FAMINE)
        assert events.blocks_food_spawn()
        assert events.food_spawn_mult() == 0.0

    def test_event_expires_after_duration(self, rng):
        settings = EventSettings()
        events = EventSystem(settings, rng)
        events.trigger(config.EVENT_AURORA)
        events.update(settings.duration / 2)
        assert events.remaining_fraction() == pytest.approx(0.5)
        events.update(settings.duration / 2)
        assert not events.active
        assert settings.min_interval <= events.next_trigger <= settings.max_interval

    def test_timer_starts_random_event(self, rng):
        events = EventSystem(EventSettings(), rng)
        started = events.update(events.next_trigger)
        assert started in config.EVENT_TYPES
        assert events.current == started

    def test_disabling_ends_active_event(self, rng):
        events = EventSystem(EventSettings(), rng)
        events.trigger(config.EVENT_ABUNDANCE)
        events.settings = EventSettings(enabled=False)
        assert events.update(0.1) is None
        assert not events.active

    def test_unknown_event_rejected(self, rng):
        with pytest.raises(ValueError):
            EventSystem(EventSettings(), rng).trigger("METEOR")
