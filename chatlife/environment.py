"""Weather, biomes and world events: the global modifiers applied each tick."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple
import logging
import random

from . import config
from .config import BiomeSettings, EventSettings, WeatherSettings
from .mathutil import distance, lerp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeatherEffects:
    food_spawn: float = 1.0
    hunger: float = 1.0
    speed: float = 1.0
    detection: float = 1.0

    @classmethod
    def of(cls, state: str) -> "WeatherEffects":
        info = config.WEATHER_TYPES[state]
        return cls(
            food_spawn=info["food_spawn"],
            hunger=info["hunger"],
            speed=info["speed"],
            detection=info["detection"],
        )

    def blend(self, other: "WeatherEffects", t: float) -> "WeatherEffects":
        return WeatherEffects(
            food_spawn=lerp(self.food_spawn, other.food_spawn, t),
            hunger=lerp(self.hunger, other.hunger, t),
            speed=lerp(self.speed, other.speed, t),
            detection=lerp(self.detection, other.detection, t),
        )


NEUTRAL_WEATHER = WeatherEffects()


@dataclass(frozen=True)
class Zone:
    x: float
    y: float
    radius: float
    kind: str

    @property
    def info(self) -> dict:
        return config.BIOME_TYPES[self.kind]

    @property
    def name(self) -> str:
        return self.info["name"]

    def contains(self, x: float, y: float) -> bool:
        return distance(x, y, self.x, self.y) < self.radius


def find_zone(zones: Sequence[Zone], x: float, y: float) -> Zone | None:
    for zone in zones:
        if zone.contains(x, y):
            return zone
    return None


@dataclass(frozen=True)
class TickContext:
    """Read-only view of the world an organism may consult during its update."""

    width: float
    height: float
    weather: WeatherEffects = NEUTRAL_WEATHER
    collision_damage_mult: float = 1.0
    zones: Tuple[Zone, ...] = ()

    def zone_at(self, x: float, y: float) -> Zone | None:
        return find_zone(self.zones, x, y)

    def hunger_mult_at(self, x: float, y: float) -> float:
        zone = self.zone_at(x, y)
        return zone.info["hunger"] if zone else 1.0

    def growth_mult_at(self, x: float, y: float) -> float:
        zone = self.zone_at(x, y)
        return zone.info["growth"] if zone else 1.0

    def is_predator_immune_at(self, x: float, y: float) -> bool:
        zone = self.zone_at(x, y)
        return bool(zone and zone.info["predator_immune"])

    def attracts_predators_at(self, x: float, y: float) -> bool:
        zone = self.zone_at(x, y)
        return bool(zone and zone.info["predator_attraction"])


class WeatherSystem:
    def __init__(self, settings: WeatherSettings, rng: random.Random) -> None:
        self.settings = settings
        self.rng = rng
        self.current = config.WEATHER_CLEAR
        self.pending: str | None = None
        self.timer = settings.change_duration
        self.transition_progress = 0.0

    @property
    def is_transitioning(self) -> bool:
        return self.pending is not None

    @property
    def name(self) -> str:
        return config.WEATHER_TYPES[self.current]["name"]

    def update(self, dt: float) -> None:
        if not self.settings.enabled:
            self.current = config.WEATHER_CLEAR
            self.pending = None
            self.transition_progress = 0.0
            return

        if self.pending is not None:
            self.transition_progress += dt / self.settings.transition_duration
            if self.transition_progress >= 1.0:
                logger.info("weather is now %s", config.WEATHER_TYPES[self.pending]["name"])
                self.current = self.pending
                self.pending = None
                self.transition_progress = 0.0
                self.timer = self.settings.change_duration
        else:
            self.timer -= dt
            if self.timer <= 0:
                self.begin_change()

    def begin_change(self, target: str | None = None) -> str:
        if target is None:
            choices = [state for state in config.WEATHER_TYPES if state != self.current]
            target = self.rng.choice(choices)
        elif target not in config.WEATHER_TYPES:
            raise ValueError(f"unknown weather state: {target}")
        self.pending = target
        self.transition_progress = 0.0
        logger.info("weather changing to %s", config.WEATHER_TYPES[target]["name"])
        return target

    def multipliers(self) -> WeatherEffects:
        if not self.settings.enabled:
            return NEUTRAL_WEATHER
        current = WeatherEffects.of(self.current)
        if self.pending is None:
            return current
        return current.blend(WeatherEffects.of(self.pending), min(1.0, self.transition_progress))


class BiomeSystem:
    def __init__(self, settings: BiomeSettings, width: float, height: float, rng: random.Random) -> None:
        self.settings = settings
        self.width = width
        self.height = height
        self.rng = rng
        self.zones: List[Zone] = []
        self.generate()

    def generate(self) -> None:
        self.zones = []
        if not self.settings.enabled:
            return
        kinds = list(config.BIOME_TYPES)
        for i in range(self.settings.count):
            self.zones.append(
                Zone(
                    x=self._axis(self.width),
                    y=self._axis(self.height),
                    radius=self.rng.uniform(self.settings.min_radius, self.settings.max_radius),
                    kind=kinds[i % len(kinds)],
                )
            )
        logger.debug("generated %d biome zones", len(self.zones))

    def regenerate(self) -> None:
        self.generate()

    def _axis(self, extent: float) -> float:
        margin = self.settings.margin
        if extent - margin <= margin:
            return extent / 2.0
        return self.rng.uniform(margin, extent - margin)

    def configure(self, settings: BiomeSettings) -> None:
        previous = self.settings
        self.settings = settings
        if (previous.enabled, previous.count) != (settings.enabled, settings.count):
            self.generate()

    def zone_at(self, x: float, y: float) -> Zone | None:
        if not self.settings.enabled:
            return None
        return find_zone(self.zones, x, y)

    def hunger_mult_at(self, x: float, y: float) -> float:
        zone = self.zone_at(x, y)
        return zone.info["hunger"] if zone else 1.0

    def growth_mult_at(self, x: float, y: float) -> float:
        zone = self.zone_at(x, y)
        return zone.info["growth"] if zone else 1.0

    def food_spawn_mult_at(self, x: float, y: float) -> float:
        zone = self.zone_at(x, y)
        return zone.info["food_spawn"] if zone else 1.0

    def is_predator_immune_at(self, x: float, y: float) -> bool:
        zone = self.zone_at(x, y)
        return bool(zone and zone.info["predator_immune"])

    def attracts_predators_at(self, x: float, y: float) -> bool:
        zone = self.zone_at(x, y)
        return bool(zone and zone.info["predator_attraction"])

    def active_zones(self) -> Tuple[Zone, ...]:
        return tuple(self.zones) if self.settings.enabled else ()


class EventSystem:
    def __init__(self, settings: EventSettings, rng: random.Random) -> None:
        self.settings = settings
        self.rng = rng
        self.current: str | None = None
        self.remaining = 0.0
        self.next_trigger = self._roll_interval()

    def _roll_interval(self) -> float:
        return self.rng.uniform(self.settings.min_interval, self.settings.max_interval)

    @property
    def active(self) -> bool:
        return self.current is not None

    @property
    def name(self) -> str:
        return config.EVENT_TYPES[self.current]["name"] if self.current else "None"

    def update(self, dt: float) -> str | None:
        """Advance the event clock; return the event that started during this call."""
        if not self.settings.enabled:
            if self.current is not None:
                self.end()
            return None

        if self.current is not None:
            self.remaining -= dt
            if self.remaining <= 0:
                self.end()
            return None

        self.next_trigger -= dt
        if self.next_trigger <= 0:
            return self.trigger()
        return None

    def trigger(self, kind: str | None = None) -> str:
        if kind is None:
            kind = self.rng.choice(list(config.EVENT_TYPES))
        elif kind not in config.EVENT_TYPES:
            raise ValueError(f"unknown event: {kind}")
        self.current = kind
        self.remaining = self.settings.duration
        logger.info("event started: %s", config.EVENT_TYPES[kind]["name"])
        return kind

    def end(self) -> None:
        if self.current is not None:
            logger.info("event ended: %s", config.EVENT_TYPES[self.current]["name"])
        self.current = None
        self.remaining = 0.0
        self.next_trigger = self._roll_interval()

    def _effect(self, key: str, default: float) -> float:
        if self.current is None:
            return default
        return config.EVENT_TYPES[self.current].get(key, default)

    def collision_damage_mult(self) -> float:
        return self._effect("collision_damage", 1.0)

    def mutation_mult(self) -> float:
        return self._effect("mutation", 1.0)

    def food_spawn_mult(self) -> float:
        return self._effect("food_spawn", 1.0)

    def blocks_food_spawn(self) -> bool:
        return bool(self._effect("blocks_food", False))

    def remaining_fraction(self) -> float:
        if self.current is None:
            return 0.0
        return max(0.0, min(1.0, self.remaining / self.settings.duration))
