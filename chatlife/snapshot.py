"""Read-only views of the world handed to renderers once per tick."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class OrganismView:
    id: int
    x: float
    y: float
    size: float
    sides: int
    hue: float
    health_fraction: float
    name: str
    glow: float
    is_predator: bool
    is_chatter: bool


@dataclass(frozen=True)
class FoodView:
    x: float
    y: float
    size: float
    pulse_phase: float


@dataclass(frozen=True)
class ParticleView:
    x: float
    y: float
    size: float
    kind: str
    fade: float


@dataclass(frozen=True)
class ZoneView:
    x: float
    y: float
    radius: float
    kind: str
    name: str


@dataclass(frozen=True)
class WeatherView:
    current: str
    pending: str | None
    transition_progress: float


@dataclass(frozen=True)
class EventView:
    kind: str
    name: str
    description: str
    remaining_fraction: float


@dataclass(frozen=True)
class WorldSnapshot:
    width: float
    height: float
    step: int
    elapsed: float
    energy: float
    energy_fraction: float
    population_cap: int
    organisms: Tuple[OrganismView, ...]
    food: Tuple[FoodView, ...]
    particles: Tuple[ParticleView, ...]
    zones: Tuple[ZoneView, ...]
    weather: WeatherView
    event: EventView | None
    time_scale: float
    death_cam_target: Tuple[float, float] | None
    births: int
    deaths: int
