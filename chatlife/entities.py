"""Organisms (prey and predator roles), food and burst particles."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Mapping, Sequence, Tuple
import math
import random

from . import config
from .config import Config, EntitySettings, PredatorSettings
from .environment import TickContext
from .mathutil import clamp, distance
from .mutations import MUTATIONS_BY_NAME, add_mutation, build_name, compound, roll_mutation, shape_for_size


class Role(Enum):
    PREY = "prey"
    PREDATOR = "predator"


PREDATOR_NAME = "PREDATOR"


@dataclass
class Food:
    x: float
    y: float
    size: float = config.FOOD_SIZE
    alive: bool = True
    age: float = 0.0
    pulse_phase: float = 0.0

    def update(self, dt: float) -> None:
        self.age += dt
        self.pulse_phase += dt * 2.0

    def consume(self) -> None:
        self.alive = False


# kind -> (vx range, vy range, size range, max age range)
PARTICLE_KINDS: Dict[str, Tuple[Tuple[float, float], ...]] = {
    "explosion": ((-200, 200), (-200, 200), (3, 8), (0.3, 0.6)),
    "heal": ((-50, 50), (-100, -50), (4, 8), (0.8, 1.2)),
    "spawn": ((-100, 100), (-100, 100), (3, 6), (0.5, 1.0)),
    "food": ((-80, 80), (-80, 80), (2, 5), (0.4, 0.8)),
    "death": ((-150, 150), (-150, 150), (4, 10), (0.8, 1.5)),
}


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    max_age: float
    kind: str
    age: float = 0.0
    alive: bool = True

    def update(self, dt: float) -> None:
        self.x += self.vx * dt
        self.y += self.vy * dt
        self.vy += 200.0 * dt
        self.vx *= 0.98
        self.age += dt
        if self.age >= self.max_age:
            self.alive = False


def make_particle(rng: random.Random, x: float, y: float, kind: str) -> Particle:
    vx_range, vy_range, size_range, age_range = PARTICLE_KINDS[kind]
    return Particle(
        x=x,
        y=y,
        vx=rng.uniform(*vx_range),
        vy=rng.uniform(*vy_range),
        size=rng.uniform(*size_range),
        max_age=rng.uniform(*age_range),
        kind=kind,
    )


@dataclass
class Organism:
    x: float
    y: float
    lineage: str
    role: Role = Role.PREY
    id: int = 0
    generation: int = 0
    vx: float = 0.0
    vy: float = 0.0
    speed: float = config.BASE_SPEED
    size: float = config.BASE_SIZE
    birth_size: float = 0.0
    health: float = config.STARTING_HEALTH
    max_health: float = config.MAX_HEALTH
    age: float = 0.0
    alive: bool = True
    time_since_reproduction: float = 0.0
    mutation_stack: Dict[str, int] = field(default_factory=dict)
    mutation: str | None = None
    hue: float = 0.0
    decay_multiplier: float = 1.0
    glow_intensity: float = 0.0
    is_chatter: bool = False
    food_eaten: int = 0
    attack_cooldown: float = 0.0
    target_id: int | None = None
    name: str = ""
    sides: int = field(init=False)
    shape: str = field(init=False)

    def __post_init__(self) -> None:
        if not self.birth_size:
            self.birth_size = self.size
        if not self.name:
            if self.role is Role.PREDATOR:
                self.name = PREDATOR_NAME
            else:
                self.name = build_name(self.lineage, self.mutation_stack, self.generation)
        self.update_shape()

    @property
    def is_predator(self) -> bool:
        return self.role is Role.PREDATOR

    @property
    def health_fraction(self) -> float:
        return self.health / self.max_health if self.max_health > 0 else 0.0

    def update_shape(self) -> None:
        self.sides, self.shape = shape_for_size(self.size)

    def take_damage(self, amount: float) -> None:
        if not self.alive:
            return
        self.health = max(0.0, self.health - amount)
        if self.health <= 0.0:
            self.alive = False

    def heal(self, amount: float) -> None:
        if self.alive:
            self.health = min(self.health + amount, self.max_health)

    def eat(self, food: Food, gain: float) -> None:
        food.consume()
        self.heal(gain)
        self.food_eaten += 1

    def update(
        self,
        dt: float,
        ctx: TickContext,
        cfg: Config,
        food: Sequence[Food],
        organisms: Sequence["Organism"],
        rng: random.Random,
    ) -> None:
        if not self.alive:
            return
        _UPDATERS[self.role](self, dt, ctx, cfg, food, organisms, rng)

    def can_reproduce(self, settings: EntitySettings) -> bool:
        if self.role is Role.PREDATOR or not self.alive:
            return False
        return (
            self.health >= settings.reproduction_threshold
            and self.time_since_reproduction >= settings.reproduction_cooldown
            and self.size > settings.reproduction_min_size
        )

    def reproduce(self, settings: EntitySettings, rng: random.Random, mutation_mult: float = 1.0) -> "Organism":
        """Pay the reproduction cost and return a child placed beside this organism.

        Callers gate this with can_reproduce(); the call itself never fails.
        """
        self.health = max(0.0, self.health - settings.reproduction_cost)
        self.time_since_reproduction = 0.0

        angle = rng.random() * math.pi * 2.0
        gap = self.size + settings.reproduction_gap
        return create_organism(
            x=self.x + math.cos(angle) * gap,
            y=self.y + math.sin(angle) * gap,
            lineage=self.lineage,
            settings=settings,
            rng=rng,
            parent_size=self.size,
            parent_mutation=self.mutation,
            parent_generation=self.generation + 1,
            parent_stack=self.mutation_stack,
            mutation_mult=mutation_mult,
        )


def create_organism(
    x: float,
    y: float,
    lineage: str,
    settings: EntitySettings,
    rng: random.Random,
    parent_size: float | None = None,
    parent_mutation: str | None = None,
    parent_generation: int = 0,
    parent_stack: Mapping[str, int] | None = None,
    mutation_mult: float = 1.0,
) -> Organism:
    stack: Dict[str, int] = dict(parent_stack) if parent_stack else {}
    primary = parent_mutation
    rolled = roll_mutation(rng, settings.mutation_chance * mutation_mult)
    if rolled is not None:
        stack = add_mutation(stack, rolled)
        primary = rolled.name

    traits = compound(stack)
    speed = (settings.base_speed + rng.uniform(-settings.speed_variance, settings.speed_variance)) * traits.speed
    if parent_size is not None:
        basis = parent_size * settings.child_size_factor
    else:
        basis = settings.base_size * settings.size_scaler
    size = clamp(basis * traits.size, settings.min_size, settings.max_size)
    health_scale = settings.health_scaler * traits.health

    if primary is not None and primary in MUTATIONS_BY_NAME:
        hue = MUTATIONS_BY_NAME[primary].hue
    else:
        hue = rng.random() * 360.0

    return Organism(
        x=x,
        y=y,
        lineage=lineage,
        generation=parent_generation,
        vx=rng.uniform(-1, 1),
        vy=rng.uniform(-1, 1),
        speed=speed,
        size=size,
        health=settings.starting_health * health_scale,
        max_health=settings.max_health * health_scale,
        mutation_stack=stack,
        mutation=primary,
        hue=hue,
        decay_multiplier=traits.decay,
        glow_intensity=traits.glow,
    )


def create_predator(x: float, y: float, settings: PredatorSettings, rng: random.Random) -> Organism:
    return Organism(
        x=x,
        y=y,
        lineage=PREDATOR_NAME,
        role=Role.PREDATOR,
        vx=rng.uniform(-1, 1),
        vy=rng.uniform(-1, 1),
        speed=settings.speed,
        size=settings.base_size,
        health=settings.max_health,
        max_health=settings.max_health,
        hue=0.0,
    )


def _wander(org: Organism, strength: float, dt: float, rng: random.Random) -> None:
    org.vx += rng.uniform(-strength, strength) * dt
    org.vy += rng.uniform(-strength, strength) * dt


def _normalize(org: Organism) -> None:
    mag = math.hypot(org.vx, org.vy)
    if mag > 0:
        org.vx /= mag
        org.vy /= mag


def _integrate(org: Organism, dt: float, ctx: TickContext) -> None:
    step = org.speed * ctx.weather.speed * dt
    org.x += org.vx * step
    org.y += org.vy * step

    if org.x < org.size:
        org.x = org.size
        org.vx = abs(org.vx)
    if org.x > ctx.width - org.size:
        org.x = ctx.width - org.size
        org.vx = -abs(org.vx)
    if org.y < org.size:
        org.y = org.size
        org.vy = abs(org.vy)
    if org.y > ctx.height - org.size:
        org.y = ctx.height - org.size
        org.vy = -abs(org.vy)


def _forage(org: Organism, dt: float, ctx: TickContext, settings: EntitySettings, food: Sequence[Food]) -> None:
    detection = settings.food_detection_range * ctx.weather.detection
    nearest: Food | None = None
    nearest_dist = math.inf
    for item in food:
        if not item.alive:
            continue
        dist = distance(org.x, org.y, item.x, item.y)
        if dist < nearest_dist and dist < detection:
            nearest = item
            nearest_dist = dist

    if nearest is None:
        return
    dx = nearest.x - org.x
    dy = nearest.y - org.y
    if nearest_dist > 0:
        seek = settings.food_attraction_strength * dt
        org.vx += dx / nearest_dist * seek
        org.vy += dy / nearest_dist * seek
    if nearest_dist < settings.eat_range:
        org.eat(nearest, settings.food_energy_gain)


def _collide(
    org: Organism,
    dt: float,
    ctx: TickContext,
    settings: EntitySettings,
    organisms: Sequence[Organism],
    rng: random.Random,
) -> None:
    damage = settings.collision_damage * ctx.collision_damage_mult * dt
    for other in organisms:
        if other is org or not other.alive:
            continue
        dist = distance(org.x, org.y, other.x, other.y)
        min_dist = org.size + other.size
        if dist >= min_dist:
            continue

        if dist > 0:
            ax = (org.x - other.x) / dist
            ay = (org.y - other.y) / dist
        else:
            angle = rng.random() * math.pi * 2.0
            ax, ay = math.cos(angle), math.sin(angle)
        push = (min_dist - dist) * 0.5
        org.x += ax * push
        org.y += ay * push
        other.x -= ax * push
        other.y -= ay * push
        org.vx, org.vy = -org.vx, -org.vy
        other.vx, other.vy = -other.vx, -other.vy

        org.take_damage(damage)
        other.take_damage(damage)
        if not org.alive:
            return


def _update_prey(
    org: Organism,
    dt: float,
    ctx: TickContext,
    cfg: Config,
    food: Sequence[Food],
    organisms: Sequence[Organism],
    rng: random.Random,
) -> None:
    settings = cfg.entity
    org.time_since_reproduction += dt

    hunger = ctx.hunger_mult_at(org.x, org.y) * ctx.weather.hunger
    org.health -= settings.health_decay_rate * org.decay_multiplier * hunger * dt
    if org.health <= 0:
        org.health = 0.0
        org.alive = False
        return

    if org.health > settings.growth_health_fraction * org.max_health and org.size < settings.max_size:
        grown = org.size + settings.growth_rate * ctx.growth_mult_at(org.x, org.y) * dt
        org.size = clamp(grown, settings.min_size, settings.max_size)
        org.update_shape()

    _forage(org, dt, ctx, settings, food)
    _collide(org, dt, ctx, settings, organisms, rng)
    if not org.alive:
        return

    _wander(org, settings.wander_strength, dt, rng)
    _normalize(org)
    _integrate(org, dt, ctx)
    org.age += dt


def _find_prey(
    org: Organism, ctx: TickContext, settings: PredatorSettings, organisms: Sequence[Organism]
) -> Tuple[Organism | None, float]:
    reach = settings.detection_range * ctx.weather.detection
    nearest: Organism | None = None
    nearest_dist = math.inf
    for other in organisms:
        if other is org or not other.alive or other.is_predator:
            continue
        if ctx.is_predator_immune_at(other.x, other.y):
            continue
        limit = reach * settings.danger_detection_mult if ctx.attracts_predators_at(other.x, other.y) else reach
        dist = distance(org.x, org.y, other.x, other.y)
        if dist < nearest_dist and dist < limit:
            nearest = other
            nearest_dist = dist
    return nearest, nearest_dist


def _update_predator(
    org: Organism,
    dt: float,
    ctx: TickContext,
    cfg: Config,
    food: Sequence[Food],
    organisms: Sequence[Organism],
    rng: random.Random,
) -> None:
    settings = cfg.predator
    org.health -= cfg.entity.health_decay_rate * settings.decay_factor * dt
    org.attack_cooldown = max(0.0, org.attack_cooldown - dt)
    if org.health <= 0:
        org.health = 0.0
        org.alive = False
        return

    target, dist = _find_prey(org, ctx, settings, organisms)
    if target is not None:
        org.target_id = target.id
        if dist > 0:
            org.vx = (target.x - org.x) / dist
            org.vy = (target.y - org.y) / dist
        if dist < settings.attack_range and org.attack_cooldown <= 0:
            target.take_damage(settings.attack_damage * settings.attack_scaler)
            org.attack_cooldown = settings.attack_cooldown
            org.heal(settings.attack_heal)
    else:
        org.target_id = None
        _wander(org, cfg.entity.wander_strength, dt, rng)

    _normalize(org)
    _integrate(org, dt, ctx)
    org.age += dt


_UPDATERS: Dict[Role, Callable[..., None]] = {
    Role.PREY: _update_prey,
    Role.PREDATOR: _update_predator,
}
