"""The population: owns every organism and food item and runs the tick pipeline."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Mapping, Tuple
import logging
import math
import random

import numpy as np

from . import config
from .config import Config, ConfigurationError, validate_config
from .entities import Food, Organism, Particle, create_organism, create_predator, make_particle
from .environment import BiomeSystem, EventSystem, TickContext, WeatherSystem
from .mathutil import clamp, distance, lerp
from .snapshot import (
    EventView,
    FoodView,
    OrganismView,
    ParticleView,
    WeatherView,
    WorldSnapshot,
    ZoneView,
)

logger = logging.getLogger(__name__)

# Actions external producers (chat, votes, UI) may queue for the next tick.
EXTERNAL_ACTIONS = frozenset(
    {
        "add_energy",
        "spawn_named_organism",
        "spawn_food",
        "spawn_food_batch",
        "area_damage",
        "heal_all",
        "spawn_organisms",
    }
)


@dataclass
class StepStats:
    step: int
    elapsed: float
    population: int
    prey: int
    predators: int
    food: int
    particles: int
    births: int
    deaths: int
    energy: float
    population_cap: int
    weather: str
    event: str
    avg_health: float
    avg_size: float
    max_generation: int
    mutated: int


@dataclass
class PendingEffect:
    action: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


class Population:
    def __init__(
        self,
        cfg: Config | None = None,
        rng: random.Random | None = None,
        on_death_cam: Callable[[float, float], None] | None = None,
        on_notification: Callable[[str, str], None] | None = None,
        populate: bool = True,
    ) -> None:
        self.config = cfg if cfg is not None else Config()
        validate_config(self.config)
        self.rng = rng if rng is not None else random.Random()
        self.on_death_cam = on_death_cam
        self.on_notification = on_notification

        self.organisms: List[Organism] = []
        self.food: List[Food] = []
        self.particles: List[Particle] = []
        energy = self.config.energy
        self.energy = clamp(energy.initial, energy.min_energy, energy.max_energy)

        self.food_spawn_timer = 0.0
        self.predator_spawn_timer = 0.0
        self.birth_count = 0
        self.death_count = 0
        self.step_count = 0
        self.elapsed = 0.0

        self.time_scale = 1.0
        self.death_cam_timer = 0.0
        self.death_cam_target: Tuple[float, float] | None = None

        self.weather = WeatherSystem(self.config.weather, self.rng)
        self.biomes = BiomeSystem(self.config.biomes, self.width, self.height, self.rng)
        self.events = EventSystem(self.config.events, self.rng)

        self._pending: Deque[PendingEffect] = deque()
        self._next_id = 1

        if populate:
            self.spawn_initial()

    @property
    def width(self) -> float:
        return self.config.world.width

    @property
    def height(self) -> float:
        return self.config.world.height

    @property
    def death_cam_active(self) -> bool:
        return self.death_cam_timer > 0.0

    # ------------------------------------------------------------------
    # Energy model

    def energy_fraction(self) -> float:
        return self.energy / self.config.energy.max_energy

    def population_cap(self) -> int:
        energy = self.config.energy
        return int(math.floor(lerp(energy.population_cap_min, energy.population_cap_max, self.energy_fraction())))

    def add_energy(self, amount: float) -> float:
        amount = float(amount)
        if math.isnan(amount):
            raise ValueError("energy amount must be a number")
        energy = self.config.energy
        self.energy = clamp(self.energy + amount, energy.min_energy, energy.max_energy)
        return self.energy

    # ------------------------------------------------------------------
    # Spawning

    def _admit(self, organism: Organism) -> Organism:
        organism.id = self._next_id
        self._next_id += 1
        self.organisms.append(organism)
        return organism

    def random_position(self, margin: float) -> Tuple[float, float]:
        def axis(extent: float) -> float:
            if extent - margin <= margin:
                return extent / 2.0
            return self.rng.uniform(margin, extent - margin)

        return axis(self.width), axis(self.height)

    def _burst(self, x: float, y: float, kind: str, count: int) -> None:
        room = self.config.effects.max_particles - len(self.particles)
        for _ in range(max(0, min(count, room))):
            self.particles.append(make_particle(self.rng, x, y, kind))

    def spawn_initial(self) -> None:
        for i in range(self.config.world.initial_organisms):
            name = config.INITIAL_NAMES[i % len(config.INITIAL_NAMES)]
            self.spawn_organism(name)
        for _ in range(self.config.food.initial_count):
            self.spawn_food()

    def spawn_organism(self, lineage: str, x: float | None = None, y: float | None = None) -> Organism:
        if x is None or y is None:
            x, y = self.random_position(self.config.world.spawn_margin)
        organism = create_organism(
            x, y, lineage, self.config.entity, self.rng, mutation_mult=self.events.mutation_mult()
        )
        return self._admit(organism)

    def spawn_predator(self, x: float | None = None, y: float | None = None) -> Organism:
        if x is None or y is None:
            x, y = self.random_position(self.config.world.spawn_margin)
        logger.debug("predator spawned at (%.0f, %.0f)", x, y)
        return self._admit(create_predator(x, y, self.config.predator, self.rng))

    def spawn_named_organism(self, name: str) -> Organism | None:
        """Spawn a chatter's organism unless the population is already at its cap."""
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"chatter name must be a non-empty string, got {name!r}")
        if self.living_count() >= self.population_cap():
            return None
        organism = self.spawn_organism(name)
        organism.is_chatter = True
        organism.hue = (ord(name[0]) * 137.5) % 360
        self._burst(organism.x, organism.y, "spawn", 12)
        return organism

    def _batch_size(self, count: Any, what: str) -> int:
        """Validate a requested batch size against ``voting.max_batch``."""
        try:
            value = float(count)
        except OverflowError as exc:
            raise ValueError(f"{what} count is out of range: {count!r}") from exc
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"{what} count must be a non-negative number, got {count!r}")
        if value > self.config.voting.max_batch:
            raise ValueError(f"{what} count {int(value)} exceeds the limit of {self.config.voting.max_batch}")
        return int(value)

    def spawn_organisms(self, count: int) -> List[Organism]:
        return self._add_organisms(self._batch_size(count, "organism"))

    def _add_organisms(self, count: int) -> List[Organism]:
        spawned = []
        for _ in range(count):
            organism = self.spawn_organism(self.rng.choice(config.VOTE_SPAWN_NAMES))
            self._burst(organism.x, organism.y, "spawn", 15)
            spawned.append(organism)
        return spawned

    def spawn_food(self, x: float | None = None, y: float | None = None) -> Food:
        if x is None or y is None:
            x, y = self.random_position(self.config.food.margin)
        if not (math.isfinite(float(x)) and math.isfinite(float(y))):
            raise ValueError(f"food position must be finite, got ({x}, {y})")
        item = Food(
            x=clamp(float(x), 0.0, self.width),
            y=clamp(float(y), 0.0, self.height),
            size=self.config.food.size,
            pulse_phase=self.rng.random() * math.pi * 2.0,
        )
        self.food.append(item)
        return item

    def spawn_food_batch(self, count: int) -> int:
        return self._drop_food(self._batch_size(count, "food"))

    def _drop_food(self, count: int) -> int:
        for _ in range(count):
            item = self.spawn_food()
            self._burst(item.x, item.y, "food", 3)
        return count

    def _scatter_food(self, count: int) -> int:
        """Place ``count`` food at random points, thinned or doubled by the local biome."""
        placed = 0
        for _ in range(count):
            x, y = self.random_position(self.config.food.margin)
            mult = self.biomes.food_spawn_mult_at(x, y)
            if mult < 1.0 and self.rng.random() >= mult:
                continue
            self.spawn_food(x, y)
            placed += 1
            if mult > 1.0 and self.rng.random() < mult - 1.0:
                self.spawn_food(x + self.rng.uniform(-30, 30), y + self.rng.uniform(-30, 30))
                placed += 1
        return placed

    def clear_food(self) -> None:
        self.food = []

    # ------------------------------------------------------------------
    # One-shot world actions

    def area_damage(self, center: Tuple[float, float], radius: float, max_damage: float) -> int:
        cx, cy = (float(v) for v in center)
        radius = float(radius)
        max_damage = float(max_damage)
        if not (math.isfinite(cx) and math.isfinite(cy)):
            raise ValueError(f"damage center must be finite, got ({cx}, {cy})")
        if not (radius > 0 and math.isfinite(radius)):
            raise ValueError(f"damage radius must be positive, got {radius}")
        if not (max_damage >= 0 and math.isfinite(max_damage)):
            raise ValueError(f"damage must be a non-negative number, got {max_damage}")
        hit = 0
        for organism in self.organisms:
            if not organism.alive:
                continue
            dist = distance(organism.x, organism.y, cx, cy)
            if dist < radius:
                organism.take_damage(max_damage * (1.0 - dist / radius))
                hit += 1
        self._burst(cx, cy, "explosion", 50)
        return hit

    def heal_all(self) -> int:
        healed = 0
        for organism in self.organisms:
            if not organism.alive:
                continue
            organism.health = organism.max_health
            self._burst(organism.x, organism.y, "heal", 8)
            healed += 1
        return healed

    def reset_reproduction_cooldowns(self) -> None:
        cooldown = self.config.entity.reproduction_cooldown
        for organism in self.organisms:
            if organism.alive and not organism.is_predator:
                organism.time_since_reproduction = max(organism.time_since_reproduction, cooldown)

    def trigger_event(self, kind: str | None = None) -> str:
        started = self.events.trigger(kind)
        self._start_event(started)
        return started

    def _start_event(self, kind: str) -> None:
        if kind == config.EVENT_EVOLUTION_BOOM:
            self.reset_reproduction_cooldowns()
        elif kind == config.EVENT_FAMINE:
            self.clear_food()
        elif kind == config.EVENT_ABUNDANCE:
            self._drop_food(self.config.events.abundance_food)
        info = config.EVENT_TYPES[kind]
        self.notify(info["name"], info["description"])

    # ------------------------------------------------------------------
    # External producers

    def enqueue(self, action: str, *args: Any, **kwargs: Any) -> None:
        """Queue an external action; it runs at the start of the next step."""
        if action not in EXTERNAL_ACTIONS:
            raise ValueError(f"unknown external action: {action}")
        self._pending.append(PendingEffect(action, args, kwargs))

    @property
    def pending_effects(self) -> int:
        return len(self._pending)

    def _apply_pending(self) -> None:
        while self._pending:
            effect = self._pending.popleft()
            try:
                getattr(self, effect.action)(*effect.args, **effect.kwargs)
            except (TypeError, ValueError, ArithmeticError) as exc:
                logger.warning("dropped %s%r: %s", effect.action, effect.args, exc)
                self.notify("Ignored action", f"{effect.action}: {exc}")

    def notify(self, title: str, detail: str) -> None:
        if self.on_notification is not None:
            self.on_notification(title, detail)

    # ------------------------------------------------------------------
    # Configuration

    def apply_config(self, cfg: Config) -> bool:
        """Install a new configuration; keep the current one if it is invalid."""
        try:
            validate_config(cfg)
        except ConfigurationError as exc:
            logger.warning("rejected configuration: %s", exc)
            self.notify("Settings rejected", "; ".join(exc.problems))
            return False

        previous = self.config
        self.config = cfg
        self.weather.settings = cfg.weather
        self.events.settings = cfg.events
        if (previous.world.width, previous.world.height) != (cfg.world.width, cfg.world.height):
            self.biomes.width = cfg.world.width
            self.biomes.height = cfg.world.height
            self.biomes.settings = cfg.biomes
            self.biomes.generate()
        else:
            self.biomes.configure(cfg.biomes)
        self.energy = clamp(self.energy, cfg.energy.min_energy, cfg.energy.max_energy)
        logger.info("configuration updated")
        return True

    def update_settings(self, changes: Mapping[str, Mapping[str, Any]]) -> bool:
        try:
            candidate = self.config.updated(changes)
        except ConfigurationError as exc:
            logger.warning("rejected settings change: %s", exc)
            self.notify("Settings rejected", "; ".join(exc.problems))
            return False
        return self.apply_config(candidate)

    # ------------------------------------------------------------------
    # Tick pipeline

    def context(self) -> TickContext:
        return TickContext(
            width=self.width,
            height=self.height,
            weather=self.weather.multipliers(),
            collision_damage_mult=self.events.collision_damage_mult(),
            zones=self.biomes.active_zones(),
        )

    def step(self, dt: float) -> StepStats:
        if not math.isfinite(dt):
            dt = 0.0
        real_dt = clamp(dt, 0.0, self.config.effects.max_dt)
        self._update_death_cam(real_dt)
        scaled = real_dt * self.time_scale
        self.step_count += 1
        self.elapsed += scaled

        self._apply_pending()

        self.weather.update(scaled)
        started = self.events.update(scaled)
        if started is not None:
            self._start_event(started)
        ctx = self.context()

        energy = self.config.energy
        self.energy = clamp(self.energy - energy.decay_rate * scaled, energy.min_energy, energy.max_energy)

        self._run_food_timer(scaled, ctx)
        self._run_predator_timer(scaled)

        for particle in self.particles:
            particle.update(scaled)
        self.particles = [p for p in self.particles if p.alive]
        for item in self.food:
            item.update(scaled)
        self.food = [f for f in self.food if f.alive]

        for organism in self.organisms:
            if organism.alive:
                organism.update(scaled, ctx, self.config, self.food, self.organisms, self.rng)

        births = self._reproduction_pass()
        deaths = self._process_deaths()
        self.food = [f for f in self.food if f.alive]
        self._replenish()
        return self._collect_stats(births, deaths)

    def _update_death_cam(self, real_dt: float) -> None:
        if self.death_cam_timer <= 0.0:
            return
        self.death_cam_timer -= real_dt
        if self.death_cam_timer <= 0.0:
            self.death_cam_timer = 0.0
            self.death_cam_target = None
            self.time_scale = 1.0

    def _trigger_death_cam(self, organism: Organism) -> None:
        effects = self.config.effects
        if effects.death_cam_duration <= 0:
            return
        self.death_cam_timer = effects.death_cam_duration
        self.death_cam_target = (organism.x, organism.y)
        self.time_scale = effects.death_cam_slowmo
        if self.on_death_cam is not None:
            self.on_death_cam(organism.x, organism.y)

    def _run_food_timer(self, dt: float, ctx: TickContext) -> int:
        food = self.config.food
        fraction = self.energy_fraction()
        self.food_spawn_timer += dt
        if self.food_spawn_timer < food.spawn_interval / (0.5 + fraction):
            return 0
        self.food_spawn_timer = 0.0
        if self.events.blocks_food_spawn():
            return 0
        amount = math.ceil(food.spawn_amount * fraction * ctx.weather.food_spawn * self.events.food_spawn_mult())
        return self._scatter_food(amount)

    def _run_predator_timer(self, dt: float) -> None:
        predator = self.config.predator
        self.predator_spawn_timer += dt
        if self.predator_spawn_timer < predator.spawn_interval:
            return
        self.predator_spawn_timer = 0.0
        if self.rng.random() < predator.spawn_roll_chance and self.living_count() > predator.min_population:
            self.spawn_predator()

    def _reproduction_pass(self) -> int:
        cap = self.population_cap()
        living = self.living_count()
        mutation_mult = self.events.mutation_mult()
        newborns: List[Organism] = []
        for organism in self.organisms:
            if living + len(newborns) >= cap:
                break
            if organism.can_reproduce(self.config.entity):
                child = organism.reproduce(self.config.entity, self.rng, mutation_mult)
                newborns.append(child)
                self._burst(child.x, child.y, "spawn", 8)
        for child in newborns:
            self._admit(child)
        self.birth_count += len(newborns)
        return len(newborns)

    def death_drop_count(self, organism: Organism) -> int:
        food = self.config.food
        growth = max(0.0, organism.size - organism.birth_size)
        return food.drop_on_death + int(growth / food.drop_growth_step) + max(0, organism.sides - 3) // 3

    def _process_deaths(self) -> int:
        dead = [o for o in self.organisms if not o.alive]
        food = self.config.food
        for organism in dead:
            if not self.death_cam_active and self.rng.random() < self.config.effects.death_cam_chance:
                self._trigger_death_cam(organism)
            self._burst(organism.x, organism.y, "death", 20)
            drops = self.death_drop_count(organism)
            for i in range(drops):
                angle = math.pi * 2.0 * i / drops
                self.spawn_food(
                    organism.x + math.cos(angle) * food.drop_ring_radius,
                    organism.y + math.sin(angle) * food.drop_ring_radius,
                )
            self.death_count += 1
            logger.debug("%s died at age %.1fs", organism.name, organism.age)
        if dead:
            self.organisms = [o for o in self.organisms if o.alive]
        return len(dead)

    def _replenish(self) -> None:
        while len(self.organisms) < self.config.energy.population_floor:
            if self.rng.random() < self.config.predator.spawn_chance:
                self.spawn_predator()
            else:
                self.spawn_organism(self.rng.choice(config.RESPAWN_NAMES))

    # ------------------------------------------------------------------
    # Queries

    def living_count(self) -> int:
        return sum(1 for o in self.organisms if o.alive)

    def predator_count(self) -> int:
        return sum(1 for o in self.organisms if o.alive and o.is_predator)

    def prey_count(self) -> int:
        return sum(1 for o in self.organisms if o.alive and not o.is_predator)

    def mutation_count(self) -> int:
        return sum(1 for o in self.organisms if o.alive and not o.is_predator and o.mutation)

    def _collect_stats(self, births: int, deaths: int) -> StepStats:
        prey = [o for o in self.organisms if o.alive and not o.is_predator]
        health = np.array([o.health_fraction for o in prey], dtype=float)
        sizes = np.array([o.size for o in prey], dtype=float)
        return StepStats(
            step=self.step_count,
            elapsed=self.elapsed,
            population=self.living_count(),
            prey=len(prey),
            predators=self.predator_count(),
            food=len(self.food),
            particles=len(self.particles),
            births=births,
            deaths=deaths,
            energy=self.energy,
            population_cap=self.population_cap(),
            weather=self.weather.name,
            event=self.events.name,
            avg_health=float(health.mean()) if health.size else 0.0,
            avg_size=float(sizes.mean()) if sizes.size else 0.0,
            max_generation=max((o.generation for o in prey), default=0),
            mutated=self.mutation_count(),
        )

    def snapshot(self) -> WorldSnapshot:
        event = None
        if self.events.current is not None:
            info = config.EVENT_TYPES[self.events.current]
            event = EventView(
                kind=self.events.current,
                name=info["name"],
                description=info["description"],
                remaining_fraction=self.events.remaining_fraction(),
            )
        return WorldSnapshot(
            width=self.width,
            height=self.height,
            step=self.step_count,
            elapsed=self.elapsed,
            energy=self.energy,
            energy_fraction=self.energy_fraction(),
            population_cap=self.population_cap(),
            organisms=tuple(
                OrganismView(
                    id=o.id,
                    x=o.x,
                    y=o.y,
                    size=o.size,
                    sides=o.sides,
                    hue=o.hue,
                    health_fraction=o.health_fraction,
                    name=o.name,
                    glow=o.glow_intensity + (15.0 if o.is_chatter else 0.0),
                    is_predator=o.is_predator,
                    is_chatter=o.is_chatter,
                )
                for o in self.organisms
                if o.alive
            ),
            food=tuple(FoodView(f.x, f.y, f.size, f.pulse_phase) for f in self.food if f.alive),
            particles=tuple(
                ParticleView(p.x, p.y, p.size, p.kind, 1.0 - p.age / p.max_age) for p in self.particles
            ),
            zones=tuple(ZoneView(z.x, z.y, z.radius, z.kind, z.name) for z in self.biomes.active_zones()),
            weather=WeatherView(
                current=self.weather.current,
                pending=self.weather.pending,
                transition_progress=self.weather.transition_progress,
            ),
            event=event,
            time_scale=self.time_scale,
            death_cam_target=self.death_cam_target,
            births=self.birth_count,
            deaths=self.death_count,
        )
