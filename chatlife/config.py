"""Default constants, catalog tables and the live-editable simulation config."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Tuple
import math

# World
WORLD_WIDTH = 1200.0
WORLD_HEIGHT = 800.0
SPAWN_MARGIN = 100.0
INITIAL_NAMES = ("Alice", "Bob", "Charlie", "Diana", "Eve", "Frank")
RESPAWN_NAMES = ("Newcomer", "Respawn", "Phoenix", "Revival", "Reborn")
VOTE_SPAWN_NAMES = ("Voter", "Spawned", "Summoned", "Called")

# Entities
BASE_SIZE = 15.0
MIN_SIZE = 5.0
MAX_SIZE = 60.0
BASE_SPEED = 50.0
SPEED_VARIANCE = 30.0
WANDER_STRENGTH = 2.0
MAX_HEALTH = 100.0
STARTING_HEALTH = 100.0
HEALTH_DECAY_RATE = 1.5
FOOD_DETECTION_RANGE = 120.0
FOOD_ATTRACTION_STRENGTH = 3.0
EAT_RANGE = 15.0
FOOD_ENERGY_GAIN = 25.0
GROWTH_RATE = 0.3
GROWTH_HEALTH_FRACTION = 0.7
COLLISION_DAMAGE = 5.0
REPRODUCTION_THRESHOLD = 80.0
REPRODUCTION_COST = 40.0
REPRODUCTION_COOLDOWN = 10.0
REPRODUCTION_MIN_SIZE = 20.0
REPRODUCTION_GAP = 20.0
CHILD_SIZE_FACTOR = 0.6
MUTATION_CHANCE = 0.05

# Predators
PREDATOR_SPAWN_CHANCE = 0.02
PREDATOR_SPAWN_ROLL_CHANCE = 0.3
PREDATOR_SPAWN_INTERVAL = 30.0
PREDATOR_MIN_POPULATION = 5
PREDATOR_SIZE = 25.0
PREDATOR_SPEED = 80.0
PREDATOR_MAX_HEALTH = 150.0
PREDATOR_DETECTION_RANGE = 200.0
PREDATOR_ATTACK_DAMAGE = 30.0
PREDATOR_ATTACK_RANGE = 20.0
PREDATOR_ATTACK_COOLDOWN = 1.0
PREDATOR_ATTACK_HEAL = 10.0
PREDATOR_DECAY_FACTOR = 0.5
PREDATOR_DANGER_DETECTION_MULT = 1.5

# Food
FOOD_SIZE = 6.0
FOOD_SPAWN_INTERVAL = 2.0
FOOD_SPAWN_AMOUNT = 3
FOOD_DROP_ON_DEATH = 2
FOOD_DROP_RING_RADIUS = 20.0
FOOD_DROP_GROWTH_STEP = 10.0
FOOD_INITIAL_COUNT = 15
FOOD_MARGIN = 50.0

# Energy / audience
INITIAL_ENERGY = 50.0
ENERGY_PER_MESSAGE = 2.0
ENERGY_DECAY_RATE = 5.0
MIN_ENERGY = 20.0
MAX_ENERGY = 100.0
POPULATION_CAP_MIN = 10
POPULATION_CAP_MAX = 30
POPULATION_FLOOR = 5
CHATTER_SPAWN_RATES: Tuple[Tuple[float, float], ...] = (
    (10, 1.0),
    (50, 0.8),
    (100, 0.5),
    (500, 0.3),
    (math.inf, 0.15),
)

# Environment
WEATHER_CHANGE_DURATION = 60.0
WEATHER_TRANSITION_DURATION = 5.0
BIOME_COUNT = 3
BIOME_MARGIN = 200.0
BIOME_MIN_RADIUS = 120.0
BIOME_MAX_RADIUS = 180.0
EVENT_MIN_INTERVAL = 90.0
EVENT_MAX_INTERVAL = 240.0
EVENT_DURATION = 30.0
EVENT_ABUNDANCE_FOOD = 50

# Votes
VOTE_INTERVAL = 180.0
VOTE_DURATION = 30.0
VOTE_COOLDOWN = 30.0
VOTE_FOOD_BATCH = 20
VOTE_BOMB_RADIUS = 150.0
VOTE_BOMB_DAMAGE = 50.0
VOTE_SPAWN_COUNT = 3
VOTE_MAX_BATCH = 200

# Effects
DEATH_CAM_DURATION = 1.5
DEATH_CAM_SLOWMO = 0.3
DEATH_CAM_CHANCE = 0.3
MAX_DT = 0.1
MAX_PARTICLES = 600


@dataclass(frozen=True)
class Mutation:
    key: str
    name: str
    hue: float
    speed_mult: float = 1.0
    size_mult: float = 1.0
    health_mult: float = 1.0
    decay_mult: float = 1.0
    glow_intensity: float = 0.0


MUTATIONS: Tuple[Mutation, ...] = (
    Mutation("SPEED", "Swift", 180, speed_mult=1.5, size_mult=0.8),
    Mutation("TANK", "Tank", 0, speed_mult=0.7, size_mult=1.3, health_mult=1.5),
    Mutation("REGEN", "Regen", 120, decay_mult=0.5, glow_intensity=20),
    Mutation("TINY", "Micro", 280, size_mult=0.5, speed_mult=1.3),
    Mutation("GIANT", "Titan", 40, size_mult=1.5, speed_mult=0.8, health_mult=1.3),
)

# (upper bound exclusive, sides, shape name)
SHAPE_BREAKPOINTS: Tuple[Tuple[float, int, str], ...] = (
    (15, 3, "triangle"),
    (20, 4, "square"),
    (25, 5, "pentagon"),
    (30, 6, "hexagon"),
    (35, 7, "septagon"),
    (40, 8, "octagon"),
    (43, 9, "nonagon"),
    (46, 10, "decagon"),
    (49, 11, "hendecagon"),
    (math.inf, 12, "dodecagon"),
)

WEATHER_CLEAR = "CLEAR"
WEATHER_RAIN = "RAIN"
WEATHER_DROUGHT = "DROUGHT"
WEATHER_FOG = "FOG"

# name, food spawn, hunger, speed, detection
WEATHER_TYPES: Dict[str, Dict[str, Any]] = {
    WEATHER_CLEAR: {"name": "Clear", "food_spawn": 1.0, "hunger": 1.0, "speed": 1.0, "detection": 1.0},
    WEATHER_RAIN: {"name": "Rain", "food_spawn": 1.5, "hunger": 0.9, "speed": 0.85, "detection": 0.8},
    WEATHER_DROUGHT: {"name": "Drought", "food_spawn": 0.4, "hunger": 1.5, "speed": 1.0, "detection": 1.0},
    WEATHER_FOG: {"name": "Fog", "food_spawn": 1.0, "hunger": 1.0, "speed": 0.9, "detection": 0.5},
}

BIOME_SAFE = "SAFE"
BIOME_DANGER = "DANGER"
BIOME_FERTILE = "FERTILE"

BIOME_TYPES: Dict[str, Dict[str, Any]] = {
    BIOME_SAFE: {
        "name": "Safe Haven",
        "hunger": 0.5,
        "growth": 1.0,
        "food_spawn": 1.0,
        "predator_immune": True,
        "predator_attraction": False,
    },
    BIOME_DANGER: {
        "name": "Danger Zone",
        "hunger": 1.5,
        "growth": 1.2,
        "food_spawn": 0.8,
        "predator_immune": False,
        "predator_attraction": True,
    },
    BIOME_FERTILE: {
        "name": "Fertile Land",
        "hunger": 1.0,
        "growth": 1.5,
        "food_spawn": 2.0,
        "predator_immune": False,
        "predator_attraction": False,
    },
}

EVENT_BLOOD_MOON = "BLOOD_MOON"
EVENT_AURORA = "AURORA"
EVENT_EVOLUTION_BOOM = "EVOLUTION_BOOM"
EVENT_FAMINE = "FAMINE"
EVENT_ABUNDANCE = "ABUNDANCE"

EVENT_TYPES: Dict[str, Dict[str, Any]] = {
    EVENT_BLOOD_MOON: {
        "name": "Blood Moon",
        "description": "Collisions hurt three times as much",
        "collision_damage": 3.0,
    },
    EVENT_AURORA: {
        "name": "Aurora",
        "description": "Mutations are five times more likely",
        "mutation": 5.0,
    },
    EVENT_EVOLUTION_BOOM: {
        "name": "Evolution Boom",
        "description": "Everyone is ready to reproduce",
    },
    EVENT_FAMINE: {
        "name": "Famine",
        "description": "All food vanishes and nothing grows",
        "food_spawn": 0.0,
        "blocks_food": True,
    },
    EVENT_ABUNDANCE: {
        "name": "Abundance",
        "description": "Food rains from the sky",
        "food_spawn": 2.0,
    },
}

VOTE_OPTIONS: Tuple[Tuple[str, str, str], ...] = (
    ("!food", "Spawn Food", "Add 20 food items"),
    ("!bomb", "Meteor Strike", "Damage random area"),
    ("!heal", "Heal All", "Restore all health"),
    ("!spawn", "Spawn Entity", "Add 3 new creatures"),
)


class ConfigurationError(ValueError):
    """Raised when a configuration holds values the simulation cannot run with."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        super().__init__("invalid configuration: " + "; ".join(self.problems))


@dataclass
class WorldSettings:
    width: float = WORLD_WIDTH
    height: float = WORLD_HEIGHT
    spawn_margin: float = SPAWN_MARGIN
    initial_organisms: int = len(INITIAL_NAMES)


@dataclass
class EntitySettings:
    base_size: float = BASE_SIZE
    min_size: float = MIN_SIZE
    max_size: float = MAX_SIZE
    base_speed: float = BASE_SPEED
    speed_variance: float = SPEED_VARIANCE
    wander_strength: float = WANDER_STRENGTH
    max_health: float = MAX_HEALTH
    starting_health: float = STARTING_HEALTH
    health_decay_rate: float = HEALTH_DECAY_RATE
    food_detection_range: float = FOOD_DETECTION_RANGE
    food_attraction_strength: float = FOOD_ATTRACTION_STRENGTH
    eat_range: float = EAT_RANGE
    food_energy_gain: float = FOOD_ENERGY_GAIN
    growth_rate: float = GROWTH_RATE
    growth_health_fraction: float = GROWTH_HEALTH_FRACTION
    collision_damage: float = COLLISION_DAMAGE
    reproduction_threshold: float = REPRODUCTION_THRESHOLD
    reproduction_cost: float = REPRODUCTION_COST
    reproduction_cooldown: float = REPRODUCTION_COOLDOWN
    reproduction_min_size: float = REPRODUCTION_MIN_SIZE
    reproduction_gap: float = REPRODUCTION_GAP
    child_size_factor: float = CHILD_SIZE_FACTOR
    mutation_chance: float = MUTATION_CHANCE
    size_scaler: float = 1.0
    health_scaler: float = 1.0


@dataclass
class PredatorSettings:
    spawn_chance: float = PREDATOR_SPAWN_CHANCE
    spawn_roll_chance: float = PREDATOR_SPAWN_ROLL_CHANCE
    spawn_interval: float = PREDATOR_SPAWN_INTERVAL
    min_population: int = PREDATOR_MIN_POPULATION
    base_size: float = PREDATOR_SIZE
    speed: float = PREDATOR_SPEED
    max_health: float = PREDATOR_MAX_HEALTH
    detection_range: float = PREDATOR_DETECTION_RANGE
    attack_damage: float = PREDATOR_ATTACK_DAMAGE
    attack_scaler: float = 1.0
    attack_range: float = PREDATOR_ATTACK_RANGE
    attack_cooldown: float = PREDATOR_ATTACK_COOLDOWN
    attack_heal: float = PREDATOR_ATTACK_HEAL
    decay_factor: float = PREDATOR_DECAY_FACTOR
    danger_detection_mult: float = PREDATOR_DANGER_DETECTION_MULT


@dataclass
class FoodSettings:
    size: float = FOOD_SIZE
    spawn_interval: float = FOOD_SPAWN_INTERVAL
    spawn_amount: int = FOOD_SPAWN_AMOUNT
    drop_on_death: int = FOOD_DROP_ON_DEATH
    drop_ring_radius: float = FOOD_DROP_RING_RADIUS
    drop_growth_step: float = FOOD_DROP_GROWTH_STEP
    initial_count: int = FOOD_INITIAL_COUNT
    margin: float = FOOD_MARGIN


@dataclass
class EnergySettings:
    initial: float = INITIAL_ENERGY
    energy_per_message: float = ENERGY_PER_MESSAGE
    decay_rate: float = ENERGY_DECAY_RATE
    min_energy: float = MIN_ENERGY
    max_energy: float = MAX_ENERGY
    population_cap_min: int = POPULATION_CAP_MIN
    population_cap_max: int = POPULATION_CAP_MAX
    population_floor: int = POPULATION_FLOOR
    chatter_spawn_rates: Tuple[Tuple[float, float], ...] = CHATTER_SPAWN_RATES


@dataclass
class WeatherSettings:
    enabled: bool = True
    change_duration: float = WEATHER_CHANGE_DURATION
    transition_duration: float = WEATHER_TRANSITION_DURATION


@dataclass
class BiomeSettings:
    enabled: bool = True
    count: int = BIOME_COUNT
    margin: float = BIOME_MARGIN
    min_radius: float = BIOME_MIN_RADIUS
    max_radius: float = BIOME_MAX_RADIUS


@dataclass
class EventSettings:
    enabled: bool = True
    min_interval: float = EVENT_MIN_INTERVAL
    max_interval: float = EVENT_MAX_INTERVAL
    duration: float = EVENT_DURATION
    abundance_food: int = EVENT_ABUNDANCE_FOOD


@dataclass
class VotingSettings:
    interval: float = VOTE_INTERVAL
    duration: float = VOTE_DURATION
    cooldown: float = VOTE_COOLDOWN
    food_batch: int = VOTE_FOOD_BATCH
    bomb_radius: float = VOTE_BOMB_RADIUS
    bomb_damage: float = VOTE_BOMB_DAMAGE
    spawn_count: int = VOTE_SPAWN_COUNT
    max_batch: int = VOTE_MAX_BATCH


@dataclass
class EffectsSettings:
    death_cam_duration: float = DEATH_CAM_DURATION
    death_cam_slowmo: float = DEATH_CAM_SLOWMO
    death_cam_chance: float = DEATH_CAM_CHANCE
    max_dt: float = MAX_DT
    max_particles: int = MAX_PARTICLES


@dataclass
class Config:
    world: WorldSettings = field(default_factory=WorldSettings)
    entity: EntitySettings = field(default_factory=EntitySettings)
    predator: PredatorSettings = field(default_factory=PredatorSettings)
    food: FoodSettings = field(default_factory=FoodSettings)
    energy: EnergySettings = field(default_factory=EnergySettings)
    weather: WeatherSettings = field(default_factory=WeatherSettings)
    biomes: BiomeSettings = field(default_factory=BiomeSettings)
    events: EventSettings = field(default_factory=EventSettings)
    voting: VotingSettings = field(default_factory=VotingSettings)
    effects: EffectsSettings = field(default_factory=EffectsSettings)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return asdict(self)

    def updated(self, changes: Mapping[str, Mapping[str, Any]]) -> "Config":
        """Return a validated copy with ``changes`` (section -> key -> value) applied.

        Unknown sections or keys, values of the wrong type and values outside the
        accepted ranges raise ConfigurationError; ``self`` is never modified.
        """
        problems: List[str] = []
        sections: Dict[str, Any] = {}
        for section_name, section_changes in changes.items():
            if section_name not in {f.name for f in fields(self)}:
                problems.append(f"unknown section '{section_name}'")
                continue
            if not isinstance(section_changes, Mapping):
                problems.append(f"section '{section_name}' must be a mapping")
                continue
            section = getattr(self, section_name)
            known = {f.name: f for f in fields(section)}
            values: Dict[str, Any] = {}
            for key, value in section_changes.items():
                if key not in known:
                    problems.append(f"unknown key '{section_name}.{key}'")
                    continue
                coerced = _coerce(getattr(section, key), value)
                if coerced is None:
                    problems.append(f"'{section_name}.{key}' has the wrong type: {value!r}")
                    continue
                values[key] = coerced
            sections[section_name] = replace(section, **values)
        if problems:
            raise ConfigurationError(problems)
        candidate = replace(self, **sections)
        validate_config(candidate)
        return candidate


def _coerce(current: Any, value: Any) -> Any:
    if isinstance(current, bool):
        return value if isinstance(value, bool) else None
    if isinstance(value, bool):
        return None
    if isinstance(current, int):
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return None
    if isinstance(current, float):
        if not isinstance(value, (int, float)):
            return None
        try:
            value = float(value)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None
    if isinstance(current, tuple):
        try:
            return tuple((float(t), float(c)) for t, c in value)
        except (TypeError, ValueError):
            return None
    return None


def validate_config(config: Config) -> None:
    """Raise ConfigurationError listing every value the tick loop cannot use."""
    problems: List[str] = []

    def positive(label: str, value: float) -> None:
        if not value > 0:
            problems.append(f"{label} must be positive (got {value})")

    def non_negative(label: str, value: float) -> None:
        if value < 0:
            problems.append(f"{label} must not be negative (got {value})")

    def probability(label: str, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            problems.append(f"{label} must be within [0, 1] (got {value})")

    def ordered(label: str, low: float, high: float) -> None:
        if low > high:
            problems.append(f"{label}: minimum {low} exceeds maximum {high}")

    for section in fields(config):
        settings = getattr(config, section.name)
        for item in fields(settings):
            value = getattr(settings, item.name)
            if isinstance(value, float) and not math.isfinite(value):
                problems.append(f"{section.name}.{item.name} must be a finite number (got {value})")
    for threshold, _ in config.energy.chatter_spawn_rates:
        if math.isnan(threshold):
            problems.append("chatter spawn thresholds must be numbers")

    w, e, p, f, en = config.world, config.entity, config.predator, config.food, config.energy
    positive("world.width", w.width)
    positive("world.height", w.height)
    non_negative("world.spawn_margin", w.spawn_margin)
    non_negative("world.initial_organisms", w.initial_organisms)

    for label, value in (
        ("entity.base_size", e.base_size),
        ("entity.min_size", e.min_size),
        ("entity.max_size", e.max_size),
        ("entity.max_health", e.max_health),
        ("entity.starting_health", e.starting_health),
        ("entity.size_scaler", e.size_scaler),
        ("entity.health_scaler", e.health_scaler),
        ("entity.child_size_factor", e.child_size_factor),
    ):
        positive(label, value)
    for label, value in (
        ("entity.base_speed", e.base_speed),
        ("entity.speed_variance", e.speed_variance),
        ("entity.wander_strength", e.wander_strength),
        ("entity.health_decay_rate", e.health_decay_rate),
        ("entity.food_detection_range", e.food_detection_range),
        ("entity.eat_range", e.eat_range),
        ("entity.food_energy_gain", e.food_energy_gain),
        ("entity.growth_rate", e.growth_rate),
        ("entity.collision_damage", e.collision_damage),
        ("entity.reproduction_cost", e.reproduction_cost),
        ("entity.reproduction_cooldown", e.reproduction_cooldown),
        ("entity.reproduction_gap", e.reproduction_gap),
    ):
        non_negative(label, value)
    ordered("entity size", e.min_size, e.max_size)
    probability("entity.mutation_chance", e.mutation_chance)
    probability("entity.growth_health_fraction", e.growth_health_fraction)

    for label, value in (
        ("predator.spawn_interval", p.spawn_interval),
        ("predator.base_size", p.base_size),
        ("predator.max_health", p.max_health),
        ("predator.attack_cooldown", p.attack_cooldown),
    ):
        positive(label, value)
    for label, value in (
        ("predator.speed", p.speed),
        ("predator.detection_range", p.detection_range),
        ("predator.attack_damage", p.attack_damage),
        ("predator.attack_scaler", p.attack_scaler),
        ("predator.attack_range", p.attack_range),
        ("predator.attack_heal", p.attack_heal),
        ("predator.decay_factor", p.decay_factor),
        ("predator.danger_detection_mult", p.danger_detection_mult),
        ("predator.min_population", p.min_population),
    ):
        non_negative(label, value)
    probability("predator.spawn_chance", p.spawn_chance)
    probability("predator.spawn_roll_chance", p.spawn_roll_chance)

    positive("food.size", f.size)
    positive("food.spawn_interval", f.spawn_interval)
    positive("food.drop_growth_step", f.drop_growth_step)
    for label, value in (
        ("food.spawn_amount", f.spawn_amount),
        ("food.drop_on_death", f.drop_on_death),
        ("food.drop_ring_radius", f.drop_ring_radius),
        ("food.initial_count", f.initial_count),
        ("food.margin", f.margin),
    ):
        non_negative(label, value)

    positive("energy.max_energy", en.max_energy)
    non_negative("energy.min_energy", en.min_energy)
    non_negative("energy.decay_rate", en.decay_rate)
    non_negative("energy.energy_per_message", en.energy_per_message)
    non_negative("energy.population_cap_min", en.population_cap_min)
    non_negative("energy.population_floor", en.population_floor)
    ordered("energy", en.min_energy, en.max_energy)
    ordered("population cap", en.population_cap_min, en.population_cap_max)
    if not en.chatter_spawn_rates:
        problems.append("energy.chatter_spawn_rates must not be empty")
    for threshold, chance in en.chatter_spawn_rates:
        probability(f"chatter spawn chance below {threshold}", chance)

    positive("weather.change_duration", config.weather.change_duration)
    positive("weather.transition_duration", config.weather.transition_duration)

    b = config.biomes
    non_negative("biomes.count", b.count)
    non_negative("biomes.margin", b.margin)
    positive("biomes.min_radius", b.min_radius)
    ordered("biome radius", b.min_radius, b.max_radius)

    ev = config.events
    positive("events.min_interval", ev.min_interval)
    positive("events.duration", ev.duration)
    non_negative("events.abundance_food", ev.abundance_food)
    ordered("event interval", ev.min_interval, ev.max_interval)

    v = config.voting
    positive("voting.interval", v.interval)
    positive("voting.duration", v.duration)
    non_negative("voting.cooldown", v.cooldown)
    positive("voting.bomb_radius", v.bomb_radius)
    non_negative("voting.bomb_damage", v.bomb_damage)
    non_negative("voting.food_batch", v.food_batch)
    non_negative("voting.spawn_count", v.spawn_count)
    positive("voting.max_batch", v.max_batch)
    ordered("voting food batch", v.food_batch, v.max_batch)
    ordered("voting spawn count", v.spawn_count, v.max_batch)

    fx = config.effects
    positive("effects.max_dt", fx.max_dt)
    non_negative("effects.death_cam_duration", fx.death_cam_duration)
    positive("effects.death_cam_slowmo", fx.death_cam_slowmo)
    probability("effects.death_cam_chance", fx.death_cam_chance)
    non_negative("effects.max_particles", fx.max_particles)

    if problems:
        raise ConfigurationError(problems)


def chatter_spawn_chance(chatter_count: int, rates: Tuple[Tuple[float, float], ...] = CHATTER_SPAWN_RATES) -> float:
    for threshold, chance in rates:
        if chatter_count < threshold:
            return chance
    return rates[-1][1]
