"""Mutation catalog lookups and the trait fold over a mutation stack."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple
import random

from . import config
from .config import Mutation


MUTATIONS_BY_NAME: Dict[str, Mutation] = {m.name: m for m in config.MUTATIONS}
_CATALOG_ORDER: Dict[str, int] = {m.name: i for i, m in enumerate(config.MUTATIONS)}


@dataclass(frozen=True)
class TraitMultipliers:
    speed: float = 1.0
    size: float = 1.0
    health: float = 1.0
    decay: float = 1.0
    glow: float = 0.0


def compound(stack: Mapping[str, int]) -> TraitMultipliers:
    """Fold a mutation stack into trait multipliers.

    Each mutation present ``n`` times contributes its multiplicative traits
    raised to ``n`` and its glow added ``n`` times. Names are visited in
    catalog order so the floating point result depends only on the counts,
    never on insertion order. Unknown names are ignored.
    """
    speed = size = health = decay = 1.0
    glow = 0.0
    for name in _ordered_names(stack):
        count = stack[name]
        mutation = MUTATIONS_BY_NAME.get(name)
        if mutation is None or count <= 0:
            continue
        speed *= mutation.speed_mult ** count
        size *= mutation.size_mult ** count
        health *= mutation.health_mult ** count
        decay *= mutation.decay_mult ** count
        glow += mutation.glow_intensity * count
    return TraitMultipliers(speed=speed, size=size, health=health, decay=decay, glow=glow)


def roll_mutation(rng: random.Random, chance: float) -> Mutation | None:
    if rng.random() < chance:
        return rng.choice(config.MUTATIONS)
    return None


def add_mutation(stack: Mapping[str, int], mutation: Mutation) -> Dict[str, int]:
    updated = dict(stack)
    updated[mutation.name] = updated.get(mutation.name, 0) + 1
    return updated


def _ordered_names(stack: Mapping[str, int]):
    return sorted(stack, key=lambda n: (_CATALOG_ORDER.get(n, len(_CATALOG_ORDER)), n))


def stack_summary(stack: Mapping[str, int]) -> str:
    parts = []
    for name in _ordered_names(stack):
        if stack[name] <= 0:
            continue
        count = stack[name]
        parts.append(f"{name} x{count}" if count > 1 else name)
    return ", ".join(parts)


def build_name(lineage: str, stack: Mapping[str, int], generation: int) -> str:
    parts = []
    summary = stack_summary(stack)
    if summary:
        parts.append(summary)
    parts.append(lineage)
    if generation > 0:
        parts.append(f"G{generation}")
    return " ".join(parts)


def shape_for_size(size: float) -> Tuple[int, str]:
    for upper, sides, shape in config.SHAPE_BREAKPOINTS:
        if size < upper:
            return sides, shape
    return config.SHAPE_BREAKPOINTS[-1][1], config.SHAPE_BREAKPOINTS[-1][2]
