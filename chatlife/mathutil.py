"""Small numeric helpers shared by the simulation modules."""

from __future__ import annotations

import math


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def clamp(value: float, low: float, high: float) -> float:
    return low if value < low else high if value > high else value
