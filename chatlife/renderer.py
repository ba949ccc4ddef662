"""Rendering utilities for world snapshots (terminal text and PPM frames)."""

from __future__ import annotations

from typing import Dict, Tuple
import colorsys
import math

from . import config
from .snapshot import WorldSnapshot


ZONE_CHARS: Dict[str, str] = {
    config.BIOME_SAFE: ":",
    config.BIOME_DANGER: "!",
    config.BIOME_FERTILE: '"',
}

ZONE_COLORS: Dict[str, Tuple[int, int, int]] = {
    config.BIOME_SAFE: (30, 60, 90),
    config.BIOME_DANGER: (90, 30, 30),
    config.BIOME_FERTILE: (30, 80, 40),
}

BACKGROUND_COLOR = (18, 18, 36)
FOOD_COLOR = (78, 204, 163)
PREDATOR_COLOR = (240, 40, 40)


def hue_to_rgb(hue: float, saturation: float = 0.7, lightness: float = 0.5) -> Tuple[int, int, int]:
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness, saturation)
    return int(r * 255), int(g * 255), int(b * 255)


def organism_char(is_predator: bool, is_chatter: bool, sides: int) -> str:
    if is_predator:
        return "X"
    if is_chatter:
        return "@"
    return str(sides % 10)


def _cell_center(index: int, cell: float) -> float:
    return (index + 0.5) * cell


def render_ascii(snapshot: WorldSnapshot, columns: int = 100, rows: int = 40) -> str:
    cell_w = snapshot.width / columns
    cell_h = snapshot.height / rows

    grid = []
    for row in range(rows):
        y = _cell_center(row, cell_h)
        line = []
        for col in range(columns):
            x = _cell_center(col, cell_w)
            char = " "
            for zone in snapshot.zones:
                if math.hypot(x - zone.x, y - zone.y) < zone.radius:
                    char = ZONE_CHARS.get(zone.kind, "?")
                    break
            line.append(char)
        grid.append(line)

    def plot(x: float, y: float, char: str) -> None:
        col = min(columns - 1, max(0, int(x / cell_w)))
        row = min(rows - 1, max(0, int(y / cell_h)))
        grid[row][col] = char

    for item in snapshot.food:
        plot(item.x, item.y, ".")
    for organism in snapshot.organisms:
        plot(organism.x, organism.y, organism_char(organism.is_predator, organism.is_chatter, organism.sides))

    event = snapshot.event.name if snapshot.event else "None"
    header = (
        f"t={snapshot.elapsed:.1f}s pop={len(snapshot.organisms)}/{snapshot.population_cap} "
        f"food={len(snapshot.food)} energy={snapshot.energy:.0f} "
        f"weather={config.WEATHER_TYPES[snapshot.weather.current]['name']} event={event}"
    )
    return "\n".join([header] + ["".join(line) for line in grid])


def render_ppm(snapshot: WorldSnapshot, path: str, scale: float = 0.5) -> None:
    """Write a plain PPM frame; ``scale`` is output pixels per world unit."""
    img_w = max(1, int(snapshot.width * scale))
    img_h = max(1, int(snapshot.height * scale))
    pixels = [[BACKGROUND_COLOR for _ in range(img_w)] for _ in range(img_h)]

    def disc(cx: float, cy: float, radius: float, color: Tuple[int, int, int]) -> None:
        px, py, pr = cx * scale, cy * scale, max(1.0, radius * scale)
        for y in range(max(0, int(py - pr)), min(img_h, int(py + pr) + 1)):
            for x in range(max(0, int(px - pr)), min(img_w, int(px + pr) + 1)):
                if (x - px) ** 2 + (y - py) ** 2 <= pr * pr:
                    pixels[y][x] = color

    for zone in snapshot.zones:
        disc(zone.x, zone.y, zone.radius, ZONE_COLORS.get(zone.kind, (40, 40, 40)))
    for item in snapshot.food:
        disc(item.x, item.y, item.size, FOOD_COLOR)
    for organism in snapshot.organisms:
        if organism.is_predator:
            color = PREDATOR_COLOR
        else:
            lightness = 0.3 + 0.4 * max(0.0, min(1.0, organism.health_fraction))
            color = hue_to_rgb(organism.hue, lightness=lightness)
        disc(organism.x, organism.y, organism.size, color)

    with open(path, "w", encoding="ascii") as handle:
        handle.write(f"P3\n{img_w} {img_h}\n255\n")
        for row in pixels:
            handle.write(" ".join(f"{r} {g} {b}" for r, g, b in row) + "\n")
