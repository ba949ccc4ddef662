"""Rankings of the living prey, refreshed on a fixed cadence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .entities import Organism

TABS = ("evolved", "survival", "food_eaten")


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    value: str
    organism_id: int


class Leaderboard:
    def __init__(self, update_interval: float = 2.0, size: int = 5) -> None:
        self.update_interval = update_interval
        self.size = size
        self.timer = 0.0
        self.entries: Dict[str, List[LeaderboardEntry]] = {tab: [] for tab in TABS}

    def update(self, dt: float, organisms: Sequence[Organism]) -> bool:
        self.timer += dt
        if self.timer < self.update_interval:
            return False
        self.timer = 0.0
        self.refresh(organisms)
        return True

    def refresh(self, organisms: Sequence[Organism]) -> None:
        prey = [o for o in organisms if o.alive and not o.is_predator]

        evolved = sorted(prey, key=lambda o: (o.generation, o.sides), reverse=True)
        self.entries["evolved"] = [
            LeaderboardEntry(o.name, f"G{o.generation} ({o.sides} sides)", o.id) for o in evolved[: self.size]
        ]

        oldest = sorted(prey, key=lambda o: o.age, reverse=True)
        self.entries["survival"] = [LeaderboardEntry(o.name, f"{int(o.age)}s", o.id) for o in oldest[: self.size]]

        eaters = sorted(prey, key=lambda o: o.food_eaten, reverse=True)
        self.entries["food_eaten"] = [
            LeaderboardEntry(o.name, f"{o.food_eaten} food", o.id) for o in eaters[: self.size]
        ]

    def top(self, tab: str) -> List[LeaderboardEntry]:
        if tab not in self.entries:
            raise KeyError(f"unknown leaderboard tab: {tab}")
        return list(self.entries[tab])
