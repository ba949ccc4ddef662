"""Chat-driven producers: the message feed and the periodic community vote."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Set
import logging
import random

from . import config
from .config import chatter_spawn_chance
from .world import Population

logger = logging.getLogger(__name__)

BOMB_MARGIN = 200.0


@dataclass(frozen=True)
class VoteOption:
    command: str
    name: str
    description: str


DEFAULT_OPTIONS: Sequence[VoteOption] = tuple(VoteOption(*option) for option in config.VOTE_OPTIONS)


class VoteManager:
    """Runs the vote cycle and turns the winning command into queued world actions."""

    def __init__(
        self,
        world: Population,
        options: Sequence[VoteOption] = DEFAULT_OPTIONS,
        rng: random.Random | None = None,
    ) -> None:
        self.world = world
        self.options = list(options)
        self.rng = rng if rng is not None else world.rng
        self.active = False
        self.votes: Dict[str, int] = {}
        self.time_until_next = world.config.voting.interval
        self.remaining = 0.0
        self.last_winner: str | None = None

    @property
    def settings(self):
        return self.world.config.voting

    def update(self, dt: float, connected: bool = True) -> str | None:
        """Advance the vote clock; return the winning command when a vote closes."""
        if self.active:
            self.remaining -= dt
            if self.remaining <= 0:
                return self.end_vote()
            return None
        self.time_until_next -= dt
        if self.time_until_next <= 0 and connected:
            self.start_vote()
        return None

    def start_vote(self) -> None:
        self.active = True
        self.remaining = self.settings.duration
        self.votes = {option.command: 0 for option in self.options}
        logger.info("vote started: %s", ", ".join(self.votes))

    def cast_vote(self, command: str) -> bool:
        command = command.strip().lower()
        if self.active and command in self.votes:
            self.votes[command] += 1
            return True
        return False

    def end_vote(self) -> str | None:
        self.active = False
        winner = None
        best = 0
        for command, count in self.votes.items():
            if count > best:
                best = count
                winner = command
        self.time_until_next = self.settings.interval + self.settings.cooldown
        if winner is None:
            logger.info("vote ended without votes")
            return None
        logger.info("vote won by %s with %d votes", winner, best)
        self.last_winner = winner
        self.execute(winner)
        return winner

    def execute(self, command: str) -> None:
        voting = self.settings
        if command == "!food":
            self.world.enqueue("spawn_food_batch", voting.food_batch)
        elif command == "!bomb":
            center = self.world.random_position(BOMB_MARGIN)
            self.world.enqueue("area_damage", center, voting.bomb_radius, voting.bomb_damage)
        elif command == "!heal":
            self.world.enqueue("heal_all")
        elif command == "!spawn":
            self.world.enqueue("spawn_organisms", voting.spawn_count)
        else:
            raise ValueError(f"unknown vote command: {command}")
        name = next((o.name for o in self.options if o.command == command), command)
        self.world.notify(name, "The chat has spoken")

    def tally(self) -> List[tuple]:
        total = sum(self.votes.values())
        rows = []
        for option in self.options:
            count = self.votes.get(option.command, 0)
            rows.append((option, count, count / total if total else 0.0))
        return rows


class ChatFeed:
    """Adapter the chat client calls once per received message."""

    def __init__(self, world: Population, votes: VoteManager | None = None, rng: random.Random | None = None) -> None:
        self.world = world
        self.votes = votes
        self.rng = rng if rng is not None else world.rng
        self.chatters: Set[str] = set()
        self.message_count = 0
        self.channel: str | None = None
        self.connected = False

    def connect(self, channel: str) -> None:
        self.channel = channel.strip().lower().lstrip("#")
        self.connected = True
        logger.info("listening to #%s", self.channel)

    def disconnect(self) -> None:
        self.connected = False
        self.channel = None
        self.chatters.clear()

    def spawn_chance(self) -> float:
        return chatter_spawn_chance(len(self.chatters), self.world.config.energy.chatter_spawn_rates)

    def handle_message(self, username: str, message: str) -> bool:
        """Record one chat message; return True when it queued a chatter spawn."""
        if not isinstance(username, str) or not username.strip():
            logger.warning("ignoring message without a username")
            return False
        self.message_count += 1
        self.world.enqueue("add_energy", self.world.config.energy.energy_per_message)

        text = message.strip().lower() if isinstance(message, str) else ""
        if self.votes is not None and self.votes.active and text.startswith("!"):
            self.votes.cast_vote(text)

        if username in self.chatters:
            return False
        self.chatters.add(username)
        if self.rng.random() < self.spawn_chance():
            self.world.enqueue("spawn_named_organism", username)
            return True
        return False
