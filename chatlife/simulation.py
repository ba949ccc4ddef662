"""Simulation driver."""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List
import csv
import logging
import os
import random

import numpy as np

from .chat import ChatFeed, VoteManager
from .config import Config
from .leaderboard import Leaderboard
from .renderer import render_ascii, render_ppm
from .world import Population, StepStats

logger = logging.getLogger(__name__)

CHAT_LINES = ("hello", "lol", "go little guy", "pog", "nice", "run!")


def _write_csv(stats: List[StepStats], csv_path: str) -> None:
    if not stats:
        with open(csv_path, "w", newline="") as handle:
            handle.write("")
        return
    fieldnames = list(asdict(stats[0]).keys())
    with open(csv_path, "w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in stats:
            writer.writerow(asdict(row))


def _summarize(stats: List[StepStats]) -> Dict[str, float]:
    if not stats:
        return {
            "steps": 0,
            "elapsed": 0.0,
            "final_pop": 0,
            "peak_pop": 0,
            "avg_pop": 0.0,
            "total_births": 0,
            "total_deaths": 0,
            "peak_predators": 0,
            "avg_energy": 0.0,
            "avg_health": 0.0,
            "avg_size": 0.0,
            "max_generation": 0,
        }
    population = np.array([s.population for s in stats])
    last = stats[-1]
    return {
        "steps": len(stats),
        "elapsed": last.elapsed,
        "final_pop": last.population,
        "peak_pop": int(population.max()),
        "avg_pop": float(population.mean()),
        "total_births": int(sum(s.births for s in stats)),
        "total_deaths": int(sum(s.deaths for s in stats)),
        "peak_predators": max(s.predators for s in stats),
        "avg_energy": float(np.mean([s.energy for s in stats])),
        "avg_health": float(np.mean([s.avg_health for s in stats])),
        "avg_size": float(np.mean([s.avg_size for s in stats])),
        "max_generation": max(s.max_generation for s in stats),
    }


def _print_summary(summary: Dict[str, float]) -> None:
    print("summary:")
    print(f"  steps={int(summary['steps'])} elapsed={summary['elapsed']:.1f}s final_pop={int(summary['final_pop'])}")
    print(
        f"  total_births={int(summary['total_births'])} "
        f"total_deaths={int(summary['total_deaths'])} "
        f"peak_pop={int(summary['peak_pop'])} peak_predators={int(summary['peak_predators'])}"
    )
    print(
        f"  avg_pop={summary['avg_pop']:.1f} avg_energy={summary['avg_energy']:.1f} "
        f"avg_health={summary['avg_health']:.3f} avg_size={summary['avg_size']:.1f}"
    )
    print(f"  max_generation={int(summary['max_generation'])}")


def _resolve_render_path(base: str, step: int) -> str:
    if "{step}" in base:
        return base.format(step=step)
    if base.lower().endswith(".ppm"):
        return base
    return os.path.join(base, f"frame_{step}.ppm")


def _synthetic_chat(chat: ChatFeed, votes: VoteManager, rng: random.Random, expected: float, audience: int) -> int:
    """Deliver a random batch of messages averaging ``expected`` per call."""
    count = int(expected)
    if rng.random() < expected - count:
        count += 1
    for _ in range(count):
        username = f"viewer{rng.randrange(audience)}"
        if votes.active and rng.random() < 0.5:
            message = rng.choice(votes.options).command
        else:
            message = rng.choice(CHAT_LINES)
        chat.handle_message(username, message)
    return count


def run_simulation(
    steps: int,
    dt: float = 1.0 / 30.0,
    seed: int | None = None,
    log_every: int = 100,
    csv_path: str | None = None,
    summary: bool = True,
    chat_rate: float = 0.0,
    audience: int = 50,
    cfg: Config | None = None,
    render_every: int = 0,
    render_path: str | None = None,
    render_ascii_enabled: bool = False,
    render_scale: float = 0.5,
) -> List[StepStats]:
    rng = random.Random(seed)
    world = Population(cfg, rng)
    votes = VoteManager(world)
    chat = ChatFeed(world, votes)
    leaderboard = Leaderboard()
    if chat_rate > 0:
        chat.connect("simulation")

    stats: List[StepStats] = []
    for _ in range(steps):
        if chat.connected:
            _synthetic_chat(chat, votes, rng, chat_rate * dt, max(1, audience))
        votes.update(dt, connected=chat.connected)
        step_stats = world.step(dt)
        leaderboard.update(dt, world.organisms)
        stats.append(step_stats)
        if log_every and step_stats.step % log_every == 0:
            print(
                f"step={step_stats.step} t={step_stats.elapsed:.1f}s pop={step_stats.population}/"
                f"{step_stats.population_cap} prey={step_stats.prey} pred={step_stats.predators} "
                f"food={step_stats.food} births={step_stats.births} deaths={step_stats.deaths} "
                f"energy={step_stats.energy:.1f} weather={step_stats.weather} event={step_stats.event} "
                f"avgHealth={step_stats.avg_health:.3f} maxGen={step_stats.max_generation}"
            )
        if render_every and step_stats.step % render_every == 0:
            snapshot = world.snapshot()
            if render_ascii_enabled:
                print(render_ascii(snapshot))
            if render_path:
                target = _resolve_render_path(render_path, step_stats.step)
                os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
                render_ppm(snapshot, target, scale=render_scale)
    if chat.connected:
        logger.info("chat delivered %d messages from %d chatters", chat.message_count, len(chat.chatters))
    if csv_path:
        _write_csv(stats, csv_path)
    if summary:
        _print_summary(_summarize(stats))
        top = leaderboard.top("evolved")
        if top:
            print("  most evolved: " + ", ".join(f"{e.name} {e.value}" for e in top[:3]))
    return stats
