"""Interactive 2D viewer for the Chat Life world (pygame)."""

from __future__ import annotations

import argparse
import logging
import math
import random
from typing import List, Tuple

try:
    import pygame
except Exception as exc:  # pragma: no cover - optional dependency
    raise RuntimeError("Viewer requires pygame. Install with: pip install pygame") from exc

from . import config
from .chat import BOMB_MARGIN, ChatFeed, VoteManager
from .config import Config
from .leaderboard import Leaderboard
from .renderer import BACKGROUND_COLOR, FOOD_COLOR, PREDATOR_COLOR, ZONE_COLORS, hue_to_rgb
from .snapshot import OrganismView, WorldSnapshot
from .world import Population

logger = logging.getLogger(__name__)

HUD_COLOR = (230, 230, 230)
NOTIFICATION_SECONDS = 3.0


def _polygon(x: float, y: float, radius: float, sides: int) -> List[Tuple[float, float]]:
    points = []
    for i in range(sides):
        angle = math.pi * 2 * i / sides - math.pi / 2
        points.append((x + math.cos(angle) * radius, y + math.sin(angle) * radius))
    return points


def _star(x: float, y: float, radius: float, spikes: int = 8) -> List[Tuple[float, float]]:
    points = []
    for i in range(spikes * 2):
        angle = math.pi * i / spikes - math.pi / 2
        r = radius if i % 2 == 0 else radius * 0.5
        points.append((x + math.cos(angle) * r, y + math.sin(angle) * r))
    return points


class Viewer:
    def __init__(self, world: Population, chat: ChatFeed, votes: VoteManager, fps: int = 60) -> None:
        self.world = world
        self.chat = chat
        self.votes = votes
        self.fps = fps
        self.leaderboard = Leaderboard()
        self.notification: Tuple[str, str] | None = None
        self.notification_timer = 0.0
        self.chatter_serial = 0
        world.on_notification = self._on_notification

        pygame.init()
        self.screen = pygame.display.set_mode((int(world.width), int(world.height)))
        pygame.display.set_caption("Chat Life")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("couriernew", 12)
        self.big_font = pygame.font.SysFont("couriernew", 24, bold=True)

    def _on_notification(self, title: str, detail: str) -> None:
        self.notification = (title, detail)
        self.notification_timer = NOTIFICATION_SECONDS

    def _handle_key(self, key: int) -> None:
        world = self.world
        if key == pygame.K_f:
            world.enqueue("spawn_food_batch", world.config.voting.food_batch)
        elif key == pygame.K_b:
            center = world.random_position(BOMB_MARGIN)
            world.enqueue("area_damage", center, world.config.voting.bomb_radius, world.config.voting.bomb_damage)
        elif key == pygame.K_h:
            world.enqueue("heal_all")
        elif key == pygame.K_s:
            world.enqueue("spawn_organisms", world.config.voting.spawn_count)
        elif key == pygame.K_e:
            world.enqueue("add_energy", 10)
        elif key == pygame.K_c:
            self.chatter_serial += 1
            self.chat.handle_message(f"viewer{self.chatter_serial}", "hello")
        elif key == pygame.K_r:
            world.biomes.regenerate()
        elif key == pygame.K_w:
            world.update_settings({"weather": {"enabled": not world.config.weather.enabled}})
        elif key == pygame.K_v:
            world.update_settings({"events": {"enabled": not world.config.events.enabled}})
        elif key == pygame.K_t:
            world.update_settings({"biomes": {"enabled": not world.config.biomes.enabled}})

    def run(self, max_frames: int | None = None) -> None:
        frames = 0
        running = True
        logger.info("viewer running at %d fps on a %.0fx%.0f world", self.fps, self.world.width, self.world.height)
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    else:
                        self._handle_key(event.key)

            dt = self.clock.tick(self.fps) / 1000.0
            self.votes.update(dt, connected=True)
            self.world.step(dt)
            self.leaderboard.update(dt, self.world.organisms)
            if self.notification_timer > 0:
                self.notification_timer -= dt
            self.draw(self.world.snapshot())

            frames += 1
            if max_frames is not None and frames >= max_frames:
                running = False
        pygame.quit()

    def _draw_organism(self, view: OrganismView) -> None:
        if view.is_predator:
            pygame.draw.polygon(self.screen, PREDATOR_COLOR, _star(view.x, view.y, view.size))
        else:
            lightness = 0.3 + 0.4 * view.health_fraction
            color = hue_to_rgb(view.hue, saturation=0.4 + 0.5 * view.health_fraction, lightness=lightness)
            if view.glow > 0:
                pygame.draw.circle(self.screen, hue_to_rgb(view.hue, 0.8, 0.25), (int(view.x), int(view.y)), int(view.size + view.glow / 4))
            pygame.draw.polygon(self.screen, color, _polygon(view.x, view.y, view.size, view.sides))

        bar_w = view.size * 2
        bar_y = view.y + view.size + 8
        pygame.draw.rect(self.screen, (0, 0, 0), (view.x - bar_w / 2, bar_y, bar_w, 4))
        health_color = (78, 204, 163) if view.health_fraction > 0.3 else (255, 107, 107)
        pygame.draw.rect(self.screen, health_color, (view.x - bar_w / 2, bar_y, bar_w * view.health_fraction, 4))
        label = self.font.render(view.name, True, HUD_COLOR)
        self.screen.blit(label, label.get_rect(center=(view.x, bar_y + 12)))

    def draw(self, snapshot: WorldSnapshot) -> None:
        brightness = 0.5 + 0.5 * snapshot.energy_fraction
        self.screen.fill(tuple(int(c * brightness) for c in BACKGROUND_COLOR))

        for zone in snapshot.zones:
            pygame.draw.circle(self.screen, ZONE_COLORS.get(zone.kind, (40, 40, 40)), (int(zone.x), int(zone.y)), int(zone.radius))
            label = self.font.render(zone.name, True, HUD_COLOR)
            self.screen.blit(label, label.get_rect(center=(zone.x, zone.y)))

        for item in snapshot.food:
            radius = item.size * (math.sin(item.pulse_phase) * 0.3 + 1)
            pygame.draw.circle(self.screen, FOOD_COLOR, (int(item.x), int(item.y)), max(1, int(radius)))

        for particle in snapshot.particles:
            shade = int(255 * max(0.0, particle.fade))
            pygame.draw.circle(self.screen, (shade, shade // 2, shade // 3), (int(particle.x), int(particle.y)), max(1, int(particle.size)))

        for view in snapshot.organisms:
            self._draw_organism(view)

        weather = config.WEATHER_TYPES[snapshot.weather.current]["name"]
        if snapshot.weather.pending:
            weather += f" -> {config.WEATHER_TYPES[snapshot.weather.pending]['name']}"
        event = f"{snapshot.event.name} ({snapshot.event.remaining_fraction:.0%})" if snapshot.event else "None"
        lines = [
            f"Population {len(snapshot.organisms)}/{snapshot.population_cap}  Food {len(snapshot.food)}",
            f"Energy {snapshot.energy:.0f}  Births {snapshot.births}  Deaths {snapshot.deaths}",
            f"Weather {weather}  Event {event}",
        ]
        if self.votes.active:
            lines.append("Vote: " + "  ".join(f"{o.command} {count}" for o, count, _ in self.votes.tally()))
        for entry in self.leaderboard.top("evolved")[:3]:
            lines.append(f"* {entry.name}: {entry.value}")
        for i, line in enumerate(lines):
            self.screen.blit(self.font.render(line, True, HUD_COLOR), (10, 10 + i * 16))

        if self.notification_timer > 0 and self.notification:
            title, detail = self.notification
            text = self.big_font.render(title, True, HUD_COLOR)
            self.screen.blit(text, text.get_rect(center=(snapshot.width / 2, 60)))
            sub = self.font.render(detail, True, HUD_COLOR)
            self.screen.blit(sub, sub.get_rect(center=(snapshot.width / 2, 85)))

        pygame.display.flip()


def run_viewer(
    seed: int | None = None, fps: int = 60, width: float = config.WORLD_WIDTH, height: float = config.WORLD_HEIGHT
) -> None:
    cfg = Config().updated({"world": {"width": width, "height": height}})
    world = Population(cfg, random.Random(seed))
    votes = VoteManager(world)
    chat = ChatFeed(world, votes)
    chat.connect("local")
    Viewer(world, chat, votes, fps=fps).run()


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat Life viewer")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--width", type=float, default=config.WORLD_WIDTH)
    parser.add_argument("--height", type=float, default=config.WORLD_HEIGHT)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    run_viewer(seed=args.seed, fps=args.fps, width=args.width, height=args.height)


if __name__ == "__main__":
    main()
