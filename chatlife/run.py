"""CLI entry point."""

from __future__ import annotations

import argparse
import logging

from .simulation import run_simulation


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat Life simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--dt", type=float, default=1.0 / 30.0, help="Seconds per step")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-every", type=int, default=100)
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--csv", type=str, default=None, help="Write per-step stats to CSV")
    parser.add_argument("--no-summary", action="store_true", help="Disable summary output")
    parser.add_argument("--chat-rate", type=float, default=0.0, help="Synthetic chat messages per second")
    parser.add_argument("--audience", type=int, default=50, help="Distinct synthetic chatters")
    parser.add_argument("--render-every", type=int, default=0, help="Render every N steps")
    parser.add_argument("--render-path", type=str, default=None, help="Output path or dir for PPM frames")
    parser.add_argument("--render-ascii", action="store_true", help="Print ASCII map at render steps")
    parser.add_argument("--render-scale", type=float, default=0.5, help="PPM pixels per world unit")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    run_simulation(
        steps=args.steps,
        dt=args.dt,
        seed=args.seed,
        log_every=args.log_every,
        csv_path=args.csv,
        summary=not args.no_summary,
        chat_rate=args.chat_rate,
        audience=args.audience,
        render_every=args.render_every,
        render_path=args.render_path,
        render_ascii_enabled=args.render_ascii,
        render_scale=args.render_scale,
    )


if __name__ == "__main__":
    main()
