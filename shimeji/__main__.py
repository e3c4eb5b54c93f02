#!/usr/bin/env python3

"""
Shimeji - autonomous desktop character

Usage:
    python -m shimeji [--config FILE] simulate [--seconds N] [--seed S]
    python -m shimeji [--config FILE] window

simulate runs the character headless on a virtual clock and logs what it
does; window opens a GLFW window that acts as the character's screen.

Window controls:
    Left drag    - Drag the character
    Click        - Say hello
    Double click - Jump
    Right click  - Walk to the cursor
    J / C        - Jump / Crawl
    ESC/Q        - Quit
"""

import argparse
import logging
import sys
from typing import List, Optional

from .clock import VirtualClock
from .config import load_config
from .entities import Shimeji

log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="shimeji",
                                description="Autonomous desktop character")
    p.add_argument("--config", default=None, help="YAML config file path")
    p.add_argument("--log-level", default="INFO", help="Log level")
    sub = p.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run headless on a virtual clock")
    sim.add_argument("--seconds", type=float, default=60.0,
                     help="Simulated time to run")
    sim.add_argument("--seed", type=int, default=None, help="Random seed")

    sub.add_parser("window", help="Open a GLFW window host")
    return p.parse_args(argv)


def simulate(config, seconds: float) -> dict:
    """Run a character for `seconds` of virtual time, return its snapshot."""
    clock = VirtualClock()
    character = Shimeji(config, clock=clock)
    character.start()

    last = None
    elapsed = 0.0
    step = config.physics.tick_ms
    total = seconds * 1000.0
    while elapsed < total:
        clock.advance(min(step, total - elapsed))
        elapsed = clock.now()
        snap = character.snapshot()
        current = (snap["behavior"], snap["state"])
        if current != last:
            log.info("%8.0f ms  %-8s %-10s (%4.0f, %4.0f)", elapsed,
                     snap["behavior"], snap["state"], snap["x"], snap["y"])
            last = current

    character.stop()
    return character.snapshot()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-5s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    config = load_config(args.config)

    if args.command == "simulate":
        if args.seed is not None:
            config.seed = args.seed
        snap = simulate(config, args.seconds)
        print(" ".join(f"{k}={v}" for k, v in snap.items()))
        return 0

    try:
        from .app import ShimejiApp
        app = ShimejiApp(config)
        app.run()
    except RuntimeError as e:
        log.error("Error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
