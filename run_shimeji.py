#!/usr/bin/env python3
"""
Shimeji - GLFW window launcher

Usage:
    python run_shimeji.py [config.yaml]

Example:
    python run_shimeji.py shimeji.yaml

Controls:
    Left drag    - Drag the character
    Click        - Say hello
    Double click - Jump
    Right click  - Walk to the cursor
    J / C        - Jump / Crawl
    ESC/Q        - Quit

Requisitos:
    pip install glfw pillow numpy pyyaml
"""

import logging
import sys
from pathlib import Path

from shimeji.app import ShimejiApp
from shimeji.config import load_config


def main():
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)-5s %(name)s: %(message)s",
                        datefmt="%H:%M:%S")

    config_path = sys.argv[1] if len(sys.argv) >= 2 else None
    if config_path is not None and not Path(config_path).exists():
        print(f"Error: config file '{config_path}' not found")
        sys.exit(1)

    config = load_config(config_path)

    asset_root = Path(config.asset_dir) / config.character_name
    if not asset_root.exists():
        print(f"Warning: no sprites in '{asset_root}', "
              f"states will fall back to idle")

    app = ShimejiApp(config)
    app.run()


if __name__ == "__main__":
    main()
