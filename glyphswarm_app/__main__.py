"""
Headless capture for the particle text engine.

Renders a number of frames offscreen and writes the last one as a PNG.

Usage:
    python -m glyphswarm_app --message "HELLO" --frames 60 --output hello.png
    python -m glyphswarm_app --config widget.json --pointer 120 40 --no-glow

The --config file holds the same keys the widget sends (camelCase, e.g.
"fontSize", "repelThreshold"); explicit command-line options override it.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Force Qt to use the offscreen platform; no window is ever shown.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtGui import QGuiApplication  # noqa: E402

from .config import DRAW_TYPES  # noqa: E402
from .engine import EngineState, ParticleTextEngine  # noqa: E402
from .scheduler import ManualTicker  # noqa: E402
from .surface import RenderSurface  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="glyphswarm_app",
        description="Render a particle text field offscreen and save the last frame as PNG.",
    )
    parser.add_argument("--config", help="JSON file with widget-style config keys.")
    parser.add_argument("--message", help="Text to render.")
    parser.add_argument("--width", type=int, help="Surface width in pixels.")
    parser.add_argument("--height", type=int, help="Surface height in pixels.")
    parser.add_argument("--density", type=int, help="Particle density level (1-4).")
    parser.add_argument("--draw-type", choices=DRAW_TYPES, help="Sample glyph outline or fill.")
    parser.add_argument("--font-family", help="Font family (e.g. 'monospace').")
    parser.add_argument("--font-size", type=float, help="Font size in pixels.")
    parser.add_argument(
        "--glow",
        dest="glow",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable or disable the neon glow pass.",
    )
    parser.add_argument("--frames", type=int, default=60, help="Number of frames to simulate (default: 60).")
    parser.add_argument(
        "--pointer",
        nargs=2,
        type=float,
        metavar=("X", "Y"),
        help="Hover the pointer at (X, Y) for the whole run.",
    )
    parser.add_argument("--output", default="glyphswarm.png", help="Output PNG path (default: glyphswarm.png).")
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective (clamped) config as JSON before rendering.",
    )
    return parser


def build_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge the optional JSON config file with explicit CLI options."""
    cfg: Dict[str, Any] = {}
    if args.config:
        with open(args.config, "r", encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise SystemExit(f"config file {args.config} must contain a JSON object")
        cfg.update(loaded)

    overrides = {
        "message": args.message,
        "width": args.width,
        "height": args.height,
        "density": args.density,
        "drawType": args.draw_type,
        "fontFamily": args.font_family,
        "fontSize": args.font_size,
        "glow": args.glow,
    }
    cfg.update({k: v for k, v in overrides.items() if v is not None})
    cfg.setdefault("width", 640)
    cfg.setdefault("height", 240)
    return cfg


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = build_config(args)

    app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])  # noqa: F841

    errors: List[BaseException] = []

    def on_error(exc: BaseException, tb: str) -> None:
        errors.append(exc)
        print("[glyphswarm] Error in render:\n", tb, file=sys.stderr)

    ticker = ManualTicker()
    engine = ParticleTextEngine(ticker=ticker, error_sink=on_error)
    # The engine sizes the surface from the (clamped) config.
    surface = RenderSurface()
    engine.handle_message({"surface": surface, "config": config})

    print(f"[glyphswarm] {engine.particles.count} particles for {engine.config.width}x{engine.config.height}")
    if args.print_config:
        print(json.dumps(engine.config.to_wire(), indent=2))

    if args.pointer is not None:
        engine.handle_message({"type": "mouseenter"})
        engine.handle_message({"type": "mousemove", "x": args.pointer[0], "y": args.pointer[1]})

    ticker.tick(max(1, args.frames))

    out_path = Path(args.output)
    if not surface.save(str(out_path), "PNG"):
        print(f"[glyphswarm] could not write {out_path}", file=sys.stderr)
        return 1
    print(f"[glyphswarm] {engine.frame_count} frames rendered -> {out_path}")

    return 1 if errors or engine.state is EngineState.STOPPED else 0


if __name__ == "__main__":
    sys.exit(main())
