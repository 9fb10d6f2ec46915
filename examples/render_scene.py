#!/usr/bin/env python3
"""Render a preset scene with the direct-lighting or path-tracing estimator.

Settings come from an optional JSON file (see pathtracer.config) and are
overridden by command-line options.

Usage:
    python -m examples.render_scene [options]

Options:
    --config PATH         JSON render settings file
    --scene NAME          Scene preset: quad or cornell (default: cornell)
    --estimator NAME      direct or path (default: path)
    --width WIDTH         Image width in pixels (default: 256)
    --height HEIGHT       Image height in pixels (default: 256)
    --max-bounces N       Path tracer bounce cap (default: 8)
    --seed SEED           Random stream seed (default: 0)
    --vfov DEGREES        Override the preset camera's vertical field of view
    --tone-map METHOD     none, reinhard or exposure (default: none)
    --output OUTPUT       Output image path, .png/.ppm/.tga (default: color.png)
    --arch ARCH           Taichi backend: cpu or gpu (default: cpu)
    --verbose             Log per-row progress

Example:
    python -m examples.render_scene --scene quad --estimator direct --width 128 --height 128
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("pathtracer.examples.render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON render settings file")
    parser.add_argument("--scene", type=str, default=None, help="Scene preset (quad, cornell)")
    parser.add_argument("--estimator", type=str, default=None, help="direct or path")
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Image height in pixels")
    parser.add_argument("--max-bounces", type=int, default=None, help="Path tracer bounce cap")
    parser.add_argument("--seed", type=int, default=None, help="Random stream seed")
    parser.add_argument("--vfov", type=float, default=None, help="Vertical field of view")
    parser.add_argument("--tone-map", type=str, default=None, help="none, reinhard or exposure")
    parser.add_argument("--output", type=str, default=None, help="Output image path")
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-row progress")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace):
    """Merge the optional JSON settings file with command-line overrides."""
    from pathtracer.config import RenderSettings

    base = RenderSettings.load(args.config) if args.config else RenderSettings()
    return base.merged(
        {
            "scene": args.scene,
            "estimator": args.estimator,
            "width": args.width,
            "height": args.height,
            "max_bounces": args.max_bounces,
            "seed": args.seed,
            "vfov": args.vfov,
            "tone_map": args.tone_map,
            "output": args.output,
        }
    )


def render_scene(settings) -> Path:
    """Build the preset, render it and save the image.

    Args:
        settings: Validated RenderSettings.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from dataclasses import replace

    from pathtracer.core.renderer import ImageRenderer
    from pathtracer.preview.export import save_image
    from pathtracer.preview.framebuffer import Framebuffer
    from pathtracer.scene.presets import get_preset
    from pathtracer.utils.timer import ScopedTimer

    preset = get_preset(settings.scene)
    camera = preset.camera_for(settings.estimator)
    if settings.vfov is not None:
        camera = replace(camera, vfov=settings.vfov)

    with ScopedTimer("Building scene"):
        intersector, materials = preset.scene.build()

    renderer = ImageRenderer(
        intersector,
        materials,
        camera,
        preset.lighting,
        seed=settings.seed,
        max_bounces=settings.max_bounces,
        gamma=settings.gamma,
    )

    framebuffer = Framebuffer(settings.width, settings.height)
    renderer.render(framebuffer, settings.estimator)

    return save_image(
        framebuffer,
        settings.output,
        tone_map=settings.tone_map,
        gamma=settings.gamma,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from pathtracer.utils.logger import configure_logging

    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = load_settings(args)
        ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu, random_seed=settings.seed or 0)
        output = render_scene(settings)
        logger.info("Saved to: %s", output.absolute())
        return 0
    except Exception:
        logger.exception("Render failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
