#!/usr/bin/env python3
"""Render a scene with the Whitted ray tracer.

Renders either a JSON scene description or the built-in demo scene (diffuse
floor, matte, mirror and glass spheres, two point lights) and saves a PNG.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH         Image width in pixels (default: 640)
    --height HEIGHT       Image height in pixels (default: 480)
    --samples N           Supersampling grid side, N x N rays per pixel (default: 2)
    --max-depth DEPTH     Maximum reflection/refraction depth (default: 10)
    --fov DEGREES         Horizontal field of view (default: 60)
    --scene PATH          JSON scene description (default: demo scene)
    --obj PATH            OBJ model to add to the demo scene
    --obj-scale SCALE     Uniform scale of the OBJ model (default: 1.0)
    --output OUTPUT       Output file path (default: whitted.png)
    --gamma GAMMA         Gamma applied on export (default: 1.0, linear)
    --arch {cpu,gpu}      Taichi backend (default: gpu, falls back to cpu)
    --show                Display the result in a Matplotlib window
    --quiet               Suppress progress output

Example:
    python -m examples.render_scene --width 320 --height 240 --samples 3
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Image height in pixels (default: 480)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=2,
        help="Supersampling grid side, N x N rays per pixel (default: 2)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=10,
        help="Maximum reflection/refraction depth (default: 10)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=60.0,
        help="Horizontal field of view in degrees (default: 60)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene description (default: built-in demo scene)",
    )
    parser.add_argument(
        "--obj",
        type=str,
        default=None,
        help="OBJ model to place in the demo scene",
    )
    parser.add_argument(
        "--obj-scale",
        type=float,
        default=1.0,
        help="Uniform scale of the OBJ model (default: 1.0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="whitted.png",
        help="Output file path (default: whitted.png)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma applied on export (default: 1.0, linear)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    width: int = 640,
    height: int = 480,
    samples_per_side: int = 2,
    max_depth: int = 10,
    fov_degrees: float = 60.0,
    scene_path: str | None = None,
    obj_path: str | None = None,
    obj_scale: float = 1.0,
    output_path: str = "whitted.png",
    gamma: float = 1.0,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_side: Supersampling grid side N.
        max_depth: Maximum reflection/refraction depth.
        fov_degrees: Horizontal field of view in degrees.
        scene_path: JSON scene to render; the demo scene when None.
        obj_path: OBJ model added to the demo scene.
        obj_scale: Uniform scale of the OBJ model.
        output_path: Output file path (PNG).
        gamma: Gamma applied on export.
        show: Display the result with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.config import RenderConfig
    from src.whitted.preview.export import save_png
    from src.whitted.preview.image import Image
    from src.whitted.scene.demo import create_demo_scene
    from src.whitted.scene.manager import load_scene

    config = RenderConfig(
        samples_per_side=samples_per_side,
        max_depth=max_depth,
        fov_degrees=fov_degrees,
    )

    if scene_path is not None:
        if not quiet:
            print(f"Loading scene {scene_path} ({width}x{height})...")
        scene = load_scene(scene_path, config=config)
        if obj_path is not None and not quiet:
            print("Ignoring --obj: only the demo scene takes an extra model")
    else:
        if not quiet:
            print(f"Creating demo scene ({width}x{height})...")
        scene = create_demo_scene(config, obj_path=obj_path, obj_scale=obj_scale)

    if not quiet:
        print(
            f"Rendering {len(scene.primitives)} primitives, {len(scene.lights)} lights, "
            f"{config.samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()
    image = Image(width, height)
    scene.render(image)

    output_file = Path(output_path)
    save_png(image, output_file, gamma=gamma)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if show:
        from src.whitted.preview.display import show_preview

        show_preview(image, gamma=gamma)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi
    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")
    else:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_scene(
            width=args.width,
            height=args.height,
            samples_per_side=args.samples,
            max_depth=args.max_depth,
            fov_degrees=args.fov,
            scene_path=args.scene,
            obj_path=args.obj,
            obj_scale=args.obj_scale,
            output_path=args.output,
            gamma=args.gamma,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
