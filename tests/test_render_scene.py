"""Tests for the render_scene command-line example.

main() is not called here because it initializes Taichi itself; the session
fixture already did that. render_scene() is exercised directly instead.
"""

import json

import pytest
from PIL import Image as PILImage


class TestParseArgs:
    def test_defaults(self):
        from examples.render_scene import parse_args

        args = parse_args([])
        assert args.width == 640
        assert args.height == 480
        assert args.samples == 2
        assert args.max_depth == 10
        assert args.fov == 60.0
        assert args.scene is None
        assert args.output == "whitted.png"
        assert args.arch == "gpu"
        assert not args.show

    def test_options(self):
        from examples.render_scene import parse_args

        args = parse_args(
            ["--width", "64", "--samples", "3", "--max-depth", "4", "--obj", "bunny.obj", "--quiet"]
        )
        assert args.width == 64
        assert args.samples == 3
        assert args.max_depth == 4
        assert args.obj == "bunny.obj"
        assert args.quiet

    def test_rejects_unknown_arch(self):
        from examples.render_scene import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--arch", "tpu"])


class TestRenderScene:
    def test_demo_scene_to_png(self, tmp_path):
        from examples.render_scene import render_scene

        output = render_scene(
            width=24,
            height=16,
            samples_per_side=1,
            max_depth=3,
            output_path=str(tmp_path / "demo.png"),
            quiet=True,
        )

        assert output.exists()
        with PILImage.open(output) as image:
            assert image.size == (24, 16)

    def test_scene_file_to_png(self, tmp_path):
        from examples.render_scene import render_scene

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(
            json.dumps(
                {
                    "materials": [{"type": "diffuse", "color": [1, 0, 0]}],
                    "primitives": [
                        {"type": "sphere", "center": [0, 0, 3], "radius": 1, "material": 0}
                    ],
                    "lights": [{"position": [0, 0, 0]}],
                }
            )
        )

        output = render_scene(
            width=16,
            height=16,
            samples_per_side=1,
            scene_path=str(scene_path),
            output_path=str(tmp_path / "disc.png"),
            quiet=True,
        )

        with PILImage.open(output) as image:
            r, g, b = image.getpixel((8, 8))
            assert r > 200
            assert g == 0
            assert b == 0
            assert image.getpixel((0, 0)) == (0, 0, 0)

    def test_invalid_settings(self, tmp_path):
        from examples.render_scene import render_scene

        with pytest.raises(ValueError):
            render_scene(
                width=8,
                height=8,
                max_depth=100,
                output_path=str(tmp_path / "x.png"),
                quiet=True,
            )
