"""Built-in demonstration scene.

A floor made of two diffuse triangles, a red diffuse sphere, a
mirror sphere, a glass sphere and two point lights, all in front of the
camera (which looks down +z from the origin). An OBJ model can be dropped
onto the floor in the middle of the spheres.

Example:
    >>> from src.whitted.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> len(scene.primitives)
    5
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.whitted.config import RenderConfig
from src.whitted.materials.material import Color, Material
from src.whitted.scene.manager import Scene

FLOOR_Y = -1.0


@dataclass
class DemoSceneParams:
    """Colors and positions of the demo scene.

    Attributes:
        floor_color: Diffuse color of the floor.
        sphere_color: Diffuse color of the matte sphere.
        glass_ior: Refractive index of the glass sphere.
        key_light: Position of the main light (upper left, behind the camera).
        fill_light: Position of the dimmer light (upper right).
    """

    floor_color: Color = (0.75, 0.75, 0.7)
    sphere_color: Color = (0.9, 0.15, 0.1)
    glass_ior: float = 1.5
    key_light: tuple[float, float, float] = (-4.0, 5.0, -1.0)
    key_light_color: Color = (0.8, 0.8, 0.8)
    fill_light: tuple[float, float, float] = (5.0, 3.0, 2.0)
    fill_light_color: Color = (0.35, 0.35, 0.4)


def create_demo_scene(
    config: RenderConfig | None = None,
    params: DemoSceneParams | None = None,
    obj_path: str | Path | None = None,
    obj_scale: float = 1.0,
) -> Scene:
    """Create the demonstration scene.

    Args:
        config: Render parameters for the scene.
        params: Colors and light placement; defaults to DemoSceneParams().
        obj_path: Optional OBJ model placed on the floor between the spheres.
        obj_scale: Uniform scale applied to the OBJ model.

    Returns:
        The populated Scene.
    """
    params = params or DemoSceneParams()
    scene = Scene(config)

    floor = Material.diffuse(params.floor_color)
    scene.add_triangle((-6.0, FLOOR_Y, 1.0), (-6.0, FLOOR_Y, 14.0), (6.0, FLOOR_Y, 14.0), floor)
    scene.add_triangle((-6.0, FLOOR_Y, 1.0), (6.0, FLOOR_Y, 14.0), (6.0, FLOOR_Y, 1.0), floor)

    scene.add_sphere((-1.6, -0.2, 6.0), 0.8, Material.diffuse(params.sphere_color))
    scene.add_sphere((1.4, 0.0, 7.5), 1.0, Material.reflective())
    scene.add_sphere((0.1, -0.45, 4.5), 0.55, Material.refractive(params.glass_ior))

    if obj_path is not None:
        scene.add_obj(
            obj_path,
            Material.diffuse((0.3, 0.5, 0.85)),
            offset=(0.0, FLOOR_Y, 9.0),
            scale=obj_scale,
        )

    scene.add_point_light(params.key_light, params.key_light_color)
    scene.add_point_light(params.fill_light, params.fill_light_color)
    return scene
