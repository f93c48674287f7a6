"""Scene: the set of primitives and lights, and the render entry point.

The Scene keeps Python-side descriptions of its primitives and lights and
uploads them to the Taichi field storage right before rendering. Primitives
and lights form sets: adding an equal object a second time has no effect.
Spheres, triangles and lights compare by value; meshes compare by identity.
Insertion order is kept only so uploads are deterministic.

Materials are shared by reference. Equal materials are uploaded once and
their ID is reused by every primitive that carries them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.materials.material import Material
    >>> from src.whitted.preview.image import Image
    >>> from src.whitted.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0, 0, 3), 1.0, Material.diffuse((1, 0, 0)))
    >>> scene.add_point_light((0, 0, 0), (1, 1, 1))
    >>> image = Image(64, 64)
    >>> scene.render(image)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Union

import numpy as np
import numpy.typing as npt

from src.whitted.config import RenderConfig
from src.whitted.core.integrator import render_to_numpy
from src.whitted.geometry.mesh import bounding_sphere, place_vertices
from src.whitted.geometry.obj import MeshData, load_obj
from src.whitted.materials.material import (
    Color,
    Material,
    add_material,
    as_color,
    clear_materials,
)
from src.whitted.preview.image import Image
from src.whitted.scene.intersection import add_mesh, add_sphere, add_triangle, clear_scene
from src.whitted.scene.lights import add_light, clear_lights

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


class RenderTarget(Protocol):
    """Anything a Scene can render into."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def set_pixel(self, x: int, y: int, color: Color) -> None: ...


def _require_material(material: Any) -> Material:
    if not isinstance(material, Material):
        raise ValueError(f"Primitive material must be a Material, got {material!r}")
    return material


# =============================================================================
# Primitives and Lights
# =============================================================================


@dataclass(frozen=True)
class SpherePrimitive:
    """A sphere with its material.

    Raises:
        ValueError: If the radius is not positive.
    """

    center: Vec3
    radius: float
    material: Material

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_color(self.center, "center"))
        object.__setattr__(self, "radius", float(self.radius))
        if self.radius <= 0.0:
            raise ValueError(f"Sphere radius = {self.radius} must be positive")
        _require_material(self.material)


@dataclass(frozen=True)
class TrianglePrimitive:
    """A single triangle; per-vertex normals enable smooth shading."""

    v0: Vec3
    v1: Vec3
    v2: Vec3
    material: Material
    normals: tuple[Vec3, Vec3, Vec3] | None = None

    def __post_init__(self) -> None:
        for name in ("v0", "v1", "v2"):
            object.__setattr__(self, name, as_color(getattr(self, name), name))
        if self.normals is not None:
            if len(self.normals) != 3:
                raise ValueError(f"Triangle needs 3 vertex normals, got {len(self.normals)}")
            object.__setattr__(
                self, "normals", tuple(as_color(n, "normal") for n in self.normals)
            )
        _require_material(self.material)


class TriangleMesh:
    """A triangle mesh placed in the world with a shared material.

    Vertices are transformed once (vertex * scale + offset) and the bounding
    sphere is computed once from the placed vertices. Faces that reference a
    vertex or normal outside the loaded lists are kept; the intersection
    routine skips them.

    Args:
        mesh_data: Vertex, normal and face lists (0-based indices).
        material: Material shared by every face.
        offset: Translation applied after scaling.
        scale: Uniform scale factor (must be positive).
        source: Path of the OBJ file the data came from, if any. Needed to
            serialize the mesh.

    Raises:
        ValueError: If the scale is not positive or the material is missing.
    """

    def __init__(
        self,
        mesh_data: MeshData,
        material: Material,
        offset: Vec3 = (0.0, 0.0, 0.0),
        scale: float = 1.0,
        source: str | Path | None = None,
    ) -> None:
        self.mesh_data = mesh_data
        self.material = _require_material(material)
        self.offset = as_color(offset, "offset")
        self.scale = float(scale)
        self.source = str(source) if source is not None else None

        self.vertices: npt.NDArray[np.float64] = place_vertices(
            mesh_data.vertices, self.offset, self.scale
        )
        self.bound_center, self.bound_radius = bounding_sphere(self.vertices)

        invalid = mesh_data.invalid_face_count()
        if invalid:
            logger.warning(
                "Mesh %s has %d of %d faces with out-of-range indices; they will be skipped",
                self.source or "<memory>",
                invalid,
                mesh_data.face_count,
            )

    @classmethod
    def from_obj(
        cls,
        path: str | Path,
        material: Material,
        offset: Vec3 = (0.0, 0.0, 0.0),
        scale: float = 1.0,
    ) -> TriangleMesh:
        """Load an OBJ file and place it in the world."""
        return cls(load_obj(path), material, offset=offset, scale=scale, source=path)

    @property
    def face_count(self) -> int:
        return self.mesh_data.face_count

    def __repr__(self) -> str:
        return (
            f"TriangleMesh(source={self.source!r}, faces={self.face_count}, "
            f"offset={self.offset}, scale={self.scale})"
        )


@dataclass(frozen=True)
class PointLight:
    """A zero-size light with an RGB color that also carries its intensity."""

    position: Vec3
    color: Color = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_color(self.position, "position"))
        object.__setattr__(self, "color", as_color(self.color))


Primitive = Union[SpherePrimitive, TrianglePrimitive, TriangleMesh]


# =============================================================================
# Scene
# =============================================================================


class Scene:
    """A set of primitives and point lights rendered with a fixed configuration.

    Only one scene can be resident in the Taichi field storage at a time;
    render() uploads this scene, replacing whatever was there.

    Attributes:
        config: Render parameters used by render().
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()
        # Dicts keep insertion order and reject duplicates
        self._primitives: dict[Primitive, None] = {}
        self._lights: dict[PointLight, None] = {}

    @property
    def primitives(self) -> tuple[Primitive, ...]:
        return tuple(self._primitives)

    @property
    def lights(self) -> tuple[PointLight, ...]:
        return tuple(self._lights)

    def __len__(self) -> int:
        return len(self._primitives)

    def clear(self) -> None:
        """Remove every primitive and light."""
        self._primitives.clear()
        self._lights.clear()

    # =========================================================================
    # Construction
    # =========================================================================

    def add_primitive(self, primitive: Primitive) -> bool:
        """Add a primitive to the set.

        Returns:
            True if the primitive was added, False if it was already present.
        """
        if not isinstance(primitive, (SpherePrimitive, TrianglePrimitive, TriangleMesh)):
            raise ValueError(f"Not a primitive: {primitive!r}")
        if primitive in self._primitives:
            return False
        self._primitives[primitive] = None
        return True

    def add_light(self, light: PointLight) -> bool:
        """Add a light to the set.

        Returns:
            True if the light was added, False if it was already present.
        """
        if not isinstance(light, PointLight):
            raise ValueError(f"Not a point light: {light!r}")
        if light in self._lights:
            return False
        self._lights[light] = None
        return True

    def add_sphere(self, center: Vec3, radius: float, material: Material) -> SpherePrimitive:
        sphere = SpherePrimitive(center, radius, material)
        self.add_primitive(sphere)
        return sphere

    def add_triangle(
        self,
        v0: Vec3,
        v1: Vec3,
        v2: Vec3,
        material: Material,
        normals: tuple[Vec3, Vec3, Vec3] | None = None,
    ) -> TrianglePrimitive:
        triangle = TrianglePrimitive(v0, v1, v2, material, normals)
        self.add_primitive(triangle)
        return triangle

    def add_mesh(
        self,
        mesh_data: MeshData,
        material: Material,
        offset: Vec3 = (0.0, 0.0, 0.0),
        scale: float = 1.0,
    ) -> TriangleMesh:
        mesh = TriangleMesh(mesh_data, material, offset=offset, scale=scale)
        self.add_primitive(mesh)
        return mesh

    def add_obj(
        self,
        path: str | Path,
        material: Material,
        offset: Vec3 = (0.0, 0.0, 0.0),
        scale: float = 1.0,
    ) -> TriangleMesh:
        mesh = TriangleMesh.from_obj(path, material, offset=offset, scale=scale)
        self.add_primitive(mesh)
        return mesh

    def add_point_light(self, position: Vec3, color: Color = (1.0, 1.0, 1.0)) -> PointLight:
        light = PointLight(position, color)
        self.add_light(light)
        return light

    # =========================================================================
    # Upload and Render
    # =========================================================================

    def materials(self) -> list[Material]:
        """Distinct materials in first-use order."""
        seen: dict[Material, None] = {}
        for primitive in self._primitives:
            seen.setdefault(primitive.material, None)
        return list(seen)

    def upload(self) -> None:
        """Replace the Taichi field storage with this scene."""
        clear_scene()
        clear_materials()
        clear_lights()

        material_ids = {material: add_material(material) for material in self.materials()}

        for primitive in self._primitives:
            material_id = material_ids[primitive.material]
            if isinstance(primitive, SpherePrimitive):
                add_sphere(primitive.center, primitive.radius, material_id)
            elif isinstance(primitive, TrianglePrimitive):
                add_triangle(
                    primitive.v0, primitive.v1, primitive.v2, material_id, primitive.normals
                )
            else:
                data = primitive.mesh_data
                add_mesh(
                    primitive.vertices,
                    data.normals,
                    data.face_vertices,
                    data.face_normals,
                    data.face_has_normals,
                    primitive.bound_center,
                    primitive.bound_radius,
                    material_id,
                )

        for light in self._lights:
            add_light(light.position, light.color)

        logger.info(
            "Uploaded scene: %d primitives, %d materials, %d lights",
            len(self._primitives),
            len(material_ids),
            len(self._lights),
        )

    def render(self, image: RenderTarget) -> None:
        """Render the scene into an image.

        Every pixel is written exactly once via set_pixel (row 0 is the top
        row). Colors are non-negative and not clamped above.

        Args:
            image: Target exposing width, height and set_pixel(x, y, color).

        Raises:
            ValueError: If the image is larger than the render buffer.
        """
        width, height = int(image.width), int(image.height)
        self.upload()

        start = time.perf_counter()
        pixels = render_to_numpy(width, height, self.config)
        elapsed = time.perf_counter() - start
        logger.info(
            "Rendered %dx%d at %d samples per pixel in %.2fs",
            width,
            height,
            self.config.samples_per_pixel,
            elapsed,
        )

        if isinstance(image, Image):
            image.fill(pixels)
            return
        for y in range(height):
            for x in range(width):
                r, g, b = pixels[y, x]
                image.set_pixel(x, y, (float(r), float(g), float(b)))

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Raises:
            ValueError: If a mesh was not loaded from a file.
        """
        materials = self.materials()
        index = {material: i for i, material in enumerate(materials)}

        primitives: list[dict[str, Any]] = []
        for primitive in self._primitives:
            if isinstance(primitive, SpherePrimitive):
                entry: dict[str, Any] = {
                    "type": "sphere",
                    "center": list(primitive.center),
                    "radius": primitive.radius,
                }
            elif isinstance(primitive, TrianglePrimitive):
                entry = {
                    "type": "triangle",
                    "vertices": [list(primitive.v0), list(primitive.v1), list(primitive.v2)],
                }
                if primitive.normals is not None:
                    entry["normals"] = [list(n) for n in primitive.normals]
            else:
                if primitive.source is None:
                    raise ValueError("Only meshes loaded from an OBJ file can be serialized")
                entry = {
                    "type": "mesh",
                    "path": primitive.source,
                    "offset": list(primitive.offset),
                    "scale": primitive.scale,
                }
            entry["material"] = index[primitive.material]
            primitives.append(entry)

        return {
            "render": self.config.to_dict(),
            "materials": [material.to_dict() for material in materials],
            "primitives": primitives,
            "lights": [
                {"position": list(light.position), "color": list(light.color)}
                for light in self._lights
            ],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        config: RenderConfig | None = None,
        base_dir: str | Path | None = None,
    ) -> Scene:
        """Build a scene from a dictionary.

        Args:
            data: Scene description as produced by to_dict().
            config: Overrides the "render" section when given.
            base_dir: Directory that relative mesh paths are resolved against.

        Raises:
            ValueError: If a material, primitive type or material index is invalid.
        """
        if config is None:
            config = RenderConfig.from_dict(data.get("render", {}))
        scene = cls(config)

        materials = [Material.from_dict(m) for m in data.get("materials", [])]

        def material_at(entry: dict[str, Any]) -> Material:
            i = entry.get("material", 0)
            if not isinstance(i, int) or not 0 <= i < len(materials):
                raise ValueError(f"Invalid material index {i!r} ({len(materials)} materials)")
            return materials[i]

        for entry in data.get("primitives", []):
            kind = entry.get("type")
            if kind == "sphere":
                scene.add_sphere(entry["center"], entry["radius"], material_at(entry))
            elif kind == "triangle":
                v0, v1, v2 = entry["vertices"]
                normals = entry.get("normals")
                scene.add_triangle(
                    v0, v1, v2, material_at(entry), tuple(normals) if normals else None
                )
            elif kind == "mesh":
                path = Path(entry["path"])
                if base_dir is not None and not path.is_absolute():
                    path = Path(base_dir) / path
                scene.add_obj(
                    path,
                    material_at(entry),
                    offset=entry.get("offset", (0.0, 0.0, 0.0)),
                    scale=entry.get("scale", 1.0),
                )
            else:
                raise ValueError(f"Unknown primitive type: {kind!r}")

        for entry in data.get("lights", []):
            scene.add_point_light(entry["position"], entry.get("color", (1.0, 1.0, 1.0)))

        return scene


def load_scene(path: str | Path, config: RenderConfig | None = None) -> Scene:
    """Read a scene from a JSON file; mesh paths are relative to the file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    scene = Scene.from_dict(data, config=config, base_dir=path.parent)
    logger.info(
        "Loaded scene %s: %d primitives, %d lights", path, len(scene), len(scene.lights)
    )
    return scene


def save_scene(scene: Scene, path: str | Path) -> None:
    """Write a scene to a JSON file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(scene.to_dict(), f, indent=2)
