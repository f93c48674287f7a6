"""Material description and GPU-side material registry.

A Material tags a primitive with one of three shading behaviours:

    DIFFUSE     Lambertian lighting from the point lights, with hard shadows
    REFLECTIVE  Perfect mirror; the local color is not blended in
    REFRACTIVE  Dielectric; reflection and refraction mixed by Fresnel

Materials are immutable and hashable, so one Material can be shared by any
number of primitives and is registered only once per render.

Example:
    >>> from src.whitted.materials.material import Material
    >>> red = Material.diffuse((1.0, 0.0, 0.0))
    >>> glass = Material.refractive(1.5)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]


class MaterialType(IntEnum):
    """Enumeration of supported shading variants.

    Used by the ray caster to decide how a hit is resolved.
    """

    DIFFUSE = 0
    REFLECTIVE = 1
    REFRACTIVE = 2


def as_color(value: Any, name: str = "color") -> Color:
    """Validate and convert a 3-component color or vector.

    Raises:
        ValueError: If the value does not have exactly three numeric components.
    """
    try:
        components = [float(c) for c in value]
    except TypeError as e:
        raise ValueError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    return components[0], components[1], components[2]


@dataclass(frozen=True)
class Material:
    """Shading behaviour of a primitive.

    Attributes:
        kind: The shading variant.
        color: Base color (RGB). Used by diffuse shading.
        refractive_index: Index of refraction, >= 1. Only read for
            refractive materials. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    kind: MaterialType
    color: Color = (1.0, 1.0, 1.0)
    refractive_index: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", MaterialType(self.kind))
        object.__setattr__(self, "color", as_color(self.color))
        if self.refractive_index < 1.0:
            raise ValueError(
                f"Index of refraction = {self.refractive_index} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )

    @classmethod
    def diffuse(cls, color: Color) -> "Material":
        return cls(MaterialType.DIFFUSE, color)

    @classmethod
    def reflective(cls, color: Color = (1.0, 1.0, 1.0)) -> "Material":
        return cls(MaterialType.REFLECTIVE, color)

    @classmethod
    def refractive(cls, refractive_index: float = 1.5, color: Color = (1.0, 1.0, 1.0)) -> "Material":
        return cls(MaterialType.REFRACTIVE, color, refractive_index)

    def to_dict(self) -> dict[str, Any]:
        """Export the material to a dictionary (for JSON serialization)."""
        data: dict[str, Any] = {"type": self.kind.name.lower(), "color": list(self.color)}
        if self.kind == MaterialType.REFRACTIVE:
            data["refractive_index"] = self.refractive_index
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        """Build a material from a dictionary.

        Raises:
            ValueError: If the material type is unknown.
        """
        kind_name = str(data.get("type", "")).upper()
        if kind_name not in MaterialType.__members__:
            raise ValueError(f"Unknown material type: {data.get('type')!r}")
        return cls(
            MaterialType[kind_name],
            as_color(data.get("color", (1.0, 1.0, 1.0))),
            float(data.get("refractive_index", 1.0)),
        )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of distinct materials in the scene
MAX_MATERIALS = 256

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all registered materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Add a material to the registry.

    Args:
        material: The material to upload.

    Returns:
        The material ID to store on primitives.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[idx] = int(material.kind)
    material_colors[idx] = vec3(*material.color)
    material_iors[idx] = material.refractive_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the shading variant for a material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_color(material_id: ti.i32) -> vec3:
    """Get the base color for a material ID."""
    return material_colors[material_id]


@ti.func
def get_material_ior(material_id: ti.i32) -> ti.f32:
    """Get the refractive index for a material ID."""
    return material_iors[material_id]
