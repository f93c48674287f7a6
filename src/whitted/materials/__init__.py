"""Materials module: the three shading variants.

Components:
    material: Material description, MaterialType enum, GPU material registry
    diffuse: Lambertian lighting from point lights with shadow rays
    reflective: Perfect mirror reflection rays
    dielectric: Fresnel reflectance and refraction rays

Shading of a hit is dispatched on its MaterialType by the ray caster in
src.whitted.core.integrator.
"""

from .material import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    add_material,
    as_color,
    clear_materials,
    get_material_color,
    get_material_count,
    get_material_ior,
    get_material_type,
)

# Note: diffuse, reflective and dielectric are NOT imported here; they depend
# on the scene storage, which imports nothing from this package.

__all__ = [
    "Material",
    "MaterialType",
    "MAX_MATERIALS",
    "as_color",
    "add_material",
    "clear_materials",
    "get_material_count",
    "get_material_type",
    "get_material_color",
    "get_material_ior",
]
