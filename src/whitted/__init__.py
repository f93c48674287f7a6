"""Whitted-style recursive ray tracer built on Taichi.

This package renders scenes made of spheres, triangles and OBJ triangle meshes
lit by point lights, with:
- Lambertian diffuse shading with hard shadows
- Perfect mirror reflection
- Dielectric refraction blended by the Fresnel equations
- Supersampled anti-aliasing on a regular sub-pixel grid

Subpackages:
    core: Ray and vector utilities, hit records, the recursive ray caster
    geometry: Sphere, triangle and mesh intersection, OBJ reading
    materials: Material registry and per-variant shading
    scene: Primitive/light storage, nearest-hit queries, the Scene container
    camera: Pixel to world-space ray mapping
    preview: Image buffer, tone mapping, PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
