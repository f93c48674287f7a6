"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with robust ray-sphere intersection
    triangle: Triangle primitive with flat or smooth (vertex normal) shading
    mesh: Mesh placement and bounding sphere computation
    obj: Wavefront OBJ reader producing triangle mesh data

Intersection routines are Taichi functions (@ti.func). Every routine only
accepts hits with t > t_min and returns a miss record for degenerate input
(negative discriminant, parallel ray, collinear vertices).
"""

from .mesh import bounding_sphere, place_vertices
from .obj import MeshData, load_obj, parse_obj
from .sphere import Sphere, hit_sphere
from .triangle import hit_triangle_vertices, triangle_normal

__all__ = [
    "Sphere",
    "hit_sphere",
    "hit_triangle_vertices",
    "triangle_normal",
    "MeshData",
    "parse_obj",
    "load_obj",
    "place_vertices",
    "bounding_sphere",
]
