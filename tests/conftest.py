"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear primitives, materials and lights before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are declared after Taichi is initialized
    from src.whitted.materials.material import clear_materials
    from src.whitted.scene.intersection import clear_scene
    from src.whitted.scene.lights import clear_lights

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def obj_file(tmp_path):
    """Write an OBJ file and return its path."""

    def _write(text: str, name: str = "model.obj"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
