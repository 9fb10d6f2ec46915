"""Pytest configuration for pathtracer tests.

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


@pytest.fixture
def gray_materials():
    """Single-entry material table with a 0.5 gray albedo."""
    from pathtracer.materials.lambertian import MaterialTable

    return MaterialTable.from_colors([(0.5, 0.5, 0.5)])


@pytest.fixture
def floor_plane():
    """Infinite plane y = 0 facing +y, surface id 0."""
    from doubles import PlaneIntersector

    return PlaneIntersector(point=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0))
