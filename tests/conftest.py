"""Pytest configuration for raytracer tests.

Shared fixtures: seeded generators, small worlds and a default camera.
Renders in tests stay tiny because the tracer is pure Python.
"""

import numpy as np
import pytest

from camera.camera import Camera
from core.vector import Vector3
from geometry.sphere import Sphere
from geometry.world import HittableList
from materials.lambertian import Lambertian


class ScriptedRng:
    """Stand-in generator that replays fixed draws.

    uniform() ignores its bounds and returns the next scripted value, so
    tests control the exact numbers the sampling helpers see.
    """

    def __init__(self, uniforms=(), randoms=()):
        self._uniforms = list(uniforms)
        self._randoms = list(randoms)

    def uniform(self, lo=0.0, hi=1.0):
        return self._uniforms.pop(0)

    def random(self):
        return self._randoms.pop(0)


@pytest.fixture
def rng():
    """A seeded numpy generator."""
    return np.random.default_rng(42)


@pytest.fixture
def scripted_rng():
    """Factory for generators with scripted draws."""
    return ScriptedRng


@pytest.fixture
def unit_sphere_world():
    """A single diffuse unit sphere at the origin."""
    world = HittableList()
    world.add(Sphere(Vector3(0, 0, 0), 1.0, Lambertian(Vector3(0.5, 0.5, 0.5))))
    return world


@pytest.fixture
def ground_and_sphere_world():
    """A large ground sphere with one Lambertian sphere resting on it."""
    world = HittableList()
    world.add(Sphere(Vector3(0, -100.5, -1), 100, Lambertian(Vector3(0.8, 0.8, 0.0))))
    world.add(Sphere(Vector3(0, 0, -1), 0.5, Lambertian(Vector3(0.1, 0.2, 0.5))))
    return world


@pytest.fixture
def front_camera():
    """Pinhole camera at (0, 0, 3) looking down -z with a 90 degree view."""
    return Camera(
        Vector3(0, 0, 3), Vector3(0, 0, 0), Vector3(0, 1, 0),
        vfov=90.0, aspect_ratio=1.0, aperture=0.0, focus_dist=3.0,
    )
