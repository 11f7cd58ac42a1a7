"""Tests for Lambertian, Metal and Dielectric scattering."""

import math

import pytest

from core.ray import Ray
from core.utils import reflect
from core.vector import Vector3
from geometry.hittable import HitRecord
from materials.dielectric import Dielectric, refract, schlick
from materials.lambertian import Lambertian
from materials.metal import Metal


def make_record(normal, front_face=True, p=None):
    return HitRecord(p=p or Vector3(0, 0, 0), normal=normal, t=1.0, front_face=front_face)


class TestLambertian:
    def test_attenuation_is_albedo(self, rng):
        albedo = Vector3(0.2, 0.4, 0.6)
        rec = make_record(Vector3(0, 1, 0), p=Vector3(1, 2, 3))
        scattered, attenuation = Lambertian(albedo).scatter(Ray(Vector3(0, 5, 0), Vector3(0, -1, 0)), rec, rng)
        assert attenuation is albedo
        assert tuple(scattered.origin) == (1, 2, 3)

    def test_scatters_into_upper_hemisphere(self, rng):
        rec = make_record(Vector3(0, 1, 0))
        material = Lambertian(Vector3(0.5, 0.5, 0.5))
        for _ in range(200):
            scattered, _ = material.scatter(Ray(Vector3(0, 5, 0), Vector3(0, -1, 0)), rec, rng)
            assert scattered.direction.dot(rec.normal) >= 0
            assert not scattered.direction.near_zero()

    def test_degenerate_direction_falls_back_to_normal(self, scripted_rng):
        """A random unit vector opposite the normal cancels it out."""
        normal = Vector3(0, 0, 1)
        rec = make_record(normal)
        rng = scripted_rng(uniforms=[0.0, 0.0, -0.5])
        scattered, _ = Lambertian(Vector3(1, 1, 1)).scatter(Ray(Vector3(0, 0, 1), Vector3(0, 0, -1)), rec, rng)
        assert scattered.direction is normal


class TestMetal:
    def test_mirror_reflection(self, rng):
        albedo = Vector3(0.8, 0.6, 0.2)
        rec = make_record(Vector3(0, 1, 0))
        result = Metal(albedo, 0.0).scatter(Ray(Vector3(-1, 1, 0), Vector3(1, -1, 0)), rec, rng)
        assert result is not None
        scattered, attenuation = result
        assert attenuation is albedo
        expected = Vector3(1, 1, 0).normalize()
        assert tuple(scattered.direction) == pytest.approx(tuple(expected))

    def test_grazing_reflection_is_absorbed(self, rng):
        rec = make_record(Vector3(0, 0, 1))
        assert Metal(Vector3(1, 1, 1), 0.0).scatter(Ray(Vector3(0, 0, 0), Vector3(1, 0, 0)), rec, rng) is None

    def test_fuzz_is_clamped(self):
        assert Metal(Vector3(1, 1, 1), 3.0).fuzz == 1

    def test_attenuation_bounded_by_albedo(self, rng):
        albedo = Vector3(0.9, 0.5, 0.1)
        rec = make_record(Vector3(0, 1, 0))
        material = Metal(albedo, 0.8)
        for _ in range(200):
            result = material.scatter(Ray(Vector3(0, 5, 0), Vector3(0.3, -1, 0)), rec, rng)
            if result is None:
                continue
            scattered, attenuation = result
            assert scattered.direction.dot(rec.normal) > 0
            assert attenuation.x <= albedo.x
            assert attenuation.y <= albedo.y
            assert attenuation.z <= albedo.z


class TestDielectric:
    def test_attenuation_is_white(self, rng):
        material = Dielectric(1.5)
        for front_face in (True, False):
            rec = make_record(Vector3(0, 0, 1), front_face=front_face)
            for _ in range(50):
                _, attenuation = material.scatter(Ray(Vector3(0, 0, 1), Vector3(0.2, 0.1, -1)), rec, rng)
                assert tuple(attenuation) == (1.0, 1.0, 1.0)

    def test_normal_incidence_refracts_straight_through(self, scripted_rng):
        rec = make_record(Vector3(0, 0, 1))
        scattered, _ = Dielectric(1.5).scatter(Ray(Vector3(0, 0, 1), Vector3(0, 0, -1)), rec, scripted_rng(randoms=[0.5]))
        assert tuple(scattered.direction) == pytest.approx((0, 0, -1))

    def test_reflects_when_draw_below_reflectance(self, scripted_rng):
        rec = make_record(Vector3(0, 0, 1))
        scattered, _ = Dielectric(1.5).scatter(Ray(Vector3(0, 0, 1), Vector3(0, 0, -1)), rec, scripted_rng(randoms=[0.0]))
        assert tuple(scattered.direction) == pytest.approx((0, 0, 1))

    def test_total_internal_reflection(self, scripted_rng):
        """Leaving glass at a grazing angle always reflects, whatever the draw."""
        normal = Vector3(0, 0, 1)
        rec = make_record(normal, front_face=False)
        direction = Vector3(math.sqrt(1 - 0.1 ** 2), 0, -0.1)
        scattered, _ = Dielectric(1.5).scatter(Ray(Vector3(0, 0, 1), direction), rec, scripted_rng(randoms=[0.99]))
        assert tuple(scattered.direction) == pytest.approx(tuple(reflect(direction, normal)))

    def test_refraction_obeys_snell(self):
        n = Vector3(0, 1, 0)
        incident = Vector3(1, -1, 0).normalize()
        ratio = 1.0 / 1.5
        out = refract(incident, n, ratio)
        sin_in = math.sqrt(1 - (-incident.dot(n)) ** 2)
        sin_out = math.sqrt(1 - (out.normalize().dot(-n)) ** 2)
        assert sin_out == pytest.approx(ratio * sin_in)
        assert out.length() == pytest.approx(1.0)


class TestSchlick:
    @pytest.mark.parametrize("ratio", [1.0 / 1.5, 1.5, 2.42])
    def test_normal_incidence_equals_r0(self, ratio):
        r0 = ((1 - ratio) / (1 + ratio)) ** 2
        assert schlick(1.0, ratio) == pytest.approx(r0)

    @pytest.mark.parametrize("ratio", [1.0 / 1.5, 1.5])
    def test_grazing_incidence_approaches_one(self, ratio):
        assert schlick(0.0, ratio) == pytest.approx(1.0)
        assert schlick(1e-4, ratio) == pytest.approx(1.0, abs=1e-3)

    def test_monotonic_in_angle(self):
        values = [schlick(c, 1.5) for c in (1.0, 0.8, 0.5, 0.2, 0.0)]
        assert values == sorted(values)
