# src/materials/dielectric.py
import math
from typing import Tuple
from core.ray import Ray
from core.vector import Vector3
from core.utils import reflect
from geometry.hittable import HitRecord
from materials.material import Material

class Dielectric(Material):
    def __init__(self, ref_idx: float):
        self.ref_idx = ref_idx

    def scatter(self, ray_in: Ray, rec: HitRecord, rng) -> Tuple[Ray, Vector3]:
        attenuation = Vector3(1.0, 1.0, 1.0)  # Glass doesn't absorb light

        # Determine if we're entering or exiting the material
        refraction_ratio = 1.0 / self.ref_idx if rec.front_face else self.ref_idx

        unit_direction = ray_in.direction.normalize()

        # Calculate cosine using the angle between incoming ray and normal
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0
        if cannot_refract or schlick(cos_theta, refraction_ratio) > rng.random():
            direction = reflect(unit_direction, rec.normal)
        else:
            direction = refract(unit_direction, rec.normal, refraction_ratio)

        return Ray(rec.p, direction), attenuation

    def __repr__(self) -> str:
        return f"Dielectric({self.ref_idx})"

def refract(v: Vector3, n: Vector3, ni_over_nt: float) -> Vector3:
    """
    Snell's law, split into the components perpendicular and parallel to n.
    """
    unit_v = v.normalize()
    cos_theta = min(-unit_v.dot(n), 1.0)
    r_out_perp = (unit_v + n * cos_theta) * ni_over_nt
    r_out_parallel = n * (-math.sqrt(abs(1.0 - r_out_perp.dot(r_out_perp))))
    return r_out_perp + r_out_parallel

def schlick(cos_theta: float, ref_idx: float) -> float:
    """
    Schlick's approximation of the Fresnel reflectance.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * math.pow((1.0 - cos_theta), 5)
