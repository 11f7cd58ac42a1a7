# geometry/sphere.py
import math
from typing import Optional
from core.vector import Vector3
from core.ray import Ray
from geometry.hittable import Hittable, HitRecord

class Sphere(Hittable):
    """
    Represents a sphere defined by its center, radius, and material.
    Several spheres may share one material instance.
    """
    def __init__(self, center: Vector3, radius: float, material):
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        # Solve |origin + t*direction - center|^2 = radius^2 with b = 2*half_b
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius
        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrt_disc = math.sqrt(discriminant)
        # Nearest root strictly inside (t_min, t_max)
        for root in ((-half_b - sqrt_disc) / a, (-half_b + sqrt_disc) / a):
            if t_min < root < t_max:
                break
        else:
            return None

        p = ray.at(root)
        rec = HitRecord(p=p, t=root, material=self.material)
        rec.set_face_normal(ray, (p - self.center) / self.radius)
        return rec

    def __repr__(self) -> str:
        return f"Sphere({self.center!r}, {self.radius}, {type(self.material).__name__})"
