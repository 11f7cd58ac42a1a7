# renderer/integrator.py
from core.ray import Ray
from core.vector import Vector3
from geometry.hittable import Hittable

# Ignore hits very near zero to avoid self-intersection ("shadow acne")
T_MIN = 0.001
INFINITY = float("inf")

BLACK = Vector3(0.0, 0.0, 0.0)
WHITE = Vector3(1.0, 1.0, 1.0)
SKY_BLUE = Vector3(0.5, 0.7, 1.0)

def background_color(ray: Ray) -> Vector3:
    """
    Vertical white-to-sky-blue gradient seen by rays that escape the scene.
    """
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t

def ray_color(ray: Ray, world: Hittable, depth: int, rng) -> Vector3:
    """
    Radiance carried back along ray. Each call either terminates (depth
    exhausted, absorbed, or escaped) or recurses exactly once.
    """
    # If we've exceeded the ray bounce limit, no more light is gathered
    if depth <= 0:
        return BLACK

    rec = world.hit(ray, T_MIN, INFINITY)
    if rec is not None:
        result = rec.material.scatter(ray, rec, rng)
        if result is None:
            return BLACK
        scattered, attenuation = result
        return attenuation * ray_color(scattered, world, depth - 1, rng)

    return background_color(ray)
