# camera/camera.py
import math
from core.vector import Vector3
from core.ray import Ray

class Camera:
    """
    Thin-lens camera built from look-from/look-at extrinsics. vfov is the
    vertical field of view in degrees. Immutable once constructed.
    """
    def __init__(self, look_from: Vector3, look_at: Vector3, vup: Vector3,
                 vfov: float, aspect_ratio: float, aperture: float = 0.0, focus_dist: float = 10.0):
        self.vfov = vfov
        self.aspect_ratio = aspect_ratio
        self.aperture = aperture  # Lens aperture for depth of field
        self.focus_dist = focus_dist  # Distance to focus plane
        self.lens_radius = aperture / 2.0

        # Compute viewport dimensions based on fov
        theta = math.radians(vfov)
        viewport_height = 2.0 * math.tan(theta / 2)
        viewport_width = aspect_ratio * viewport_height

        # Orthonormal basis: w points backwards, u right, v up
        self.w = (look_from - look_at).normalize()
        self.u = vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        self.origin = look_from
        # Scale by focus distance
        self.horizontal = self.u * (viewport_width * focus_dist)
        self.vertical = self.v * (viewport_height * focus_dist)
        self.lower_left_corner = (self.origin -
                                  self.horizontal * 0.5 -
                                  self.vertical * 0.5 -
                                  self.w * focus_dist)

    def get_ray(self, s: float, t: float, rng) -> Ray:
        """Generates a ray with depth of field effect."""
        # Generate random point on lens
        rd = self.lens_radius * random_in_unit_disk(rng)
        offset = self.u * rd.x + self.v * rd.y

        ray_origin = self.origin + offset
        ray_direction = (self.lower_left_corner +
                         self.horizontal * s +
                         self.vertical * t -
                         ray_origin)
        return Ray(ray_origin, ray_direction)

def random_in_unit_disk(rng) -> Vector3:
    """Generate random point in unit disk for DOF."""
    while True:
        p = Vector3(
            rng.uniform(-1, 1),
            rng.uniform(-1, 1),
            0
        )
        if p.dot(p) < 1:
            return p
