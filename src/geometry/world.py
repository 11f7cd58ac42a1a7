# src/geometry/world.py
from geometry.hittable import Hittable, HitRecord
from typing import Iterable, Optional, List
from core.ray import Ray

class HittableList(Hittable):
    """
    An ordered list of Hittable objects. Every member is tested on each query
    and the closest hit wins; the list is treated as read-only while rendering.
    """
    def __init__(self, objects: Iterable[Hittable] = ()):
        self.objects: List[Hittable] = list(objects)

    def add(self, obj: Hittable):
        self.objects.append(obj)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        hit_record = None
        closest_so_far = t_max
        for obj in self.objects:
            rec = obj.hit(ray, t_min, closest_so_far)
            if rec is not None:
                closest_so_far = rec.t
                hit_record = rec
        return hit_record
