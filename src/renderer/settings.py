# renderer/settings.py
from dataclasses import dataclass, replace
from typing import Optional, Tuple
from core.vector import Vector3
from camera.camera import Camera

# Named presets; scale multiplies the configured image width
QUALITY_LEVELS = {
    "interactive": {"samples": 1, "bounces": 4, "scale": 0.25},
    "balanced": {"samples": 4, "bounces": 10, "scale": 0.5},
    "high_quality": {"samples": 10, "bounces": 50, "scale": 1.0},
    "final": {"samples": 500, "bounces": 50, "scale": 3.0},
}

@dataclass(frozen=True)
class RenderSettings:
    image_width: int = 400
    aspect_ratio: float = 3.0 / 2.0
    samples_per_pixel: int = 10
    max_depth: int = 50
    seed: Optional[int] = None
    workers: Optional[int] = None  # None means one per CPU
    rows_per_task: int = 1

    @property
    def image_height(self) -> int:
        return int(self.image_width / self.aspect_ratio)

    @classmethod
    def from_quality(cls, name: str, image_width: int = 400, **overrides) -> "RenderSettings":
        """
        Build settings from one of QUALITY_LEVELS, scaling the base image width.
        """
        try:
            quality = QUALITY_LEVELS[name]
        except KeyError:
            raise ValueError(f"Unknown quality level {name!r}; choose from {sorted(QUALITY_LEVELS)}") from None
        settings = cls(
            image_width=max(1, int(image_width * quality["scale"])),
            samples_per_pixel=quality["samples"],
            max_depth=quality["bounces"],
        )
        return replace(settings, **overrides)

    def validate(self) -> "RenderSettings":
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.image_width}x{self.image_height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        if self.rows_per_task <= 0:
            raise ValueError(f"rows_per_task must be positive, got {self.rows_per_task}")
        return self

@dataclass(frozen=True)
class CameraSettings:
    look_from: Tuple[float, float, float] = (13.0, 2.0, 3.0)
    look_at: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: Tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aperture: float = 0.1
    focus_dist: float = 10.0

    def validate(self) -> "CameraSettings":
        if not 0 < self.vfov < 180:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.focus_dist <= 0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        if self.aperture < 0:
            raise ValueError(f"aperture must not be negative, got {self.aperture}")
        if tuple(self.look_from) == tuple(self.look_at):
            raise ValueError("look_from and look_at must differ")
        return self

    def build(self, aspect_ratio: float) -> Camera:
        return Camera(
            Vector3(*self.look_from),
            Vector3(*self.look_at),
            Vector3(*self.vup),
            self.vfov,
            aspect_ratio,
            aperture=self.aperture,
            focus_dist=self.focus_dist,
        )
