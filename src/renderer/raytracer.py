# renderer/raytracer.py
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

import numpy as np

from renderer.integrator import ray_color
from renderer.tone_mapping import gamma_quantize_kernel

# Receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Scene state installed once per worker process by the pool initializer
_worker_scene = None

def _init_worker(world, camera, width, height, samples_per_pixel, max_depth):
    global _worker_scene
    _worker_scene = (world, camera, width, height, samples_per_pixel, max_depth)

def _render_task(rows, seeds):
    return rows, render_rows(*_worker_scene, rows, seeds)

def render_rows(world, camera, width: int, height: int, samples_per_pixel: int,
                max_depth: int, rows: Sequence[int], seeds: Sequence) -> np.ndarray:
    """
    Trace the given scanlines (j = 0 is the bottom of the image) and return
    their quantized colors as a (len(rows), width, 3) uint8 array.

    Each scanline draws from its own generator built from the matching entry
    of seeds, so the result does not depend on which process renders it.
    """
    output = np.empty((len(rows), width, 3), dtype=np.uint8)
    pixel_sums = np.empty((width, 3), dtype=np.float64)
    # Single-pixel axes would divide by zero
    u_scale = 1.0 / max(width - 1, 1)
    v_scale = 1.0 / max(height - 1, 1)

    for k, (j, seed) in enumerate(zip(rows, seeds)):
        rng = np.random.default_rng(seed)
        for i in range(width):
            r = g = b = 0.0
            for _ in range(samples_per_pixel):
                s = (i + rng.random()) * u_scale
                t = (j + rng.random()) * v_scale
                color = ray_color(camera.get_ray(s, t, rng), world, max_depth, rng)
                r += color.x
                g += color.y
                b += color.z
            pixel_sums[i, 0] = r
            pixel_sums[i, 1] = g
            pixel_sums[i, 2] = b
        gamma_quantize_kernel(pixel_sums, samples_per_pixel, output[k])
    return output

class Renderer:
    """
    Multi-sample path tracer over an immutable world and camera.

    Scanlines are independent: they are grouped into tasks and dispatched to
    a process pool, and each task writes only its own rows of the buffer.
    """
    def __init__(self, width: int, height: int, samples_per_pixel: int = 10, max_depth: int = 50,
                 workers: Optional[int] = None, seed: Optional[int] = None,
                 rows_per_task: int = 1, debug_mode: bool = False):
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
        if max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        if workers is not None and workers <= 0:
            raise ValueError(f"workers must be positive, got {workers}")
        if rows_per_task <= 0:
            raise ValueError(f"rows_per_task must be positive, got {rows_per_task}")
        self.width = width
        self.height = height
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.workers = workers
        self.seed = seed
        self.rows_per_task = rows_per_task
        self.debug_mode = debug_mode
        self.last_render_time = None

    @classmethod
    def from_settings(cls, settings, debug_mode: bool = False) -> "Renderer":
        settings.validate()
        return cls(
            settings.image_width,
            settings.image_height,
            samples_per_pixel=settings.samples_per_pixel,
            max_depth=settings.max_depth,
            workers=settings.workers,
            seed=settings.seed,
            rows_per_task=settings.rows_per_task,
            debug_mode=debug_mode,
        )

    def row_seeds(self) -> List[np.random.SeedSequence]:
        """
        One independent seed sequence per scanline. A fixed seed yields the
        same sequences on every call; seed=None draws fresh entropy.
        """
        return np.random.SeedSequence(self.seed).spawn(self.height)

    def make_tasks(self):
        # Top scanline first so early progress fills the image from the top
        scanlines = list(range(self.height - 1, -1, -1))
        return [scanlines[k:k + self.rows_per_task]
                for k in range(0, len(scanlines), self.rows_per_task)]

    def worker_count(self, n_tasks: int) -> int:
        workers = self.workers if self.workers is not None else (os.cpu_count() or 1)
        return max(1, min(workers, n_tasks))

    def render(self, world, camera, progress: Optional[ProgressCallback] = None) -> np.ndarray:
        """
        Render the world and return a (height, width, 3) uint8 buffer.
        Row 0 of the buffer is the top of the image.
        """
        seeds = self.row_seeds()
        tasks = self.make_tasks()
        workers = self.worker_count(len(tasks))
        buffer = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        scene = (world, camera, self.width, self.height, self.samples_per_pixel, self.max_depth)

        if self.debug_mode:
            print("\n=== Rendering ===")
            print(f"Resolution: {self.width}x{self.height}")
            print(f"Samples per pixel: {self.samples_per_pixel}, max depth: {self.max_depth}")
            print(f"World contains {len(world.objects)} objects")
            print(f"Dispatching {len(tasks)} tasks to {workers} worker(s)")

        start = time.perf_counter()
        rows_done = 0

        def store(rows, block):
            nonlocal rows_done
            for k, j in enumerate(rows):
                buffer[self.height - 1 - j] = block[k]
            previous = rows_done
            rows_done += len(rows)
            if progress is not None:
                progress(rows_done, self.height)
            if self.debug_mode:
                step = max(1, self.height // 10)
                if rows_done // step != previous // step or rows_done == self.height:
                    print(f"  {rows_done}/{self.height} scanlines")

        if workers == 1:
            for rows in tasks:
                store(rows, render_rows(*scene, rows, [seeds[j] for j in rows]))
        else:
            with ProcessPoolExecutor(max_workers=workers, initializer=_init_worker, initargs=scene) as exe:
                futures = [exe.submit(_render_task, rows, [seeds[j] for j in rows]) for rows in tasks]
                for future in as_completed(futures):
                    store(*future.result())

        self.last_render_time = time.perf_counter() - start
        if self.debug_mode:
            print(f"Render complete in {self.last_render_time:.2f}s")
        return buffer

def render(world, camera, image_width: int, image_height: int, samples_per_pixel: int,
           max_depth: int, seed: Optional[int] = None, workers: Optional[int] = None) -> np.ndarray:
    """
    Render world through camera into a fully populated (image_height,
    image_width, 3) uint8 buffer, row-major with row 0 at the top.
    """
    renderer = Renderer(image_width, image_height, samples_per_pixel=samples_per_pixel,
                        max_depth=max_depth, workers=workers, seed=seed)
    return renderer.render(world, camera)
