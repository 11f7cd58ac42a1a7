# main.py
import argparse
import sys
import numpy as np
import pygame
from core.vector import Vector3
from geometry.world import HittableList
from geometry.sphere import Sphere
from materials.lambertian import Lambertian
from materials.metal import Metal
from materials.dielectric import Dielectric
from renderer.raytracer import Renderer
from renderer.settings import QUALITY_LEVELS, CameraSettings, RenderSettings

def create_world(rng) -> HittableList:
    """
    Ground sphere, a grid of small random spheres and three large ones.
    """
    world = HittableList()

    ground_material = Lambertian(Vector3(0.5, 0.5, 0.5))
    world.add(Sphere(Vector3(0, -1000, 0), 1000, ground_material))

    glass = Dielectric(1.5)
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Vector3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            # Keep clear of the large metal sphere
            if (center - Vector3(4, 0.2, 0)).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                # diffuse
                albedo = Vector3.random(rng) * Vector3.random(rng)
                sphere_material = Lambertian(albedo)
            elif choose_mat < 0.95:
                # metal
                albedo = Vector3.random(rng, 0.5, 1)
                fuzz = rng.uniform(0, 0.5)
                sphere_material = Metal(albedo, fuzz)
            else:
                sphere_material = glass
            world.add(Sphere(center, 0.2, sphere_material))

    world.add(Sphere(Vector3(0, 1, 0), 1.0, glass))
    world.add(Sphere(Vector3(-4, 1, 0), 1.0, Lambertian(Vector3(0.4, 0.2, 0.1))))
    world.add(Sphere(Vector3(4, 1, 0), 1.0, Metal(Vector3(0.7, 0.6, 0.5), 0.0)))

    return world

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Monte-Carlo sphere ray tracer")
    parser.add_argument("--quality", choices=sorted(QUALITY_LEVELS), default="high_quality",
                        help="Preset for samples, bounces and resolution scale")
    parser.add_argument("--width", type=int, default=400, help="Base image width before quality scaling")
    parser.add_argument("--samples", type=int, help="Samples per pixel (overrides the preset)")
    parser.add_argument("--depth", type=int, help="Maximum bounce depth (overrides the preset)")
    parser.add_argument("--seed", type=int, help="Seed for the scene and the sampler")
    parser.add_argument("--workers", type=int, help="Worker processes (default: one per CPU)")
    parser.add_argument("--look-from", type=float, nargs=3, metavar=("X", "Y", "Z"))
    parser.add_argument("--look-at", type=float, nargs=3, metavar=("X", "Y", "Z"))
    parser.add_argument("--vfov", type=float, help="Vertical field of view in degrees")
    parser.add_argument("--aperture", type=float, help="Lens diameter; 0 disables defocus blur")
    parser.add_argument("--focus-dist", type=float, help="Distance to the plane in perfect focus")
    parser.add_argument("--no-window", action="store_true", help="Render without opening a window")
    parser.add_argument("--debug", action="store_true", help="Print render progress")
    return parser, parser.parse_args(argv)

def build_settings(parser, args) -> RenderSettings:
    overrides = {"seed": args.seed, "workers": args.workers}
    if args.samples is not None:
        overrides["samples_per_pixel"] = args.samples
    if args.depth is not None:
        overrides["max_depth"] = args.depth
    try:
        return RenderSettings.from_quality(args.quality, image_width=args.width, **overrides).validate()
    except ValueError as e:
        parser.error(str(e))

def build_camera_settings(parser, args) -> CameraSettings:
    overrides = {}
    for name in ("look_from", "look_at", "vfov", "aperture", "focus_dist"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = tuple(value) if isinstance(value, list) else value
    try:
        return CameraSettings(**overrides).validate()
    except ValueError as e:
        parser.error(str(e))

def show(buffer: np.ndarray):
    """
    Display a finished (height, width, 3) buffer until the window is closed.
    """
    height, width = buffer.shape[:2]
    pygame.init()
    try:
        screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Raytracer")
        # surfarray indexes pixels as [x, y]
        surface = pygame.surfarray.make_surface(np.ascontiguousarray(buffer.transpose(1, 0, 2)))
        clock = pygame.time.Clock()

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
            screen.fill((0, 0, 0))
            screen.blit(surface, (0, 0))
            pygame.display.flip()
            clock.tick(20)
    finally:
        pygame.quit()

def main(argv=None) -> int:
    parser, args = parse_args(argv)
    settings = build_settings(parser, args)
    camera_settings = build_camera_settings(parser, args)

    print("\n=== Creating World ===")
    world = create_world(np.random.default_rng(settings.seed))
    print(f"World contains {len(world)} spheres")

    camera = camera_settings.build(settings.aspect_ratio)
    print(f"Camera position: {camera.origin}")
    print(f"Camera focus distance: {camera.focus_dist}, aperture: {camera.aperture}")

    print("\n=== Initializing Renderer ===")
    print(f"Render resolution: {settings.image_width}x{settings.image_height}")
    print(f"Quality settings: {args.quality}")
    print(f"Samples per pixel: {settings.samples_per_pixel}")
    print(f"Max bounces: {settings.max_depth}")

    renderer = Renderer.from_settings(settings, debug_mode=args.debug)
    buffer = renderer.render(world, camera)
    print(f"Rendered in {renderer.last_render_time:.2f}s")

    if not args.no_window:
        show(buffer)
    return 0

if __name__ == "__main__":
    sys.exit(main())
