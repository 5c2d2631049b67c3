"""
Scene composer.

Turns a particle field and its profile into a renderer-agnostic scene:
camera, lights, the particle point cloud and the archetype's auxiliary
meshes. Every buffer, geometry, material and texture is allocated through a
``ResourceTracker`` and released again by ``RenderableScene.dispose``.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..errors import SceneInitError
from ..moods.profiles import GeometryArchetype, MoodVisualProfile, hex_to_rgb
from .distributions import (
    CRYSTAL_INNER,
    TREE_BASES,
    crystal_axes,
    unit_vectors,
    wave_height,
)
from .field import ParticleField
from .resources import GpuResource, ResourceTracker

_LOGGER = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

CAMERA_FOV = 75.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 1000.0
CAMERA_RADIUS = 5.0

BACKGROUND = hex_to_rgb("#F9F6F2")

POINTS_SPIN = 0.018
GROUND_SEGMENTS = 32
GROUND_SIZE = 10.0
GROUND_Y = -2.5
DISTANT_STARS = 1500
NEBULA_RADIUS = 30.0


@dataclass
class PerspectiveCamera:
    fov: float = CAMERA_FOV
    aspect: float = 1.0
    near: float = CAMERA_NEAR
    far: float = CAMERA_FAR
    orbit_radius: float = CAMERA_RADIUS
    position: Vec3 = (0.0, 0.0, CAMERA_RADIUS)
    target: Vec3 = (0.0, 0.0, 0.0)

    def orbit(self, clock: float) -> None:
        """Slow drift around the origin, always looking at the target."""
        yaw = 0.15 * math.sin(0.05 * clock)
        pitch = 0.05 * math.sin(0.03 * clock)
        r = self.orbit_radius
        self.position = (
            r * math.sin(yaw) * math.cos(pitch),
            r * math.sin(pitch),
            r * math.cos(yaw) * math.cos(pitch),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fov": self.fov,
            "aspect": self.aspect,
            "near": self.near,
            "far": self.far,
            "position": list(self.position),
            "target": list(self.target),
        }


@dataclass
class Light:
    kind: str
    color: Vec3
    intensity: float
    position: Optional[Vec3] = None
    ground_color: Optional[Vec3] = None
    # intensity = brightness * factor
    factor: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind, "color": list(self.color), "intensity": self.intensity}
        if self.position is not None:
            data["position"] = list(self.position)
        if self.ground_color is not None:
            data["groundColor"] = list(self.ground_color)
        return data


@dataclass
class Material:
    program: str
    color: Optional[Vec3] = None
    opacity: float = 1.0
    transparent: bool = False
    additive: bool = False
    side: str = "front"
    uniforms: Dict[str, float] = dc_field(default_factory=dict)
    resource: Optional[GpuResource] = None
    texture: Optional[GpuResource] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "program": self.program,
            "opacity": self.opacity,
            "transparent": self.transparent,
            "blending": "additive" if self.additive else "normal",
            "side": self.side,
        }
        if self.color is not None:
            data["color"] = list(self.color)
        if self.uniforms:
            data["uniforms"] = dict(self.uniforms)
        return data


@dataclass
class PointCloud:
    name: str
    positions: np.ndarray
    colors: np.ndarray
    sizes: np.ndarray
    material: Material
    buffers: Dict[str, GpuResource]
    field: Optional[ParticleField] = None
    rotation_y: float = 0.0

    @property
    def count(self) -> int:
        return int(self.positions.shape[0])

    def to_dict(self, include_buffers: bool = False) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "count": self.count,
            "rotationY": self.rotation_y,
            "material": self.material.to_dict(),
        }
        if include_buffers:
            data["positions"] = np.round(self.positions, 4).ravel().tolist()
            data["colors"] = np.round(self.colors, 4).ravel().tolist()
            data["sizes"] = np.round(self.sizes, 4).tolist()
        return data


@dataclass
class Mesh:
    name: str
    shape: str
    params: Dict[str, Any]
    material: Material
    geometry: GpuResource
    position: Vec3 = (0.0, 0.0, 0.0)
    direction: Optional[Vec3] = None
    rotation_y: float = 0.0
    scale: float = 1.0
    group: Optional[str] = None
    animated: bool = False
    vertices: Optional[np.ndarray] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "shape": self.shape,
            "params": dict(self.params),
            "position": list(self.position),
            "rotationY": self.rotation_y,
            "scale": self.scale,
            "material": self.material.to_dict(),
        }
        if self.direction is not None:
            data["direction"] = list(self.direction)
        if self.group is not None:
            data["group"] = self.group
        return data


def _scale(color: Vec3, factor: float) -> Vec3:
    return tuple(min(max(c * factor, 0.0), 1.0) for c in color)  # type: ignore[return-value]


class RenderableScene:
    """A composed scene owning its GPU resource handles."""

    def __init__(
        self,
        *,
        camera: PerspectiveCamera,
        tracker: ResourceTracker,
        width: int,
        height: int,
        profile: Optional[MoodVisualProfile] = None,
        brightness: float = 1.0,
        fallback: bool = False,
    ):
        self.camera = camera
        self.tracker = tracker
        self.profile = profile
        self.brightness = float(brightness)
        self.fallback = fallback
        self.viewport: Tuple[int, int] = (int(width), int(height))
        self.lights: List[Light] = []
        self.points: Optional[PointCloud] = None
        self.extra_points: List[PointCloud] = []
        self.meshes: List[Mesh] = []
        self.background: Vec3 = BACKGROUND
        self.clock = 0.0
        self.disposed = False
        self._resources: List[GpuResource] = []

    def allocate(self, kind: str, label: str) -> GpuResource:
        res = self.tracker.allocate(kind, label)
        self._resources.append(res)
        return res

    @property
    def resources(self) -> List[GpuResource]:
        return list(self._resources)

    def set_brightness(self, brightness: float) -> None:
        self.brightness = float(brightness)
        for light in self.lights:
            light.intensity = self.brightness * light.factor
        intensity = self.profile.background_intensity if self.profile is not None else 1.0
        self.background = _scale(BACKGROUND, self.brightness * intensity)
        if self.points is not None:
            if self.points.field is not None:
                self.points.field.apply_brightness(self.brightness)
            if "brightness" in self.points.material.uniforms:
                self.points.material.uniforms["brightness"] = self.brightness

    def resize(self, width: int, height: int) -> bool:
        """Update aspect and viewport only; particle state is untouched."""
        if width <= 0 or height <= 0:
            _LOGGER.debug("Ignoring resize to %sx%s", width, height)
            return False
        self.viewport = (int(width), int(height))
        self.camera.aspect = width / height
        return True

    def update(self, clock: float, speed: float) -> None:
        """Per-frame scene animation (camera, uniforms, animated meshes)."""
        if self.disposed:
            raise RuntimeError("Cannot update a disposed scene")
        self.clock = float(clock)
        self.camera.orbit(clock)
        tau = clock * speed

        if self.points is not None:
            self.points.rotation_y = POINTS_SPIN * tau
            uniforms = self.points.material.uniforms
            if uniforms:
                uniforms["time"] = self.clock
                uniforms["speed"] = float(speed)

        for extra in self.extra_points:
            extra.rotation_y = 0.2 * POINTS_SPIN * tau

        for mesh in self.meshes:
            if not mesh.animated:
                continue
            if mesh.vertices is not None:
                v = mesh.vertices
                v[:, 1] = GROUND_Y + 0.25 * wave_height(v[:, 0], v[:, 2], tau)
            elif mesh.shape == "cone":
                mesh.rotation_y = 0.08 * tau
            elif mesh.name == "nebula":
                mesh.rotation_y = 0.005 * self.clock
            else:
                mesh.scale = 1.0 + 0.05 * math.sin(0.8 * tau)

    def dispose(self) -> int:
        """Release every resource this scene allocated. Idempotent."""
        if self.disposed:
            return 0
        released = 0
        for res in self._resources:
            if self.tracker.release(res):
                released += 1
        self._resources.clear()
        self.disposed = True
        _LOGGER.debug("Scene disposed, released %d resources", released)
        return released

    def to_dict(self, include_buffers: bool = False) -> Dict[str, Any]:
        return {
            "archetype": (
                self.profile.geometry_archetype.value if self.profile is not None else None
            ),
            "fallback": self.fallback,
            "viewport": list(self.viewport),
            "background": list(self.background),
            "camera": self.camera.to_dict(),
            "lights": [light.to_dict() for light in self.lights],
            "points": self.points.to_dict(include_buffers) if self.points is not None else None,
            "extraPoints": [p.to_dict(include_buffers) for p in self.extra_points],
            "meshes": [m.to_dict() for m in self.meshes],
            "resources": len(self._resources),
        }


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise SceneInitError(f"Invalid surface size {width}x{height}")


def _lights(scene: RenderableScene, archetype: GeometryArchetype, profile: MoodVisualProfile) -> None:
    white = (1.0, 1.0, 1.0)
    scene.lights.append(Light("ambient", white, 0.0, factor=1.0))
    scene.lights.append(Light("directional", white, 0.0, position=(1.0, 1.0, 1.0), factor=0.5))
    if archetype is GeometryArchetype.CRYSTAL:
        scene.lights.append(Light("point", profile.accent_color, 0.0, position=(0.0, 2.0, 3.0), factor=0.8))
    elif archetype is GeometryArchetype.STARFIELD:
        scene.lights.append(Light("point", profile.accent_color, 0.0, position=(0.0, 0.0, 0.0), factor=0.6))
    elif archetype is GeometryArchetype.FOREST:
        scene.lights.append(
            Light("hemisphere", BACKGROUND, 0.0, ground_color=profile.secondary_color, factor=0.4)
        )


def _points(scene: RenderableScene, field: ParticleField, profile: MoodVisualProfile) -> PointCloud:
    label = field.archetype.value
    buffers = {
        "position": scene.allocate("buffer", f"{label}.position"),
        "color": scene.allocate("buffer", f"{label}.color"),
        "size": scene.allocate("buffer", f"{label}.size"),
    }
    if profile.use_advanced_shading:
        material = Material(
            program=f"shader:{label}",
            opacity=profile.particle_opacity,
            transparent=True,
            additive=True,
            uniforms={"time": 0.0, "speed": 1.0, "brightness": scene.brightness},
            resource=scene.allocate("material", f"{label}.shader"),
        )
    else:
        material = Material(
            program="points",
            opacity=profile.particle_opacity,
            transparent=True,
            resource=scene.allocate("material", f"{label}.points"),
            texture=scene.allocate("texture", f"{label}.sprite"),
        )
    return PointCloud(
        name=label,
        positions=field.positions,
        colors=field.colors,
        sizes=field.sizes,
        material=material,
        buffers=buffers,
        field=field,
    )


def _mesh(scene: RenderableScene, name: str, shape: str, params: Dict[str, Any], material: Material, **kwargs) -> Mesh:
    material.resource = scene.allocate("material", f"{name}.material")
    mesh = Mesh(
        name=name,
        shape=shape,
        params=params,
        material=material,
        geometry=scene.allocate("geometry", f"{name}.geometry"),
        **kwargs,
    )
    scene.meshes.append(mesh)
    return mesh


def _ground_vertices() -> np.ndarray:
    line = np.linspace(-GROUND_SIZE / 2, GROUND_SIZE / 2, GROUND_SEGMENTS + 1, dtype=np.float32)
    gx, gz = np.meshgrid(line, line)
    vertices = np.zeros((gx.size, 3), dtype=np.float32)
    vertices[:, 0] = gx.ravel()
    vertices[:, 2] = gz.ravel()
    vertices[:, 1] = GROUND_Y + 0.25 * wave_height(vertices[:, 0], vertices[:, 2], 0.0)
    return vertices


def _distant_stars(scene: RenderableScene, rng: np.random.Generator, profile: MoodVisualProfile) -> PointCloud:
    positions = (unit_vectors(rng, DISTANT_STARS) * rng.uniform(40.0, 80.0, DISTANT_STARS)[:, None]).astype(np.float32)
    colors = np.tile(np.asarray(profile.accent_color, dtype=np.float32), (DISTANT_STARS, 1))
    sizes = rng.uniform(0.05, 0.15, DISTANT_STARS).astype(np.float32)
    return PointCloud(
        name="distant-stars",
        positions=positions,
        colors=colors,
        sizes=sizes,
        material=Material(
            program="points",
            opacity=0.8,
            transparent=True,
            resource=scene.allocate("material", "distant-stars.points"),
        ),
        buffers={
            "position": scene.allocate("buffer", "distant-stars.position"),
            "color": scene.allocate("buffer", "distant-stars.color"),
            "size": scene.allocate("buffer", "distant-stars.size"),
        },
    )


def _auxiliary(
    scene: RenderableScene,
    archetype: GeometryArchetype,
    profile: MoodVisualProfile,
    rng: np.random.Generator,
) -> None:
    if archetype in (GeometryArchetype.SPHERE, GeometryArchetype.CLOUD):
        radius = 1.2 if archetype is GeometryArchetype.SPHERE else 2.0
        _mesh(
            scene,
            "glow",
            "sphere",
            {"radius": radius, "segments": 32},
            Material(program="basic", color=profile.base_color, opacity=0.15, transparent=True, additive=True),
            animated=True,
        )
    elif archetype is GeometryArchetype.FLOWER:
        _mesh(
            scene,
            "bloom-core",
            "sphere",
            {"radius": 0.35, "segments": 24},
            Material(program="basic", color=profile.accent_color, opacity=0.6, transparent=True),
            position=(0.0, 0.0, 0.2),
            animated=True,
        )
    elif archetype is GeometryArchetype.WAVE:
        _mesh(
            scene,
            "ground",
            "plane",
            {"size": GROUND_SIZE, "segments": GROUND_SEGMENTS},
            Material(program="standard", color=profile.secondary_color, opacity=0.35, transparent=True, side="double"),
            position=(0.0, GROUND_Y, 0.0),
            animated=True,
            vertices=_ground_vertices(),
        )
    elif archetype is GeometryArchetype.CRYSTAL:
        for i, axis in enumerate(crystal_axes()):
            length = float(rng.uniform(0.8, 1.4))
            center = axis * (CRYSTAL_INNER + length / 2)
            _mesh(
                scene,
                f"crystal-{i}",
                "cone",
                {"radius": 0.15, "height": length, "sides": 6},
                Material(program="phong", color=profile.accent_color, opacity=0.7, transparent=True),
                position=tuple(float(c) for c in center),
                direction=tuple(float(c) for c in axis),
                animated=True,
            )
    elif archetype is GeometryArchetype.FOREST:
        trunk_color = _scale(profile.secondary_color, 0.6)
        for i, (x, z) in enumerate(TREE_BASES):
            group = f"tree-{i}"
            _mesh(
                scene,
                f"{group}-trunk",
                "cylinder",
                {"radius": 0.12, "height": 2.2},
                Material(program="standard", color=trunk_color),
                position=(float(x), -0.9, float(z)),
                group=group,
            )
            _mesh(
                scene,
                f"{group}-canopy",
                "cone",
                {"radius": 0.9, "height": 1.8, "sides": 8},
                Material(program="standard", color=profile.secondary_color, opacity=0.85, transparent=True),
                position=(float(x), 1.0, float(z)),
                direction=(0.0, 1.0, 0.0),
                group=group,
            )
    elif archetype is GeometryArchetype.STARFIELD:
        _mesh(
            scene,
            "nebula",
            "sphere",
            {"radius": NEBULA_RADIUS, "segments": 32},
            Material(program="basic", color=profile.accent_color, opacity=0.08, transparent=True, side="back"),
            animated=True,
        )
        scene.extra_points.append(_distant_stars(scene, rng, profile))


def compose(
    field: ParticleField,
    profile: MoodVisualProfile,
    brightness: float,
    *,
    width: int = 800,
    height: int = 450,
    rng: Optional[np.random.Generator] = None,
    tracker: Optional[ResourceTracker] = None,
) -> RenderableScene:
    """Compose a renderable scene for ``field``.

    Raises SceneInitError for a zero or negative surface size.
    """
    _check_size(width, height)
    if field.disposed:
        raise SceneInitError("Cannot compose a disposed particle field")
    if field.archetype != profile.geometry_archetype:
        raise SceneInitError("Field and profile archetypes differ")
    if rng is None:
        rng = np.random.default_rng()
    if tracker is None:
        tracker = ResourceTracker()

    archetype = field.archetype
    camera = PerspectiveCamera(aspect=width / height)
    scene = RenderableScene(
        camera=camera,
        tracker=tracker,
        width=width,
        height=height,
        profile=profile,
        brightness=brightness,
    )
    _lights(scene, archetype, profile)
    scene.points = _points(scene, field, profile)
    _auxiliary(scene, archetype, profile, rng)
    scene.set_brightness(brightness)

    _LOGGER.debug(
        "Composed %s scene: %d lights, %d meshes, %d resources",
        archetype.value,
        len(scene.lights),
        len(scene.meshes),
        len(scene.resources),
    )
    return scene


def fallback_scene(
    width: int,
    height: int,
    brightness: float = 1.0,
    tracker: Optional[ResourceTracker] = None,
) -> RenderableScene:
    """Static scene shown when the real one cannot be built or animated."""
    width = max(int(width), 1)
    height = max(int(height), 1)
    scene = RenderableScene(
        camera=PerspectiveCamera(aspect=width / height),
        tracker=tracker or ResourceTracker(),
        width=width,
        height=height,
        brightness=brightness,
        fallback=True,
    )
    scene.lights.append(Light("ambient", (1.0, 1.0, 1.0), 0.0, factor=1.0))
    scene.set_brightness(brightness)
    return scene
