"""
Scene engine - particle fields, motion laws, composition and frame loop.

- distributions: archetype point layouts and size rules
- field: ParticleField buffers and generate()
- motion: one MotionLaw per archetype and step()
- composer: RenderableScene with camera, lights, meshes and resource tracking
- loop: FrameScheduler, AnimationLoop and the owned AnimationHandle
"""

from .composer import RenderableScene, compose, fallback_scene
from .field import ParticleField, generate
from .loop import AnimationClock, AnimationHandle, AnimationLoop, FrameScheduler
from .motion import MotionLaw, motion_law_for, step
from .renderer import HeadlessRenderer, Renderer, ensure_surface
from .resources import GpuResource, ResourceTracker

__all__ = [
    "RenderableScene",
    "compose",
    "fallback_scene",
    "ParticleField",
    "generate",
    "AnimationClock",
    "AnimationHandle",
    "AnimationLoop",
    "FrameScheduler",
    "MotionLaw",
    "motion_law_for",
    "step",
    "HeadlessRenderer",
    "Renderer",
    "ensure_surface",
    "GpuResource",
    "ResourceTracker",
]
