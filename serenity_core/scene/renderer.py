"""Renderer protocol and the headless renderer used by the service and tests."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Tuple

from ..errors import SceneInitError

if TYPE_CHECKING:
    from .composer import RenderableScene

_LOGGER = logging.getLogger(__name__)


class Renderer(Protocol):
    has_surface: bool

    def set_viewport(self, width: int, height: int) -> None: ...

    def render(self, scene: "RenderableScene") -> None: ...

    def dispose(self) -> None: ...


class HeadlessRenderer:
    """Counts frames and keeps a small snapshot of the last one."""

    def __init__(self, width: int = 800, height: int = 450, has_surface: bool = True):
        self.has_surface = has_surface
        self.viewport: Tuple[int, int] = (int(width), int(height))
        self.frames_rendered = 0
        self.last_frame: Optional[Dict[str, Any]] = None
        self.disposed = False

    def set_viewport(self, width: int, height: int) -> None:
        self.viewport = (int(width), int(height))

    def render(self, scene: "RenderableScene") -> None:
        if self.disposed or not self.has_surface:
            raise SceneInitError("Renderer has no surface to draw on")
        if scene.disposed:
            raise RuntimeError("Cannot render a disposed scene")
        points = scene.points
        self.frames_rendered += 1
        self.last_frame = {
            "frame": self.frames_rendered,
            "clock": scene.clock,
            "camera": list(scene.camera.position),
            "particles": points.field.count if points is not None else 0,
        }
        if points is not None:
            points.field.mark_uploaded()

    def dispose(self) -> None:
        self.disposed = True


def ensure_surface(renderer: Optional[Renderer], width: int, height: int) -> None:
    """Raise SceneInitError unless there is something to draw on."""
    if renderer is None:
        raise SceneInitError("No renderer available")
    if not getattr(renderer, "has_surface", False):
        raise SceneInitError("Renderer has no surface to draw on")
    if width <= 0 or height <= 0:
        raise SceneInitError(f"Invalid surface size {width}x{height}")
