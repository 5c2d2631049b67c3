"""Runtime version resolution helpers for SerenitySphere Core."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER = logging.getLogger(__name__)


def get_runtime_version(default: str = "0.0.0") -> str:
    """Resolve runtime version from env with stable file fallback.

    Priority:
    1) ``SERENITY_VERSION``
    2) ``BUILD_VERSION``
    3) ``VERSION`` file at the project root (packaged fallback)
    """
    for key in ("SERENITY_VERSION", "BUILD_VERSION"):
        value = str(os.environ.get(key, "") or "").strip()
        if value:
            return value

    version_file = Path(__file__).resolve().parents[1] / "VERSION"
    try:
        value = version_file.read_text(encoding="utf-8").strip()
        if value:
            return value
    except OSError:
        _LOGGER.debug("No VERSION file at %s", version_file)

    return default
