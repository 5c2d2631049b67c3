"""Root pytest configuration for SerenitySphere Core tests.

Fixtures:
- rng: seeded numpy Generator
- small_profile: factory for a mood profile with a reduced particle count
- app / client: Flask app wired to a throwaway data directory
"""
import dataclasses
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to Python path for imports
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from serenity_core.app import SerenityConfig, create_app  # noqa: E402
from serenity_core.moods.profiles import profile_for  # noqa: E402


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def small_profile():
    def _make(mood, count=96):
        return dataclasses.replace(profile_for(mood), particle_count=count)

    return _make


@pytest.fixture
def serenity_config(tmp_path):
    return SerenityConfig(
        log_level="warning",
        data_dir=str(tmp_path),
        device_store_path=str(tmp_path / "device.json"),
    )


@pytest.fixture
def app(serenity_config):
    app = create_app(serenity_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
