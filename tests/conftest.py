"""Pytest configuration and fixtures."""

import pytest

from tridchess.game.engine import get_world
from tridchess.game.geometry import World
from tridchess.game.initial_setup import initial_positions
from tridchess.game.positions import BoardPositions
from tridchess.settings import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings fresh from the environment."""
    get_settings.cache_clear()
    get_world.cache_clear()
    yield
    get_settings.cache_clear()
    get_world.cache_clear()


@pytest.fixture
def world() -> World:
    return get_world()


@pytest.fixture
def start_positions() -> BoardPositions:
    """Attack boards in their starting places: white at pin 1, black at pin 6."""
    return initial_positions()
