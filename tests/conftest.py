"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest

from training_periodizer.config import Settings
from training_periodizer.services.program_service import ProgramService
from tests.factories import make_definition


@pytest.fixture
def settings():
    """Default settings, isolated from the environment's .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def fast_trigger_settings():
    """Settings where two consecutive high-fatigue sessions trigger a deload."""
    return Settings(_env_file=None, consecutive_high_sessions=2)


@pytest.fixture
def service(settings):
    return ProgramService(settings=settings)


@pytest.fixture
def session_time():
    return datetime(2026, 1, 5, 18, 0, 0)


@pytest.fixture
def hypertrophy_definition():
    return make_definition()
