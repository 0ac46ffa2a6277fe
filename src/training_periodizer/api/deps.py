"""Dependency injection for API routes."""

from functools import lru_cache

from ..config import get_settings
from ..db.repositories import (
    FatigueStateRepository,
    InMemoryFatigueStateRepository,
    SqliteFatigueStateRepository,
)
from ..services.program_service import ProgramService


@lru_cache
def get_fatigue_repository() -> FatigueStateRepository:
    """Get the fatigue state repository, SQLite-backed when a path is configured."""
    settings = get_settings()
    if settings.sqlite_path:
        return SqliteFatigueStateRepository(settings.sqlite_path)
    return InMemoryFatigueStateRepository()


@lru_cache
def get_program_service() -> ProgramService:
    """Get the program service instance."""
    return ProgramService(
        settings=get_settings(),
        fatigue_repository=get_fatigue_repository(),
    )
