"""Repository interfaces and implementations."""

from .base import FatigueStateRepository, Repository, fatigue_key
from .memory import InMemoryFatigueStateRepository, InMemoryProgramRepository
from .sqlite_fatigue import SqliteFatigueStateRepository

__all__ = [
    "Repository",
    "FatigueStateRepository",
    "fatigue_key",
    "InMemoryProgramRepository",
    "InMemoryFatigueStateRepository",
    "SqliteFatigueStateRepository",
]
