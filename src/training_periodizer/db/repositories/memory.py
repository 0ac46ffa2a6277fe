"""In-memory repositories.

Default storage for the library and the API process. Both stores guard
their dictionaries with a lock so concurrent request handlers can share
one instance.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Sequence
import logging
import threading

from ...exceptions import StaleFatigueStateError
from ...models.fatigue import FatigueState
from ...models.schedule import ProgramWithSchedule
from ...utils import utc_now
from .base import FatigueStateRepository, Repository


logger = logging.getLogger(__name__)


def _matches(entity, filters: Dict) -> bool:
    return all(getattr(entity, name, None) == value for name, value in filters.items())


class InMemoryProgramRepository(Repository[ProgramWithSchedule]):
    """Programs keyed by program_id."""

    def __init__(self) -> None:
        self._programs: Dict[str, ProgramWithSchedule] = {}
        self._lock = threading.Lock()

    def save(self, entity: ProgramWithSchedule) -> ProgramWithSchedule:
        with self._lock:
            self._programs[entity.program_id] = entity
        return entity

    def get(self, entity_id: str) -> Optional[ProgramWithSchedule]:
        with self._lock:
            return self._programs.get(entity_id)

    def get_all(self, limit: int = 100, offset: int = 0, **filters) -> List[ProgramWithSchedule]:
        """Programs ordered by creation time, newest first. Filters: user_id."""
        with self._lock:
            programs = [p for p in self._programs.values() if _matches(p, filters)]
        programs.sort(key=lambda p: p.created_at, reverse=True)
        return programs[offset:offset + limit]

    def delete(self, entity_id: str) -> bool:
        with self._lock:
            return self._programs.pop(entity_id, None) is not None

    def exists(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._programs

    def count(self, **filters) -> int:
        with self._lock:
            return sum(1 for p in self._programs.values() if _matches(p, filters))


class InMemoryFatigueStateRepository(FatigueStateRepository):
    """Fatigue states keyed by "user:program:muscle_group", saved by compare-and-swap."""

    def __init__(self) -> None:
        self._states: Dict[str, FatigueState] = {}
        self._lock = threading.Lock()

    def save_many(self, entities: Sequence[FatigueState]) -> List[FatigueState]:
        with self._lock:
            for entity in entities:
                current = self._states.get(entity.key)
                actual_version = current.version if current else 0
                if actual_version != entity.version:
                    logger.warning(
                        "Stale fatigue write for %s: expected v%d, stored v%d",
                        entity.key,
                        entity.version,
                        actual_version,
                    )
                    raise StaleFatigueStateError(entity.key, entity.version, actual_version)

            saved = [
                replace(entity, version=entity.version + 1, updated_at=entity.updated_at or utc_now())
                for entity in entities
            ]
            for state in saved:
                self._states[state.key] = state
        return saved

    def get(self, entity_id: str) -> Optional[FatigueState]:
        with self._lock:
            return self._states.get(entity_id)

    def get_all(self, limit: int = 100, offset: int = 0, **filters) -> List[FatigueState]:
        """Filters: user_id, program_id, muscle_group, status."""
        with self._lock:
            states = [s for s in self._states.values() if _matches(s, filters)]
        states.sort(key=lambda s: s.key)
        return states[offset:offset + limit]

    def delete(self, entity_id: str) -> bool:
        with self._lock:
            return self._states.pop(entity_id, None) is not None

    def exists(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._states

    def count(self, **filters) -> int:
        with self._lock:
            return sum(1 for s in self._states.values() if _matches(s, filters))
