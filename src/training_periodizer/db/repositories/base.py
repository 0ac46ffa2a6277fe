"""Base repository interfaces.

One repository per entity, injected into ProgramService. Programs use the
plain CRUD interface; fatigue states add compare-and-swap saves keyed by
(user, program, muscle group).
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, Sequence, TypeVar

from ...models.fatigue import FatigueState

# Type variable for the entity type stored in the repository
T = TypeVar("T")


def fatigue_key(user_id: str, program_id: str, muscle_group: str) -> str:
    return f"{user_id}:{program_id}:{muscle_group}"


class Repository(ABC, Generic[T]):
    """
    Abstract base class for synchronous repository implementations.

    Type Parameters:
        T: The type of entity stored in this repository
    """

    @abstractmethod
    def save(self, entity: T) -> T:
        """
        Save an entity, creating or replacing it.

        Returns:
            The saved entity (may include generated fields)
        """
        pass

    @abstractmethod
    def get(self, entity_id: str) -> Optional[T]:
        """Retrieve an entity by ID, or None."""
        pass

    @abstractmethod
    def get_all(
        self,
        limit: int = 100,
        offset: int = 0,
        **filters
    ) -> List[T]:
        """
        Retrieve entities matching the given filters.

        Args:
            limit: Maximum number of entities to return
            offset: Number of entities to skip
            **filters: Additional filter criteria
        """
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> bool:
        """Delete by ID. True if something was deleted."""
        pass

    @abstractmethod
    def exists(self, entity_id: str) -> bool:
        pass

    @abstractmethod
    def count(self, **filters) -> int:
        pass


class FatigueStateRepository(Repository[FatigueState]):
    """
    Fatigue state storage with optimistic concurrency.

    ``save`` is a compare-and-swap on ``version``: the stored version must
    equal the entity's version (0 for a state that has never been saved).
    On success the stored copy carries ``version + 1`` and is returned.

    Raises:
        StaleFatigueStateError: from ``save`` or ``save_many`` on a version mismatch
    """

    def save(self, entity: FatigueState) -> FatigueState:
        return self.save_many([entity])[0]

    @abstractmethod
    def save_many(self, entities: Sequence[FatigueState]) -> List[FatigueState]:
        """
        Compare-and-swap a batch of states, all or nothing.

        Every version is checked before anything is written, so a stale
        entry leaves the whole batch unsaved.

        Returns:
            The stored states with their new versions, in input order
        """
        pass

    def get_for(self, user_id: str, program_id: str, muscle_group: str) -> Optional[FatigueState]:
        return self.get(fatigue_key(user_id, program_id, muscle_group))

    def load_or_new(self, user_id: str, program_id: str, muscle_group: str) -> FatigueState:
        """Stored state for the key, or a fresh version-0 state."""
        state = self.get_for(user_id, program_id, muscle_group)
        if state is None:
            state = FatigueState(user_id=user_id, program_id=program_id, muscle_group=muscle_group)
        return state

    def list_for_program(self, user_id: str, program_id: str) -> List[FatigueState]:
        states = self.get_all(limit=10_000, user_id=user_id, program_id=program_id)
        return sorted(states, key=lambda s: s.muscle_group)
