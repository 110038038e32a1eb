"""Base repository interface.

Storage is keyed by each entity's natural key (workout id, profile id), and
`save` always overwrites, so recomputing and saving again is safe.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Hashable, Optional, TypeVar

# Type variable for the entity type stored in the repository
T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """
    Abstract base class for synchronous repository implementations.

    Type Parameters:
        T: The type of entity stored in this repository
    """

    @abstractmethod
    def save(self, entity: T) -> T:
        """
        Upsert an entity by its natural key.

        An existing entity with the same key is replaced, never duplicated.

        Returns:
            The saved entity
        """
        pass

    @abstractmethod
    def get(self, entity_id: Hashable) -> Optional[T]:
        """Retrieve an entity by its key, None if not found."""
        pass

    @abstractmethod
    def exists(self, entity_id: Hashable) -> bool:
        pass

    @abstractmethod
    def count(self, **filters: Any) -> int:
        pass
