"""In-memory repositories.

Used by the CLI (workouts loaded from a JSON file) and by tests. Each
repository guards its dict with a lock so batch jobs over distinct keys
can run from several threads.
"""

import logging
import threading
from datetime import date
from typing import Any, Callable, Dict, Generic, Hashable, Iterable, List, Optional

from ...models.workouts import (
    FitnessSignalRecord,
    LapSummary,
    UserFitnessState,
    VdotHistoryEntry,
    WorkoutId,
    WorkoutRecord,
)
from .base import Repository, T

logger = logging.getLogger(__name__)


class InMemoryRepository(Repository[T], Generic[T]):
    """Dict-backed repository keyed by `key_fn(entity)`."""

    def __init__(self, key_fn: Callable[[T], Hashable], entities: Optional[Iterable[T]] = None):
        self._key_fn = key_fn
        self._items: Dict[Hashable, T] = {}
        self._lock = threading.RLock()
        for entity in entities or ():
            self.save(entity)

    def save(self, entity: T) -> T:
        with self._lock:
            self._items[self._key_fn(entity)] = entity
        return entity

    def get(self, entity_id: Hashable) -> Optional[T]:
        with self._lock:
            return self._items.get(entity_id)

    def _matching(self, filters: Dict[str, Any]) -> List[T]:
        with self._lock:
            items = list(self._items.values())
        return [
            item for item in items
            if all(getattr(item, name, None) == value for name, value in filters.items())
        ]

    def exists(self, entity_id: Hashable) -> bool:
        with self._lock:
            return entity_id in self._items

    def count(self, **filters: Any) -> int:
        return len(self._matching(filters))


class WorkoutRepository(InMemoryRepository[WorkoutRecord]):
    """Workout summaries keyed by workout id."""

    def __init__(self, workouts: Optional[Iterable[WorkoutRecord]] = None):
        super().__init__(lambda w: w.id, workouts)

    def list_between(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        profile_id: Optional[int] = None,
    ) -> List[WorkoutRecord]:
        """Workouts dated within [start, end], oldest first."""
        with self._lock:
            items = list(self._items.values())
        selected = [
            w for w in items
            if (start is None or w.date >= start)
            and (end is None or w.date <= end)
            and (profile_id is None or w.profile_id == profile_id)
        ]
        return sorted(selected, key=lambda w: (w.date, str(w.id)))


class FitnessSignalRepository(InMemoryRepository[FitnessSignalRecord]):
    """Signal records, one per workout; saving again replaces the record."""

    def __init__(self, records: Optional[Iterable[FitnessSignalRecord]] = None):
        super().__init__(lambda r: r.workout_id, records)


class FitnessStateRepository(InMemoryRepository[UserFitnessState]):
    """Stored VDOT and paces keyed by profile id."""

    def __init__(self, states: Optional[Iterable[UserFitnessState]] = None):
        super().__init__(lambda s: s.profile_id, states)


class VdotHistoryRepository(InMemoryRepository[VdotHistoryEntry]):
    """
    Monthly VDOT points keyed by (profile id, month start).

    Recording a second value in the same month replaces the first.
    """

    def __init__(self, entries: Optional[Iterable[VdotHistoryEntry]] = None):
        super().__init__(lambda e: (e.profile_id, e.date), entries)

    def list_for_profile(
        self,
        profile_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[VdotHistoryEntry]:
        """Entries dated within [start, end], oldest first."""
        selected = [
            e for e in self._matching({"profile_id": profile_id})
            if (start is None or e.date >= start) and (end is None or e.date <= end)
        ]
        return sorted(selected, key=lambda e: e.date)

    def replace_for_profile(self, profile_id: int, entries: Iterable[VdotHistoryEntry]) -> int:
        """Drop every entry for the profile and store `entries` instead."""
        entries = list(entries)
        with self._lock:
            for key in [k for k, e in self._items.items() if e.profile_id == profile_id]:
                del self._items[key]
            for entry in entries:
                self._items[self._key_fn(entry)] = entry
        logger.debug("Replaced VDOT history for profile %s with %d entries", profile_id, len(entries))
        return len(entries)


class LapRepository:
    """Ordered laps per workout, replaced wholesale on save."""

    def __init__(self, laps: Optional[Dict[WorkoutId, List[LapSummary]]] = None):
        self._laps: Dict[WorkoutId, List[LapSummary]] = dict(laps or {})
        self._lock = threading.RLock()

    def get_laps(self, workout_id: WorkoutId) -> List[LapSummary]:
        with self._lock:
            return list(self._laps.get(workout_id, []))

    def save_laps(self, workout_id: WorkoutId, laps: List[LapSummary]) -> None:
        with self._lock:
            self._laps[workout_id] = list(laps)
        logger.debug("Saved %d laps for workout %s", len(laps), workout_id)

    def workout_ids(self) -> List[WorkoutId]:
        with self._lock:
            return list(self._laps)
