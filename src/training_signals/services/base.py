"""
Base service classes.

Services bind the pure metric functions to their collaborators
(repositories, weather provider, prediction engine) and run the batch
drivers that recompute many workouts at once.
"""

import logging
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

from ..config import Settings, get_settings
from ..exceptions import BatchItemError


ItemT = TypeVar("ItemT")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BatchSummary:
    """Counters reported at the end of a batch run."""

    processed: int = 0
    skipped: int = 0
    errors: List[BatchItemError] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.error_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "errors": self.error_count,
            "failed_items": [e.item_id for e in self.errors],
        }


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides common functionality:
    - Settings and logger injection
    - An injectable clock for timestamps
    - The per-item batch loop
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._clock = clock or utc_now
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    @property
    def settings(self) -> Settings:
        return self._settings

    def now(self) -> datetime:
        return self._clock()

    def run_batch(
        self,
        items: Iterable[ItemT],
        handler: Callable[[ItemT], bool],
        item_id: Callable[[ItemT], Hashable],
        label: str = "items",
    ) -> BatchSummary:
        """
        Run `handler` over every item independently.

        The handler returns True when it did work and False when it skipped
        the item. An exception from one item is recorded in the summary and
        the loop moves on.
        """
        summary = BatchSummary()
        interval = max(1, self._settings.batch_progress_interval)
        items = list(items)

        self.logger.info("Processing %d %s", len(items), label)

        for index, item in enumerate(items, start=1):
            key = item_id(item)
            try:
                if handler(item):
                    summary.processed += 1
                else:
                    summary.skipped += 1
            except Exception as e:
                self.logger.error("Failed to process %s %s: %s", label, key, e)
                summary.errors.append(BatchItemError(key, e))

            if index % interval == 0:
                self.logger.info(
                    "Progress: %d/%d %s (processed=%d, skipped=%d, errors=%d)",
                    index, len(items), label,
                    summary.processed, summary.skipped, summary.error_count,
                )

        self.logger.info(
            "Done: processed=%d, skipped=%d, errors=%d",
            summary.processed, summary.skipped, summary.error_count,
        )
        return summary
