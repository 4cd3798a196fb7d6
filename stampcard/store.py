"""In-memory progress container with the three allowed mutations."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from stampcard.catalog import StampCatalog
from stampcard.models import StampRecord, UserProgress

ChangeListener = Callable[[UserProgress], None]
Clock = Callable[[], str]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProgressStore:
    """Owns the current UserProgress; each mutation replaces the whole value.

    ``on_change`` runs after every mutation that altered the value, which is how
    the persistence adapter mirrors progress into browser storage.
    """

    def __init__(
        self,
        catalog: StampCatalog,
        progress: Optional[UserProgress] = None,
        on_change: Optional[ChangeListener] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.catalog = catalog
        self._progress = progress or UserProgress.empty()
        self._on_change = on_change
        self._clock = clock or _now_iso

    @property
    def progress(self) -> UserProgress:
        return self._progress

    @property
    def total(self) -> int:
        return self.catalog.total

    def is_complete(self) -> bool:
        return self._progress.is_complete(self.total)

    def record_stamp(self, stamp_id: int) -> Optional[StampRecord]:
        """Append a record for ``stamp_id``; returns None when out of range or already held."""
        if not self.catalog.contains(stamp_id) or self._progress.has(stamp_id):
            return None

        record = StampRecord(
            id=stamp_id,
            timestamp=self._clock(),
            name=self.catalog.name_for(stamp_id),
        )
        stamps = tuple(sorted((*self._progress.stamps, record), key=lambda stamp: stamp.id))
        self._replace(replace(self._progress, stamps=stamps))
        return record

    def claim_reward(self) -> bool:
        if not self.is_complete() or self._progress.reward_claimed:
            return False
        self._replace(replace(self._progress, reward_claimed=True))
        return True

    def reset(self) -> None:
        self._replace(UserProgress.empty())

    def _replace(self, progress: UserProgress) -> None:
        self._progress = progress
        if self._on_change:
            self._on_change(progress)
