"""Mirror progress into browser-scoped storage (the Flask cookie session)."""

from __future__ import annotations

import json
from typing import MutableMapping, Optional

from stampcard.applog import log_warning
from stampcard.models import UserProgress

STORAGE_KEY = "digital_stamp_progress"


class ProgressPersistence:
    """Best-effort load/save of a JSON-serialized UserProgress under one key."""

    def __init__(
        self,
        storage: MutableMapping,
        total: int,
        key: str = STORAGE_KEY,
    ) -> None:
        self.storage = storage
        self.total = total
        self.key = key

    def load(self) -> Optional[UserProgress]:
        """Return the saved progress, or None when nothing usable is stored."""
        raw = self.storage.get(self.key)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            return UserProgress.from_dict(payload, self.total)
        except (TypeError, ValueError) as exc:
            # InvalidProgressError and JSONDecodeError are both ValueErrors
            log_warning("Discarding unreadable stamp progress: %s", exc)
            return None

    def load_or_empty(self) -> UserProgress:
        return self.load() or UserProgress.empty()

    def save(self, progress: UserProgress) -> None:
        try:
            self.storage[self.key] = json.dumps(
                progress.to_dict(), ensure_ascii=False, separators=(",", ":")
            )
            if hasattr(self.storage, "permanent"):
                self.storage.permanent = True
        except Exception as exc:  # storage is best-effort
            log_warning("Stamp progress could not be saved: %s", exc)

