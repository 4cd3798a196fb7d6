"""Progress records kept in the visitor's browser session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Tuple

from dateutil import parser as date_parser

from stampcard.exceptions import InvalidProgressError


@dataclass(frozen=True)
class StampRecord:
    """A collected stamp; created once per id and never changed afterwards."""

    id: int
    timestamp: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "timestamp": self.timestamp, "name": self.name}

    @classmethod
    def from_dict(cls, payload: Any) -> "StampRecord":
        if not isinstance(payload, dict):
            raise InvalidProgressError("Stamp record must be an object.")
        raw_id = payload.get("id")
        # bool is an int subclass; reject it explicitly
        if not isinstance(raw_id, int) or isinstance(raw_id, bool):
            raise InvalidProgressError(f"Stamp id must be an integer, got {raw_id!r}.")
        timestamp = payload.get("timestamp")
        if not isinstance(timestamp, str) or not _is_iso_timestamp(timestamp):
            raise InvalidProgressError(f"Stamp {raw_id} has an invalid timestamp: {timestamp!r}.")
        name = payload.get("name")
        if not isinstance(name, str):
            raise InvalidProgressError(f"Stamp {raw_id} has no name.")
        return cls(id=raw_id, timestamp=timestamp, name=name)


@dataclass(frozen=True)
class UserProgress:
    """Collected stamps (ascending by id) and whether the reward was claimed."""

    stamps: Tuple[StampRecord, ...] = ()
    reward_claimed: bool = False

    @classmethod
    def empty(cls) -> "UserProgress":
        return cls(stamps=(), reward_claimed=False)

    @property
    def count(self) -> int:
        return len(self.stamps)

    @property
    def collected_ids(self) -> FrozenSet[int]:
        return frozenset(stamp.id for stamp in self.stamps)

    def has(self, stamp_id: int) -> bool:
        return any(stamp.id == stamp_id for stamp in self.stamps)

    def get(self, stamp_id: int) -> StampRecord | None:
        for stamp in self.stamps:
            if stamp.id == stamp_id:
                return stamp
        return None

    def is_complete(self, total: int) -> bool:
        return self.count == total

    def percent(self, total: int) -> int:
        return int((self.count / total) * 100) if total else 0

    def to_dict(self) -> dict:
        return {
            "stamps": [stamp.to_dict() for stamp in self.stamps],
            "rewardClaimed": self.reward_claimed,
        }

    @classmethod
    def from_dict(cls, payload: Any, total: int) -> "UserProgress":
        """Validate a serialized progress value against a catalog of ``total`` stamps."""
        if not isinstance(payload, dict):
            raise InvalidProgressError("Progress must be an object.")
        raw_stamps = payload.get("stamps")
        if not isinstance(raw_stamps, list):
            raise InvalidProgressError("Progress is missing its stamps list.")
        reward_claimed = payload.get("rewardClaimed", False)
        if not isinstance(reward_claimed, bool):
            raise InvalidProgressError("rewardClaimed must be a boolean.")

        stamps = [StampRecord.from_dict(entry) for entry in raw_stamps]
        seen: set[int] = set()
        for stamp in stamps:
            if not 1 <= stamp.id <= total:
                raise InvalidProgressError(f"Stamp id {stamp.id} is outside 1..{total}.")
            if stamp.id in seen:
                raise InvalidProgressError(f"Stamp id {stamp.id} appears more than once.")
            seen.add(stamp.id)

        if reward_claimed and len(stamps) != total:
            raise InvalidProgressError("Reward cannot be claimed before every stamp is collected.")

        return cls(
            stamps=tuple(sorted(stamps, key=lambda stamp: stamp.id)),
            reward_claimed=reward_claimed,
        )


def _is_iso_timestamp(value: str) -> bool:
    try:
        date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return False
    return True
