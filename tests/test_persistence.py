"""Tests for mirroring progress into browser storage."""

import json

from stampcard.models import StampRecord, UserProgress
from stampcard.persistence import STORAGE_KEY, ProgressPersistence

TS = "2024-05-01T10:00:00+00:00"


class ExplodingStorage(dict):
    def __setitem__(self, key, value):
        raise RuntimeError("quota exceeded")


def _full_progress(claimed=True):
    stamps = tuple(StampRecord(id=i, timestamp=TS, name=f"Stamp {i}") for i in range(1, 7))
    return UserProgress(stamps=stamps, reward_claimed=claimed)


class TestLoad:
    def test_nothing_saved(self):
        assert ProgressPersistence({}, 6).load() is None

    def test_round_trip(self):
        persistence = ProgressPersistence({}, 6)
        for progress in (
            UserProgress.empty(),
            UserProgress(stamps=(StampRecord(id=4, timestamp=TS, name="咖啡吧 Coffee Bar"),)),
            _full_progress(),
        ):
            persistence.save(progress)
            assert persistence.load() == progress

    def test_corrupt_json_falls_back(self):
        persistence = ProgressPersistence({STORAGE_KEY: "{not json"}, 6)
        assert persistence.load() is None
        assert persistence.load_or_empty() == UserProgress.empty()

    def test_invalid_progress_falls_back(self):
        payload = json.dumps({"stamps": [{"id": 9, "timestamp": TS, "name": "x"}], "rewardClaimed": False})
        assert ProgressPersistence({STORAGE_KEY: payload}, 6).load() is None

    def test_non_string_value_falls_back(self):
        assert ProgressPersistence({STORAGE_KEY: 42}, 6).load() is None


class TestSave:
    def test_wire_format(self):
        storage = {}
        ProgressPersistence(storage, 6).save(
            UserProgress(stamps=(StampRecord(id=1, timestamp=TS, name="A"),))
        )
        assert json.loads(storage[STORAGE_KEY]) == {
            "stamps": [{"id": 1, "timestamp": TS, "name": "A"}],
            "rewardClaimed": False,
        }

    def test_write_failure_is_swallowed(self):
        persistence = ProgressPersistence(ExplodingStorage(), 6)
        persistence.save(_full_progress())
        assert persistence.load() is None

    def test_custom_key(self):
        storage = {}
        ProgressPersistence(storage, 6, key="other").save(UserProgress.empty())
        assert "other" in storage
        assert STORAGE_KEY not in storage
