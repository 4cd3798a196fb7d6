"""Tests for turning ``?point=<id>`` visits into stamps."""

import pytest

from stampcard.intake import build_share_url, handle_intake, parse_point, strip_point_param
from stampcard.store import ProgressStore

BASE = "https://stamps.example.com/card/"


class TestParsePoint:
    @pytest.mark.parametrize("raw,expected", [("1", 1), ("6", 6), (" 3 ", 3), ("03", 3), ("000004", 4)])
    def test_valid(self, raw, expected):
        assert parse_point(raw, 6) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "0", "7", "-1", "abc", "3abc", "2.5", "+2", "３", "9" * 5000, "1" * 30],
    )
    def test_ignored(self, raw):
        assert parse_point(raw, 6) is None


class TestUrls:
    def test_strip_keeps_other_params(self):
        assert strip_point_param(BASE + "?point=3&lang=zh#top") == BASE + "?lang=zh#top"

    def test_strip_only_param(self):
        assert strip_point_param(BASE + "?point=3") == BASE

    def test_strip_repeated_param(self):
        assert strip_point_param(BASE + "?point=3&point=4") == BASE

    def test_share_url(self):
        assert build_share_url(BASE + "?lang=zh", 4) == BASE + "?point=4"


class TestHandleIntake:
    def test_records_new_stamp(self, store):
        result = handle_intake(store, BASE + "?point=3", {"point": "3"})

        assert result.added
        assert result.added_id == 3
        assert result.clean_url == BASE
        assert [stamp.id for stamp in store.progress.stamps] == [3]

    def test_revisit_is_a_no_op(self, store):
        handle_intake(store, BASE + "?point=3", {"point": "3"})
        before = store.progress

        result = handle_intake(store, BASE + "?point=3", {"point": "3"})

        assert not result.added
        assert result.clean_url is None
        assert store.progress == before

    @pytest.mark.parametrize(
        "args", [{}, {"point": "x"}, {"point": "0"}, {"point": "7"}, {"point": "9" * 5000}]
    )
    def test_invalid_visit_changes_nothing(self, store, args):
        result = handle_intake(store, BASE, args)

        assert not result.added
        assert store.progress.count == 0

    def test_visit_order_does_not_matter(self, store):
        for point in ("3", "4", "5", "1", "2", "6"):
            handle_intake(store, BASE + "?point=" + point, {"point": point})

        assert [stamp.id for stamp in store.progress.stamps] == [1, 2, 3, 4, 5, 6]
        assert store.claim_reward() is True
        assert store.progress.reward_claimed is True

    def test_stamp_is_persisted_during_intake(self, catalog, fixed_clock):
        saved = []
        store = ProgressStore(catalog, on_change=saved.append, clock=fixed_clock)

        result = handle_intake(store, BASE + "?point=2", {"point": "2"})

        assert result.added_id == 2
        assert saved and saved[-1].has(2)
