"""Unit tests for competition ranking."""

from report_engine.grading.ranking import RankEngine
from report_engine.grading.types import UNRANKED, Classified, Excluded, Ungraded


def ranks(entries):
    return {entry.key: entry.position for entry in RankEngine().rank(entries)}


class TestRankEngine:
    def test_ties_share_rank_and_skip_positions(self):
        entries = [
            ("a", 10, Classified("Division 1")),
            ("b", 15, Classified("Division 2")),
            ("c", 10, Classified("Division 1")),
            ("d", 20, Classified("Division 2")),
        ]
        assert ranks(entries) == {"a": 1, "c": 1, "b": 3, "d": 4}

    def test_lower_aggregate_ranks_first(self):
        ranked = RankEngine().rank([
            ("x", 30, Classified("Division 4")),
            ("y", 8, Classified("Division 1")),
        ])
        assert [entry.key for entry in ranked] == ["y", "x"]

    def test_ungraded_with_aggregate_is_ranked(self):
        entries = [
            ("pass", 12, Classified("Division 1")),
            ("fail", 20, Ungraded()),
        ]
        assert ranks(entries) == {"pass": 1, "fail": 2}

    def test_excluded_and_missing_aggregate_are_unranked(self):
        entries = [
            ("none", None, Ungraded()),
            ("excluded", 0, Excluded()),
            ("ranked", 14, Classified("Division 2")),
        ]
        ranked = RankEngine().rank(entries)

        assert ranked[0].key == "ranked"
        assert ranked[0].position == 1
        assert {entry.key for entry in ranked[1:]} == {"none", "excluded"}
        assert all(entry.position == UNRANKED for entry in ranked[1:])
        assert all(entry.rank is None for entry in ranked[1:])

    def test_unranked_with_aggregate_listed_before_unranked_without(self):
        ranked = RankEngine().rank([
            ("no-aggregate", None, Ungraded()),
            ("excluded", 0, Excluded()),
        ])
        assert [entry.key for entry in ranked] == ["excluded", "no-aggregate"]

    def test_empty_cohort(self):
        assert RankEngine().rank([]) == []
