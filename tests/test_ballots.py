"""Tests for ballot normalization."""

import pytest
from tests.conftest import make_record
from awardtally.ballots import (
    canonical_ranks,
    get_all_rank_sources,
    normalize_ballot,
)
from awardtally.ballots.explicit import ExplicitRankSource
from awardtally.ballots.legacy import LegacyRankSource
from awardtally.models import MovieEntry, RankedBallot

FIVE = ["m1", "m2", "m3", "m4", "m5"]


class TestRegistry:
    def test_explicit_before_legacy(self):
        sources = get_all_rank_sources()
        assert sources.index(ExplicitRankSource) < sources.index(LegacyRankSource)
        assert [cls().name for cls in sources] == ["explicit", "legacy"]


class TestExplicitRanks:
    def test_valid_explicit_list(self):
        record = make_record("b1", seen=FIVE + ["m6"], explicit=["m3", "m1", "m5", "m2", "m4"])
        assert canonical_ranks(record) == ["m3", "m1", "m5", "m2", "m4"]

    def test_explicit_preferred_over_legacy(self):
        record = make_record(
            "b1", seen=FIVE,
            ranks={"m1": 1, "m2": 2, "m3": 3, "m4": 4, "m5": 5},
            explicit=["m5", "m4", "m3", "m2", "m1"],
        )
        assert canonical_ranks(record) == ["m5", "m4", "m3", "m2", "m1"]

    @pytest.mark.parametrize("explicit", [
        ["m1", "m2", "m3", "m4"],                # too short
        ["m1", "m2", "m3", "m4", "m5", "m6"],    # too long
        ["m1", "m2", "m3", "m4", "m4"],          # duplicate
        ["m1", "m2", "m3", "m4", 5],             # not a string
        ["m1", "m2", "m3", "m4", "m9"],          # not seen
        "m1,m2,m3,m4,m5",                        # not a list
        {"1": "m1"},
    ])
    def test_invalid_explicit_falls_back(self, explicit):
        record = make_record("b1", seen=FIVE + ["m6"], ranks={"m2": 1, "m1": 2}, explicit=explicit)
        assert canonical_ranks(record) == ["m2", "m1"]

    def test_invalid_explicit_without_legacy_is_empty(self):
        record = make_record("b1", seen=["m1"], explicit=["m1", "m1", "m1", "m1", "m1"])
        assert canonical_ranks(record) == []

    def test_required_count(self):
        record = make_record("b1", seen=FIVE, explicit=["m1", "m2", "m3"])
        assert canonical_ranks(record, required_count=3) == ["m1", "m2", "m3"]
        assert canonical_ranks(record) == []


class TestLegacyRanks:
    def test_sorted_by_rank(self):
        record = make_record("b1", seen=["A", "B", "C"], ranks={"A": 3, "B": 1, "C": 2})
        assert canonical_ranks(record) == ["B", "C", "A"]

    def test_partial_ranking(self):
        record = make_record("b1", seen=["A", "B", "C"], ranks={"C": 2})
        assert canonical_ranks(record) == ["C"]

    def test_unseen_movies_skipped(self):
        record = make_record("b1", seen=["A", "B"], ranks={"A": 2, "B": 3, "X": 1})
        assert canonical_ranks(record) == ["A", "B"]

    def test_duplicate_rank_keeps_first(self):
        record = make_record("b1", seen=["A", "B", "C"], ranks={"A": 1, "B": 1, "C": 2})
        assert canonical_ranks(record) == ["A", "C"]

    def test_duplicate_movie_keeps_best_rank(self):
        record = make_record("b1", seen=["A", "B"], ranks={"A": 2, "B": 3})
        record.movies.append(make_record("x", seen=["A"], ranks={"A": 1}).movies[0])
        assert canonical_ranks(record) == ["A", "B"]

    @pytest.mark.parametrize("rank", [0, 6, -1, 2.5, "1", True, None])
    def test_out_of_range_or_non_numeric_rank(self, rank):
        record = make_record("b1", seen=["A", "B"], ranks={"A": rank, "B": 1})
        assert canonical_ranks(record) == ["B"]

    def test_whole_float_rank(self):
        record = make_record("b1", seen=["A", "B"], ranks={"A": 2.0, "B": 1})
        assert canonical_ranks(record) == ["B", "A"]

    def test_no_data(self):
        assert canonical_ranks(make_record("b1", seen=[])) == []

    def test_required_count_bounds_ranks(self):
        record = make_record("b1", seen=["A", "B", "C"], ranks={"A": 1, "B": 3, "C": 4})
        assert canonical_ranks(record, required_count=3) == ["A", "B"]

    @pytest.mark.parametrize("movie_id", [7, "", None])
    def test_non_string_movie_id_skipped(self, movie_id):
        record = make_record("b1", seen=["A"], ranks={"A": 2})
        record.movies.append(MovieEntry(id=movie_id, seen=True, rank=1))
        assert canonical_ranks(record) == ["A"]


class TestNormalizeBallot:
    def test_normalize(self):
        record = make_record("b7", seen=["A", "B", "C"], ranks={"A": 3, "B": 1, "C": 2})
        assert normalize_ballot(record) == RankedBallot("b7", ("B", "C", "A"))

    def test_normalize_empty(self):
        assert normalize_ballot(make_record("b8", seen=["A"])) == RankedBallot("b8", ())
