"""Shared test helpers."""

import json
from pathlib import Path

import pytest

from awardtally.models import BallotRecord, Election, MovieEntry, RankedBallot

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_election(
    rankings: dict[str, list[str]], titles: dict[str, str] | None = None
) -> Election:
    """Build an Election from a compact rankings table.

    Args:
        rankings: {ballot_id: [candidate_id, ...]} most preferred first
        titles: Optional {candidate_id: title}; IDs are used otherwise

    Returns:
        Election with one RankedBallot per entry.
    """
    return Election(
        ballots=[RankedBallot(ballot_id, tuple(ranks)) for ballot_id, ranks in rankings.items()],
        titles=titles or {},
    )


def make_record(
    ballot_id: str,
    seen: list[str],
    ranks: dict[str, int] | None = None,
    explicit=None,
    **kwargs,
) -> BallotRecord:
    """Build a BallotRecord with the given seen movies.

    Args:
        ballot_id: Ballot identifier
        seen: Movie IDs marked as seen
        ranks: Legacy per-movie ranks {movie_id: rank}; movies that only
            appear here are added as unseen
        explicit: Value stored as best_picture_ranks
        **kwargs: Other BallotRecord fields (voter_name, timestamp, flagged)
    """
    ranks = ranks or {}
    movie_ids = list(seen) + [m for m in ranks if m not in seen]
    movies = [
        MovieEntry(id=m, seen=m in seen, rank=ranks.get(m))
        for m in movie_ids
    ]
    return BallotRecord(id=ballot_id, movies=movies, best_picture_ranks=explicit, **kwargs)


@pytest.fixture
def ballot_documents():
    """Anonymized ballot export with both ballot schema generations."""
    path = FIXTURES_DIR / "ballots.json"
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def movie_catalog():
    path = FIXTURES_DIR / "movies.json"
    return {movie["id"]: movie["title"] for movie in json.loads(path.read_text(encoding="utf-8"))}
