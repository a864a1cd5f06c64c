"""Participation statistics for the results overview."""

import math
from datetime import datetime

from awardtally.models import BallotRecord, ParticipationLeader, ParticipationStats


FALLBACK_VOTER_NAME = "Anonymous"


def _timestamp_sort_value(timestamp: str | None) -> float:
    """Epoch seconds for an ISO-8601 timestamp; unparsable ones sort last."""
    if not timestamp:
        return math.inf
    try:
        return datetime.fromisoformat(timestamp).timestamp()
    except (TypeError, ValueError):
        return math.inf


def most_movies_seen(
    ballots: list[BallotRecord],
    fallback_name: str = FALLBACK_VOTER_NAME,
) -> ParticipationLeader | None:
    """The voter who marked the most movies as seen.

    Ties go to the earliest ballot, then voter name, then ballot ID.
    """
    if not ballots:
        return None

    def sort_key(ballot: BallotRecord):
        name = ballot.voter_name.strip() if isinstance(ballot.voter_name, str) else ""
        name = name or fallback_name
        seen = sum(1 for movie in ballot.movies if movie.seen)
        return (-seen, _timestamp_sort_value(ballot.timestamp), name, ballot.id)

    top = min(ballots, key=sort_key)
    seen_count, _, voter_name, _ = sort_key(top)
    return ParticipationLeader(voter_name=voter_name, count=-seen_count)


def calculate_participation_stats(
    included_ballots: list[BallotRecord],
    total_ballot_count: int | None = None,
) -> ParticipationStats:
    """Summarize who took part.

    Args:
        included_ballots: Ballots that count towards analysis
        total_ballot_count: All ballots before the exclusion filter
            (defaults to the number of included ballots)
    """
    if total_ballot_count is None:
        total_ballot_count = len(included_ballots)

    unique_seen = {
        movie.id
        for ballot in included_ballots
        for movie in ballot.movies
        if movie.seen and isinstance(movie.id, str) and movie.id
    }

    return ParticipationStats(
        included_ballots=len(included_ballots),
        total_ballots=total_ballot_count,
        excluded_ballots=max(total_ballot_count - len(included_ballots), 0),
        unique_movies_voted_on=len(unique_seen),
        most_movies_seen=most_movies_seen(included_ballots),
    )
