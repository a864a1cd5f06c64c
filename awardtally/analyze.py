"""Orchestrator: normalize stored ballots, run the count and the stats."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from awardtally.ballots import DEFAULT_RANK_COUNT, normalize_ballot
from awardtally.models import BallotRecord, Election, ParticipationStats, TabulationResult
from awardtally.stats import calculate_participation_stats
from awardtally.voting.rcv import RankedChoiceSystem

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Participation stats plus the ranked-choice count for included ballots."""
    stats: ParticipationStats
    rcv: TabulationResult

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "stats": self.stats.to_dict(),
            "rcv": self.rcv.to_dict(),
        }


class AnalysisError(Exception):
    """Error during ballot analysis."""
    pass


def build_title_map(
    ballots: list[BallotRecord], catalog: dict[str, str] | None = None
) -> dict[str, str]:
    """Map movie ID -> title, preferring the catalog over titles on ballots.

    Catalog entries that are not string -> string are ignored.
    """
    titles = {
        movie_id: title
        for movie_id, title in (catalog or {}).items()
        if isinstance(movie_id, str) and isinstance(title, str)
    }
    for ballot in ballots:
        for movie in ballot.movies:
            if isinstance(movie.id, str) and movie.id and not titles.get(movie.id):
                titles[movie.id] = movie.title or movie.id
    return titles


def load_ballots(records: Iterable[BallotRecord | dict[str, Any]]) -> list[BallotRecord]:
    """Turn raw ballot documents into BallotRecords.

    Raises:
        AnalysisError: If the payload is not a list of ballots, a ballot has
            no string ID, or two ballots share an ID
    """
    if isinstance(records, (str, bytes, dict)) or not isinstance(records, Iterable):
        raise AnalysisError("Expected a list of ballots")

    ballots = []
    for record in records:
        if isinstance(record, BallotRecord):
            ballots.append(record)
        elif isinstance(record, dict):
            if not record.get("id") or not isinstance(record["id"], str):
                raise AnalysisError("Every ballot needs a string 'id'")
            ballots.append(BallotRecord.from_dict(record))
        else:
            raise AnalysisError(f"Unrecognized ballot: {record!r}")

    ids = [ballot.id for ballot in ballots]
    if len(set(ids)) != len(ids):
        raise AnalysisError("Ballot IDs must be unique")

    return ballots


def analyze_ballots(
    records: Iterable[BallotRecord | dict[str, Any]],
    catalog: dict[str, str] | None = None,
    required_count: int = DEFAULT_RANK_COUNT,
) -> AnalysisResult:
    """Run participation stats and the ranked-choice count.

    Args:
        records: Every stored ballot, flagged ones included
        catalog: Optional dict mapping movie ID -> title
        required_count: Number of Best Picture ranks the voting form asked for

    Returns:
        AnalysisResult for the ballots not flagged as excluded

    Raises:
        AnalysisError: If the ballots can't be read
    """
    ballots = load_ballots(records)
    included = [ballot for ballot in ballots if ballot.included]
    logger.info("Analyzing %d of %d ballots", len(included), len(ballots))

    election = Election(
        ballots=[normalize_ballot(ballot, required_count) for ballot in included],
        titles=build_title_map(included, catalog),
    )

    return AnalysisResult(
        stats=calculate_participation_stats(included, len(ballots)),
        rcv=RankedChoiceSystem().calculate(election),
    )
