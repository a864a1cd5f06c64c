"""Rank source for ballots that store an explicit ordered ID list."""

from awardtally.ballots import register_rank_source
from awardtally.ballots.base import RankSource
from awardtally.models import BallotRecord


@register_rank_source
class ExplicitRankSource(RankSource):
    """Ballots with a ``bestPictureRanks`` array of movie IDs.

    The array is trusted only when it is a complete ranking: exactly
    ``required_count`` distinct string IDs, every one of them a movie the
    voter marked as seen. Anything else is left to the next source.
    """

    @property
    def name(self) -> str:
        return "explicit"

    def extract(self, record: BallotRecord, required_count: int) -> list[str] | None:
        ranks = record.best_picture_ranks
        if not isinstance(ranks, list) or len(ranks) != required_count:
            return None
        if not all(isinstance(movie_id, str) for movie_id in ranks):
            return None
        if len(set(ranks)) != required_count:
            return None

        seen = record.seen_ids
        if not all(movie_id in seen for movie_id in ranks):
            return None

        return list(ranks)
