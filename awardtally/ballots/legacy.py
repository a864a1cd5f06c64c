"""Rank source for ballots that store a numeric rank on each movie."""

from awardtally.ballots import register_rank_source
from awardtally.ballots.base import RankSource
from awardtally.models import BallotRecord


@register_rank_source
class LegacyRankSource(RankSource):
    """Older ballots where each movie entry may carry ``rank`` 1..N.

    Only seen movies with a string ID and an integer rank in range are
    eligible. They are ordered by rank; a rank that was already used, or a
    movie that was already placed, is skipped. Corrupt data therefore
    yields a shorter ranking rather than an error.
    """

    @property
    def name(self) -> str:
        return "legacy"

    def extract(self, record: BallotRecord, required_count: int) -> list[str] | None:
        eligible = [
            movie for movie in record.movies
            if movie.seen
            and isinstance(movie.id, str) and movie.id
            and _is_valid_rank(movie.rank, required_count)
        ]
        # sorted() is stable, so equal ranks keep ballot order
        eligible = sorted(eligible, key=lambda movie: movie.rank)

        used_ranks: set[int] = set()
        ordered: list[str] = []
        for movie in eligible:
            if movie.rank in used_ranks or movie.id in ordered:
                continue
            used_ranks.add(movie.rank)
            ordered.append(movie.id)

        return ordered


def _is_valid_rank(rank, required_count: int) -> bool:
    # bool is an int subclass but never a rank
    if isinstance(rank, bool):
        return False
    if isinstance(rank, float) and rank.is_integer():
        rank = int(rank)
    return isinstance(rank, int) and 1 <= rank <= required_count
