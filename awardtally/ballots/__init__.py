"""Ballot normalization across the stored ballot schema generations."""

from .base import DEFAULT_RANK_COUNT, RankSource
from awardtally.models import BallotRecord, RankedBallot

# Rank source registry - sources are tried in registration order
_rank_sources: list[type[RankSource]] = []


def register_rank_source(source_class: type[RankSource]) -> type[RankSource]:
    """Decorator to register a rank source class."""
    _rank_sources.append(source_class)
    return source_class


def get_all_rank_sources() -> list[type[RankSource]]:
    """Return all registered rank source classes."""
    return _rank_sources.copy()


def canonical_ranks(record: BallotRecord, required_count: int = DEFAULT_RANK_COUNT) -> list[str]:
    """Return the voter's Best Picture ranking, most preferred first.

    The first registered source that recognises the record wins, so an
    explicit rank list is preferred over legacy per-movie ranks. If no
    source recognises it the ballot has no ranked preferences.
    """
    for source_class in _rank_sources:
        ranks = source_class().extract(record, required_count)
        if ranks is not None:
            return ranks
    return []


def normalize_ballot(record: BallotRecord, required_count: int = DEFAULT_RANK_COUNT) -> RankedBallot:
    return RankedBallot(
        ballot_id=record.id,
        ranks=tuple(canonical_ranks(record, required_count)),
    )


# Import sources here to register them (explicit before legacy)
from awardtally.ballots import explicit  # noqa: E402, F401
from awardtally.ballots import legacy  # noqa: E402, F401
