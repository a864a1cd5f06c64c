"""Core data models for ballots and ranked-choice results."""

from dataclasses import dataclass, field
from typing import Any, Self


@dataclass
class MovieEntry:
    """One movie line on a submitted ballot.

    Attributes:
        id: Movie identifier
        seen: Whether the voter marked the movie as seen
        title: Display title, if the ballot carries one
        rank: Legacy per-movie Best Picture rank (1 = favourite)
    """
    id: str
    seen: bool = False
    title: str | None = None
    rank: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=_text(data.get("id")) or "",
            seen=data.get("seen") is True,
            title=_text(data.get("title")),
            rank=data.get("rank"),
        )


@dataclass
class BallotRecord:
    """A ballot as stored by the ballot repository.

    Two schema generations coexist: newer ballots carry an explicit
    ``best_picture_ranks`` list of movie IDs, older ones only a numeric
    ``rank`` on each movie entry. ``best_picture_ranks`` is kept exactly as
    stored, even when malformed.

    Example:
        >>> record = BallotRecord.from_dict({
        ...     "id": "b1",
        ...     "voterName": "Sam",
        ...     "movies": [{"id": "m1", "seen": True, "rank": 1}],
        ... })
    """
    id: str
    voter_name: str | None = None
    timestamp: str | None = None
    movies: list[MovieEntry] = field(default_factory=list)
    best_picture_ranks: Any = None
    flagged: bool = False

    @property
    def seen_ids(self) -> set[str]:
        return {movie.id for movie in self.movies if movie.seen and movie.id}

    @property
    def included(self) -> bool:
        """Whether this ballot counts towards analysis."""
        return self.flagged is not True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        movies = data.get("movies")
        return cls(
            id=data["id"],
            voter_name=_text(data.get("voterName", data.get("voter_name"))),
            timestamp=_text(data.get("timestamp")),
            movies=[MovieEntry.from_dict(m) for m in movies if isinstance(m, dict)]
            if isinstance(movies, list) else [],
            best_picture_ranks=data.get("bestPictureRanks", data.get("best_picture_ranks")),
            flagged=data.get("flagged") is True,
        )


@dataclass(frozen=True)
class RankedBallot:
    """A ballot reduced to its canonical preference order (highest first)."""
    ballot_id: str
    ranks: tuple[str, ...]


@dataclass
class Election:
    """Normalized ballots plus the titles used to display candidates.

    Attributes:
        ballots: Ranked ballots, possibly with empty preference lists
        titles: Dict mapping movie ID -> display title
    """
    ballots: list[RankedBallot]
    titles: dict[str, str] = field(default_factory=dict)

    def title_of(self, candidate_id: str) -> str:
        return self.titles.get(candidate_id) or candidate_id

    def sort_key(self, candidate_id: str) -> tuple[str, str]:
        """Tie-break order: title, then ID."""
        return (self.title_of(candidate_id), candidate_id)

    def candidate_order(self) -> list[str]:
        """Every candidate ranked on some ballot, in tie-break order."""
        candidates = {c for ballot in self.ballots for c in ballot.ranks}
        return sorted(candidates, key=self.sort_key)


@dataclass(frozen=True)
class CandidateTally:
    candidate_id: str
    title: str
    votes: int

    def to_dict(self) -> dict[str, Any]:
        return {"candidate_id": self.candidate_id, "title": self.title, "votes": self.votes}


@dataclass(frozen=True)
class TransferSummary:
    """Number of ballots moving from an eliminated candidate to one destination.

    A ``to_candidate_id`` of None means the ballots were exhausted.
    """
    from_candidate_id: str
    from_title: str
    to_candidate_id: str | None
    to_title: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_candidate_id": self.from_candidate_id,
            "from_title": self.from_title,
            "to_candidate_id": self.to_candidate_id,
            "to_title": self.to_title,
            "count": self.count,
        }


@dataclass(frozen=True)
class VoteToken:
    """One ballot's vote sitting on a candidate."""
    token_id: str
    ballot_id: str
    rank_index: int
    emoji: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "token_id": self.token_id,
            "ballot_id": self.ballot_id,
            "rank_index": self.rank_index,
            "emoji": self.emoji,
        }


@dataclass(frozen=True)
class CandidateState:
    candidate_id: str
    title: str
    votes: int
    status: str  # "active", "eliminated" or "winner"
    tokens: tuple[VoteToken, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "title": self.title,
            "votes": self.votes,
            "status": self.status,
            "tokens": [t.to_dict() for t in self.tokens],
        }


@dataclass(frozen=True)
class VoteMovement:
    """One ballot leaving an eliminated candidate (to_candidate_id None = exhausted)."""
    token_id: str
    ballot_id: str
    from_candidate_id: str
    from_emoji: str
    to_candidate_id: str | None
    emoji: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "token_id": self.token_id,
            "ballot_id": self.ballot_id,
            "from_candidate_id": self.from_candidate_id,
            "from_emoji": self.from_emoji,
            "to_candidate_id": self.to_candidate_id,
            "emoji": self.emoji,
        }


@dataclass(frozen=True)
class Round:
    """One iteration of the elimination loop.

    Attributes:
        round_number: 1-based round number
        tallies: Votes per active candidate, most votes first
        eliminated: Candidates eliminated this round (several on a tie for last)
        transfers: Aggregated ballot movements out of the eliminated candidates
        active_ballots: Ballots not exhausted at the start of the round
        threshold: Votes needed for a majority this round
        winner: Winning candidate if the count ended this round
        excluded_zero_vote: Zero-vote candidates dropped before this round's tally
    """
    round_number: int
    tallies: tuple[CandidateTally, ...]
    eliminated: tuple[str, ...]
    transfers: tuple[TransferSummary, ...]
    active_ballots: int
    threshold: int
    winner: str | None = None
    excluded_zero_vote: tuple[str, ...] = ()

    def votes_for(self, candidate_id: str) -> int:
        for tally in self.tallies:
            if tally.candidate_id == candidate_id:
                return tally.votes
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "tallies": [t.to_dict() for t in self.tallies],
            "eliminated": list(self.eliminated),
            "transfers": [t.to_dict() for t in self.transfers],
            "active_ballots": self.active_ballots,
            "threshold": self.threshold,
            "winner": self.winner,
            "excluded_zero_vote": list(self.excluded_zero_vote),
        }


@dataclass(frozen=True)
class PresentationStep:
    """A single slide of the live results reveal.

    ``type`` is one of "standings", "redistribution", "threshold-update"
    or "winner". ``candidates`` always lists every candidate of the run in
    display order, so a renderer never has to re-derive anything.
    """
    id: str
    round_number: int
    type: str
    title: str
    explanation: str
    active_ballots: int
    threshold: int
    exhausted_ballots: int
    newly_eliminated: tuple[str, ...]
    candidates: tuple[CandidateState, ...]
    vote_movements: tuple[VoteMovement, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "round_number": self.round_number,
            "type": self.type,
            "title": self.title,
            "explanation": self.explanation,
            "active_ballots": self.active_ballots,
            "threshold": self.threshold,
            "exhausted_ballots": self.exhausted_ballots,
            "newly_eliminated": list(self.newly_eliminated),
            "candidates": [c.to_dict() for c in self.candidates],
            "vote_movements": [m.to_dict() for m in self.vote_movements],
        }


@dataclass
class TabulationResult:
    """Result of a ranked-choice count.

    Attributes:
        rounds: Elimination rounds in computation order
        winner: Winning candidate ID, or None if no result
        steps: Presentation steps in computation order
        candidate_order: Every candidate in display/tie-break order
        titles_by_candidate_id: Display title for each candidate
    """
    rounds: list[Round] = field(default_factory=list)
    winner: str | None = None
    steps: list[PresentationStep] = field(default_factory=list)
    candidate_order: list[str] = field(default_factory=list)
    titles_by_candidate_id: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rounds": [r.to_dict() for r in self.rounds],
            "winner": self.winner,
            "steps": [s.to_dict() for s in self.steps],
            "candidate_order": list(self.candidate_order),
            "titles_by_candidate_id": dict(self.titles_by_candidate_id),
        }


@dataclass(frozen=True)
class ParticipationLeader:
    voter_name: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"voter_name": self.voter_name, "count": self.count}


@dataclass(frozen=True)
class ParticipationStats:
    included_ballots: int
    total_ballots: int
    excluded_ballots: int
    unique_movies_voted_on: int
    most_movies_seen: ParticipationLeader | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "included_ballots": self.included_ballots,
            "total_ballots": self.total_ballots,
            "excluded_ballots": self.excluded_ballots,
            "unique_movies_voted_on": self.unique_movies_voted_on,
            "most_movies_seen": (
                self.most_movies_seen.to_dict() if self.most_movies_seen else None
            ),
        }


def _text(value: Any) -> str | None:
    """Free-text fields are only kept when stored as strings."""
    return value if isinstance(value, str) else None
