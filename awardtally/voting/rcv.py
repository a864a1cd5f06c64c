"""Instant Runoff Voting (IRV) with a replayable presentation record."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from awardtally.models import (
    CandidateTally,
    Election,
    RankedBallot,
    Round,
    TabulationResult,
)
from awardtally.voting.base import VotingSystem
from awardtally.voting.steps import BALLOT_EMOJI, StepBuilder

logger = logging.getLogger(__name__)


MAX_ROUNDS = 500


@dataclass(frozen=True)
class Assignment:
    """Where a ballot's vote currently sits.

    ``rank_index`` is the 0-based position of the candidate on the ballot.
    Both fields are None when the ballot is exhausted.
    """
    candidate_id: str | None
    rank_index: int | None


EXHAUSTED = Assignment(None, None)


def assign(ranks: Iterable[str], remaining: set[str]) -> Assignment:
    """Return the ballot's first preference that is still in the count."""
    for index, candidate_id in enumerate(ranks):
        if candidate_id in remaining:
            return Assignment(candidate_id, index)
    return EXHAUSTED


def majority_threshold(active_ballots: int) -> int:
    return active_ballots // 2 + 1 if active_ballots > 0 else 0


def count_active(assignments: dict[str, Assignment]) -> int:
    return sum(1 for a in assignments.values() if a.candidate_id is not None)


class RankedChoiceSystem(VotingSystem):
    """Single-winner instant runoff.

    Each round:
    1. Every ballot counts for its highest-ranked candidate still in the race
    2. If a candidate has a majority of the active (non-exhausted) ballots,
       or is the only one left, they win
    3. Candidates with zero votes are dropped together without using up a
       round, as long as someone still has votes
    4. If every remaining candidate is tied, the first one in title order wins
    5. Otherwise all candidates tied for fewest votes are eliminated and
       their ballots move to the next remaining preference

    Ties are always resolved by movie title, then ID, so the same ballots
    always give the same result regardless of the order they arrive in.
    Ballot IDs must be unique; ``calculate`` raises ValueError otherwise.

    Args:
        max_rounds: Iteration guard for the elimination loop
        emoji: Token glyph used in presentation steps
    """

    def __init__(self, max_rounds: int = MAX_ROUNDS, emoji: str = BALLOT_EMOJI):
        self.max_rounds = max_rounds
        self.emoji = emoji

    @property
    def name(self) -> str:
        return "Ranked Choice"

    @property
    def description(self) -> str:
        return "Instant runoff: eliminate the last-placed movie and transfer its votes until one has a majority"

    def calculate(self, election: Election) -> TabulationResult:
        ids = [b.ballot_id for b in election.ballots]
        if len(set(ids)) != len(ids):
            raise ValueError("Ballot IDs must be unique")

        ballots = sorted(
            (b for b in election.ballots if b.ranks), key=lambda b: b.ballot_id
        )
        candidate_order = election.candidate_order()
        result = TabulationResult(
            candidate_order=candidate_order,
            titles_by_candidate_id={c: election.title_of(c) for c in candidate_order},
        )

        builder = StepBuilder(election, candidate_order, len(ballots), self.emoji)
        remaining = list(candidate_order)
        eliminated: set[str] = set()
        zero_vote_dropped: list[str] = []
        round_number = 1

        for _ in range(self.max_rounds):
            if not remaining:
                break

            assignments = self._assign_all(ballots, set(remaining))
            votes = {c: 0 for c in remaining}
            for assignment in assignments.values():
                if assignment.candidate_id is not None:
                    votes[assignment.candidate_id] += 1

            active = count_active(assignments)
            threshold = majority_threshold(active)
            tallies = tuple(sorted(
                (CandidateTally(c, election.title_of(c), votes[c]) for c in remaining),
                key=lambda t: (-t.votes, *election.sort_key(t.candidate_id)),
            ))
            leader = tallies[0]

            # Check for majority winner or last candidate standing
            winner = None
            if active > 0 and leader.votes >= threshold:
                winner = leader.candidate_id
            elif len(remaining) == 1:
                winner = remaining[0]

            if winner is not None:
                result.steps.append(builder.winner(
                    round_number, winner, votes[winner],
                    assignments, active, threshold, eliminated,
                ))
                result.rounds.append(Round(
                    round_number=round_number,
                    tallies=tallies,
                    eliminated=(),
                    transfers=(),
                    active_ballots=active,
                    threshold=threshold,
                    winner=winner,
                    excluded_zero_vote=tuple(zero_vote_dropped),
                ))
                result.winner = winner
                logger.debug("Round %d: %s wins with %d of %d", round_number, winner, votes[winner], active)
                break

            lowest = min(votes.values())
            # remaining is kept in tie-break order, so this is too
            lowest_candidates = [c for c in remaining if votes[c] == lowest]

            if len(lowest_candidates) == len(remaining):
                # Everyone tied - nobody can be eliminated without emptying the race
                winner = leader.candidate_id
                result.steps.append(builder.tiebreak_winner(
                    round_number, winner, lowest,
                    assignments, active, threshold, eliminated,
                ))
                result.rounds.append(Round(
                    round_number=round_number,
                    tallies=tallies,
                    eliminated=(),
                    transfers=(),
                    active_ballots=active,
                    threshold=threshold,
                    winner=winner,
                    excluded_zero_vote=tuple(zero_vote_dropped),
                ))
                result.winner = winner
                logger.debug("Round %d: %d-way tie, %s wins on tie-break", round_number, len(remaining), winner)
                break

            if lowest == 0:
                # Zero-vote candidates can't affect anyone's tally, drop them all at once
                eliminated.update(lowest_candidates)
                zero_vote_dropped.extend(lowest_candidates)
                remaining = [c for c in remaining if votes[c] > 0]
                logger.debug("Round %d: dropping zero-vote candidates %s", round_number, lowest_candidates)
                continue

            result.steps.append(builder.standings(
                round_number, assignments, tallies, active, threshold, eliminated,
            ))

            dropped = set(lowest_candidates)
            next_remaining = [c for c in remaining if c not in dropped]
            next_assignments = self._assign_all(ballots, set(next_remaining))

            # Move each eliminated candidate's ballots separately, so the
            # presentation can show one transfer at a time
            progressive = dict(assignments)
            round_movements = []
            newly_exhausted = 0
            for index, candidate_id in enumerate(lowest_candidates, start=1):
                eliminated.add(candidate_id)
                movements = []
                for ballot in ballots:
                    current = assignments[ballot.ballot_id]
                    if current.candidate_id != candidate_id:
                        continue
                    following = next_assignments[ballot.ballot_id]
                    movements.append(builder.movement(ballot.ballot_id, current, following))
                    progressive[ballot.ballot_id] = following

                newly_exhausted += sum(1 for m in movements if m.to_candidate_id is None)
                round_movements.extend(movements)
                step_active = count_active(progressive)
                result.steps.append(builder.redistribution(
                    round_number, index, candidate_id, tuple(movements),
                    progressive, step_active, majority_threshold(step_active), eliminated,
                ))

            next_active = count_active(next_assignments)
            next_threshold = majority_threshold(next_active)
            if newly_exhausted > 0 and next_threshold != threshold and next_active > 0:
                result.steps.append(builder.threshold_update(
                    round_number, newly_exhausted,
                    next_assignments, next_active, next_threshold, eliminated,
                ))

            result.rounds.append(Round(
                round_number=round_number,
                tallies=tallies,
                eliminated=tuple(lowest_candidates),
                transfers=builder.transfer_summaries(round_movements),
                active_ballots=active,
                threshold=threshold,
                excluded_zero_vote=tuple(zero_vote_dropped),
            ))
            logger.debug("Round %d: eliminated %s", round_number, lowest_candidates)

            zero_vote_dropped = []
            remaining = next_remaining
            round_number += 1

        if result.winner is None and remaining:
            logger.warning(
                "No winner after %d iterations with %d candidates remaining",
                self.max_rounds, len(remaining),
            )

        return result

    @staticmethod
    def _assign_all(ballots: list[RankedBallot], remaining: set[str]) -> dict[str, Assignment]:
        return {ballot.ballot_id: assign(ballot.ranks, remaining) for ballot in ballots}


def tabulate(
    ballots: list[RankedBallot],
    titles: dict[str, str] | None = None,
    max_rounds: int = MAX_ROUNDS,
) -> TabulationResult:
    """Run an instant-runoff count over normalized ballots.

    Args:
        ballots: Ranked ballots; empty preference lists are ignored
        titles: Dict mapping candidate ID -> display title
        max_rounds: Iteration guard for the elimination loop

    Returns:
        TabulationResult. With no ranked ballots it has no rounds, no steps
        and no winner.
    """
    election = Election(ballots=list(ballots), titles=dict(titles or {}))
    return RankedChoiceSystem(max_rounds=max_rounds).calculate(election)
