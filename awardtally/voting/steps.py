"""Presentation steps for the live ranked-choice reveal.

The tabulator decides *what* happens in each round; this module turns
those decisions into self-contained slides. Every step carries a full
snapshot of where each ballot currently sits so the renderer can animate
transfers without recounting anything.
"""

from collections import Counter
from collections.abc import Mapping
from typing import TYPE_CHECKING

from awardtally.models import (
    CandidateState,
    CandidateTally,
    Election,
    PresentationStep,
    TransferSummary,
    VoteMovement,
    VoteToken,
)

if TYPE_CHECKING:
    from awardtally.voting.rcv import Assignment


BALLOT_EMOJI = "\N{TROPHY}"
EXHAUSTED_TITLE = "Exhausted"
WINNER_TITLE = "We Have a Winner!"


class StepBuilder:
    """Builds presentation steps for one tabulation run.

    Assignment mappings passed to the builder map ballot ID to an object
    with ``candidate_id`` and ``rank_index`` attributes (both None once the
    ballot is exhausted).

    Args:
        election: The election being counted (used for titles and ordering)
        candidate_order: Every candidate of the run in display order
        ranked_ballots: Number of ballots with at least one preference
        emoji: Token glyph shown for each vote
    """

    def __init__(
        self,
        election: Election,
        candidate_order: list[str],
        ranked_ballots: int,
        emoji: str = BALLOT_EMOJI,
    ):
        self.election = election
        self.candidate_order = candidate_order
        self.ranked_ballots = ranked_ballots
        self.emoji = emoji

    def candidate_states(
        self,
        assignments: Mapping[str, "Assignment"],
        eliminated: set[str],
        winner: str | None = None,
    ) -> tuple[CandidateState, ...]:
        tokens: dict[str, list[VoteToken]] = {}
        for ballot_id, assignment in assignments.items():
            if assignment.candidate_id is None:
                continue
            tokens.setdefault(assignment.candidate_id, []).append(VoteToken(
                token_id=ballot_id,
                ballot_id=ballot_id,
                rank_index=assignment.rank_index,
                emoji=self.emoji,
            ))

        states = []
        for candidate_id in self.candidate_order:
            candidate_tokens = sorted(
                tokens.get(candidate_id, []),
                key=lambda t: (t.rank_index, t.ballot_id),
            )
            if candidate_id == winner:
                status = "winner"
            elif candidate_id in eliminated:
                status = "eliminated"
            else:
                status = "active"
            states.append(CandidateState(
                candidate_id=candidate_id,
                title=self.election.title_of(candidate_id),
                votes=len(candidate_tokens),
                status=status,
                tokens=tuple(candidate_tokens),
            ))
        return tuple(states)

    def _step(
        self,
        step_id: str,
        round_number: int,
        step_type: str,
        title: str,
        explanation: str,
        assignments: Mapping[str, "Assignment"],
        active_ballots: int,
        threshold: int,
        eliminated: set[str],
        winner: str | None = None,
        newly_eliminated: tuple[str, ...] = (),
        vote_movements: tuple[VoteMovement, ...] = (),
    ) -> PresentationStep:
        return PresentationStep(
            id=step_id,
            round_number=round_number,
            type=step_type,
            title=title,
            explanation=explanation,
            active_ballots=active_ballots,
            threshold=threshold,
            exhausted_ballots=self.ranked_ballots - active_ballots,
            newly_eliminated=newly_eliminated,
            candidates=self.candidate_states(assignments, eliminated, winner),
            vote_movements=vote_movements,
        )

    def standings(
        self,
        round_number: int,
        assignments: Mapping[str, "Assignment"],
        tallies: tuple[CandidateTally, ...],
        active_ballots: int,
        threshold: int,
        eliminated: set[str],
    ) -> PresentationStep:
        """Tallies at the start of a round that has no majority."""
        leader = tallies[0]
        return self._step(
            f"round-{round_number}-standings-start",
            round_number,
            "standings",
            f"Round {round_number}: Standings",
            f"No majority yet. {leader.title} leads with {leader.votes} of "
            f"{active_ballots} votes. {threshold} needed to win.",
            assignments, active_ballots, threshold, eliminated,
        )

    def redistribution(
        self,
        round_number: int,
        index: int,
        candidate_id: str,
        movements: tuple[VoteMovement, ...],
        assignments: Mapping[str, "Assignment"],
        active_ballots: int,
        threshold: int,
        eliminated: set[str],
    ) -> PresentationStep:
        """One eliminated candidate's ballots moving on.

        ``assignments`` is the running state after this candidate's ballots
        have moved but before any later candidate eliminated in the same
        round has been processed.
        """
        reassigned = Counter(
            m.to_candidate_id for m in movements if m.to_candidate_id is not None
        )
        exhausted = len(movements) - sum(reassigned.values())

        parts = [
            f"{reassigned[c]} to {self.election.title_of(c)}"
            for c in sorted(reassigned, key=self.election.sort_key)
        ]
        summary = ", ".join(parts) if parts else "0 to no remaining movies"

        return self._step(
            f"round-{round_number}-redistribution-{index}",
            round_number,
            "redistribution",
            "Votes Reassigned",
            f"{self.election.title_of(candidate_id)} eliminated. "
            f"{sum(reassigned.values())} vote(s) reassigned: {summary}. "
            f"{exhausted} ballot(s) exhausted.",
            assignments, active_ballots, threshold, eliminated,
            newly_eliminated=(candidate_id,),
            vote_movements=movements,
        )

    def threshold_update(
        self,
        round_number: int,
        newly_exhausted: int,
        assignments: Mapping[str, "Assignment"],
        active_ballots: int,
        threshold: int,
        eliminated: set[str],
    ) -> PresentationStep:
        return self._step(
            f"round-{round_number}-threshold-update",
            round_number,
            "threshold-update",
            "Checking for a Majority...",
            f"{newly_exhausted} ballot(s) exhausted. Majority is now "
            f"{threshold} of {active_ballots} active ballots.",
            assignments, active_ballots, threshold, eliminated,
        )

    def winner(
        self,
        round_number: int,
        winner_id: str,
        votes: int,
        assignments: Mapping[str, "Assignment"],
        active_ballots: int,
        threshold: int,
        eliminated: set[str],
    ) -> PresentationStep:
        """Winner by majority, or as the last candidate standing."""
        title = self.election.title_of(winner_id)
        if active_ballots > 0:
            explanation = f"{title} wins with {votes} of {active_ballots} active votes."
        else:
            explanation = (
                f"{title} is the final remaining movie and wins after all "
                f"ballots were exhausted."
            )
        return self._step(
            f"round-{round_number}-winner",
            round_number,
            "winner",
            WINNER_TITLE,
            explanation,
            assignments, active_ballots, threshold, eliminated,
            winner=winner_id,
        )

    def tiebreak_winner(
        self,
        round_number: int,
        winner_id: str,
        tied_votes: int,
        assignments: Mapping[str, "Assignment"],
        active_ballots: int,
        threshold: int,
        eliminated: set[str],
    ) -> PresentationStep:
        """Winner picked by title order because every candidate is tied."""
        title = self.election.title_of(winner_id)
        if active_ballots > 0:
            explanation = (
                f"All remaining movies are tied at {tied_votes} vote(s). "
                f"{title} wins via tie-break."
            )
        else:
            explanation = f"{title} wins via tie-break after all ballots were exhausted."
        return self._step(
            f"round-{round_number}-winner-tiebreak",
            round_number,
            "winner",
            WINNER_TITLE,
            explanation,
            assignments, active_ballots, threshold, eliminated,
            winner=winner_id,
        )

    def movement(
        self, ballot_id: str, current: "Assignment", following: "Assignment"
    ) -> VoteMovement:
        return VoteMovement(
            token_id=ballot_id,
            ballot_id=ballot_id,
            from_candidate_id=current.candidate_id,
            from_emoji=self.emoji,
            to_candidate_id=following.candidate_id,
            emoji=self.emoji,
        )

    def transfer_summaries(self, movements: list[VoteMovement]) -> tuple[TransferSummary, ...]:
        """Aggregate movements into one count per (from, to) path.

        Sorted by source candidate, then destination; exhausted ballots
        come after every real destination.
        """
        counts = Counter((m.from_candidate_id, m.to_candidate_id) for m in movements)

        def order(path):
            source, target = path
            target_key = (1, "", "") if target is None else (0, *self.election.sort_key(target))
            return (self.election.sort_key(source), target_key)

        return tuple(
            TransferSummary(
                from_candidate_id=source,
                from_title=self.election.title_of(source),
                to_candidate_id=target,
                to_title=EXHAUSTED_TITLE if target is None else self.election.title_of(target),
                count=counts[(source, target)],
            )
            for source, target in sorted(counts, key=order)
        )
