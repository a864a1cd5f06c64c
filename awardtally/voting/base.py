"""Abstract base class for voting systems."""

from abc import ABC, abstractmethod

from awardtally.models import Election, TabulationResult


class VotingSystem(ABC):
    """Abstract base class for voting systems.

    Each voting system implementation counts the ranked ballots of an
    election with its own algorithm.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this voting system."""
        pass

    @property
    def description(self) -> str:
        """Optional description of how this voting system works."""
        return ""

    @abstractmethod
    def calculate(self, election: Election) -> TabulationResult:
        """Count the election using this voting system.

        Args:
            election: Normalized ballots and candidate titles

        Returns:
            TabulationResult with the rounds, winner and presentation steps
        """
        pass
