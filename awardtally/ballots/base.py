"""Abstract base class for ballot rank sources."""

from abc import ABC, abstractmethod

from awardtally.models import BallotRecord


DEFAULT_RANK_COUNT = 5


class RankSource(ABC):
    """Reads a voter's preference order from one ballot schema generation.

    Ballots collected by different versions of the voting form store
    their Best Picture ranking differently. Each rank source understands
    one of those layouts. Sources are registered via the
    @register_rank_source decorator in awardtally/ballots/__init__.py and
    tried in registration order.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this schema generation."""
        pass

    @abstractmethod
    def extract(self, record: BallotRecord, required_count: int) -> list[str] | None:
        """Read the ranking from a ballot record.

        Args:
            record: The stored ballot
            required_count: Number of ranks the voting form asked for

        Returns:
            Movie IDs from most to least preferred, or None if this source
            cannot supply a ranking for the record. Never raises on
            malformed data.
        """
        pass
