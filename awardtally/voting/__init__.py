"""Voting systems for counting ranked ballots."""

from .base import VotingSystem

__all__ = ["VotingSystem"]
