"""Ranked-choice tabulation for the party awards ballot."""
