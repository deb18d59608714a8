"""Condominium voting ledger: unit-based polls, ballots, and tallies."""

__version__ = "0.1.0"
