"""Shared-account ledger with conversational entry flows."""

__version__ = "0.3.0"
