"""Release reconciliation for hosted git providers."""

__version__ = "0.3.0"
