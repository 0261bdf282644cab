"""Live football odds dashboard, pressure analysis and bet ledger."""

__version__ = "0.1.0"
