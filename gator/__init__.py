"""Command-line RSS aggregator with several users, stored in SQLite."""

__version__ = "0.1.0"
__all__ = ["__version__"]