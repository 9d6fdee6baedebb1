"""CLI command groups for ctx."""

__all__ = [
    "context",
    "exclude",
    "history",
]
