"""Load Markdown books from a SUMMARY.md outline and plan their preprocessing."""

__version__ = "0.1.0"
__all__ = ["book", "events", "ordering", "pipeline", "summary"]