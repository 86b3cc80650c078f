"""Linear backlog prioritizer: score, rank and reorder backlog issues."""

__version__ = "0.1.0"
