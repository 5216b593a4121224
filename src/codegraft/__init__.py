"""codegraft: a temporal code graph for planning structural edits."""

__version__ = "0.1.0"
