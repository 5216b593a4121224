"""Configuration constants.

Values here are implementation limits and are NOT user-configurable.
For configurable values, see models.py.
"""

DATA_DIR_NAME = ".codegraft"
"""Per-project directory holding the store and config."""

DB_FILE_NAME = "graph.db"
"""SQLite database file inside DATA_DIR_NAME."""

CONFIG_FILE_NAME = "config.yaml"
"""User config file inside DATA_DIR_NAME."""

MAX_HOPS_LIMIT = 64
"""Largest configurable default for bounded blast radius queries."""

MIN_TOKEN_BUDGET = 64
"""Smallest token budget accepted; below this no record would ever fit."""

HASH_KEY_LENGTH = 8
"""Hex characters kept from the SHA-256 digest in new-entity identities."""

TOKENS_PER_ENTITY_ESTIMATE = 50
"""Rough metadata-only cost of one entity, used in human-facing summaries."""
