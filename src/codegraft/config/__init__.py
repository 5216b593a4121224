"""Config module exports."""

from codegraft.config.loader import get_store_path, load_config
from codegraft.config.models import (
    CodeGraftConfig,
    ContextConfig,
    ExtractionConfig,
    GraphConfig,
    LoggingConfig,
    StoreConfig,
)

__all__ = [
    "load_config",
    "get_store_path",
    "CodeGraftConfig",
    "ContextConfig",
    "ExtractionConfig",
    "GraphConfig",
    "LoggingConfig",
    "StoreConfig",
]
