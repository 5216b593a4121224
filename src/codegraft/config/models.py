"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CODEGRAFT__SECTION__KEY)
3. Repo YAML (.codegraft/config.yaml)
4. Global YAML (~/.config/codegraft/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CODEGRAFT__<SECTION>__<KEY>=<VALUE>

Examples:
    CODEGRAFT__LOGGING__LEVEL=DEBUG
    CODEGRAFT__CONTEXT__TOKEN_BUDGET=4000
    CODEGRAFT__GRAPH__DEFAULT_MAX_HOPS=3
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from codegraft.config.constants import MAX_HOPS_LIMIT, MIN_TOKEN_BUDGET

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CODEGRAFT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. The CLI's --verbose flag lowers it to DEBUG.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class StoreConfig(BaseModel):
    """Code graph store location.

    Env vars:
        CODEGRAFT__STORE__PATH: Override the SQLite database path
    """

    path: str | None = Field(
        default=None,
        description="Override the database location. Default: .codegraft/graph.db in the project.",
    )


class ContextConfig(BaseModel):
    """Context projection budget.

    Env vars:
        CODEGRAFT__CONTEXT__TOKEN_BUDGET: Approximate token ceiling per projection
        CODEGRAFT__CONTEXT__CHARS_PER_TOKEN: Estimator divisor
    """

    token_budget: int = Field(
        default=8000,
        description="Approximate token ceiling. Projections beyond it are truncated.",
    )
    chars_per_token: int = Field(
        default=4,
        description="Characters of compact JSON counted as one token by the estimator.",
    )

    @field_validator("token_budget")
    @classmethod
    def validate_token_budget(cls, v: int) -> int:
        if v < MIN_TOKEN_BUDGET:
            raise ValueError(f"token_budget must be >= {MIN_TOKEN_BUDGET}, got {v}")
        return v

    @field_validator("chars_per_token")
    @classmethod
    def validate_chars_per_token(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"chars_per_token must be positive, got {v}")
        return v


class ExtractionConfig(BaseModel):
    """Source discovery and parsing.

    Env vars:
        CODEGRAFT__EXTRACTION__MAX_FILE_SIZE_KB: Skip files larger than this
    """

    max_file_size_kb: int = Field(
        default=1024,
        description="Skip files larger than this (KB). Oversized files are reported as failures.",
    )
    exclude_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directory names to skip in addition to the built-in prunable set.",
    )
    languages: list[str] | None = Field(
        default=None,
        description="Restrict extraction to these language names. None means all supported.",
    )


class GraphConfig(BaseModel):
    """Graph query defaults.

    Env vars:
        CODEGRAFT__GRAPH__DEFAULT_MAX_HOPS: Blast radius hop limit when none is given
    """

    default_max_hops: int = Field(default=2)

    @field_validator("default_max_hops")
    @classmethod
    def validate_hops(cls, v: int) -> int:
        if not (0 <= v <= MAX_HOPS_LIMIT):
            raise ValueError(f"default_max_hops must be 0-{MAX_HOPS_LIMIT}, got {v}")
        return v


class DatabaseConfig(BaseModel):
    """Database connection configuration.

    Env vars:
        CODEGRAFT__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
        CODEGRAFT__DATABASE__MAX_RETRIES: Max retry attempts for locked DB
    """

    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )


class CodeGraftConfig(BaseModel):
    """Root configuration for codegraft.

    All settings can be configured via:
    1. Environment variables: CODEGRAFT__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
