"""Minimal user-facing configuration.

Only the fields users should care about live here; everything else uses
defaults from ``models.py`` and can be overridden with env vars.

User config is stored in .codegraft/config.yaml
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from codegraft.core.errors import ConfigError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_TOKEN_BUDGET = 8000
DEFAULT_MAX_HOPS = 2
DEFAULT_LOG_LEVEL: LogLevel = "WARNING"


class UserConfig(BaseModel):
    """User-facing configuration options."""

    token_budget: int = Field(
        default=DEFAULT_TOKEN_BUDGET,
        description="Approximate token ceiling for 'graft context'.",
    )
    max_hops: int = Field(
        default=DEFAULT_MAX_HOPS,
        description="Default hop limit for 'graft query blast'.",
    )
    log_level: LogLevel = Field(
        default=DEFAULT_LOG_LEVEL,
        description="Log level. DEBUG is very verbose.",
    )
    exclude_dirs: list[str] = Field(default_factory=list)


def write_user_config(path: Path, config: UserConfig | None = None) -> None:
    """Write user config file with helpful comments.

    Non-default values are written active; defaults are written commented
    out so the file documents itself.
    """
    cfg = config or UserConfig()

    lines = [
        "# codegraft configuration",
        "# Env vars (CODEGRAFT__SECTION__KEY) override anything set here.",
        "",
    ]

    lines.append("# Approximate token ceiling for context projections.")
    if cfg.token_budget != DEFAULT_TOKEN_BUDGET:
        lines.append(f"token_budget: {cfg.token_budget}")
    else:
        lines.append(f"# token_budget: {cfg.token_budget}")
    lines.append("")

    lines.append("# Hop limit used by 'graft query blast' when --max-hops is omitted.")
    if cfg.max_hops != DEFAULT_MAX_HOPS:
        lines.append(f"max_hops: {cfg.max_hops}")
    else:
        lines.append(f"# max_hops: {cfg.max_hops}")
    lines.append("")

    lines.append("# Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL")
    if cfg.log_level != DEFAULT_LOG_LEVEL:
        lines.append(f"log_level: {cfg.log_level}")
    else:
        lines.append(f"# log_level: {cfg.log_level}")
    lines.append("")

    lines.append("# Extra directory names skipped during extraction.")
    if cfg.exclude_dirs:
        lines.append(yaml.safe_dump({"exclude_dirs": cfg.exclude_dirs}, default_flow_style=False))
    else:
        lines.append("# exclude_dirs: [generated]")
    lines.append("")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines))


def load_user_config(path: Path) -> UserConfig:
    """Load user config from YAML file.

    Raises:
        ConfigError: If the file is not valid YAML or has invalid values.
    """
    if not path.exists():
        return UserConfig()
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    try:
        return UserConfig(**data)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
