"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (CODEGRAFT__SECTION__KEY)
3. User config (.codegraft/config.yaml) - minimal user-facing options
4. Global config (~/.config/codegraft/config.yaml) - full sectioned layout
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from codegraft.config.constants import CONFIG_FILE_NAME, DATA_DIR_NAME, DB_FILE_NAME
from codegraft.config.models import (
    CodeGraftConfig,
    ContextConfig,
    DatabaseConfig,
    ExtractionConfig,
    GraphConfig,
    LoggingConfig,
    StoreConfig,
)
from codegraft.config.user_config import load_user_config
from codegraft.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/codegraft/config.yaml").expanduser()

_USER_FIELD_MAP: dict[str, tuple[str, str]] = {
    "token_budget": ("context", "token_budget"),
    "max_hops": ("graph", "default_max_hops"),
    "log_level": ("logging", "level"),
    "exclude_dirs": ("extraction", "exclude_dirs"),
}


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class bound to one merged YAML dict."""

    class CodeGraftSettings(BaseSettings):
        """Root config. Env vars: CODEGRAFT__LOGGING__LEVEL, CODEGRAFT__GRAPH__..., etc."""

        model_config = SettingsConfigDict(
            env_prefix="CODEGRAFT__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        store: StoreConfig = StoreConfig()
        context: ContextConfig = ContextConfig()
        extraction: ExtractionConfig = ExtractionConfig()
        graph: GraphConfig = GraphConfig()
        database: DatabaseConfig = DatabaseConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return CodeGraftSettings


def load_config(project_root: Path | None = None, **kwargs: Any) -> CodeGraftConfig:
    """Load config: defaults < global yaml < user config < env vars < kwargs.

    Args:
        project_root: Project to load config from. Defaults to cwd.
        **kwargs: Override values (highest precedence).

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    project_root = project_root or Path.cwd()
    user_config = load_user_config(project_root / DATA_DIR_NAME / CONFIG_FILE_NAME)

    # Only keys present in the file, so global yaml can supply the rest
    explicit = user_config.model_dump(exclude_unset=True)
    yaml_config: dict[str, Any] = {}
    for key, (section, name) in _USER_FIELD_MAP.items():
        if key in explicit:
            yaml_config.setdefault(section, {})[name] = explicit[key]

    global_config = _load_yaml(GLOBAL_CONFIG_PATH)
    if global_config:
        yaml_config = _deep_merge(global_config, yaml_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return CodeGraftConfig.model_validate(settings.model_dump())


def get_store_path(project_root: Path, config: CodeGraftConfig | None = None) -> Path:
    """Database path for a project, respecting ``store.path``."""
    config = config or load_config(project_root)
    if config.store.path:
        return Path(config.store.path).expanduser()
    return project_root / DATA_DIR_NAME / DB_FILE_NAME
