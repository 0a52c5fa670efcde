import logging
import os
import sys
from pathlib import Path
from typing import Any

import logfire
import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

from repocache.cli.util.paths import RepoCachePaths


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from a YAML file.

    REPOCACHE_CONFIG_FILE names the file; without it the XDG config file
    (~/.config/repocache/config.yaml) is read when present.
    """

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("REPOCACHE_CONFIG_FILE")
        path = Path(config_file) if config_file else RepoCachePaths().config_file
        if path.is_file():
            return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Repository Cache"
    version: str = "0.1.0"
    description: str = "Caching, coalescing proxy for artifacts hosted on GitHub and GitLab"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter).

    The url field uses empty string as sentinel to indicate "derive from
    RepoCachePaths". When the user doesn't override via REPOCACHE_DATABASE__URL,
    the actual path is computed in Config's model_validator.
    """

    url: str = ""  # Empty string = derive from paths; explicit value = use as-is
    echo: bool = False
    auto_migrate: bool = True  # Auto-migrate for SQLite, manual for PostgreSQL


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    logfire: bool = True  # Export spans only when LOGFIRE_TOKEN is present

    @property
    def file(self) -> str | None:
        """Get log file path from REPOCACHE_LOG_FILE env var."""
        return os.environ.get("REPOCACHE_LOG_FILE")


class FreshnessConfig(BaseModel):
    """How long an observed latest version is trusted without re-asking upstream."""

    ttl_seconds: float = Field(default=60.0, ge=0)


class GitHubConfig(BaseModel):
    api_url: str = "https://api.github.com"


class GitLabConfig(BaseModel):
    api_url: str = "https://gitlab.com/api/v4"


class ProvidersConfig(BaseModel):
    """Upstream provider configuration.

    Only public, unauthenticated API access is used.
    """

    artifact_path: str = "lumina.json"  # File fetched from each repository
    collection_key: str = "blocks"  # Named collection the artifact must contain
    user_agent: str = "repocache"
    connect_timeout: float = 5.0
    read_timeout: float = 15.0
    github: GitHubConfig = GitHubConfig()
    gitlab: GitLabConfig = GitLabConfig()


class Config(BaseSettings):
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    freshness: FreshnessConfig = FreshnessConfig()
    providers: ProvidersConfig = ProvidersConfig()

    model_config = {
        "env_prefix": "REPOCACHE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows REPOCACHE_DATABASE__URL override
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Derive database URL from RepoCachePaths if not explicitly set.

        REPOCACHE_DATA_DIR controls the SQLite location while an explicit
        REPOCACHE_DATABASE__URL still wins.
        """
        if not self.database.url:
            paths = RepoCachePaths()
            self.database = DatabaseConfig(
                url=f"sqlite+aiosqlite:///{paths.database_file}",
                echo=self.database.echo,
                auto_migrate=self.database.auto_migrate,
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - REPOCACHE_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging and logfire based on config.

    Should be called early in application startup so all loggers pick up the
    configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)

    if config.logfire:
        logfire.configure(send_to_logfire="if-token-present", console=False)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
