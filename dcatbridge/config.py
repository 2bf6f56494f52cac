import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


# =============================================================================
# Upstream Configuration
# =============================================================================


class UpstreamConfig(BaseModel):
    """Metadata API configuration (nested in Config, uses env_nested_delimiter)."""

    api_url: str = "https://v1.api.isogeo.com"
    token_url: str = "https://id.api.isogeo.com/oauth/token"
    client_id: str = ""
    client_secret: str = ""
    page_size: int = 20  # Records per /resources/search request
    refresh_margin_seconds: int = 600  # Refresh credentials expiring within 10 minutes


class ServicesConfig(BaseModel):
    """Service-layer resolution API configuration."""

    url: str = "https://geodataprocess.api.isogeo.com"


class CatalogConfig(BaseModel):
    """Public URLs used when building catalog records."""

    open_catalog_url: str = "https://open.isogeo.com"  # Human-facing metadata pages
    server_url: str = "http://localhost:5000"  # Public URL of this server (proxied downloads)

    @field_validator("open_catalog_url", "server_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        # URLs are joined with "/{share_id}/..." downstream
        return value.rstrip("/")


class HttpConfig(BaseModel):
    """Timeouts for the shared HTTP client."""

    connect_timeout: float = 5.0
    read_timeout: float = 30.0
    write_timeout: float = 5.0
    pool_timeout: float = 5.0


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by DCAT_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("DCAT_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "DCAT Bridge"
    version: str = "0.1.0"
    description: str = "Streams metadata shares as DCAT open-data catalogs"


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from DCAT_LOG_FILE env var."""
        return os.environ.get("DCAT_LOG_FILE")


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    logging: LoggingConfig = LoggingConfig()
    upstream: UpstreamConfig = UpstreamConfig()
    services: ServicesConfig = ServicesConfig()
    catalog: CatalogConfig = CatalogConfig()
    http: HttpConfig = HttpConfig()

    model_config = {
        "env_prefix": "DCAT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows DCAT_UPSTREAM__CLIENT_ID override
    }

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
        4. yaml_settings - DCAT_CONFIG_FILE yaml
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
    """Configure Python logging based on config.

    Should be called early in application startup so that every module
    logger picks up the configuration.
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
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
