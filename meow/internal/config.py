"""
Configuration loading.

Values come from a YAML file (default ~/.meow-cli.yaml) and are overridden
by CCAT_* environment variables, e.g. CCAT_CAT_VERSION=1.7.1.
"""
from pathlib import Path
from typing import Any, Optional

import pydantic
import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from meow.internal import paths
from meow.internal.errors import ConfigurationError
from meow.internal.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "CCAT_"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    cat_image: str = "ghcr.io/cheshire-cat-ai/core"
    cat_version: str = "latest"
    container_name: str = "cheshire_cat_core"
    container_port: int = Field(default=80, ge=1, le=65535)
    plugins_dir: Path = Field(default_factory=paths.get_default_plugins_dir)
    data_dir: Path = Field(default_factory=paths.get_default_data_dir)
    static_dir: Path = Field(default_factory=paths.get_default_static_dir)
    download_timeout: float = Field(default=60.0, gt=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # file values arrive as init kwargs; the environment wins over them
        return env_settings, init_settings

    @property
    def image_reference(self) -> str:
        return f"{self.cat_image}:{self.cat_version}"


def _read_config_file(config_file: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_file} must contain a mapping")
    if not all(isinstance(key, str) for key in raw):
        raise ConfigurationError(f"{config_file} keys must be strings")
    return raw


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Resolve settings from the config file and the environment.

    An explicit config_file must exist. The default file is optional.
    """
    values: dict[str, Any] = {}
    if config_file is not None:
        if not config_file.is_file():
            raise ConfigurationError(f"Config file not found: {config_file}")
        values = _read_config_file(config_file)
        logger.debug("Using config file", path=str(config_file))
    else:
        default_file = paths.get_default_config_file()
        if default_file.is_file():
            values = _read_config_file(default_file)
            logger.debug("Using config file", path=str(default_file))

    try:
        return Settings(**values)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
