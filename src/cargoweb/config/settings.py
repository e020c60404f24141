# config/settings.py
import tomllib
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigurationError
from ..utils.logging import setup_logger

logger = setup_logger()

DEFAULT_CONFIG_FILE_NAME = "Web.toml"


class WebConfig(BaseModel):
    """Per-package configuration read from `Web.toml`."""
    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    link_args: List[str] = Field(default_factory=list, alias="link-args")

    @classmethod
    def load(cls, path: Path) -> "WebConfig":
        """Load config from `path`; a missing file yields the defaults."""
        if not path.exists():
            return cls()

        try:
            data = tomllib.loads(path.read_text())
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"cannot parse {path}: {e}") from e

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid {path}: {e}") from e

        for key in sorted(config.model_extra or {}):
            logger.warning(f"unknown key `{key}` in {path}")

        return config

    @classmethod
    def load_for_package(cls, manifest_path: Optional[Path], file_name: str = DEFAULT_CONFIG_FILE_NAME) -> "WebConfig":
        """Load the config that sits next to a package's Cargo.toml."""
        if manifest_path is None:
            return cls()
        return cls.load(manifest_path.parent / file_name)


class Settings(BaseSettings):
    """Application settings."""
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARGO_WEB_", extra="ignore")

    # Tools
    cargo: str = Field(default="cargo")

    # Logging
    log_dir: Optional[Path] = Field(default=None)

    # Emscripten installation laid out as emscripten/, emscripten-fastcomp/, binaryen/
    emscripten_root: Optional[Path] = Field(default=None)

    # Browser test harness as "module:attribute"
    browser_harness: Optional[str] = Field(default=None)

    config_file_name: str = Field(default=DEFAULT_CONFIG_FILE_NAME)
