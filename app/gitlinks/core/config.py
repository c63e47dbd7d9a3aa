"""gitlinks configuration and settings.

Configuration is stored in ~/.config/gitlinks/config.toml and validated
with a Pydantic model. Every field has a default, so a missing file
simply means default settings.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gitlinks.core.descriptor import DEFAULT_DEPENDENCY_KEY, DEFAULT_DESCRIPTOR_NAME
from gitlinks.core.orchestrator import DEFAULT_MAX_DEPENDENCY_DEPTH
from gitlinks.core.paths import get_config_path

logger = logging.getLogger(__name__)


class GitLinksConfig(BaseModel):
    """Settings for the package orchestrator.

    Attributes:
        project_dir: Project npm operates in. None means the working directory.
        npm_executable: npm executable name or path.
        poll_interval: Seconds between polls of an in-flight operation.
        descriptor_name: Descriptor file scanned for git dependencies.
        dependency_key: Descriptor key declaring git dependencies.
        max_dependency_depth: Deepest dependency level re-added after an install.
    """

    model_config = ConfigDict(extra="forbid")

    project_dir: Annotated[
        Path | None,
        Field(description="Project directory (None = current directory)"),
    ] = None
    npm_executable: Annotated[
        str,
        Field(min_length=1, description="npm executable name or path"),
    ] = "npm"
    poll_interval: Annotated[
        float,
        Field(ge=0.01, le=5.0, description="Seconds between polls (0.01-5.0)"),
    ] = 0.2
    descriptor_name: Annotated[
        str,
        Field(min_length=1, description="Descriptor file scanned for git dependencies"),
    ] = DEFAULT_DESCRIPTOR_NAME
    dependency_key: Annotated[
        str,
        Field(min_length=1, description="Descriptor key declaring git dependencies"),
    ] = DEFAULT_DEPENDENCY_KEY
    max_dependency_depth: Annotated[
        int,
        Field(ge=1, le=64, description="Deepest git dependency level re-added (1-64)"),
    ] = DEFAULT_MAX_DEPENDENCY_DEPTH

    @property
    def effective_project_dir(self) -> Path:
        """Get the project directory, defaulting to the working directory."""
        if self.project_dir is not None:
            return self.project_dir.expanduser()
        return Path.cwd()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when config content is invalid."""


def load_config(path: Path | None = None) -> GitLinksConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated GitLinksConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return GitLinksConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> GitLinksConfig:
    """Load configuration, falling back to defaults when no file exists.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file, using defaults")
        return GitLinksConfig()


def save_config(config: GitLinksConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically through a temporary file in the same
    directory.

    Args:
        config: Configuration to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(config_to_dict(config), f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def config_to_dict(config: GitLinksConfig) -> dict[str, Any]:
    """Convert a config to a TOML-serializable dictionary.

    TOML has no null, so unset optional fields are omitted.
    """
    data = config.model_dump(exclude_none=True)
    if "project_dir" in data:
        data["project_dir"] = str(data["project_dir"])
    return data
