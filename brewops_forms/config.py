"""Global configuration for brewops-forms.

Settings come from, in increasing precedence: built-in defaults, the
``config.yaml`` file in the BrewOps home, and environment variables.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

CONFIG_FILENAME = "config.yaml"

ENV_HOME = "BREWOPS_HOME"
ENV_BACKEND_URL = "BREWOPS_BACKEND_URL"
ENV_SESSION_PATH = "BREWOPS_SESSION_PATH"


class ConfigError(Exception):
    """Raised when the config file cannot be read or is invalid."""

    pass


def get_brewops_home() -> Path:
    """Directory holding config.yaml and the session file.

    ``$BREWOPS_HOME`` if set, otherwise ``~/.config/brewops``.
    """
    env_home = os.environ.get(ENV_HOME)
    if env_home:
        return Path(env_home)
    return Path.home() / ".config" / "brewops"


def get_config_path() -> Path:
    return get_brewops_home() / CONFIG_FILENAME


def default_session_path() -> Path:
    return get_brewops_home() / "session.json"


class Settings(BaseModel):
    """Runtime settings shared by the client, forms and CLI.

    Attributes:
        backend_url: Root URL of the BrewOps REST backend.
        token_key: Session key the bearer token is stored under.
        legacy_token_keys: Older keys checked when token_key is absent.
        session_path: Session file holding the token and user info.
        debounce_seconds: Delay before a field edit is validated.
        message_timeout: Seconds a submission result message stays visible.
        page_size: Rows shown initially and added per "show more".
        request_timeout: Per-request HTTP timeout in seconds.
    """

    backend_url: str = "http://localhost:5000"
    token_key: str = "jwtToken"
    legacy_token_keys: list[str] = Field(default_factory=lambda: ["token"])
    session_path: Path = Field(default_factory=default_session_path)
    debounce_seconds: float = Field(default=0.6, ge=0)
    message_timeout: float = Field(default=3.0, ge=0)
    page_size: int = Field(default=10, ge=1)
    request_timeout: float | None = Field(default=30.0, gt=0)


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_settings(config_path: Path | None = None) -> Settings:
    """Load settings from the config file and environment.

    Args:
        config_path: Config file to read. Defaults to get_config_path().

    Returns:
        The merged settings.

    Raises:
        ConfigError: If the file is malformed or a value is invalid.
    """
    values = _read_config_file(config_path if config_path is not None else get_config_path())

    backend_url = os.environ.get(ENV_BACKEND_URL)
    if backend_url:
        values["backend_url"] = backend_url
    session_path = os.environ.get(ENV_SESSION_PATH)
    if session_path:
        values["session_path"] = session_path

    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def write_settings(settings: Settings, config_path: Path | None = None) -> Path:
    """Write settings to the config file, creating its directory.

    Returns:
        The path written.
    """
    path = config_path if config_path is not None else get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(settings.model_dump(mode="json"), f, sort_keys=False)
    return path
