"""Credential resolution and tool settings."""
import logging
import os
import stat
from typing import Mapping

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ddsubmit.errors import ConfigError
from ddsubmit.models import Credentials

logger = logging.getLogger(__name__)

HOME_SHORTCUT = "~" + os.sep
MODE_ONLY_USER_READABLE = 0o600

DEFAULT_CONFIG_PATH = "~/.datadogrc"
API_KEY_ENV = "API_KEY"
APP_KEY_ENV = "APP_KEY"


class KeysFile(BaseModel):
    """Contents of the JSON credentials file."""
    model_config = ConfigDict(extra="ignore")

    api_key: str = ""
    app_key: str = ""


class Settings(BaseModel):
    """Tool settings, overridable from the environment."""
    log_level: str = "INFO"
    config_path: str = DEFAULT_CONFIG_PATH


def load_settings(env: Mapping[str, str]) -> Settings:
    """Build settings, applying environment variable overrides."""
    raw = {}

    if env_log_level := env.get('LOG_LEVEL'):
        raw['log_level'] = env_log_level

    if env_conf := env.get('DATADOG_CONF'):
        raw['config_path'] = env_conf

    return Settings(**raw)


def expand_path(path: str) -> str:
    """Expand a leading ``~/`` to the current user's home directory.

    The shortcut is only recognised as a prefix, so ``foo/~/bar`` is left
    alone.
    """
    if not path.startswith(HOME_SHORTCUT):
        return path
    home = os.path.expanduser("~")
    return os.path.join(home, path[len(HOME_SHORTCUT):])


def ensure_exclusive_permissions(st: os.stat_result, path: str) -> None:
    """Reject anything but a regular file with mode 0600."""
    if not stat.S_ISREG(st.st_mode) or stat.S_IMODE(st.st_mode) != MODE_ONLY_USER_READABLE:
        raise ConfigError(
            f"unsafe permissions: {path} must have mode "
            f"{MODE_ONLY_USER_READABLE:04o}"
        )


def read_keys_file(path: str) -> KeysFile:
    """Read and validate the credentials file at ``path``."""
    try:
        with open(path, 'rb') as f:
            ensure_exclusive_permissions(os.fstat(f.fileno()), path)
            content = f.read()
    except OSError as e:
        raise ConfigError(f"datadog configuration missing or inaccessible: {e}") from e

    try:
        return KeysFile.model_validate_json(content)
    except PydanticValidationError as e:
        raise ConfigError(f"malformed datadog configuration in {path}: {e}") from e


def resolve(config_path: str, env: Mapping[str, str]) -> Credentials:
    """
    Determine the API and app keys.

    Environment variables win; the credentials file is only read when one
    of them is empty, and then only fills in the missing key.

    Args:
        config_path: Path to the JSON credentials file, ``~/`` allowed
        env: Environment mapping, usually ``os.environ``

    Returns:
        Non-empty credentials
    """
    api_key = env.get(API_KEY_ENV, "")
    app_key = env.get(APP_KEY_ENV, "")

    if not api_key or not app_key:
        path = expand_path(config_path)
        logger.debug(f"Reading credentials from {path}")
        keys = read_keys_file(path)
        api_key = api_key or keys.api_key
        app_key = app_key or keys.app_key
    else:
        logger.debug("Using credentials from environment")

    if not api_key:
        raise ConfigError("Datadog API key missing.")
    if not app_key:
        raise ConfigError("Datadog app key missing.")

    return Credentials(api_key=api_key, app_key=app_key)
