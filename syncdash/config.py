"""Load session configuration from YAML, and environment overrides from .env."""

from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from models.sync import SessionConfig
from syncdash.logging import reload_env_config

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "default.yaml"
DEFAULT_ENV_PATH = Path(__file__).parent.parent / ".env"


def load_env(path: Optional[Union[str, Path]] = None) -> bool:
    """Load SYNCDASH_* variables from a .env file.

    Variables already set in the environment take precedence. Logging
    settings are re-read so SYNCDASH_LOG_* / SYNCDASH_LOGGING_* entries in
    the file take effect.

    Args:
        path: .env file (default: .env at the project root)

    Returns:
        True if a file was found and loaded
    """
    env_path = Path(path) if path else DEFAULT_ENV_PATH
    if not env_path.exists():
        return False

    load_dotenv(env_path)
    reload_env_config()
    return True


def load_config(path: Union[str, Path]) -> SessionConfig:
    """Load and validate a session configuration from YAML.

    Reads the YAML file, parses it with PyYAML, and validates it using the
    Pydantic SessionConfig model. An empty file yields the defaults.

    Args:
        path: Path to the YAML file

    Returns:
        Validated SessionConfig instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the content fails validation
        yaml.YAMLError: If the YAML syntax is malformed

    Examples:
        >>> config = load_config("config/default.yaml")
        >>> config.sync.delay
        0.1
    """
    yaml_path = Path(path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    try:
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(
            f"Failed to parse YAML file '{yaml_path}': {e}"
        )

    try:
        return SessionConfig.model_validate(config_dict or {})
    except ValidationError as e:
        raise ValueError(
            f"Invalid session configuration in '{yaml_path}':\n{e}"
        ) from e
