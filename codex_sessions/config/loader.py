"""YAML settings loader."""

import logging
import os
from pathlib import Path
from typing import Optional, Type, TypeVar

import yaml
from pydantic import BaseModel

from codex_sessions.config.schema import BrowserSettings
from codex_sessions.paths import CONFIG_PATH
from codex_sessions.utils import expand_env_vars

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _warn_unknown_keys(model: BaseModel, source_path: Path) -> None:
    """Log keys the model accepted but does not know (typos, removed options)."""
    extra = model.model_extra or {}
    if extra:
        logger.warning("Unknown keys in %s: %s", source_path, sorted(extra))


def load_config(path: Path, model_class: Type[T]) -> T:
    """Load and validate settings from a YAML file.

    Args:
        path: Path to the config.yml file.
        model_class: The Pydantic model class to use for validation.

    Returns:
        The validated model; defaults when the file is missing, unreadable,
        or not a mapping.

    Raises:
        pydantic.ValidationError: The file has invalid values.
    """
    if not path.exists():
        logger.debug("No settings file at %s; using defaults", path)
        return model_class()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to read config file %s: %s", path, e)
        return model_class()

    if not isinstance(raw, dict):
        logger.warning("Ignoring %s: expected a mapping, got %s", path, type(raw).__name__)
        return model_class()

    model = model_class.model_validate(expand_env_vars(raw))
    _warn_unknown_keys(model, path)
    return model


def config_path() -> Path:
    """Config file location, overridable via CODEX_SESSIONS_CONFIG."""
    env_path = os.getenv("CODEX_SESSIONS_CONFIG")
    return Path(env_path).expanduser() if env_path else CONFIG_PATH


def load_settings(path: Optional[Path] = None) -> BrowserSettings:
    """Load browser settings from `path` or the default location."""
    return load_config(path or config_path(), BrowserSettings)
