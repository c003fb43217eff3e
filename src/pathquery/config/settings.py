"""
Settings Loader
===============

Loads the pathquery runtime settings from YAML.

Resolution order (later wins):

1. The bundled `settings.yaml` next to this module
2. A user YAML file, given explicitly or via `PATHQUERY_CONFIG`
3. Single-value environment overrides
   (`PATHQUERY_LOG_LEVEL`, `PATHQUERY_MODEL_PATH`)

The merged mapping is validated into a `Settings` model.

Dependencies
------------
- PyYAML
- pydantic

Notes
-----
- Environment variables are read from `os.environ`; call
  `pathquery.config.env_loader.load_env()` first if they live in a
  `.env` file.
- The summarisation cutoff is a fixed policy constant and is
  intentionally not exposed here.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ValidationError

from pathquery.config.paths import DEFAULT_MODEL_PATH, DEFAULT_SETTINGS_PATH
from pathquery.exceptions import ConfigError


CONFIG_ENV_VAR = "PATHQUERY_CONFIG"
LOG_LEVEL_ENV_VAR = "PATHQUERY_LOG_LEVEL"
MODEL_PATH_ENV_VAR = "PATHQUERY_MODEL_PATH"


# --------------------------------------------------
# Settings models
# --------------------------------------------------

class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "[%(levelname)s] %(name)s - %(message)s"


class ModelSettings(BaseModel):
    path: Optional[str] = None


class SerializationSettings(BaseModel):
    xml_indent: bool = True


class Settings(BaseModel):
    """
    Validated runtime settings.

    Attributes
    ----------
    logging : LoggingSettings
        Root log level and record format.
    model : ModelSettings
        Location of the default schema model document.
    serialization : SerializationSettings
        Output options for the XML template binding.
    """

    logging: LoggingSettings = LoggingSettings()
    model: ModelSettings = ModelSettings()
    serialization: SerializationSettings = SerializationSettings()

    @property
    def model_path(self) -> Path:
        """
        Schema model path. Falls back to the bundled sample model; a
        relative path is resolved against the current working directory.
        """
        if not self.model.path:
            return DEFAULT_MODEL_PATH
        path = Path(self.model.path)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


# --------------------------------------------------
# YAML helpers
# --------------------------------------------------

def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)

    for key, override_val in override.items():
        base_val = merged.get(key)
        if isinstance(base_val, dict) and isinstance(override_val, dict):
            merged[key] = _deep_merge(base_val, override_val)
        else:
            merged[key] = override_val

    return merged


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to read YAML config: {path}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping (dict): {path}")

    return data


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}

    level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if level:
        overrides["logging"] = {"level": level.upper()}

    model_path = os.environ.get(MODEL_PATH_ENV_VAR)
    if model_path:
        overrides["model"] = {"path": model_path}

    return _deep_merge(data, overrides)


# --------------------------------------------------
# Public entry point
# --------------------------------------------------

def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load and validate the runtime settings.

    Parameters
    ----------
    path : str or Path, optional
        User YAML file merged over the bundled defaults. When omitted,
        the `PATHQUERY_CONFIG` environment variable is consulted.

    Returns
    -------
    Settings
        Validated settings.

    Raises
    ------
    ConfigError
        If a YAML file is missing or malformed, or the merged mapping
        does not validate.
    """
    data = _load_yaml_file(DEFAULT_SETTINGS_PATH)

    user_path = path if path is not None else os.environ.get(CONFIG_ENV_VAR)
    if user_path:
        data = _deep_merge(data, _load_yaml_file(Path(user_path)))

    data = _apply_env_overrides(data)

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
