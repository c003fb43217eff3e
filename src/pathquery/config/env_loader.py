"""
Environment Loader Utility
==========================

Loads environment variables from a `.env` file into the process
environment.

It is meant to be called explicitly, before `load_settings`, by
applications that keep their overrides (e.g. `PATHQUERY_LOG_LEVEL`,
`PATHQUERY_MODEL_PATH`) in a `.env` file rather than in the shell.

Dependencies
------------
- python-dotenv
- pathquery.config.paths (ENV_PATH)

Example
-------
>>> from pathquery.config.env_loader import load_env
>>> load_env()
"""

import os
from pathlib import Path
from typing import Union

from dotenv import load_dotenv

from pathquery.config.paths import ENV_PATH


# ==================================================
# Environment loading
# ==================================================

def load_env(path: Union[str, Path] = ENV_PATH, override: bool = False) -> None:
    """
    Load environment variables from a `.env` file into `os.environ`.

    Parameters
    ----------
    path : str or Path, optional
        Location of the `.env` file (default: `ENV_PATH`).
    override : bool, optional
        Whether values in the file replace variables already set in
        the environment (default: False).

    Raises
    ------
    FileNotFoundError
        If the `.env` file does not exist at `path`.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(
            f".env file not found at expected path: {path}"
        )

    load_dotenv(path, override=override)
