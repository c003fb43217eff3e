"""
Project Directory Constants
===========================

Defines and centralizes all filesystem paths used by the pathquery
package.

This module provides a single source of truth for directory and file
locations, ensuring:

- Consistent path management across modules
- No hardcoded paths in the query, template or schema layers
- A clear picture of where bundled data lives

All paths are implemented using `pathlib.Path` to guarantee
cross-platform compatibility.
"""

from pathlib import Path


# =============================================================================
# Root Directory
# =============================================================================

# Absolute path to the project root directory (source checkout).
# Computed relative to this file (src/pathquery/config/paths.py).
ROOT_DIR = Path(__file__).resolve().parents[3]

PACKAGE_DIR = Path(__file__).resolve().parents[1]  # src/pathquery


# =============================================================================
# Bundled Data
# =============================================================================

DATA_DIR = PACKAGE_DIR / "data"    # Sample schema shipped as package data

DEFAULT_MODEL_PATH = DATA_DIR / "genomic_model.json"


# =============================================================================
# Configuration
# =============================================================================

CONFIG_DIR = PACKAGE_DIR / "config"                       # Package configuration folder
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "settings.yaml"      # Bundled default settings


# =============================================================================
# Environment File
# =============================================================================

ENV_PATH = ROOT_DIR / ".env"  # Environment variables file
