"""
Schema Loader
=============

Utility module responsible for loading object-graph schema
definitions from disk.

This module provides a minimal and explicit interface to read a
JSON-based schema file and return its contents as a Python
dictionary. The loaded document is turned into a `Model` by
`pathquery.schema.model`, which is what path resolution uses.

Dependencies
------------
- json
- pathlib

Usage
-----
    from pathquery.schema.schema_loader import load_schema
    schema = load_schema("schemas/genomic_model.json")

Notes
-----
- The schema file must exist and be a valid JSON document.
- Structural validation happens in `Model.from_dict`.
"""

import json
from pathlib import Path
from typing import Dict, Any, Union

from pathquery.exceptions import ModelError


# --------------------------------------------------
# Schema loading utility
# --------------------------------------------------

def load_schema(schema_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load an object-graph schema from a JSON file.

    Parameters
    ----------
    schema_path : str or Path
        Path to the JSON schema file.

    Returns
    -------
    Dict[str, Any]
        Parsed schema represented as a Python dictionary.

    Raises
    ------
    FileNotFoundError
        If the schema file does not exist.
    ModelError
        If the file is not valid JSON or its top level is not an object.
    """
    path = Path(schema_path)

    if not path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")

    with path.open("r", encoding="utf-8") as file:
        try:
            document = json.load(file)
        except json.JSONDecodeError as e:
            raise ModelError(f"Schema is not valid JSON: {schema_path}") from e

    if not isinstance(document, dict):
        raise ModelError(f"Schema top level must be an object: {schema_path}")

    return document
