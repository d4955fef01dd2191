"""Locate ``elabfront.toml``.

Lookup order: ``$ELABFRONT_CONFIG`` if set, otherwise the nearest
``elabfront.toml`` in the start directory or any of its parents.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "elabfront.toml"
CONFIG_ENV_VAR = "ELABFRONT_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Path of the config file that applies to *start* (default: cwd), or None.

    A set ``ELABFRONT_CONFIG`` that names no file yields None rather than
    falling back to the search.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        if (directory / CONFIG_FILENAME).is_file():
            return directory / CONFIG_FILENAME
    return None

