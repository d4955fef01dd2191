"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``elabfront.toml`` only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from elabfront.domain.environment import MAX_TRUST_LEVEL


class FrontendConfig(BaseModel):
    """[frontend] section."""

    model_config = {"frozen": True}

    module_name: str = "<input>"
    trust_level: int = Field(default=0, ge=0, le=MAX_TRUST_LEVEL)
    prelude: bool = True
    max_rec_depth: int = Field(default=512, ge=1)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str = ".elabfront/plugins"

