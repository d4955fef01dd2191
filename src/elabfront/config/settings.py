"""ElabSettings: one frozen object built from CLI flags, env vars and TOML.

Sources, highest priority first: keyword arguments from click, then
``ELABFRONT_*`` environment variables (``__`` separates nested keys, e.g.
``ELABFRONT_FRONTEND__PRELUDE``), then ``elabfront.toml``, then the
defaults on the section models.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from elabfront.config.discovery import find_config
from elabfront.config.models import FrontendConfig, PluginsConfig

_active_toml: ContextVar[Path | None] = ContextVar("elabfront_active_toml", default=None)


def _read_toml(path: Path | None) -> dict[str, Any]:
    if path is None or not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc


def _resolve_config_path(explicit: str | None, cwd: Path | None) -> Path | None:
    if not explicit:
        return find_config(cwd)
    path = Path(explicit)
    if not path.is_file():
        raise click.ClickException(f"Config file not found: {explicit}")
    return path


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Top-level tables of ``elabfront.toml`` as a settings source."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._tables = _read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._tables.get(field_name), field_name, field_name in self._tables

    def __call__(self) -> dict[str, Any]:
        return dict(self._tables)


class ElabSettings(BaseSettings):
    """Settings for one CLI invocation.

    Attributes:
        project_root: Directory holding the config file, or the CWD.
        config_path: The TOML file that was read, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ELABFRONT_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    frontend: FrontendConfig = Field(default_factory=FrontendConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, TomlSettingsSource(settings_cls, _active_toml.get())

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        cwd: Path | None = None,
        **cli_flags: Any,
    ) -> ElabSettings:
        """Build settings for a CLI call.

        An explicit *config_path* must exist. Without one, ``elabfront.toml``
        is looked up from *cwd* towards the filesystem root.
        """
        toml_path = _resolve_config_path(config_path, cwd)
        root = toml_path.parent if toml_path else (cwd or Path.cwd())
        token = _active_toml.set(toml_path)
        try:
            return cls(project_root=root, config_path=toml_path, **cli_flags)
        finally:
            _active_toml.reset(token)

    @property
    def plugin_dir(self) -> Path:
        """``plugins.local_dir``, resolved against the project root."""
        local = Path(self.plugins.local_dir)
        return local if local.is_absolute() else self.project_root / local
