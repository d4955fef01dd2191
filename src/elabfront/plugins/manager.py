"""pluggy wiring for elabfront.

Plugins contribute two setup-time tables (command elaborators and importable
modules) and observe the command loop through ``post_command`` and
``post_run``. They come from three places, in registration order: the
built-in core plugin, the ``elabfront.plugins`` entry-point group, and
single-file plugins in a local directory (``.elabfront/plugins``).
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

import pluggy

from elabfront.plugins.hookspecs import ElabfrontHookSpec

if TYPE_CHECKING:
    from elabfront.domain.environment import ConstantInfo
    from elabfront.elab.builtin import CommandElab

PROJECT_NAME = "elabfront"
ENTRY_POINT_GROUP = "elabfront.plugins"
LOCAL_MODULE_PREFIX = "elabfront_local_plugin_"

_IMPL_ATTR = f"{PROJECT_NAME}_impl"

logger = logging.getLogger(__name__)


def _is_plugin_class(obj: object) -> bool:
    """True for classes with at least one ``@hookimpl`` method."""
    if not inspect.isclass(obj):
        return False
    return any(
        getattr(getattr(obj, attr, None), _IMPL_ATTR, None)
        for attr in dir(obj)
        if not attr.startswith("_")
    )


def _import_file(path: Path) -> ModuleType | None:
    module_name = LOCAL_MODULE_PREFIX + path.stem
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Cannot import %s as a plugin module", path)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Failed to load local plugin %s", path, exc_info=True)
        return None
    return module


def _declared_plugin_classes(module: ModuleType) -> Iterator[type]:
    for _, cls in inspect.getmembers(module, _is_plugin_class):
        # classes imported into the file belong to their own module
        if cls.__module__ == module.__name__:
            yield cls


class PluginManager:
    """Thin facade over :class:`pluggy.PluginManager` for the frontend."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ElabfrontHookSpec)

    def register_builtins(self) -> None:
        from elabfront.plugins.builtins.core import CorePlugin

        if not self._pm.has_plugin("core"):
            self.register_plugin(CorePlugin(), name="core")

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register *plugin* under *name* (its class name by default)."""
        name = name or type(plugin).__name__
        self._pm.register(plugin, name=name)
        logger.debug("Registered plugin %s", name)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then single-file plugins from *local_dir*.

        Returns the names of every registered plugin afterwards. Broken
        plugins are skipped with a warning.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_registered_classes()
        if local_dir is not None and local_dir.is_dir():
            for path in sorted(local_dir.glob("*.py")):
                if not path.name.startswith("_"):
                    self._load_file(path)
        return self.list_plugin_names()

    def _load_file(self, path: Path) -> None:
        module = _import_file(path)
        if module is None:
            return
        for cls in _declared_plugin_classes(module):
            instance = self._instantiate(cls, origin=path)
            if instance is None:
                continue
            try:
                self.register_plugin(instance, name=f"{module.__name__}.{cls.__name__}")
            except Exception:
                # a failed hook validation leaves the name registered
                if self._pm.is_registered(instance):
                    self._pm.unregister(instance)
                logger.warning("Cannot register plugin %s from %s", cls.__name__, path, exc_info=True)

    def _instantiate_registered_classes(self) -> None:
        # an entry point may name a class; hooks need a bound instance
        for plugin in self.get_plugins():
            if not _is_plugin_class(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            instance = self._instantiate(plugin, origin=name)
            if instance is not None:
                self._pm.register(instance, name=name)

    @staticmethod
    def _instantiate(cls: type, *, origin: object) -> object | None:
        try:
            return cls()
        except Exception:
            logger.warning("Cannot instantiate plugin %s from %s", cls.__name__, origin, exc_info=True)
            return None

    # --- setup-time tables ---

    def command_elaborators(self) -> dict[str, CommandElab]:
        """Command kind -> elaborator. Later registrations win."""
        return self._merge("register_command_elaborators")

    def modules(self) -> dict[str, list[ConstantInfo]]:
        """Module name -> declarations. Later registrations win."""
        return self._merge("register_modules")

    def _merge(self, hook_name: str) -> dict[str, Any]:
        try:
            contributions = getattr(self._pm.hook, hook_name)()
        except Exception:
            logger.warning("Hook %s failed", hook_name, exc_info=True)
            return {}

        merged: dict[str, Any] = {}
        # pluggy answers newest plugin first
        for table in reversed(contributions):
            if isinstance(table, dict):
                merged.update(table)
            else:
                logger.warning("Plugin returned non-dict result from %s", hook_name)
        return merged

    # --- loop observers ---

    def notify_command(self, *, kind: str, position: int, ok: bool, diagnostics_added: int) -> None:
        try:
            self._pm.hook.post_command(kind=kind, position=position, ok=ok, diagnostics_added=diagnostics_added)
        except Exception:
            logger.warning("post_command hook failed", exc_info=True)

    def notify_run(self, *, module_name: str, commands: int, errors: int) -> None:
        try:
            self._pm.hook.post_run(module_name=module_name, commands=commands, errors=errors)
        except Exception:
            logger.warning("post_run hook failed", exc_info=True)


def default_plugin_manager(*, local_dir: Path | None = None, discover: bool = False) -> PluginManager:
    """Plugin manager with the core plugin registered.

    Entry-point and local discovery only run when *discover* is set, so
    library callers get a deterministic elaborator table by default.
    """
    manager = PluginManager()
    manager.register_builtins()
    if discover:
        manager.discover_and_load(local_dir=local_dir)
    return manager
