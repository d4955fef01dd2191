"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from a local directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from elabfront.plugins.manager import PluginManager, default_plugin_manager

__all__ = ["PluginManager", "default_plugin_manager"]
