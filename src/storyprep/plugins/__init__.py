"""Extension layer — plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
Plugins contribute project annotations; see :mod:`storyprep.plugins.hookspecs`.
"""

from storyprep.plugins.hookspecs import hookimpl
from storyprep.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
