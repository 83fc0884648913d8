"""Plugin discovery, loading, and project-annotation collection.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
in the ``storyprep.plugins`` group, plus direct registration.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from storyprep.domain.annotations import ProjectAnnotations
from storyprep.plugins.hookspecs import PROJECT_NAME, StoryprepHookSpec
from storyprep.services.compose import compose_project_annotations

ENTRY_POINT_GROUP = "storyprep.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and annotation collection."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(StoryprepHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Discover plugins from entry points and register them.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_builtins(self) -> None:
        """Register the built-in arg-type inference plugin."""
        from storyprep.plugins.builtins.infer import ArgTypeInferencePlugin

        self.register_plugin(ArgTypeInferencePlugin(), name="infer-builtin")

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        """Access the hook relay."""
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        """Return all registered plugins."""
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def collect_project_annotations(
        self, base: ProjectAnnotations | None = None
    ) -> ProjectAnnotations:
        """Compose plugin contributions (in registration order) with *base*.

        *base* is applied last so the project's own annotations win keyed
        conflicts and its decorators sit outermost.
        """
        # pluggy calls implementations last-registered first.
        contributions = [
            item for item in reversed(self._pm.hook.project_annotations()) if item is not None
        ]
        for item in contributions:
            if not isinstance(item, ProjectAnnotations):
                msg = f"Plugin returned {type(item).__name__}, expected ProjectAnnotations"
                raise TypeError(msg)
        if base is not None:
            contributions.append(base)
        logger.debug("Composing %d project annotation sets", len(contributions))
        return compose_project_annotations(*contributions)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("storyprep")`` sets a ``storyprep_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, f"{PROJECT_NAME}_impl", None):
                return True
        return False
