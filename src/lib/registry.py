"""
Component registry for MD++ plugins

Maps framework names to validated PluginDefinitions. A registry is an
ordinary value owned by whoever builds it (usually one Parser), never a
process-wide singleton: two parsers configured with different plugins
cannot interfere.
"""

from typing import Dict, List, Optional, Tuple

from ..models.plugins import ComponentDefinition, PluginDefinition
from .log import LOG, WARN


class ComponentRegistry:
    """
    Registry of plugin definitions keyed by framework

    Lookup without a framework scans plugins in registration order and
    returns the first match; ``conflicts_list()`` reports names that more
    than one plugin defines.

    Example:
        registry = ComponentRegistry()
        registry.register(bootstrap_plugin)
        registry.lookup("alert", "bootstrap")
    """

    def __init__(self, plugins: Optional[List[PluginDefinition]] = None) -> None:
        """Initialize the registry, optionally with an initial set of plugins"""
        self.plugins: Dict[str, PluginDefinition] = {}
        for plugin in plugins or []:
            self.register(plugin)

    def __len__(self) -> int:
        return len(self.plugins)

    def __contains__(self, framework: object) -> bool:
        return framework in self.plugins

    def register(self, plugin: PluginDefinition) -> None:
        """
        Register a plugin definition

        Re-registering a framework replaces the earlier definition and logs
        a warning. The replaced plugin keeps its original position in the
        registration order.
        """
        if plugin.framework in self.plugins:
            WARN(f'Plugin "{plugin.framework}" is already registered; overwriting')
        self.plugins[plugin.framework] = plugin
        LOG(
            f"Registered plugin {plugin.framework} v{plugin.version} "
            f"({len(plugin.components)} components)",
            level=2,
        )

    def unregister(self, framework: str) -> bool:
        """Remove a plugin; returns True if it was registered"""
        return self.plugins.pop(framework, None) is not None

    def clear(self) -> None:
        """Remove every plugin"""
        self.plugins.clear()

    def plugin_get(self, framework: str) -> Optional[PluginDefinition]:
        """Get a plugin definition by framework name"""
        return self.plugins.get(framework)

    def plugins_list(self) -> List[PluginDefinition]:
        """All plugins in registration order"""
        return list(self.plugins.values())

    def lookup(self, component: str, framework: Optional[str] = None) -> Optional[ComponentDefinition]:
        """
        Find a component definition

        Args:
            component: Component name
            framework: Plugin to search; None searches all plugins

        Returns:
            The definition, or None when nothing matches
        """
        if framework is not None:
            plugin = self.plugins.get(framework)
            return plugin.component_get(component) if plugin else None

        found = self.component_find(component)
        return found[1] if found else None

    def component_find(self, component: str) -> Optional[Tuple[str, ComponentDefinition]]:
        """First (framework, definition) exposing the component, in registration order"""
        for framework, plugin in self.plugins.items():
            definition = plugin.component_get(component)
            if definition is not None:
                return framework, definition
        return None

    def conflicts_list(self) -> Dict[str, List[str]]:
        """
        Component names defined by more than one registered plugin

        Diagnostic only; resolution order is unaffected.

        Returns:
            Component name -> frameworks defining it, in registration order
        """
        owners: Dict[str, List[str]] = {}
        for framework, plugin in self.plugins.items():
            for name in plugin.components:
                owners.setdefault(name, []).append(framework)
        return {name: frameworks for name, frameworks in owners.items() if len(frameworks) > 1}

    def assets_collect(self) -> Tuple[List[str], List[str]]:
        """
        CSS and JS URLs required by registered plugins

        Returns:
            (css, js), each de-duplicated in registration order
        """
        css: List[str] = []
        js: List[str] = []
        for plugin in self.plugins.values():
            for url in plugin.css:
                if url not in css:
                    css.append(url)
            for url in plugin.js:
                if url not in js:
                    js.append(url)
        return css, js
