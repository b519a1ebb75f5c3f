"""
Plugin manifest loader

Validates JSON plugin manifests into PluginDefinitions. Validation
failures are fatal (PluginManifestError): a broken manifest is a
configuration mistake and must surface at registration time, not as a
banner inside some later document.

Manifest shape:

    {
      "framework": "bootstrap",
      "version": "5.3.0",
      "css": ["https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css"],
      "components": {
        "alert": {
          "tag": "div",
          "classes": ["alert"],
          "variants": {"success": ["alert-success"]},
          "defaultAttributes": {"role": "alert"}
        }
      }
    }
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.directives import reserved_is
from ..models.plugins import ComponentDefinition, PluginDefinition
from .errors import PluginManifestError
from .log import LOG, WARN
from .registry import ComponentRegistry


def _strings_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int, float))]


def _variants_dict(value: Any) -> Dict[str, List[str]]:
    if not isinstance(value, dict):
        return {}
    return {str(name): _strings_list(classes) for name, classes in value.items()}


def _attributes_dict(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    attributes: Dict[str, str] = {}
    for key, item in value.items():
        if isinstance(item, bool):
            attributes[str(key)] = "true" if item else "false"
        elif item is not None:
            attributes[str(key)] = str(item)
    return attributes


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _optional_string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


class PluginLoader:
    """
    Validates and loads plugin manifests

    Example:
        loader = PluginLoader()
        plugin = loader.manifest_load(Path("plugins/bootstrap.json"))
        registry.register(plugin)
    """

    def manifest_validate(self, data: Any) -> PluginDefinition:
        """
        Validate a decoded manifest into a PluginDefinition.

        Optional fields that are malformed fall back to their defaults.

        Args:
            data: Decoded JSON value

        Returns:
            The validated PluginDefinition

        Raises:
            PluginManifestError: manifest is not an object, or lacks a
                framework string or a components object, or a component
                definition is not an object
        """
        if not isinstance(data, dict):
            raise PluginManifestError("Plugin must be an object")

        framework = data.get("framework")
        if not isinstance(framework, str) or not framework:
            raise PluginManifestError('Plugin must have a "framework" string')

        raw_components = data.get("components")
        if not isinstance(raw_components, dict):
            raise PluginManifestError('Plugin must have a "components" object')

        components: Dict[str, ComponentDefinition] = {}
        for name, raw in raw_components.items():
            components[str(name)] = self.component_validate(framework, str(name), raw)

        version = data.get("version")
        return PluginDefinition(
            framework=framework,
            components=components,
            version=version if isinstance(version, str) and version else "1.0.0",
            author=_optional_string(data.get("author")),
            description=_optional_string(data.get("description")),
            css=_strings_list(data.get("css")),
            js=_strings_list(data.get("js")),
            code_block_languages=_strings_list(data.get("codeBlockLanguages")),
        )

    def component_validate(self, framework: str, name: str, raw: Any) -> ComponentDefinition:
        """Validate one component entry, applying defaults"""
        if not isinstance(raw, dict):
            raise PluginManifestError(
                f'Component "{name}" in plugin "{framework}" must be an object'
            )
        if reserved_is(name):
            WARN(f'Component "{name}" in plugin "{framework}" is shadowed by the built-in directive of the same name')

        tag = raw.get("tag")
        return ComponentDefinition(
            tag=tag if isinstance(tag, str) and tag else "div",
            classes=_strings_list(raw.get("classes")),
            variants=_variants_dict(raw.get("variants")),
            wrapper_tag=_optional_string(raw.get("wrapperTag")),
            wrapper_classes=_strings_list(raw.get("wrapperClasses")),
            default_attributes=_attributes_dict(raw.get("defaultAttributes")),
            allow_nesting=_flag(raw.get("allowNesting"), True),
            hidden=_flag(raw.get("hidden"), False),
            ai_visible=_flag(raw.get("aiVisible"), False),
        )

    def manifest_loads(self, text: str) -> PluginDefinition:
        """
        Validate a manifest from a JSON string.

        Raises:
            PluginManifestError: invalid JSON or invalid manifest
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PluginManifestError(f"Invalid plugin JSON: {e}") from e
        return self.manifest_validate(data)

    def manifest_load(self, path: Path) -> PluginDefinition:
        """
        Validate a manifest file.

        Raises:
            PluginManifestError: invalid JSON or invalid manifest
            OSError: file cannot be read
        """
        LOG(f"Loading plugin manifest {path}", level=2)
        try:
            return self.manifest_loads(Path(path).read_text(encoding="utf-8"))
        except PluginManifestError as e:
            raise PluginManifestError(f"{path}: {e}") from e

    def directory_load(self, directory: Path, registry: ComponentRegistry) -> List[PluginDefinition]:
        """
        Register every ``*.json`` manifest in a directory, in sorted order.

        Returns:
            The plugins registered
        """
        plugins = [self.manifest_load(path) for path in sorted(Path(directory).glob("*.json"))]
        for plugin in plugins:
            registry.register(plugin)
        LOG(f"Loaded {len(plugins)} plugin(s) from {directory}", level=1)
        return plugins
