"""
Bundled plugins

The ``admonitions`` plugin is what GitHub-style callouts resolve against:
``> [!WARNING] Careful`` becomes ``:::admonitions_warning[Careful]`` and
renders as ``div.admonition.admonition-warning``. The command line
registers it unless --noBundledPlugins is given; library users register
it explicitly.
"""

from typing import Dict, List

from ..config import appsettings
from ..models.plugins import ComponentDefinition, PluginDefinition


ADMONITION_TYPES: List[str] = [
    'note', 'tip', 'important', 'warning', 'caution', 'danger', 'info',
    'success', 'question', 'quote', 'example', 'bug', 'abstract',
]


def admonitions_plugin() -> PluginDefinition:
    """
    The admonitions plugin, one component per callout type.

    Example:
        registry.register(admonitions_plugin())
    """
    components: Dict[str, ComponentDefinition] = {
        name: ComponentDefinition(
            tag='div',
            classes=['admonition', f'admonition-{name}'],
            default_attributes={'role': 'note'},
        )
        for name in ADMONITION_TYPES
    }
    return PluginDefinition(
        framework=appsettings.callout_framework,
        components=components,
        description='Callout boxes for GitHub/Obsidian style > [!TYPE] blockquotes',
    )


def plugins_bundled() -> List[PluginDefinition]:
    """Every plugin shipped with mdpp"""
    return [admonitions_plugin()]
