"""
Shared fixtures: a small bootstrap-like plugin and parsers built around it
"""

import pytest

from mdpp.lib.bundled import admonitions_plugin
from mdpp.lib.parser import Parser
from mdpp.lib.registry import ComponentRegistry
from mdpp.models.options import ParserOptions
from mdpp.models.plugins import ComponentDefinition, PluginDefinition


@pytest.fixture
def bootstrap_plugin() -> PluginDefinition:
    return PluginDefinition(
        framework="bootstrap",
        version="5.3.0",
        css=["https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css"],
        js=["https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/js/bootstrap.bundle.min.js"],
        components={
            "alert": ComponentDefinition(
                tag="div",
                classes=["alert"],
                variants={
                    "success": ["alert-success"],
                    "dismissible": ["alert-dismissible", "fade", "show"],
                },
                default_attributes={"role": "alert"},
            ),
            "card": ComponentDefinition(classes=["card"]),
            "badge": ComponentDefinition(tag="span", classes=["badge"]),
            "tooltip": ComponentDefinition(tag="span", classes=["tt"], allow_nesting=False),
            "figure": ComponentDefinition(
                tag="figure",
                classes=["figure"],
                wrapper_tag="div",
                wrapper_classes=["figure-wrapper"],
            ),
        },
    )


@pytest.fixture
def registry(bootstrap_plugin) -> ComponentRegistry:
    return ComponentRegistry([bootstrap_plugin, admonitions_plugin()])


@pytest.fixture
def parser(registry) -> Parser:
    return Parser(registry, verbosity=0)


@pytest.fixture
def make_parser(registry):
    """Parser factory taking ParserOptions keyword arguments"""

    def factory(**options) -> Parser:
        return Parser(registry, options=ParserOptions(**options), verbosity=0)

    return factory
