"""
Command line pipeline tests

Runs the ProgramState stages directly against temporary directories.
"""

import json
from argparse import Namespace

import pytest

from mdpp.__main__ import (
    document_convert,
    env_check,
    frontmatter_split,
    parser as cli_parser,
    plugins_load,
    results_report,
    results_write,
    source_read,
)
from mdpp.models import FileFormat, ProgramState, pipeline
from mdpp.models.security import SecurityProfile


DOCUMENT = """---
title: Guide
tags: [a, b]
---
# Guide

:::ui:panel{.wide}
Hello
:::

> [!TIP] Remember
> Save often

:::script
console.log("x");
:::
"""

MANIFEST = {
    "framework": "ui",
    "version": "1.0.0",
    "components": {"panel": {"tag": "section", "classes": ["panel"]}},
}


def state_make(tmp_path, **options) -> ProgramState:
    inputdir = tmp_path / "in"
    inputdir.mkdir(exist_ok=True)
    (inputdir / "guide.mdsc").write_text(DOCUMENT, encoding="utf-8")
    plugins = inputdir / "plugins"
    plugins.mkdir(exist_ok=True)
    (plugins / "ui.json").write_text(json.dumps(MANIFEST), encoding="utf-8")
    defaults = {"inputFile": "guide.mdsc", "pluginsDir": "plugins", "verbosity": 0}
    defaults.update(options)
    return ProgramState(inputdir=inputdir, outputdir=tmp_path / "out", **defaults)


class TestFrontmatter:
    """Test YAML frontmatter splitting"""

    def test_split(self):
        frontmatter, body = frontmatter_split("---\ntitle: T\n---\n# Body\n")
        assert frontmatter == {"title": "T"}
        assert body == "# Body\n"

    def test_absent(self):
        assert frontmatter_split("# Body") == ({}, "# Body")

    def test_empty(self):
        assert frontmatter_split("---\n\n---\nx") == ({}, "x")

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            frontmatter_split("---\n- a\n- b\n---\nx")

    def test_thematic_break_later_ignored(self):
        source = "Intro\n\n---\ntitle: no\n---\n"
        assert frontmatter_split(source) == ({}, source)


class TestArguments:
    """Test command line parsing"""

    def test_defaults(self):
        options, _ = cli_parser.parse_known_args(["--inputFile", "a.md", "in", "out"])
        assert options.inputFile == "a.md"
        assert options.format is None
        assert options.verbosity == 1
        assert options.noBundledPlugins is False
        assert options.presentation is False
        assert options.embedded is False

    def test_state_from_namespace(self, tmp_path):
        options = Namespace(inputFile="a.mdsc", format="md", highlight=True, unrelated=1)
        state = ProgramState.state_createFromNamespace(options, tmp_path, tmp_path / "out")
        assert state.inputFile == "a.mdsc"
        assert state.format == "md"
        assert state.highlight is True
        assert not hasattr(state, "unrelated")


class TestEnvironment:
    """Test env_check"""

    def test_ok(self, tmp_path):
        state = env_check(state_make(tmp_path))
        assert state.envOK
        assert state.inputSourceFile.name == "guide.mdsc"
        assert state.pluginsInputdir.is_dir()
        assert state.outputdir.is_dir()

    def test_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Input file not found"):
            env_check(state_make(tmp_path, inputFile="nope.md"))

    def test_missing_plugins_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Plugin directory not found"):
            env_check(state_make(tmp_path, pluginsDir="elsewhere"))

    def test_missing_security_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Security file not found"):
            env_check(state_make(tmp_path, securityFile="security.yaml"))


class TestStages:
    """Test the conversion stages"""

    def test_source_read(self, tmp_path):
        state = source_read(env_check(state_make(tmp_path)))
        assert state.frontmatter == {"title": "Guide", "tags": ["a", "b"]}
        assert state.sourceBody.startswith("# Guide")
        assert state.fileFormat is FileFormat.MDSC

    def test_format_override(self, tmp_path):
        state = source_read(env_check(state_make(tmp_path, format="md")))
        assert state.fileFormat is FileFormat.MD

    def test_plugins_load(self, tmp_path):
        state = plugins_load(source_read(env_check(state_make(tmp_path))))
        assert [p.framework for p in state.registry.plugins_list()] == ["admonitions", "ui"]
        assert state.securityConfig.profile is SecurityProfile.WARN

    def test_no_bundled_plugins(self, tmp_path):
        state = plugins_load(source_read(env_check(state_make(tmp_path, noBundledPlugins=True))))
        assert [p.framework for p in state.registry.plugins_list()] == ["ui"]

    def test_security_file(self, tmp_path):
        state = state_make(tmp_path, securityFile="security.yaml")
        (state.inputdir / "security.yaml").write_text("profile: strict\n", encoding="utf-8")
        state = plugins_load(source_read(env_check(state)))
        assert state.securityConfig.profile is SecurityProfile.STRICT


class TestPipeline:
    """Test a whole run"""

    def test_full_run(self, tmp_path):
        state = pipeline(
            state_make(tmp_path),
            env_check,
            source_read,
            plugins_load,
            document_convert,
            results_write,
            results_report,
        )
        html_file = tmp_path / "out" / "guide.html"
        json_file = tmp_path / "out" / "guide.json"
        assert state.outputFiles == [html_file, json_file]

        html = html_file.read_text(encoding="utf-8")
        assert '<section class="panel wide"><p>Hello</p>' in html
        assert 'class="admonition admonition-tip"' in html
        assert "mdsc-script-block" in html
        assert "mdpp-error" not in html

        data = json.loads(json_file.read_text(encoding="utf-8"))
        assert data["format"] == "mdsc"
        assert data["frontmatter"] == {"title": "Guide", "tags": ["a", "b"]}
        assert data["scripts"][0]["code"] == 'console.log("x");'
        assert data["errors"] == []

    def test_run_without_bundled_plugins(self, tmp_path):
        """Callouts report a missing plugin but the run still succeeds"""
        state = pipeline(
            state_make(tmp_path, noBundledPlugins=True, suppressErrors=True),
            env_check,
            source_read,
            plugins_load,
            document_convert,
            results_write,
        )
        assert [e.kind.value for e in state.conversionResult.errors] == ["missing-plugin"]
        assert "mdpp-error" not in (tmp_path / "out" / "guide.html").read_text(encoding="utf-8")

    def test_presentation_from_frontmatter(self, tmp_path):
        state = state_make(tmp_path, inputFile="talk.mdplus")
        (state.inputdir / "talk.mdplus").write_text(
            "---\npresentation: true\ntheme: moon\n---\n# One\n\n---\n\n# Two\n", encoding="utf-8"
        )
        state = pipeline(state, env_check, source_read, plugins_load, document_convert, results_write)
        assert state.isPresentation is True

        html = (tmp_path / "out" / "talk.html").read_text(encoding="utf-8")
        assert html.startswith("<!DOCTYPE html>")
        assert "dist/theme/moon.css" in html
        assert "<h1>Two</h1>" in html

        data = json.loads((tmp_path / "out" / "talk.json").read_text(encoding="utf-8"))
        assert data["slideCount"] == 2
        assert data["theme"] == "moon"

    def test_presentation_flag(self, tmp_path):
        state = pipeline(
            state_make(tmp_path, presentation=True, embedded=True),
            env_check,
            source_read,
            plugins_load,
            document_convert,
        )
        assert state.conversionResult.slide_count == 1
        assert state.conversionResult.html.startswith('<div class="mdpp-reveal-container"')
