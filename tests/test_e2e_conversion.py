"""
End-to-end conversion tests

Whole documents through Parser.convert()/convert_full(), checking the
rendered HTML together with the returned side-channels and errors.
"""

import asyncio
import json

from mdpp.lib.parser import Parser
from mdpp.lib.registry import ComponentRegistry
from mdpp.models.formats import FileFormat
from mdpp.models.plugins import ComponentDefinition, PluginDefinition
from mdpp.models.records import ErrorKind
from mdpp.models.security import SecurityProfile, securityConfig_forProfile


ALERT = ':::bootstrap:alert{variant="success"}\nOK\n:::'


class TestComponents:
    """Test plugin component resolution"""

    def test_alert(self, parser):
        result = parser.convert(ALERT)
        assert result.errors == []
        assert '<div class="alert alert-success" role="alert"><p>OK</p>' in result.html

    def test_container_label(self, parser):
        result = parser.convert(":::bootstrap:card[**Title**]\nBody\n:::")
        assert '<div class="card"><p><strong>Title</strong></p>' in result.html
        assert "<p>Body</p>" in result.html

    def test_nested_containers(self, parser):
        source = "::::bootstrap:card\n:::bootstrap:alert\nInner\n:::\n::::"
        html = parser.convert(source).html
        assert html.index('class="card"') < html.index('class="alert"') < html.index("Inner")
        assert html.count("</div>") == 2

    def test_inline_component(self, parser):
        result = parser.convert("Status :bootstrap:badge[new]{.bg-info} today")
        assert '<p>Status <span class="badge bg-info">new</span> today</p>' in result.html

    def test_wrapper(self, parser):
        html = parser.convert(":::bootstrap:figure\nImg\n:::").html
        assert '<div class="figure-wrapper"><figure class="figure"><p>Img</p>' in html

    def test_framework_less_lookup(self, parser):
        """A bare name resolves against the first plugin that has it"""
        result = parser.convert(":::card\nX\n:::")
        assert result.errors == []
        assert '<div class="card">' in result.html

    def test_undefined_leaf_and_text(self, parser):
        """Undefined bare names fall back to plain elements without errors"""
        result = parser.convert("::divider[Section]\n\nPress :kbd[Ctrl] now")
        assert result.errors == []
        assert "<div>Section</div>" in result.html
        assert "<p>Press <span>Ctrl</span> now</p>" in result.html

    def test_prose_colons_untouched(self, parser):
        result = parser.convert("Meeting at 10:30: bring notes")
        assert result.errors == []
        assert "<p>Meeting at 10:30: bring notes</p>" in result.html

    def test_plugin_registered_on_parser(self, bootstrap_plugin):
        parser = Parser(verbosity=0)
        parser.plugin_register(bootstrap_plugin)
        assert parser.convert(ALERT).errors == []

    def test_plugins_from_directory(self, tmp_path):
        manifest = {"framework": "ui", "components": {"panel": {"tag": "section", "classes": ["panel"]}}}
        (tmp_path / "ui.json").write_text(json.dumps(manifest), encoding="utf-8")
        parser = Parser(verbosity=0)
        assert [p.framework for p in parser.plugins_loadFromDirectory(tmp_path)] == ["ui"]
        assert '<section class="panel"><p>Hi</p>' in parser.convert(":::ui:panel\nHi\n:::").html


class TestErrors:
    """Test non-fatal error reporting"""

    def test_missing_plugin(self):
        result = Parser(ComponentRegistry(), verbosity=0).convert(":::unknown:widget\nX\n:::")
        assert [e.kind for e in result.errors] == [ErrorKind.MISSING_PLUGIN]
        assert result.html.startswith('<div class="mdpp-error mdpp-error-warning" role="alert">')
        assert "<div><p>X</p>\n</div>" in result.html

    def test_suppress_errors(self, make_parser):
        result = make_parser(suppress_errors=True).convert(":::unknown:widget\nX\n:::")
        assert len(result.errors) == 1
        assert "mdpp-error" not in result.html
        assert "<p>X</p>" in result.html

    def test_unknown_component(self, parser):
        result = parser.convert(":::bootstrap:carousel\nX\n:::")
        [error] = result.errors
        assert error.kind is ErrorKind.UNKNOWN_COMPONENT
        assert error.message == 'Component "carousel" not found in plugin "bootstrap".'
        assert error.details.startswith("Available components: alert, card")
        assert error.line == 1
        assert "<p>X</p>" in result.html

    def test_nesting_error(self, parser):
        result = parser.convert(":::bootstrap:tooltip\nHover :bootstrap:badge[new]\n:::")
        assert [e.kind for e in result.errors] == [ErrorKind.NESTING_ERROR]
        assert '<span class="badge">new</span>' in result.html

    def test_security_blocked(self, parser):
        result = parser.convert(':::bootstrap:alert{onclick="steal()" .x}\nOK\n:::')
        assert [e.kind for e in result.errors] == [ErrorKind.SECURITY_BLOCKED]
        assert "steal()" not in result.html
        assert '<div class="alert x" role="alert">' in result.html
        assert result.errors[0].message == 'Removed unsafe attribute(s) from "bootstrap:alert": onclick'

    def test_unsafe_default_attributes(self):
        """Plugin default attributes pass through the security filter too"""
        plugin = PluginDefinition(
            framework="evil",
            components={
                "box": ComponentDefinition(
                    default_attributes={"onclick": "alert(1)", "href": "javascript:alert(1)", "title": "ok"},
                ),
            },
        )
        result = Parser(ComponentRegistry([plugin]), verbosity=0).convert(":::evil:box\nhi\n:::")
        assert [e.kind for e in result.errors] == [ErrorKind.SECURITY_BLOCKED]
        assert "evil:box" in result.errors[0].message
        assert '<div title="ok"><p>hi</p>' in result.html
        assert "alert(1)" not in result.html
        assert plugin.components["box"].default_attributes["onclick"] == "alert(1)"

    def test_error_lines(self, parser):
        result = parser.convert("Intro\n\n:::nope:a\nX\n:::\n\n:::nope:b\nY\n:::")
        assert [e.line for e in result.errors] == [3, 7]

    def test_errors_do_not_leak(self, parser):
        """Each conversion starts from a clean slate"""
        assert len(parser.convert(":::nope:widget\nX\n:::").errors) == 1
        assert parser.convert(ALERT).errors == []

    def test_separate_parsers_independent(self, parser):
        bare = Parser(ComponentRegistry(), verbosity=0)
        assert parser.convert(ALERT).errors == []
        assert [e.kind for e in bare.convert(ALERT).errors] == [ErrorKind.MISSING_PLUGIN]


class TestCallouts:
    """Test callouts resolving against the admonitions plugin"""

    def test_callout(self, parser):
        result = parser.convert("> [!WARNING] Careful\n> Mind the gap\n\nAfter")
        assert result.errors == []
        assert '<div class="admonition admonition-warning" role="note"><p>Careful</p>' in result.html
        assert "<p>Mind the gap</p>" in result.html
        assert "<blockquote>" not in result.html
        assert result.html.rstrip().endswith("<p>After</p>")

    def test_callout_with_fence(self, parser):
        """Code inside a callout stays inside it and the document goes on"""
        result = parser.convert("> [!NOTE] Title\n> ```js\n> x = 1\n> ```\n\nAfter paragraph\n")
        assert result.errors == []
        assert '<pre><code class="language-js">x = 1\n</code></pre>' in result.html
        assert result.html.index("</code></pre>") < result.html.index("<p>After paragraph</p>")
        assert "&gt;" not in result.html

    def test_callout_without_plugin(self, bootstrap_plugin):
        parser = Parser(ComponentRegistry([bootstrap_plugin]), verbosity=0)
        result = parser.convert("> [!NOTE]\n> Hi")
        assert [e.kind for e in result.errors] == [ErrorKind.MISSING_PLUGIN]

    def test_plain_blockquote(self, parser):
        assert "<blockquote>" in parser.convert("> Just a quote").html


class TestFences:
    """Test fenced code handling"""

    def test_directives_in_fence_untouched(self, parser):
        result = parser.convert("```md\n:::bootstrap:alert\nOK\n:::\n```")
        assert result.errors == []
        assert '<pre><code class="language-md">:::bootstrap:alert\nOK\n:::\n</code></pre>' in result.html

    def test_mermaid(self, parser):
        html = parser.convert("```mermaid\ngraph TD\nA-->B\n```").html
        assert '<pre class="mermaid">graph TD\nA--&gt;B\n</pre>' in html

    def test_math(self, parser):
        html = parser.convert("```math\nE = mc^2\n```").html
        assert '<div class="math math-display" data-math-style="display">E = mc^2\n</div>' in html

    def test_math_disabled(self, make_parser):
        html = make_parser(enable_math=False).convert("```math\nE = mc^2\n```").html
        assert '<code class="language-math">' in html

    def test_highlight(self, make_parser):
        html = make_parser(highlight_code=True).convert("```python\nx = 1\n```").html
        assert '<code class="language-python">' in html
        assert '<span style="' in html

    def test_highlight_mdpp_source(self, make_parser):
        html = make_parser(highlight_code=True).convert("```mdsc\n:::bootstrap:alert\n:::\n```").html
        assert "bootstrap:alert" in html
        assert '<span style="' in html

    def test_gfm_table(self, parser):
        html = parser.convert("| a | b |\n|---|---|\n| 1 | 2 |").html
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_strikethrough(self, parser):
        assert "<s>gone</s>" in parser.convert("~~gone~~").html


class TestAssets:
    """Test plugin CSS/JS inclusion"""

    def test_include_assets(self, make_parser):
        result = make_parser(include_assets=True).convert(ALERT)
        css = '<link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css">'
        js = '<script src="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/js/bootstrap.bundle.min.js"></script>'
        assert result.html.startswith(css)
        assert js in result.html
        assert result.html.index(js) < result.html.index('class="alert')

    def test_assets_off_by_default(self, parser):
        assert "<link" not in parser.convert(ALERT).html

    def test_strict_blocks_assets(self, registry):
        parser = Parser(registry, security=securityConfig_forProfile(SecurityProfile.STRICT), verbosity=0)
        parser.options.include_assets = True
        result = parser.convert(ALERT)
        assert [e.kind for e in result.errors] == [ErrorKind.SECURITY_BLOCKED, ErrorKind.SECURITY_BLOCKED]
        assert "<link" not in result.html
        assert "<script" not in result.html


class TestResults:
    """Test result objects and the async entry points"""

    def test_frontmatter_passthrough(self, parser):
        assert parser.convert("x", frontmatter={"title": "T"}).frontmatter == {"title": "T"}
        assert parser.convert("x", frontmatter={}).frontmatter is None

    def test_full_to_dict(self, parser):
        source = ":::ai-context\nNotes\n:::\n\n:::script\nrun();\n:::\n\n:::nope:x\n:::"
        data = parser.convert_full(source, format="mdsc").to_dict()
        assert set(data) == {"html", "aiContexts", "frontmatter", "errors", "scripts", "placeholders", "styles", "format"}
        assert data["format"] == "mdsc"
        assert data["aiContexts"][0]["visibility"] == "hidden"
        assert data["aiContexts"][0]["visible"] is False
        assert data["scripts"][0]["mode"] == "execute"
        assert data["errors"][0]["kind"] == "missing-plugin"
        json.dumps(data)

    def test_plain_result_fields(self, parser):
        data = parser.convert("# Hi").to_dict()
        assert set(data) == {"html", "aiContexts", "frontmatter", "errors"}
        assert "<h1>Hi</h1>" in data["html"]

    def test_full_result_format(self, parser):
        assert parser.convert_full("x", filename="page.md").format is FileFormat.MD

    def test_aconvert(self, parser):
        result = asyncio.run(parser.aconvert(ALERT))
        assert result.errors == []
        assert 'class="alert alert-success"' in result.html

    def test_aconvert_full(self, parser):
        result = asyncio.run(parser.aconvert_full(":::script\nx();\n:::", format="mdsc"))
        assert len(result.scripts) == 1
