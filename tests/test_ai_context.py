"""
AI context tests

Covers visibility resolution, rendering of each visibility, the recorded
side-channel and the source-level helpers.
"""

from mdpp.lib.ai_context import (
    aiContext_extract,
    aiContext_format,
    aiContext_has,
    contexts_hidden,
    contexts_visible,
    metadata_parse,
    visibility_resolve,
)
from mdpp.models.records import AIContextRecord, ErrorKind, Visibility


class TestVisibilityResolution:
    """Test label → attribute → default priority"""

    def test_default_hidden(self):
        assert visibility_resolve(None, {}) is Visibility.HIDDEN

    def test_attribute(self):
        assert visibility_resolve(None, {"visibility": "visible"}) is Visibility.VISIBLE

    def test_label_beats_attribute(self):
        assert visibility_resolve("html-hidden", {"visibility": "visible"}) is Visibility.HTML_HIDDEN

    def test_case_insensitive(self):
        assert visibility_resolve("Visible", {}) is Visibility.VISIBLE

    def test_unknown_value(self):
        assert visibility_resolve("sometimes", {}) is None


class TestRendering:
    """Test the three visibility outcomes"""

    def test_visible(self, parser):
        result = parser.convert(":::ai-context{visibility=visible}\nA\n:::")
        record = result.ai_contexts[0]
        assert record.visible is True
        assert record.content == "A"
        assert "<p>A</p>" in result.html
        assert "display:none" not in result.html
        assert "display: none" not in result.html
        assert 'class="mdpp-ai-context mdpp-ai-visible"' in result.html
        assert 'data-visibility="visible"' in result.html

    def test_hidden(self, parser):
        result = parser.convert(":::ai-context{visibility=hidden}\nA\n:::")
        assert result.ai_contexts[0].visible is False
        assert "display: none;" in result.html
        assert "mdpp-ai-hidden" in result.html

    def test_hidden_by_default(self, parser):
        result = parser.convert(":::ai-context\nBackground notes\n:::")
        assert result.ai_contexts[0].visibility is Visibility.HIDDEN
        assert "display: none;" in result.html

    def test_hidden_revealed(self, make_parser):
        """show_ai_context renders hidden blocks like visible ones"""
        result = make_parser(show_ai_context=True).convert(":::ai-context{visibility=hidden}\nA\n:::")
        assert result.ai_contexts[0].visible is False
        assert "display: none" not in result.html
        assert "mdpp-ai-visible" in result.html
        assert 'data-visibility="hidden"' in result.html

    def test_html_hidden(self, parser):
        """Content exists only in the side-channel"""
        result = parser.convert(":::ai-context{visibility=html-hidden}\nSecret-Audience-Notes\n:::")
        assert "Secret-Audience-Notes" not in result.html
        assert "<!-- AI Context (html-hidden) -->" in result.html
        assert result.ai_contexts[0].content == "Secret-Audience-Notes"

    def test_label_form(self, parser):
        result = parser.convert(":::ai-context[visible]\nShown\n:::")
        assert result.ai_contexts[0].visible is True

    def test_unknown_visibility_reported(self, parser):
        """An unknown value is invalid syntax and falls back to hidden"""
        result = parser.convert(":::ai-context[sometimes]\nX\n:::")
        assert [e.kind for e in result.errors] == [ErrorKind.INVALID_SYNTAX]
        assert result.ai_contexts[0].visibility is Visibility.HIDDEN
        assert "mdpp-error-danger" in result.html

    def test_record_fields(self, parser):
        """Metadata holds the attributes plus the resolved visibility"""
        result = parser.convert("Intro\n\n:::ai-context{visibility=visible audience=devs}\nFirst\n\nSecond\n:::")
        record = result.ai_contexts[0]
        assert record.metadata == {"visibility": "visible", "audience": "devs"}
        assert record.content == "First\nSecond"
        assert record.line == 3

    def test_framework_prefixed_name(self, parser):
        """ai-context is recognised as the component part of a name"""
        result = parser.convert(":::docs:ai-context[visible]\nX\n:::")
        assert len(result.ai_contexts) == 1
        assert result.errors == []

    def test_md_format_keeps_ai_context(self, parser):
        result = parser.convert(":::ai-context\nX\n:::", format="md")
        assert len(result.ai_contexts) == 1


class TestSourceHelpers:
    """Test scanning raw markdown without a conversion"""

    SOURCE = (
        "# Title\n"
        "\n"
        ":::ai-context[visible]\n"
        "audience: developers\n"
        "- tone: friendly\n"
        ":::\n"
        "\n"
        ":::ai-context{visibility=hidden}\n"
        "Keep answers short.\n"
        ":::\n"
    )

    def test_extract(self):
        contexts = aiContext_extract(self.SOURCE)
        assert len(contexts) == 2
        assert contexts[0].visibility is Visibility.VISIBLE
        assert contexts[0].line == 3
        assert contexts[0].metadata == {"audience": "developers", "tone": "friendly"}
        assert contexts[1].visibility is Visibility.HIDDEN
        assert contexts[1].content == "Keep answers short."

    def test_filters(self):
        contexts = aiContext_extract(self.SOURCE)
        assert len(contexts_visible(contexts)) == 1
        assert len(contexts_hidden(contexts)) == 1

    def test_has(self):
        assert aiContext_has(self.SOURCE)
        assert not aiContext_has("# Plain")

    def test_metadata_parse(self):
        assert metadata_parse("Key: value\nnot metadata\n* other: thing") == {"key": "value", "other": "thing"}

    def test_format(self):
        contexts = [
            AIContextRecord(visibility=Visibility.VISIBLE, content="Hello"),
            AIContextRecord(visibility=Visibility.HIDDEN, content="tone: dry", metadata={"tone": "dry"}),
        ]
        assert aiContext_format(contexts) == (
            "[Visible AI Context]\nHello\n\n"
            "[Hidden AI Context]\ntone: dry\nMetadata:\n  tone: dry"
        )
