"""
AI placeholder tests

Covers block and inline placeholders, prompt previews, variable
interpolation and the HTML scan/replace utilities.
"""

from mdpp.lib.ai_placeholder import (
    format_parse,
    placeholder_replaceContent,
    placeholders_extractFromHTML,
    placeholders_interpolate,
    preview_make,
    prompt_interpolate,
)
from mdpp.models.records import (
    AIPlaceholderRecord,
    PlaceholderFormat,
    PlaceholderStatus,
    PlaceholderType,
)


class TestBlockPlaceholders:
    """Test :::ai-generate"""

    def test_block_placeholder(self, parser):
        result = parser.convert_full(':::ai-generate{prompt="Write a summary" format="list"}\n:::')
        record = result.placeholders[0]
        assert record.id == "ai-1"
        assert record.type is PlaceholderType.BLOCK
        assert record.prompt == "Write a summary"
        assert record.format is PlaceholderFormat.LIST
        assert record.status is PlaceholderStatus.PENDING
        assert record.line == 1

        html = result.html
        assert 'class="mdpp-ai-placeholder mdpp-ai-block mdpp-ai-format-list"' in html
        assert 'data-ai-id="ai-1"' in html
        assert 'data-ai-type="block"' in html
        assert 'data-ai-prompt="Write a summary"' in html
        assert 'data-ai-format="list"' in html
        assert 'data-ai-status="pending"' in html
        assert 'data-ai-line="1"' in html
        assert '<div class="mdpp-ai-pending-content">[AI: Write a summary]</div>' in html

    def test_underscore_alias(self, parser):
        result = parser.convert_full('::ai_generate{prompt="Leaf form"}')
        assert result.placeholders[0].type is PlaceholderType.BLOCK

    def test_fallback_shown(self, parser):
        result = parser.convert_full(':::ai-generate{prompt="Long prompt" fallback="Coming soon"}\n:::')
        assert result.placeholders[0].fallback == "Coming soon"
        assert 'data-ai-fallback="Coming soon"' in result.html
        assert ">Coming soon</div>" in result.html

    def test_default_and_invalid_format(self, parser):
        result = parser.convert_full(
            ':::ai-generate{prompt="a"}\n:::\n\n:::ai-generate{prompt="b" format="poem"}\n:::'
        )
        assert [p.format for p in result.placeholders] == [PlaceholderFormat.PARAGRAPH, PlaceholderFormat.PARAGRAPH]

    def test_label_as_prompt(self, parser):
        result = parser.convert_full(":::ai-generate[Summarize the release]\n:::")
        assert result.placeholders[0].prompt == "Summarize the release"

    def test_explicit_and_duplicate_ids(self, parser):
        """Ids stay unique within a conversion"""
        result = parser.convert_full(
            ':::ai-generate{id=intro prompt="a"}\n:::\n\n'
            ':::ai-generate{id=intro prompt="b"}\n:::\n\n'
            ':::ai-generate{prompt="c"}\n:::'
        )
        assert [p.id for p in result.placeholders] == ["intro", "intro-2", "ai-1"]

    def test_ids_restart_per_conversion(self, parser):
        first = parser.convert_full(':::ai-generate{prompt="a"}\n:::')
        second = parser.convert_full(':::ai-generate{prompt="a"}\n:::')
        assert first.placeholders[0].id == second.placeholders[0].id == "ai-1"


class TestInlinePlaceholders:
    """Test :ai{prompt=...}"""

    def test_inline_placeholder(self, parser):
        result = parser.convert_full('Founded in :ai{prompt="founding year" fallback="19xx"}.')
        record = result.placeholders[0]
        assert record.type is PlaceholderType.INLINE
        assert record.format is PlaceholderFormat.INLINE
        assert '<span class="mdpp-ai-placeholder mdpp-ai-inline mdpp-ai-format-inline"' in result.html
        assert ">19xx</span>." in result.html

    def test_inline_format_forced(self, parser):
        result = parser.convert_full(':ai{prompt="x" format="table"}')
        assert result.placeholders[0].format is PlaceholderFormat.INLINE

    def test_inline_preview_truncated(self, parser):
        prompt = "Describe the product in a single short sentence"
        result = parser.convert_full(f':ai{{prompt="{prompt}"}}')
        assert f"[AI: {prompt[:30]}…]" in result.html

    def test_disabled_in_md(self, parser):
        """Placeholders stay unresolved where the format forbids them"""
        result = parser.convert_full(':::ai-generate{prompt="x"}\nBody\n:::', format="md")
        assert result.placeholders == []
        assert "mdpp-ai-placeholder" not in result.html
        assert "<p>Body</p>" in result.html


class TestPreviewAndFormat:
    """Test preview text and format parsing"""

    def test_short_prompt(self):
        assert preview_make("Hi", 50) == "[AI: Hi]"

    def test_long_prompt(self):
        assert preview_make("x" * 60, 50) == "[AI: " + "x" * 50 + "…]"

    def test_exact_length_not_truncated(self):
        assert preview_make("x" * 30, 30) == "[AI: " + "x" * 30 + "]"

    def test_format_parse(self):
        assert format_parse("Table") is PlaceholderFormat.TABLE
        assert format_parse(None) is PlaceholderFormat.PARAGRAPH
        assert format_parse("poem") is PlaceholderFormat.PARAGRAPH


class TestInterpolation:
    """Test {{var}} substitution"""

    def test_known_variable(self):
        assert prompt_interpolate("Describe {{product}}", {"product": "Widget"}) == "Describe Widget"

    def test_unknown_variable_literal(self):
        assert prompt_interpolate("Describe {{x}}", {"product": "Widget"}) == "Describe {{x}}"

    def test_object_values_compact_json(self):
        result = prompt_interpolate("Use {{spec}} and {{tags}}", {"spec": {"a": 1}, "tags": ["x", "y"]})
        assert result == 'Use {"a":1} and ["x","y"]'

    def test_non_string_values(self):
        assert prompt_interpolate("{{n}} items", {"n": 3}) == "3 items"

    def test_records_copied(self):
        """Interpolation returns new records and leaves the originals alone"""
        original = AIPlaceholderRecord(id="ai-1", type=PlaceholderType.BLOCK, prompt="About {{topic}}")
        [interpolated] = placeholders_interpolate([original], {"topic": "owls"})
        assert interpolated.prompt == "About owls"
        assert interpolated.variables == {"topic": "owls"}
        assert original.prompt == "About {{topic}}"
        assert original.variables is None

    def test_conversion_interpolates_in_mdsc(self, make_parser):
        parser = make_parser(variables={"product": "Widget"})
        result = parser.convert_full(':::ai-generate{prompt="Describe {{product}}"}\n:::', format="mdsc")
        assert result.placeholders[0].prompt == "Describe Widget"
        assert result.placeholders[0].variables == {"product": "Widget"}

    def test_conversion_skips_interpolation_in_mdplus(self, make_parser):
        parser = make_parser(variables={"product": "Widget"})
        result = parser.convert_full(':::ai-generate{prompt="Describe {{product}}"}\n:::', format="mdplus")
        assert result.placeholders[0].prompt == "Describe {{product}}"


class TestHTMLUtilities:
    """Test recovering and patching placeholders in rendered HTML"""

    SOURCE = (
        ':::ai-generate{prompt="Summarize" format="table" fallback="Soon"}\n:::\n\n'
        'Inline :ai{prompt="a number"} here.'
    )

    def test_extract_from_html(self, parser):
        result = parser.convert_full(self.SOURCE)
        recovered = placeholders_extractFromHTML(result.html)
        assert [r.id for r in recovered] == ["ai-1", "ai-2"]
        assert recovered[0].type is PlaceholderType.BLOCK
        assert recovered[0].format is PlaceholderFormat.TABLE
        assert recovered[0].fallback == "Soon"
        assert recovered[0].line == 1
        assert recovered[1].type is PlaceholderType.INLINE
        assert recovered[1].prompt == "a number"
        assert recovered[1].line == 4

    def test_replace_block(self, parser):
        html = parser.convert_full(self.SOURCE).html
        patched = placeholder_replaceContent(html, "ai-1", "Generated <b>text</b>")
        recovered = placeholders_extractFromHTML(patched)
        assert recovered[0].status is PlaceholderStatus.COMPLETED
        assert '<div class="mdpp-ai-content">Generated &lt;b&gt;text&lt;/b&gt;</div>' in patched
        assert "mdpp-ai-pending-content" not in patched

    def test_replace_inline_error(self, parser):
        html = parser.convert_full(self.SOURCE).html
        patched = placeholder_replaceContent(html, "ai-2", "failed", success=False)
        recovered = placeholders_extractFromHTML(patched)
        assert recovered[1].status is PlaceholderStatus.ERROR
        assert ">failed</span>" in patched

    def test_replace_missing_id(self, parser):
        html = parser.convert_full(self.SOURCE).html
        assert placeholder_replaceContent(html, "ai-99", "x") == html
