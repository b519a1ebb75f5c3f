"""
Style block and stylesheet link tests
"""

from mdpp.lib.parser import Parser
from mdpp.lib.style_block import scoped_is
from mdpp.models.records import ErrorKind, StyleType
from mdpp.models.security import SecurityProfile, securityConfig_forProfile


class TestScopedFlag:
    """Test the scoped attribute"""

    def test_scoped(self):
        assert scoped_is({"scoped": ""}) is True
        assert scoped_is({"scoped": "true"}) is True
        assert scoped_is({"scoped": "false"}) is False
        assert scoped_is({}) is False


class TestStyleBlocks:
    """Test :::style"""

    def test_style_block(self, parser):
        result = parser.convert_full(":::style{scoped}\n.note { color: teal; }\n:::", format="mdsc")
        record = result.styles[0]
        assert record.id == "mdpp-style-1"
        assert record.type is StyleType.INLINE
        assert record.content == ".note { color: teal; }"
        assert record.scoped is True
        assert '<style id="mdpp-style-1" scoped>.note { color: teal; }</style>' in result.html

    def test_style_with_id(self, parser):
        result = parser.convert_full(":::style{#theme}\nbody { margin: 0; }\n:::", format="mdsc")
        assert result.styles[0].id == "theme"
        assert result.styles[0].scoped is False
        assert '<style id="theme">' in result.html

    def test_multiline_css(self, parser):
        source = ":::style\n.a {\n  color: red;\n}\n\n.b:hover { color: blue; }\n:::"
        record = parser.convert_full(source, format="mdsc").styles[0]
        assert record.content == ".a {\n  color: red;\n}\n\n.b:hover { color: blue; }"

    def test_closing_tag_escaped(self, parser):
        result = parser.convert_full(":::style\na::after { content: '</style>'; }\n:::", format="mdsc")
        assert "</style>'" not in result.html
        assert "<\\/style>'" in result.html

    def test_name_case_insensitive(self, parser):
        result = parser.convert_full(":::STYLE\np { color: red; }\n:::", format="mdsc")
        assert len(result.styles) == 1

    def test_unresolved_in_mdplus(self, parser):
        result = parser.convert_full(":::style\np { color: red; }\n:::", format="mdplus")
        assert result.styles == []
        assert "<style" not in result.html


class TestStylesheetLinks:
    """Test :::link-css and its aliases"""

    URL = "https://unpkg.com/sakura.css/css/sakura.css"

    def test_url_from_body(self, parser):
        result = parser.convert_full(f":::link-css\n{self.URL}\n:::", format="mdsc")
        record = result.styles[0]
        assert record.type is StyleType.EXTERNAL
        assert record.content == self.URL
        assert f'<link id="mdpp-style-1" rel="stylesheet" href="{self.URL}">' in result.html

    def test_url_attribute_and_aliases(self, parser):
        result = parser.convert_full(
            f':::linkcss{{url="{self.URL}"}}\n:::\n\n:::css-link{{href="{self.URL}"}}\n:::',
            format="mdsc",
        )
        assert [s.content for s in result.styles] == [self.URL, self.URL]
        assert [s.id for s in result.styles] == ["mdpp-style-1", "mdpp-style-2"]

    def test_body_wins_over_attribute(self, parser):
        result = parser.convert_full(f':::link-css{{url="https://unpkg.com/other.css"}}\n{self.URL}\n:::', format="mdsc")
        assert result.styles[0].content == self.URL

    def test_no_url_skipped(self, parser):
        """No URL: no element, no record, no error"""
        result = parser.convert_full(":::link-css\n:::", format="mdsc")
        assert result.styles == []
        assert result.errors == []
        assert "<link" not in result.html

    def test_blocked_source(self, registry):
        parser = Parser(registry, security=securityConfig_forProfile(SecurityProfile.STRICT), verbosity=0)
        result = parser.convert_full(f":::link-css\n{self.URL}\n:::", format="mdsc")
        assert result.styles == []
        assert [e.kind for e in result.errors] == [ErrorKind.SECURITY_BLOCKED]
        assert "<link" not in result.html

    def test_script_url_blocked(self, parser):
        result = parser.convert_full(":::link-css\njavascript:alert(1)\n:::", format="mdsc")
        assert result.styles == []
        assert [e.kind for e in result.errors] == [ErrorKind.SECURITY_BLOCKED]
