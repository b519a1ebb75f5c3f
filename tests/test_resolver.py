"""
Directive resolver tests

Resolution itself runs through whole conversions in
test_e2e_conversion.py; these cover the name handling.
"""

from mdpp.lib.resolver import DirectiveResolver


class TestNameSplit:
    """Test splitting canonical names into framework and component"""

    def test_framework_and_component(self):
        assert DirectiveResolver.name_split("bootstrap_alert") == ("bootstrap", "alert")

    def test_first_underscore_only(self):
        assert DirectiveResolver.name_split("bootstrap_list_group") == ("bootstrap", "list_group")

    def test_bare_name(self):
        assert DirectiveResolver.name_split("card") == (None, "card")


class TestDispatch:
    """Test which path a directive takes"""

    def test_builtin_before_registry(self, parser):
        """A built-in name never reaches the component registry"""
        result = parser.convert_full(":::style\nh1 { color: red; }\n:::", format="mdsc")
        assert result.errors == []
        assert len(result.styles) == 1

    def test_components_disabled_in_md(self, parser):
        result = parser.convert(":::bootstrap:alert\nOK\n:::", filename="page.md")
        assert result.errors == []
        assert 'class="alert' not in result.html
