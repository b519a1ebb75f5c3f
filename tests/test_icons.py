"""
Material Icons tests
"""

from mdpp.lib.icons import iconHints_resolve, iconName_extract, iconUrl_is, icon_render


class TestIconUrls:
    """Test recognising icon image URLs"""

    def test_schemes(self):
        assert iconUrl_is("google:home")
        assert iconUrl_is("material:search")
        assert iconUrl_is("md:star")
        assert not iconUrl_is("https://example.com/home.png")
        assert not iconUrl_is("googles:home")

    def test_name(self):
        assert iconName_extract("google:home") == "home"


class TestIconHints:
    """Test sorting hints into base class, classes and styles"""

    def test_size_and_variant(self):
        assert iconHints_resolve([".large", ".outlined"]) == ("material-icons-outlined", [], ["font-size: 36px;"])

    def test_extra_classes(self):
        assert iconHints_resolve(["text-primary", ".md-18"]) == ("material-icons", ["text-primary"], ["font-size: 18px;"])

    def test_unusable_hint_dropped(self):
        assert iconHints_resolve(['x"onmouseover=1']) == ("material-icons", [], [])


class TestIconRender:
    """Test the rendered span"""

    def test_plain(self):
        assert icon_render("google:home") == '<span class="material-icons mdpp-icon">home</span>'

    def test_hints(self):
        assert icon_render("google:home", [".large"]) == (
            '<span class="material-icons mdpp-icon" style="font-size: 36px;">home</span>'
        )


class TestIconConversion:
    """Test icons inside whole documents"""

    def test_trailing_hints(self, parser):
        html = parser.convert("Go ![icon](google:home){.large .outlined} now").html
        assert '<span class="material-icons-outlined mdpp-icon" style="font-size: 36px;">home</span> now' in html
        assert "{" not in html
        assert "<img" not in html

    def test_alt_and_title_hints(self, parser):
        html = parser.convert('![icon {.small}](google:star "text-warning")').html
        assert '<span class="material-icons mdpp-icon text-warning" style="font-size: 18px;">star</span>' in html

    def test_regular_image_untouched(self, parser):
        html = parser.convert("![logo](https://example.com/logo.png)").html
        assert '<img src="https://example.com/logo.png" alt="logo"' in html

    def test_plain_markdown_keeps_image(self, parser):
        html = parser.convert("![icon](google:home)", filename="page.md").html
        assert "<img" in html
        assert "material-icons" not in html

    def test_disabled_by_option(self, make_parser):
        html = make_parser(enable_icons=False).convert("![icon](google:home)").html
        assert "material-icons" not in html
