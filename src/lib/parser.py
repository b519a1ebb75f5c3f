"""
MD++ parser: the public conversion entry point

A Parser is long-lived. It owns the component registry, the security
filter and the options; every convert() call builds a fresh
ConversionContext and markdown-it instance, so nothing leaks from one
document into the next.

Conversion pipeline:
1. Format: explicit override or filename extension → capability set
   (format table AND ParserOptions toggles)
2. Preprocess: protect fences, canonicalize framework:component names,
   convert callouts
3. Compile: markdown-it parse, directive resolution, render
4. Assemble: error banners and plugin assets ahead of the body

convert_presentation() runs steps 2 and 3 once per slide and wraps the
slides in a reveal.js document.

Example:
    >>> parser = Parser(ComponentRegistry([bootstrap]))
    >>> result = parser.convert(':::bootstrap:alert{variant="success"}\\nOK\\n:::')
    >>> result.errors
    []
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import appsettings
from ..models.elements import Element
from ..models.formats import FileFormat, capabilities_get, format_resolve
from ..models.options import FullRenderResult, ParserOptions, PresentationResult, RenderResult
from ..models.plugins import PluginDefinition
from ..models.records import ErrorKind
from ..models.security import SecurityConfig, SecurityProfile, securityConfig_forProfile
from ..models.slides import Slide
from .ai_placeholder import placeholders_interpolate
from .compiler import Compiler, ConversionContext
from .html import node_serialize
from .loader import PluginLoader
from .log import LOG, state_connectToLogger
from .preprocessor import TextPreprocessor
from .registry import ComponentRegistry
from .resolver import DirectiveResolver
from .security import SecurityFilter
from .slides import (
    revealDocument_wrap,
    revealOptions_fromFrontmatter,
    revealPreview_wrap,
    sections_render,
    slides_parse,
)


class Parser:
    """
    Converts MD++ documents to HTML plus side-channel records

    Attributes:
        registry: Component registry, owned by this parser
        options: Feature toggles and rendering switches
        security_config: Profile and asset trust lists
        verbosity: Logging verbosity when used as a library
    """

    def __init__(
        self,
        registry: Optional[ComponentRegistry] = None,
        options: Optional[ParserOptions] = None,
        security: Optional[SecurityConfig] = None,
        verbosity: int = 1,
    ) -> None:
        self.registry = registry if registry is not None else ComponentRegistry()
        self.options = options or ParserOptions()
        self.security_config = security or securityConfig_forProfile(
            SecurityProfile(appsettings.security_profile)
        )
        self.verbosity = verbosity
        self.security = SecurityFilter(self.security_config)
        self.resolver = DirectiveResolver(self.registry, self.security)
        self.preprocessor = TextPreprocessor()

    def plugin_register(self, plugin: PluginDefinition) -> None:
        self.registry.register(plugin)

    def plugins_loadFromDirectory(self, directory: Path) -> List[PluginDefinition]:
        """Register every JSON manifest in a directory"""
        return PluginLoader().directory_load(directory, self.registry)

    def convert(
        self,
        markdown: str,
        filename: Optional[str] = None,
        format: Union[FileFormat, str, None] = None,
        frontmatter: Optional[Dict[str, Any]] = None,
    ) -> RenderResult:
        """
        Convert a document to HTML.

        Args:
            markdown: MD++ body, frontmatter already removed
            filename: Used to detect the format when none is given
            format: Explicit format override (FileFormat or "md"/"mdplus"/"mdsc")
            frontmatter: Parsed frontmatter, returned unchanged

        Returns:
            RenderResult with HTML, AI contexts and errors

        Raises:
            ValueError: explicit format names no known format
        """
        full = self.convert_full(markdown, filename=filename, format=format, frontmatter=frontmatter)
        return RenderResult(
            html=full.html,
            ai_contexts=full.ai_contexts,
            frontmatter=full.frontmatter,
            errors=full.errors,
        )

    def convert_full(
        self,
        markdown: str,
        filename: Optional[str] = None,
        format: Union[FileFormat, str, None] = None,
        frontmatter: Optional[Dict[str, Any]] = None,
    ) -> FullRenderResult:
        """
        Convert a document, returning every side-channel.

        Returns:
            FullRenderResult with scripts, placeholders, styles and the
            resolved format on top of the RenderResult fields
        """
        state_connectToLogger(self)
        context = self.context_create(filename, format)
        LOG(f"Converting {filename or 'document'} as {context.format.value}", level=2)

        body = self.body_compile(markdown, Compiler(context, self.resolver))
        return self.result_assemble(context, self.preamble_render(context) + body, frontmatter)

    def convert_presentation(
        self,
        markdown: str,
        filename: Optional[str] = None,
        format: Union[FileFormat, str, None] = None,
        frontmatter: Optional[Dict[str, Any]] = None,
        embedded: bool = False,
    ) -> PresentationResult:
        """
        Convert a slide deck to reveal.js markup.

        Every slide goes through the same pipeline as convert_full(). The
        slides share one conversion context, so ids stay unique across
        the deck and records and errors are collected from all of them.
        Error banners and plugin assets sit ahead of the slides.

        Args:
            markdown: Slide source, frontmatter already removed
            frontmatter: Parsed frontmatter; ``theme``, ``transition`` and
                ``title`` configure reveal.js
            embedded: Produce a preview fragment instead of a document

        Returns:
            PresentationResult whose ``html`` is the reveal.js markup
        """
        state_connectToLogger(self)
        context = self.context_create(filename, format)
        LOG(f"Converting {filename or 'document'} as a {context.format.value} presentation", level=2)
        compiler = Compiler(context, self.resolver)

        presentation = slides_parse(markdown, revealOptions_fromFrontmatter(frontmatter))
        self.slideAttributes_secure(presentation.slides, context)

        def slide_render(text: str) -> str:
            return self.body_compile(text, compiler)

        sections = sections_render(presentation, slide_render, notes=not embedded)
        wrap = revealPreview_wrap if embedded else revealDocument_wrap
        html = wrap(presentation, sections, self.preamble_render(context))

        result = self.result_assemble(context, html, frontmatter)
        return PresentationResult(
            **{f.name: getattr(result, f.name) for f in fields(result)},
            slide_count=presentation.slide_count,
            theme=presentation.options.theme,
        )

    def context_create(
        self, filename: Optional[str], format: Union[FileFormat, str, None]
    ) -> ConversionContext:
        """Fresh context: resolved format, capabilities AND options toggles"""
        file_format = format_resolve(format, filename)
        capabilities = capabilities_get(file_format).intersect(self.options.capabilities_toggled())
        return ConversionContext(format=file_format, capabilities=capabilities, options=self.options)

    def body_compile(self, markdown: str, compiler: Compiler) -> str:
        """Preprocess and compile one body within the compiler's context"""
        capabilities = compiler.context.capabilities
        text = self.preprocessor.process(
            markdown,
            callouts=capabilities.callouts,
            directives=capabilities.directives or capabilities.callouts,
        )
        return compiler.compile(text)

    def preamble_render(self, context: ConversionContext) -> str:
        """
        Error banners, then plugin assets. Rendered after the body so
        that every error is known and blocked assets are reported.
        """
        assets = self.assets_render(context) if self.options.include_assets else ""
        banners = "" if self.options.suppress_errors else context.errors.alerts_render()
        return banners + assets

    def result_assemble(
        self, context: ConversionContext, html: str, frontmatter: Optional[Dict[str, Any]]
    ) -> FullRenderResult:
        placeholders = context.placeholders
        if context.capabilities.variables and self.options.variables:
            placeholders = placeholders_interpolate(placeholders, self.options.variables)

        LOG(
            f"Converted: {len(context.errors)} error(s), {len(context.ai_contexts)} AI context(s), "
            f"{len(placeholders)} placeholder(s), {len(context.scripts)} script(s), "
            f"{len(context.styles)} style(s)",
            level=2,
        )
        return FullRenderResult(
            html=html,
            ai_contexts=context.ai_contexts,
            frontmatter=frontmatter or None,
            errors=list(context.errors),
            scripts=context.scripts,
            placeholders=placeholders,
            styles=context.styles,
            format=context.format,
        )

    def slideAttributes_secure(self, slides: List[Slide], context: ConversionContext) -> None:
        """Run every slide's attribute bag through the security filter"""
        for slide in slides:
            outcome = self.security.attributes_filter(slide.attributes)
            if outcome.blocked:
                context.errors.add(
                    ErrorKind.SECURITY_BLOCKED,
                    f"Removed unsafe slide attribute(s): {', '.join(outcome.blocked)}",
                )
                slide.attributes = outcome.attributes
            self.slideAttributes_secure(slide.vertical_slides, context)

    async def aconvert(self, markdown: str, **kwargs: Any) -> RenderResult:
        """Awaitable convert(); the conversion itself never suspends"""
        return self.convert(markdown, **kwargs)

    async def aconvert_full(self, markdown: str, **kwargs: Any) -> FullRenderResult:
        """Awaitable convert_full()"""
        return self.convert_full(markdown, **kwargs)

    def assets_render(self, context: ConversionContext) -> str:
        """
        <link>/<script> tags for registered plugin assets.

        Blocked sources are skipped and reported; untrusted ones are
        emitted with a warning.
        """
        css, js = self.registry.assets_collect()
        tags: List[str] = []

        for url in css:
            if self.security.asset_isAllowed(url):
                tags.append(node_serialize(Element("link", {"rel": "stylesheet", "href": url})))
            else:
                context.errors.add(ErrorKind.SECURITY_BLOCKED, f"Plugin stylesheet source is blocked: {url}")

        for url in js:
            if self.security.asset_isAllowed(url):
                tags.append(node_serialize(Element("script", {"src": url})))
            else:
                context.errors.add(ErrorKind.SECURITY_BLOCKED, f"Plugin script source is blocked: {url}")

        return "".join(tag + "\n" for tag in tags)
