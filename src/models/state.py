"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
from dataclasses import dataclass, field, fields
from functools import reduce


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the conversion pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the conversion progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile and CLI flags
        - env_check: inputSourceFile, pluginsInputdir, securityInputFile, envOK
        - source_read: sourceBody, frontmatter, fileFormat, isPresentation
        - plugins_load: registry, securityConfig
        - document_convert: conversionResult
        - results_write: outputFiles
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the MD++ source file
        outputdir: Base output directory
        verbosity: Logging verbosity level (1-3)
        inputFile: Source filename (relative to inputdir)
        format: Explicit format override (md, mdplus, mdsc)
        pluginsDir: Directory of plugin manifests (relative to inputdir)
        noBundledPlugins: Skip the bundled admonitions plugin
        securityFile: security.yaml path (relative to inputdir)
        showAIContext: Reveal hidden AI context blocks
        suppressErrors: Omit error banners from the HTML
        includeAssets: Prefix plugin CSS/JS tags
        enableKroki: Render Kroki diagram fences
        highlight: Highlight fenced code with Pygments
        presentation: Write a reveal.js presentation regardless of frontmatter
        embedded: Write the presentation as an embeddable preview fragment
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the source file
        pluginsInputdir: Resolved plugin manifest directory, if any
        securityInputFile: Resolved security.yaml path, if any
        sourceBody: Markdown body with frontmatter removed
        frontmatter: Parsed frontmatter (empty dict when absent)
        fileFormat: Detected or overridden FileFormat
        isPresentation: --presentation given or a frontmatter switch set
        registry: ComponentRegistry populated with plugins
        securityConfig: Parsed SecurityConfig
        conversionResult: FullRenderResult (PresentationResult for slides)
        outputFiles: Written output paths
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    format: Optional[str] = field(default=None)
    pluginsDir: Optional[str] = field(default=None)
    noBundledPlugins: bool = field(default=False)
    securityFile: Optional[str] = field(default=None)
    showAIContext: bool = field(default=False)
    suppressErrors: bool = field(default=False)
    includeAssets: bool = field(default=False)
    enableKroki: bool = field(default=False)
    highlight: bool = field(default=False)
    presentation: bool = field(default=False)
    embedded: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    pluginsInputdir: Optional[Path] = field(default=None)
    securityInputFile: Optional[Path] = field(default=None)
    sourceBody: str = field(default="")
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    fileFormat: Optional[Any] = field(default=None)  # FileFormat at runtime
    isPresentation: bool = field(default=False)
    registry: Optional[Any] = field(default=None)  # ComponentRegistry at runtime
    securityConfig: Optional[Any] = field(default=None)  # SecurityConfig at runtime
    conversionResult: Optional[Any] = field(default=None)  # FullRenderResult at runtime
    outputFiles: List[Path] = field(default_factory=list)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Build the initial state from parsed CLI options.

        Options without a matching ProgramState field (anything the
        chris_plugin wrapper adds) are ignored.

        Args:
            options: argparse Namespace (inputFile, format, pluginsDir, ...)
            inputdir: Directory holding the MD++ document
            outputdir: Directory receiving <stem>.html and <stem>.json

        Returns:
            ProgramState ready for env_check
        """
        known = {f.name for f in fields(cls)}
        cli_values = {k: v for k, v in vars(options).items() if k in known}
        return cls(**{**cli_values, "inputdir": inputdir, "outputdir": outputdir})

    def copy(self: PS) -> PS:
        """Shallow copy; stages extend the copy and leave their input alone"""
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Thread a state through stages, left to right.

    Example:
        final = pipeline(state, env_check, source_read, plugins_load,
                         document_convert, results_write, results_report)
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
