#!/usr/bin/env python3
"""
mdpp - MD++ extended Markdown converter

Converts an MD++ document (.md, .mdplus, .mdsc) to HTML, and writes the
structured side-channels (AI context, AI placeholders, scripts, styles,
errors) next to it as JSON.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Markdown first: an MD++ file is still readable Markdown
    - Components from plugins: :::bootstrap:alert resolves through JSON manifests
    - AI aware: context and generation placeholders travel beside the HTML
    - Never executes: scripts and AI prompts are extracted, not run

Usage:
    mdpp inputdir/ outputdir/ --inputFile notes.mdplus

    The HTML is written to outputdir/<stem>.html and the side-channels to
    outputdir/<stem>.json.

Examples:
    # Basic conversion
    mdpp . output/ --inputFile guide.mdplus

    # With plugin manifests and a security profile
    mdpp . output/ --inputFile guide.mdsc --pluginsDir plugins/ --securityFile security.yaml

    # reveal.js slides (or set presentation: true in the frontmatter)
    mdpp . output/ --inputFile talk.mdplus --presentation

    # Verbose output
    mdpp . output/ --inputFile guide.mdplus -vv
"""

import json
import re
import sys
from pathlib import Path
from typing import Any, Dict, Tuple
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

import yaml
from chris_plugin import chris_plugin

from .lib import Parser, PluginLoader, PluginManifestError, ComponentRegistry, __version__, LOG, state_connectToLogger
from .lib.bundled import plugins_bundled
from .lib.log import WARN
from .lib.security import securityConfig_load, securityConfig_validate
from .lib.slides import presentationSwitch_is
from .models import ParserOptions, ProgramState, SecurityProfile, format_resolve, pipeline
from .models.security import securityConfig_forProfile
from .config import appsettings


DISPLAY_TITLE = r"""
                  _
  _ __ ___   __| |_ __    _     _
 | '_ ` _ \ / _` | '_ \ _| |_ _| |_
 | | | | | | (_| | |_) |_   _|_   _|
 |_| |_| |_|\__,_| .__/  |_|   |_|
                 |_|
  Extended Markdown converter
"""

FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

# Define CLI arguments
parser = ArgumentParser(
    description="mdpp - MD++ extended Markdown to HTML converter",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input MD++ file (relative to inputdir)"
)

parser.add_argument(
    "--format",
    default=None,
    type=str,
    choices=["md", "mdplus", "mdsc"],
    help="File format override. Defaults to detection from the file extension",
)

parser.add_argument(
    "--pluginsDir",
    default=None,
    type=str,
    help="Directory of JSON plugin manifests (relative to inputdir)",
)

parser.add_argument(
    "--noBundledPlugins",
    action="store_true",
    help="Do not register the bundled admonitions plugin used by callouts",
)

parser.add_argument(
    "--securityFile",
    default=None,
    type=str,
    help="security.yaml with profile and trusted/blocked sources (relative to inputdir)",
)

parser.add_argument(
    "--showAIContext", action="store_true", help="Reveal hidden AI context blocks in the HTML"
)

parser.add_argument(
    "--suppressErrors", action="store_true", help="Omit error banners from the HTML"
)

parser.add_argument(
    "--includeAssets", action="store_true", help="Prefix plugin CSS/JS tags to the HTML"
)

parser.add_argument(
    "--enableKroki", action="store_true", help="Render diagram fences as Kroki image URLs"
)

parser.add_argument(
    "--highlight", action="store_true", help="Highlight fenced code with Pygments"
)

parser.add_argument(
    "--presentation",
    action="store_true",
    help="Write a reveal.js presentation (also switched on by presentation: true in frontmatter)",
)

parser.add_argument(
    "--embedded", action="store_true", help="Write presentations as an embeddable preview fragment"
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def frontmatter_split(source: str) -> Tuple[Dict[str, Any], str]:
    """
    Split leading YAML frontmatter from a document.

    Returns:
        (frontmatter, body); an empty dict when there is no frontmatter

    Raises:
        ValueError: frontmatter is not a YAML mapping
        yaml.YAMLError: frontmatter is not valid YAML
    """
    match = FRONTMATTER_PATTERN.match(source)
    if not match:
        return {}, source

    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        raise ValueError("Frontmatter must be a YAML mapping")
    return data, source[match.end():]


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Verifies that the input file, plugin directory and security file
    exist, then creates the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the MD++ input file
            - pluginsInputdir: Resolved plugin manifest directory, if given
            - securityInputFile: Resolved security.yaml, if given
            - envOK: True if environment is valid

    Raises:
        FileNotFoundError: a named input does not exist
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.is_file():
        raise FileNotFoundError(f"Input file not found: {input_file}")
    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    if state.pluginsDir:
        state.pluginsInputdir = state.inputdir / state.pluginsDir
        if not state.pluginsInputdir.is_dir():
            raise FileNotFoundError(f"Plugin directory not found: {state.pluginsInputdir}")
        LOG(f"Plugin directory: {state.pluginsInputdir}", level=2)

    if state.securityFile:
        state.securityInputFile = state.inputdir / state.securityFile
        if not state.securityInputFile.is_file():
            raise FileNotFoundError(f"Security file not found: {state.securityInputFile}")
        LOG(f"Security file: {state.securityInputFile}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def source_read(inputstate: ProgramState) -> ProgramState:
    """
    Read the source file and split off its frontmatter.

    Args:
        inputstate: Program state with inputSourceFile path set

    Returns:
        ProgramState with added fields:
            - sourceBody: Markdown body without frontmatter
            - frontmatter: Parsed frontmatter mapping
            - fileFormat: Format from --format or the file extension
            - isPresentation: --presentation or a frontmatter switch

    Exits:
        1 if the file cannot be read or its frontmatter is invalid
    """

    state = inputstate.copy()

    LOG("Reading source file...", level=1)

    try:
        source = state.inputSourceFile.read_text(encoding="utf-8")
        LOG(f"Read {len(source)} characters from {state.inputSourceFile.name}", level=2)
    except OSError as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        state.frontmatter, state.sourceBody = frontmatter_split(source)
    except (ValueError, yaml.YAMLError) as e:
        print(f"Frontmatter error: {e}", file=sys.stderr)
        sys.exit(1)
    if state.frontmatter:
        LOG(f"Frontmatter keys: {', '.join(str(k) for k in state.frontmatter)}", level=2)

    state.fileFormat = format_resolve(state.format, state.inputFile)
    LOG(f"Format: {state.fileFormat.value}", level=2)

    state.isPresentation = state.presentation or presentationSwitch_is(state.frontmatter)
    if state.isPresentation:
        LOG("Presentation mode: writing reveal.js", level=2)
    return state


def plugins_load(inputstate: ProgramState) -> ProgramState:
    """
    Build the component registry and security configuration.

    Args:
        inputstate: Program state with plugin/security paths resolved

    Returns:
        ProgramState with added fields:
            - registry: ComponentRegistry with bundled and manifest plugins
            - securityConfig: SecurityConfig from security.yaml or the
              configured default profile

    Exits:
        1 if a plugin manifest or the security file is invalid
    """

    state = inputstate.copy()

    LOG("Loading plugins...", level=1)

    registry = ComponentRegistry()
    if not state.noBundledPlugins:
        for plugin in plugins_bundled():
            registry.register(plugin)

    if state.pluginsInputdir:
        try:
            PluginLoader().directory_load(state.pluginsInputdir, registry)
        except (PluginManifestError, OSError) as e:
            print(f"Plugin error: {e}", file=sys.stderr)
            sys.exit(1)

    for name, frameworks in registry.conflicts_list().items():
        LOG(f'Component "{name}" is defined by {", ".join(frameworks)}; first match wins', level=2)
    state.registry = registry

    if state.securityInputFile:
        try:
            state.securityConfig = securityConfig_load(state.securityInputFile)
        except (ValueError, yaml.YAMLError) as e:
            print(f"Security configuration error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        state.securityConfig = securityConfig_forProfile(SecurityProfile(appsettings.security_profile))

    for warning in securityConfig_validate(state.securityConfig):
        WARN(warning)
    LOG(f"Security profile: {state.securityConfig.profile.value}", level=2)
    return state


def document_convert(inputstate: ProgramState) -> ProgramState:
    """
    Convert the document body to HTML and side-channels.

    Args:
        inputstate: Program state with sourceBody, registry and securityConfig

    Returns:
        ProgramState with added field:
            - conversionResult: FullRenderResult, or PresentationResult in
              presentation mode
    """

    state = inputstate.copy()

    LOG("Converting document...", level=1)

    options = ParserOptions(
        show_ai_context=state.showAIContext,
        suppress_errors=state.suppressErrors,
        include_assets=state.includeAssets,
        enable_kroki=state.enableKroki,
        highlight_code=state.highlight,
    )
    mdpp_parser = Parser(
        registry=state.registry,
        options=options,
        security=state.securityConfig,
        verbosity=state.verbosity,
    )
    if state.isPresentation:
        state.conversionResult = mdpp_parser.convert_presentation(
            state.sourceBody,
            filename=state.inputFile,
            format=state.fileFormat,
            frontmatter=state.frontmatter,
            embedded=state.embedded,
        )
    else:
        state.conversionResult = mdpp_parser.convert_full(
            state.sourceBody,
            filename=state.inputFile,
            format=state.fileFormat,
            frontmatter=state.frontmatter,
        )

    for error in state.conversionResult.errors:
        WARN(f"{error.kind.value}: {error.message}" + (f" (line {error.line})" if error.line else ""))
    return state


def results_write(inputstate: ProgramState) -> ProgramState:
    """
    Write <stem>.html and <stem>.json to the output directory.

    Args:
        inputstate: Program state with conversionResult populated

    Returns:
        ProgramState with added field:
            - outputFiles: Paths written
    """

    state = inputstate.copy()
    result = state.conversionResult
    stem = Path(state.inputFile).stem

    html_file = state.outputdir / f"{stem}.html"
    html_file.write_text(result.html, encoding="utf-8")
    LOG(f"Wrote {html_file}", level=2)

    json_file = state.outputdir / f"{stem}.json"
    json_file.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    LOG(f"Wrote {json_file}", level=2)

    state.outputFiles = [html_file, json_file]
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display conversion results to user.

    Args:
        inputstate: Program state with conversionResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if conversionResult is None
    """
    state: ProgramState = inputstate.copy()
    result = state.conversionResult
    if result is None:
        print("Error: Conversion failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Conversion successful!", level=1)
    for output_file in state.outputFiles:
        LOG(f"  Output: {output_file}", level=1)
    LOG(f"  Format: {result.format.value}", level=1)
    if state.isPresentation:
        LOG(f"  Slides: {result.slide_count} ({result.theme} theme)", level=1)
    LOG(f"  AI contexts: {len(result.ai_contexts)}, placeholders: {len(result.placeholders)}", level=1)
    LOG(f"  Scripts: {len(result.scripts)}, styles: {len(result.styles)}", level=1)
    LOG(f"  Errors: {len(result.errors)}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="mdpp - MD++ extended Markdown converter",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - convert an MD++ document to HTML and JSON.

    Orchestrates the conversion pipeline:
        1. env_check: Validate paths and environment
        2. source_read: Read the file, split frontmatter, detect the format
        3. plugins_load: Build the registry and security configuration
        4. document_convert: Run the MD++ parser
        5. results_write: Write <stem>.html and <stem>.json
        6. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the MD++ source file
        outputdir: Directory where the outputs will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_read, plugins_load, document_convert, results_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
