"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use MDPP_ prefix (e.g., MDPP_DEBUG_MODE=true).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use MDPP_ prefix.

    Examples:
        MDPP_KROKI_SERVER_URL=https://kroki.internal.example.org
        MDPP_SECURITY_PROFILE=strict
        MDPP_DEBUG_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="MDPP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Preprocessor configuration
    placeholder_prefix: str = Field(
        default="\x00CODE_BLOCK_",
        description="Prefix for protected code fence placeholders (uses null byte to avoid collisions)",
    )

    placeholder_suffix: str = Field(
        default="\x00",
        description="Suffix for protected code fence placeholders (uses null byte to avoid collisions)",
    )

    callout_marker: str = Field(
        default="__callout__",
        description="Internal marker on callout openers, removed once callouts are closed",
    )

    callout_framework: str = Field(
        default="admonitions",
        description="Plugin framework that GitHub-style callouts resolve against",
    )

    # Rendering configuration
    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during conversion",
    )

    component_list_limit: int = Field(
        default=10,
        description="Number of available component names listed in unknown-component errors",
    )

    block_preview_length: int = Field(
        default=50,
        description="Prompt preview length for block AI placeholders",
    )

    inline_preview_length: int = Field(
        default=30,
        description="Prompt preview length for inline AI placeholders",
    )

    pygments_style: str = Field(
        default="monokai",
        description="Pygments style used when code highlighting is enabled",
    )

    # Diagram configuration
    kroki_server_url: str = Field(
        default="https://kroki.io",
        description="Kroki server used when building diagram URLs (never fetched in-core)",
    )

    kroki_output_format: str = Field(
        default="svg",
        description="Kroki output format: svg, png, jpeg or pdf",
    )

    # Presentation configuration
    reveal_cdn_url: str = Field(
        default="https://unpkg.com/reveal.js@5.2.1",
        description="Base URL of the reveal.js distribution linked from presentations",
    )

    reveal_theme: str = Field(
        default="black",
        description="Default reveal.js theme when the frontmatter names none",
    )

    reveal_transition: str = Field(
        default="slide",
        description="Default reveal.js slide transition",
    )

    slide_separator_threshold: int = Field(
        default=2,
        description="Horizontal --- separators that mark a body as slides without a frontmatter switch",
    )

    # Security configuration
    security_profile: str = Field(
        default="warn",
        description="Default security profile: strict, warn, expert or custom",
    )

    def placeHolder_make(self, index: int) -> str:
        """
        Generate a placeholder string for a protected code fence at given index.

        Args:
            index: Zero-based index of the protected fence

        Returns:
            Placeholder string (e.g., "\\x00CODE_BLOCK_0\\x00")

        Example:
            >>> settings = AppSettings()
            >>> settings.placeHolder_make(0)
            '\\x00CODE_BLOCK_0\\x00'
        """
        return f"{self.placeholder_prefix}{index}{self.placeholder_suffix}"

    def codeIndex_extract(self, placeholder: str) -> int | None:
        """
        Extract the fence index from a placeholder string.

        Args:
            placeholder: Placeholder string to parse

        Returns:
            Fence index if valid placeholder, None otherwise

        Example:
            >>> settings = AppSettings()
            >>> settings.codeIndex_extract('\\x00CODE_BLOCK_3\\x00')
            3
        """
        if not placeholder.startswith(self.placeholder_prefix):
            return None
        if not placeholder.endswith(self.placeholder_suffix):
            return None

        content = placeholder[len(self.placeholder_prefix) : -len(self.placeholder_suffix)]

        try:
            return int(content)
        except ValueError:
            return None


# Singleton instance - import this in your code
appsettings = AppSettings()
