"""
Security configuration models

A SecurityConfig never switches attribute sanitization off. Its profile
tunes how loudly stripped attributes are logged and which external asset
hosts are trusted or blocked.
"""

from enum import Enum
from dataclasses import dataclass, field, replace
from typing import Dict, List


class SecurityProfile(Enum):
    """
    Security profiles

    STRICT: untrusted content, every external source blocked
    WARN:   default, common CDNs trusted, everything else warned about
    EXPERT: trusted content, all sources trusted, quiet logging
    CUSTOM: user-defined lists only
    """
    STRICT = "strict"
    WARN = "warn"
    EXPERT = "expert"
    CUSTOM = "custom"


@dataclass
class SecurityConfig:
    """
    Security settings for a parser

    Attributes:
        profile: Active profile
        allow_parser_code: Permit plugin parser code (expert only)
        allow_html_code: Permit raw HTML code (expert only)
        warn_on_code: Warn when code-bearing content is present
        log_executions: Record downstream script executions
        trusted_sources: Host patterns considered trusted (``*``, ``*.x``, ``x``)
        blocked_sources: Host patterns always refused, checked first
    """
    profile: SecurityProfile = SecurityProfile.WARN
    allow_parser_code: bool = False
    allow_html_code: bool = False
    warn_on_code: bool = True
    log_executions: bool = False
    trusted_sources: List[str] = field(default_factory=list)
    blocked_sources: List[str] = field(default_factory=list)

    def copy(self) -> "SecurityConfig":
        return replace(
            self,
            trusted_sources=list(self.trusted_sources),
            blocked_sources=list(self.blocked_sources),
        )


SECURITY_PROFILES: Dict[SecurityProfile, SecurityConfig] = {
    SecurityProfile.STRICT: SecurityConfig(
        profile=SecurityProfile.STRICT,
        blocked_sources=["*"],
    ),
    SecurityProfile.WARN: SecurityConfig(
        profile=SecurityProfile.WARN,
        trusted_sources=[
            "cdn.jsdelivr.net",
            "unpkg.com",
            "cdnjs.cloudflare.com",
            "fonts.googleapis.com",
            "fonts.gstatic.com",
        ],
    ),
    SecurityProfile.EXPERT: SecurityConfig(
        profile=SecurityProfile.EXPERT,
        allow_parser_code=True,
        allow_html_code=True,
        warn_on_code=False,
        trusted_sources=["*"],
    ),
    SecurityProfile.CUSTOM: SecurityConfig(
        profile=SecurityProfile.CUSTOM,
    ),
}


def securityConfig_forProfile(profile: SecurityProfile) -> SecurityConfig:
    """Fresh copy of a profile's default configuration"""
    return SECURITY_PROFILES[profile].copy()
