"""
Security filter and security configuration helpers

SecurityFilter strips dangerous attributes from directive attribute bags.
Stripping is unconditional; the SecurityConfig profile only decides how
loudly drops are logged and which external asset hosts are trusted.

Security YAML (security.yaml):

    profile: warn
    settings:
      allowParserCode: false
      allowHTMLCode: false
      warnOnCode: true
    trustedSources:
      - "*.example.org"
    blockedSources:
      - evil.example.com
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional
from urllib.parse import urlparse

import yaml

from ..config import appsettings
from ..models.security import (
    SECURITY_PROFILES,
    SecurityConfig,
    SecurityProfile,
    securityConfig_forProfile,
)
from .log import LOG, WARN


EVENT_HANDLER_ATTRIBUTES: FrozenSet[str] = frozenset({
    'onabort', 'onafterprint', 'onanimationend', 'onanimationiteration',
    'onanimationstart', 'onbeforeprint', 'onbeforeunload', 'onblur',
    'oncanplay', 'oncanplaythrough', 'onchange', 'onclick', 'oncontextmenu',
    'oncopy', 'oncut', 'ondblclick', 'ondrag', 'ondragend', 'ondragenter',
    'ondragleave', 'ondragover', 'ondragstart', 'ondrop', 'onerror',
    'onfocus', 'onfocusin', 'onfocusout', 'onhashchange', 'oninput',
    'oninvalid', 'onkeydown', 'onkeypress', 'onkeyup', 'onload',
    'onmessage', 'onmousedown', 'onmouseenter', 'onmouseleave',
    'onmousemove', 'onmouseout', 'onmouseover', 'onmouseup', 'onpaste',
    'onpointerdown', 'onpointerup', 'onreset', 'onresize', 'onscroll',
    'onselect', 'onsubmit', 'ontoggle', 'ontouchstart', 'ontouchend',
    'onunload', 'onwheel',
})

URL_ATTRIBUTES: FrozenSet[str] = frozenset({
    'href', 'src', 'action', 'data', 'poster', 'srcset', 'formaction', 'xlink:href',
})

DANGEROUS_URL_PREFIXES = ('javascript:', 'vbscript:', 'data:text/html')

DANGEROUS_STYLE_FRAGMENTS = ('expression(', 'javascript:', 'vbscript:')

# Browsers ignore ASCII whitespace and control characters inside a URL scheme
_URL_IGNORED = re.compile(r"[\x00-\x20]+")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class FilterOutcome:
    """
    Result of filtering one attribute bag

    Attributes:
        attributes: The safe attributes, in original order
        blocked: Keys that were dropped
    """
    attributes: Dict[str, str]
    blocked: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.blocked


def url_isDangerous(value: str) -> bool:
    """True when a URL value uses a script-capable scheme"""
    normalized = _URL_IGNORED.sub("", value).lower()
    return normalized.startswith(DANGEROUS_URL_PREFIXES)


def srcset_isDangerous(value: str) -> bool:
    """True when any srcset candidate uses a script-capable scheme"""
    return any(url_isDangerous(candidate.strip()) for candidate in value.split(','))


def style_isDangerous(value: str) -> bool:
    """True when an inline style can execute script"""
    normalized = _WHITESPACE.sub("", value).lower()
    return any(fragment in normalized for fragment in DANGEROUS_STYLE_FRAGMENTS)


class SecurityFilter:
    """
    Strips event handlers, script URLs and script-capable styles

    Idempotent: filtering an already filtered bag returns an equal bag.

    Example:
        >>> SecurityFilter().attributes_filter({"onclick": "x()", "title": "ok"}).attributes
        {'title': 'ok'}
    """

    def __init__(self, config: Optional[SecurityConfig] = None) -> None:
        self.config = config or securityConfig_forProfile(SecurityProfile(appsettings.security_profile))

    def attribute_isBlocked(self, key: str, value: str) -> bool:
        """Decide whether a single attribute must be dropped"""
        name = key.strip().lower()
        if name in EVENT_HANDLER_ATTRIBUTES:
            return True
        if name == 'srcset':
            return srcset_isDangerous(value)
        if name in URL_ATTRIBUTES:
            return url_isDangerous(value)
        if name == 'style':
            return style_isDangerous(value)
        return False

    def attributes_filter(self, attributes: Dict[str, str]) -> FilterOutcome:
        """
        Filter an attribute bag.

        Args:
            attributes: Raw directive attributes

        Returns:
            FilterOutcome with the safe attributes and the dropped keys
        """
        safe: Dict[str, str] = {}
        blocked: List[str] = []
        for key, value in attributes.items():
            if self.attribute_isBlocked(key, str(value)):
                blocked.append(key)
            else:
                safe[key] = value

        if blocked:
            self.blocked_report(blocked)
        return FilterOutcome(attributes=safe, blocked=blocked)

    def blocked_report(self, blocked: List[str]) -> None:
        message = f"Removed unsafe attribute(s): {', '.join(blocked)}"
        if self.config.profile is SecurityProfile.EXPERT:
            LOG(message, level=2)
        else:
            WARN(message)

    def source_isTrusted(self, url: str) -> bool:
        return source_isTrusted(url, self.config)

    def source_isBlocked(self, url: str) -> bool:
        return source_isBlocked(url, self.config)

    def asset_isAllowed(self, url: str) -> bool:
        """
        Asset-trust decision for an external stylesheet or script URL.

        Script-capable URLs and blocked hosts are refused. A host that is
        neither blocked nor trusted is allowed with a warning.
        """
        if url_isDangerous(url) or self.source_isBlocked(url):
            return False
        if hostname_get(url) is not None and not self.source_isTrusted(url):
            WARN(f"Loading asset from untrusted source: {url}")
        return True


def domain_matches(hostname: str, pattern: str) -> bool:
    """
    Match a hostname against a domain pattern.

    ``*`` matches everything, ``*.example.com`` matches example.com and any
    subdomain, anything else must match exactly.
    """
    hostname = hostname.lower()
    pattern = pattern.strip().lower()
    if pattern == '*':
        return True
    if pattern.startswith('*.'):
        base = pattern[2:]
        return hostname == base or hostname.endswith('.' + base)
    return hostname == pattern


def hostname_get(url: str) -> Optional[str]:
    """Hostname of an absolute (or protocol-relative) URL, None otherwise"""
    url = url.strip()
    if url.startswith('//'):
        url = 'https:' + url
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    return hostname


def source_isBlocked(url: str, config: SecurityConfig) -> bool:
    """
    True when an external URL's host matches a blocked pattern.

    Relative URLs have no host and are never blocked.
    """
    hostname = hostname_get(url)
    if hostname is None:
        return False
    return any(domain_matches(hostname, pattern) for pattern in config.blocked_sources)


def source_isTrusted(url: str, config: SecurityConfig) -> bool:
    """
    True when a URL's host is trusted.

    Blocked patterns are checked first. A host found in neither list is
    trusted only under the expert profile. Invalid and relative URLs are
    never trusted.
    """
    hostname = hostname_get(url)
    if hostname is None:
        return False
    if any(domain_matches(hostname, pattern) for pattern in config.blocked_sources):
        return False
    if any(domain_matches(hostname, pattern) for pattern in config.trusted_sources):
        return True
    return config.profile is SecurityProfile.EXPERT


def _unique(items: List[str]) -> List[str]:
    seen: List[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def securityConfig_fromDict(data: Optional[Dict[str, Any]]) -> SecurityConfig:
    """
    Build a SecurityConfig from a decoded security.yaml mapping.

    User sources are merged ahead of the profile defaults;
    ``allowedDomains``/``blockedDomains`` are accepted as aliases.

    Raises:
        ValueError: unknown profile name
    """
    data = data or {}
    profile = SecurityProfile(data.get('profile') or appsettings.security_profile)
    defaults = SECURITY_PROFILES[profile]
    settings = data.get('settings') or {}

    def setting_get(key: str, default: bool) -> bool:
        value = settings.get(key)
        return value if isinstance(value, bool) else default

    return SecurityConfig(
        profile=profile,
        allow_parser_code=setting_get('allowParserCode', defaults.allow_parser_code),
        allow_html_code=setting_get('allowHTMLCode', defaults.allow_html_code),
        warn_on_code=setting_get('warnOnCode', defaults.warn_on_code),
        log_executions=setting_get('logExecutions', defaults.log_executions),
        trusted_sources=_unique(
            list(data.get('trustedSources') or [])
            + list(data.get('allowedDomains') or [])
            + defaults.trusted_sources
        ),
        blocked_sources=_unique(
            list(data.get('blockedSources') or [])
            + list(data.get('blockedDomains') or [])
            + defaults.blocked_sources
        ),
    )


def securityConfig_load(path: Path) -> SecurityConfig:
    """Read a security.yaml file"""
    LOG(f"Loading security configuration {path}", level=2)
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"{path}: security configuration must be a mapping")
    return securityConfig_fromDict(data)


def securityYaml_generate(profile: SecurityProfile = SecurityProfile.WARN) -> str:
    """Sample security.yaml for a profile"""
    config = SECURITY_PROFILES[profile]
    document = {
        'profile': profile.value,
        'settings': {
            'allowParserCode': config.allow_parser_code,
            'allowHTMLCode': config.allow_html_code,
            'warnOnCode': config.warn_on_code,
        },
        'trustedSources': list(config.trusted_sources),
        'blockedSources': list(config.blocked_sources),
    }
    header = (
        "# MD++ Security Configuration\n"
        f"# Profile: {profile.value}\n"
        "# Options: strict, warn, expert, custom\n\n"
    )
    return header + yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


def securityConfig_validate(config: SecurityConfig) -> List[str]:
    """Warnings about risky or contradictory settings"""
    warnings: List[str] = []
    expert = config.profile is SecurityProfile.EXPERT

    if config.allow_parser_code and not expert:
        warnings.append('Warning: allowParserCode is enabled but profile is not "expert". This may be risky.')
    if config.allow_html_code and not expert:
        warnings.append('Warning: allowHTMLCode is enabled but profile is not "expert". This may be risky.')
    if '*' in config.trusted_sources and not expert:
        warnings.append('Warning: Trusting all sources (*) with non-expert profile. Consider being more specific.')
    if '*' in config.trusted_sources and config.blocked_sources:
        warnings.append('Note: Blocked sources will take precedence over trusted wildcard.')

    return warnings


def security_recommend(use_case: str) -> SecurityProfile:
    """
    Recommended profile for a deployment.

    Raises:
        ValueError: use case is not public, internal or development
    """
    recommendations = {
        'public': SecurityProfile.STRICT,
        'internal': SecurityProfile.WARN,
        'development': SecurityProfile.EXPERT,
    }
    if use_case not in recommendations:
        raise ValueError(f"Unknown use case: {use_case}")
    return recommendations[use_case]
