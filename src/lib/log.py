"""
Loguru logging for mdpp.

Two entry points. LOG() is gated by the verbosity of whatever object was
last connected with state_connectToLogger(): the ProgramState during a
CLI run, or the Parser during a library conversion. WARN() is never
gated and is reserved for things a user should see even at -v0, such as
a plugin being replaced or an attribute being stripped.

The connected object lives in a ContextVar, so concurrent conversions
running as separate asyncio tasks each see their own verbosity.

    from mdpp.lib.log import LOG, WARN, state_connectToLogger

    state_connectToLogger(parser)
    LOG("Resolved bootstrap:alert", level=2)
    WARN("Plugin 'bootstrap' re-registered")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

_verbosity_source: ContextVar[Optional[Any]] = ContextVar('verbosity_source', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{name}:{function}</cyan>:{line} ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """Make ``state.verbosity`` govern LOG() calls in the current context"""
    _verbosity_source.set(state)


def verbosity_current() -> int:
    """Verbosity of the connected object, 0 when nothing is connected"""
    return getattr(_verbosity_source.get(), 'verbosity', 0)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Emit a debug record when the connected verbosity is at least ``level``.

    Args:
        message: Text to log
        level: 1 for progress, 2 for per-directive detail, 3 for traces
        **kwargs: Passed through to loguru
    """
    if verbosity_current() >= level:
        logger.opt(depth=1).debug(message, **kwargs)


def WARN(message: str, **kwargs: Any) -> None:
    """Emit a warning record regardless of verbosity"""
    logger.opt(depth=1).warning(message, **kwargs)
