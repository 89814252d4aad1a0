"""Domain models for mockshell.

This package contains the per-session state and the request value
objects used throughout the system. Terminal attributes use Pydantic v2
for validation; mutable session state uses plain dataclasses.
"""

from mockshell.domain.models import (
    ChannelRequest,
    LineState,
    Session,
    TerminalAttributes,
)

__all__ = [
    "ChannelRequest",
    "LineState",
    "Session",
    "TerminalAttributes",
]
