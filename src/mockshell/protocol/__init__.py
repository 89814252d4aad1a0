"""SSH channel request payload codecs."""

from mockshell.protocol.payloads import (
    MalformedPayload,
    parse_env_request,
    parse_exec_request,
    parse_pty_request,
    parse_window_change,
)

__all__ = [
    "MalformedPayload",
    "parse_env_request",
    "parse_exec_request",
    "parse_pty_request",
    "parse_window_change",
]
