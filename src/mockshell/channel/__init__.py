"""Channel abstraction and request routing for mockshell.

Public API:
    Channel -- Abstract base class for a session byte stream
    ChannelRequestRouter -- Dispatches out-of-band channel requests
"""

from mockshell.channel.base import (
    Channel,
    ChannelError,
    StreamClosed,
    StreamReadFailure,
)

__all__ = [
    "Channel",
    "ChannelError",
    "ChannelRequestRouter",
    "StreamClosed",
    "StreamReadFailure",
    "UnknownChannelType",
    "UnknownRequestName",
    "check_channel_type",
]

_ROUTER_NAMES = {
    "ChannelRequestRouter",
    "UnknownChannelType",
    "UnknownRequestName",
    "check_channel_type",
}


def __getattr__(name: str) -> object:
    """Lazy import for the router, which depends on the shell package."""
    if name in _ROUTER_NAMES:
        from mockshell.channel import router
        return getattr(router, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
