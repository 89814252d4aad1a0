"""Abstract base class for a session channel.

A channel is the bidirectional byte stream that carries one
interactive session. The session engine only talks to this interface,
so the SSH binding can be swapped for an in-memory channel in tests
without changing any other code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Channel(ABC):
    """Abstract interface for one logical session channel.

    Example usage::

        try:
            data = await channel.read()
        except StreamClosed:
            channel.close()
        await channel.write(b"$ ")
    """

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once close() has been called or the peer went away."""
        ...

    @abstractmethod
    async def read(self) -> bytes:
        """Return the next chunk of input, waiting until some arrives.

        Raises:
            StreamClosed: The peer sent EOF or closed the channel cleanly.
            StreamReadFailure: The stream failed for any other reason.
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """Send output to the peer.

        May wait while the transport applies backpressure. Writes to a
        closed channel are dropped.
        """
        ...

    @abstractmethod
    def send_exit_status(self, status: int) -> None:
        """Report a command's exit status (0 = success) to the peer."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        ...


class ChannelError(Exception):
    """Base class for channel stream errors."""

    def __init__(self, message: str, session_id: str = "") -> None:
        super().__init__(message)
        self.session_id = session_id


class StreamClosed(ChannelError):
    """Raised by read() at a clean end of stream."""


class StreamReadFailure(ChannelError):
    """Raised by read() when the stream fails other than by clean EOF."""
