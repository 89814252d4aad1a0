"""Core domain models for the mockshell system.

These models represent the state owned by one interactive session:
the editable command line, the terminal attributes negotiated by a
pty request, and the out-of-band requests that arrive on a channel.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field

UINT32_MAX = 0xFFFFFFFF


# ---------------------------------------------------------------------------
# Terminal Models
# ---------------------------------------------------------------------------


class TerminalAttributes(BaseModel):
    """Terminal settings requested by the client with ``pty-req``."""

    model_config = ConfigDict(frozen=True)

    term_name: str = Field(description="Value of the client's TERM variable, e.g. 'xterm'")
    width: int = Field(ge=0, le=UINT32_MAX, description="Terminal width in columns")
    height: int = Field(ge=0, le=UINT32_MAX, description="Terminal height in rows")

    def resized(self, width: int, height: int) -> TerminalAttributes:
        return self.model_copy(update={"width": width, "height": height})


# ---------------------------------------------------------------------------
# Session State
# ---------------------------------------------------------------------------


@dataclass
class LineState:
    """The in-progress command line and the cursor position within it.

    The buffer is a list of characters so that inserts and deletes at
    the cursor splice in place instead of rebuilding the whole string.
    """

    buffer: list[str] = field(default_factory=list)
    cursor: int = 0

    @property
    def text(self) -> str:
        return "".join(self.buffer)

    @property
    def at_end(self) -> bool:
        return self.cursor == len(self.buffer)

    def tail(self) -> str:
        """Text to the right of the cursor."""
        return "".join(self.buffer[self.cursor:])

    def reset(self) -> None:
        self.buffer.clear()
        self.cursor = 0


@dataclass
class Session:
    """State owned by exactly one interactive channel.

    Nothing in here is shared between channels; every channel builds
    its own Session when it is accepted.
    """

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    line: LineState = field(default_factory=LineState)
    terminal: TerminalAttributes | None = None


# ---------------------------------------------------------------------------
# Channel Requests
# ---------------------------------------------------------------------------


@dataclass
class ChannelRequest:
    """A named out-of-band request received on a channel.

    The payload is the request-specific data in SSH wire format. The
    reply is recorded on the request itself so the transport can read
    it back after dispatch.
    """

    name: str
    payload: bytes = b""
    want_reply: bool = True
    accepted: bool | None = None
    reply_data: bytes | None = None

    @property
    def replied(self) -> bool:
        return self.accepted is not None

    def accept(self, ok: bool, data: bytes | None = None) -> None:
        self.accepted = ok
        self.reply_data = data
