"""Shared test fixtures for the mockshell test suite.

Provides an in-memory Channel that replays scripted input chunks and
records everything written to it, plus ready-made sessions and pty
payloads.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable

import pytest

from mockshell.channel.base import Channel, StreamClosed, StreamReadFailure
from mockshell.domain.models import Session
from mockshell.protocol.payloads import pack_pty_request


class ScriptedChannel(Channel):
    """Channel that returns pre-recorded chunks, then EOF or an error."""

    def __init__(self, chunks: list[bytes] | None = None, error: Exception | None = None) -> None:
        self._chunks = deque(chunks or [])
        self._error = error
        self._closed = False
        self.output = bytearray()
        self.reads = 0
        self.close_calls = 0
        self.exit_status: int | None = None

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def text(self) -> str:
        return self.output.decode("utf-8")

    @property
    def pending_chunks(self) -> int:
        return len(self._chunks)

    async def read(self) -> bytes:
        self.reads += 1
        if self._chunks:
            return self._chunks.popleft()
        if self._error is not None:
            raise StreamReadFailure(str(self._error)) from self._error
        raise StreamClosed("end of input")

    async def write(self, data: bytes) -> None:
        if not self._closed:
            self.output += data

    def send_exit_status(self, status: int) -> None:
        self.exit_status = status

    def close(self) -> None:
        self._closed = True
        self.close_calls += 1


# ---------------------------------------------------------------------------
# Channel / Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_channel() -> Callable[..., ScriptedChannel]:
    """Factory for ScriptedChannel instances."""
    return ScriptedChannel


@pytest.fixture
def channel() -> ScriptedChannel:
    """A channel with no input: the first read reports EOF."""
    return ScriptedChannel()


@pytest.fixture
def session() -> Session:
    return Session(session_id="test0001")


# ---------------------------------------------------------------------------
# Payload Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def xterm_pty_payload() -> bytes:
    """pty-req payload for an 80x24 xterm."""
    return pack_pty_request("xterm", 80, 24, 640, 480, modes=b"\x00")
