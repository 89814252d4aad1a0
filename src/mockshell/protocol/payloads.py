"""Binary payload codecs for SSH channel requests.

Reference: RFC 4254, Section 6 (Interactive Sessions).

Each request payload is a sequence of SSH wire types:

- ``uint32``: 4 bytes, big-endian
- ``string``: a ``uint32`` length N followed by N bytes

Layouts handled here::

    pty-req        string TERM, uint32 cols, uint32 rows,
                   uint32 px_width, uint32 px_height, string modes
    env            string name, string value
    window-change  uint32 cols, uint32 rows, uint32 px_width, uint32 px_height
    exec           string command

Every read is bounds-checked against the payload before slicing; a
declared length that runs past the end raises MalformedPayload.
"""

from __future__ import annotations

import struct

from mockshell.domain.models import TerminalAttributes

_UINT32 = struct.Struct(">I")

# ---------------------------------------------------------------------------
# Request names (RFC 4254)
# ---------------------------------------------------------------------------

PTY_REQ = "pty-req"
ENV = "env"
WINDOW_CHANGE = "window-change"
SHELL = "shell"
EXEC = "exec"

# Length prefix skipped when extracting an exec command
EXEC_HEADER_SIZE = 4


class MalformedPayload(ValueError):
    """Raised when a request payload is shorter than its declared fields."""

    def __init__(self, message: str, request: str = "") -> None:
        super().__init__(message)
        self.request = request


class PayloadReader:
    """Sequential, bounds-checked reader over one request payload."""

    def __init__(self, payload: bytes, request: str = "") -> None:
        self._payload = payload
        self._request = request
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._payload) - self._offset

    def _take(self, size: int, what: str) -> bytes:
        if size > self.remaining:
            raise MalformedPayload(
                f"{self._request or 'request'} payload truncated reading {what}: "
                f"need {size} bytes at offset {self._offset}, have {self.remaining}",
                request=self._request,
            )
        start = self._offset
        self._offset += size
        return self._payload[start:self._offset]

    def uint32(self, what: str = "uint32") -> int:
        return _UINT32.unpack(self._take(_UINT32.size, what))[0]

    def string(self, what: str = "string") -> bytes:
        length = self.uint32(f"{what} length")
        return self._take(length, what)


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def parse_pty_request(payload: bytes) -> TerminalAttributes:
    """Decode a ``pty-req`` payload into terminal attributes.

    Only the terminal name, width and height are read; the pixel
    dimensions and the encoded terminal modes that follow are ignored.

    Raises:
        MalformedPayload: If the payload ends before the height field.
    """
    reader = PayloadReader(payload, PTY_REQ)
    term_name = reader.string("terminal name").decode("ascii", errors="replace")
    width = reader.uint32("width")
    height = reader.uint32("height")
    return TerminalAttributes(term_name=term_name, width=width, height=height)


def parse_env_request(payload: bytes) -> tuple[str, str]:
    """Decode an ``env`` payload into a (name, value) pair."""
    reader = PayloadReader(payload, ENV)
    name = reader.string("variable name").decode("utf-8", errors="replace")
    value = reader.string("variable value").decode("utf-8", errors="replace")
    return name, value


def parse_window_change(payload: bytes) -> tuple[int, int]:
    """Decode a ``window-change`` payload into (width, height)."""
    reader = PayloadReader(payload, WINDOW_CHANGE)
    width = reader.uint32("width")
    height = reader.uint32("height")
    return width, height


def parse_exec_request(payload: bytes) -> str:
    """Extract the command from an ``exec`` payload.

    The fixed 4-byte length header is skipped and everything after it
    is taken as the command text.
    """
    if len(payload) < EXEC_HEADER_SIZE:
        raise MalformedPayload(
            f"{EXEC} payload is {len(payload)} bytes, shorter than its "
            f"{EXEC_HEADER_SIZE}-byte header",
            request=EXEC,
        )
    return payload[EXEC_HEADER_SIZE:].decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------


def pack_uint32(value: int) -> bytes:
    return _UINT32.pack(value)


def pack_string(value: str | bytes) -> bytes:
    data = value.encode("utf-8") if isinstance(value, str) else value
    return pack_uint32(len(data)) + data


def pack_pty_request(
    term_name: str,
    width: int,
    height: int,
    pixel_width: int = 0,
    pixel_height: int = 0,
    modes: bytes = b"",
) -> bytes:
    return (
        pack_string(term_name)
        + pack_uint32(width)
        + pack_uint32(height)
        + pack_uint32(pixel_width)
        + pack_uint32(pixel_height)
        + pack_string(modes)
    )


def pack_env_request(name: str, value: str) -> bytes:
    return pack_string(name) + pack_string(value)


def pack_window_change(
    width: int, height: int, pixel_width: int = 0, pixel_height: int = 0
) -> bytes:
    return (
        pack_uint32(width)
        + pack_uint32(height)
        + pack_uint32(pixel_width)
        + pack_uint32(pixel_height)
    )


def pack_exec_request(command: str) -> bytes:
    return pack_string(command)
