"""Tests for channel request payload decoding."""

from __future__ import annotations

import struct

import pytest

from mockshell.domain.models import TerminalAttributes
from mockshell.protocol.payloads import (
    MalformedPayload,
    pack_env_request,
    pack_exec_request,
    pack_pty_request,
    pack_window_change,
    parse_env_request,
    parse_exec_request,
    parse_pty_request,
    parse_window_change,
)


def raw_pty(name: bytes, *ints: int) -> bytes:
    """Hand-built pty-req payload: 3 zero bytes, length byte, name, ints."""
    return b"\x00\x00\x00" + bytes([len(name)]) + name + b"".join(struct.pack(">I", i) for i in ints)


class TestParsePtyRequest:
    def test_xterm_80x24(self) -> None:
        attrs = parse_pty_request(raw_pty(b"xterm", 80, 24))
        assert attrs == TerminalAttributes(term_name="xterm", width=80, height=24)

    def test_trailing_fields_are_ignored(self, xterm_pty_payload: bytes) -> None:
        attrs = parse_pty_request(xterm_pty_payload)
        assert (attrs.term_name, attrs.width, attrs.height) == ("xterm", 80, 24)

    def test_large_dimensions(self) -> None:
        attrs = parse_pty_request(raw_pty(b"vt100", 0xFFFFFFFF, 1))
        assert attrs.width == 0xFFFFFFFF

    def test_truncated_before_width(self) -> None:
        with pytest.raises(MalformedPayload) as excinfo:
            parse_pty_request(raw_pty(b"xterm"))
        assert excinfo.value.request == "pty-req"
        assert "width" in str(excinfo.value)

    def test_truncated_inside_height(self) -> None:
        payload = raw_pty(b"xterm", 80) + b"\x00\x18"
        with pytest.raises(MalformedPayload, match="height"):
            parse_pty_request(payload)

    def test_declared_name_longer_than_payload(self) -> None:
        payload = b"\x00\x00\x00\x20" + b"xterm"
        with pytest.raises(MalformedPayload, match="terminal name"):
            parse_pty_request(payload)

    @pytest.mark.parametrize("payload", [b"", b"\x00", b"\x00\x00\x00"])
    def test_too_short_for_length_prefix(self, payload: bytes) -> None:
        with pytest.raises(MalformedPayload):
            parse_pty_request(payload)

    def test_full_length_prefix_is_honoured(self) -> None:
        name = b"x" * 300
        attrs = parse_pty_request(pack_pty_request(name.decode(), 100, 40))
        assert attrs.term_name == name.decode()
        assert attrs.height == 40


class TestParseOtherRequests:
    def test_env(self) -> None:
        assert parse_env_request(pack_env_request("LANG", "en_US.UTF-8")) == ("LANG", "en_US.UTF-8")

    def test_env_missing_value(self) -> None:
        with pytest.raises(MalformedPayload, match="variable value"):
            parse_env_request(struct.pack(">I", 4) + b"LANG")

    def test_window_change(self) -> None:
        assert parse_window_change(pack_window_change(132, 50, 0, 0)) == (132, 50)

    def test_window_change_truncated(self) -> None:
        with pytest.raises(MalformedPayload) as excinfo:
            parse_window_change(b"\x00\x00\x00\x84")
        assert excinfo.value.request == "window-change"

    def test_exec_skips_length_header(self) -> None:
        assert parse_exec_request(pack_exec_request("echo hi")) == "echo hi"

    def test_exec_empty_command(self) -> None:
        assert parse_exec_request(b"\x00\x00\x00\x00") == ""

    def test_exec_shorter_than_header(self) -> None:
        with pytest.raises(MalformedPayload) as excinfo:
            parse_exec_request(b"\x00\x07")
        assert excinfo.value.request == "exec"

    def test_exec_invalid_utf8_is_replaced(self) -> None:
        assert parse_exec_request(b"\x00\x00\x00\x02\xff!") == "�!"
