"""Tests for the ChannelRequestRouter dispatch table."""

from __future__ import annotations

import pytest

from mockshell.channel.router import (
    ChannelRequestRouter,
    UnknownChannelType,
    check_channel_type,
)
from mockshell.domain.models import ChannelRequest, Session, TerminalAttributes
from mockshell.protocol.payloads import (
    pack_env_request,
    pack_exec_request,
    pack_window_change,
)


@pytest.fixture
def router(session: Session, channel) -> ChannelRequestRouter:
    return ChannelRequestRouter(session, channel)


class TestChannelType:
    def test_session_is_accepted(self) -> None:
        check_channel_type("session")

    @pytest.mark.parametrize("channel_type", ["direct-tcpip", "x11", "Session"])
    def test_other_types_are_rejected(self, channel_type: str) -> None:
        with pytest.raises(UnknownChannelType) as excinfo:
            check_channel_type(channel_type)
        assert excinfo.value.channel_type == channel_type


class TestConfigurationRequests:
    def test_pty_request_stores_attributes(self, router, channel, xterm_pty_payload) -> None:
        request = ChannelRequest("pty-req", xterm_pty_payload)
        assert router.route(request) is True
        assert request.accepted is True
        assert router.session.terminal == TerminalAttributes(term_name="xterm", width=80, height=24)
        assert not channel.is_closed

    def test_malformed_pty_request_closes_channel(self, router, channel) -> None:
        request = ChannelRequest("pty-req", b"\x00\x00\x00\x05xterm")
        assert router.route(request) is False
        assert not request.replied
        assert router.session.terminal is None
        assert channel.is_closed

    def test_env_is_acknowledged_and_not_stored(self, router, channel) -> None:
        request = ChannelRequest("env", pack_env_request("LANG", "C"))
        assert router.route(request) is True
        assert router.session.terminal is None
        assert not channel.is_closed

    def test_window_change_updates_allocated_terminal(self, router, xterm_pty_payload) -> None:
        router.route(ChannelRequest("pty-req", xterm_pty_payload))
        request = ChannelRequest("window-change", pack_window_change(120, 40))
        assert router.route(request) is True
        assert router.session.terminal == TerminalAttributes(term_name="xterm", width=120, height=40)

    def test_window_change_without_terminal(self, router) -> None:
        assert router.route(ChannelRequest("window-change", pack_window_change(120, 40))) is True
        assert router.session.terminal is None

    @pytest.mark.parametrize("name", ["x11-req", "subsystem", "signal", ""])
    def test_unknown_request_closes_channel(self, router, channel, name: str) -> None:
        request = ChannelRequest(name, b"")
        assert router.route(request) is False
        assert not request.replied
        assert channel.is_closed
        assert router.session_task is None


class TestSessionStart:
    @pytest.mark.asyncio
    async def test_shell_runs_interactive_session(self, session, make_channel) -> None:
        channel = make_channel([b"echo hi\rexit\r"])
        router = ChannelRequestRouter(session, channel)
        assert router.route(ChannelRequest("shell")) is True
        await router.wait_closed()
        assert channel.text.startswith("Mock shell started.")
        assert "hi\r\n$ exit\r\nGoodbye!\r\n" in channel.text
        assert channel.is_closed

    @pytest.mark.asyncio
    async def test_exec_runs_one_shot_command(self, session, make_channel) -> None:
        channel = make_channel()
        router = ChannelRequestRouter(session, channel)
        assert router.route(ChannelRequest("exec", pack_exec_request("echo hi"))) is True
        await router.wait_closed()
        assert channel.text == "hi\r\n"
        assert channel.exit_status == 0
        assert channel.is_closed

    @pytest.mark.asyncio
    async def test_malformed_exec_closes_channel(self, router, channel) -> None:
        assert router.route(ChannelRequest("exec", b"\x00\x00")) is False
        assert router.session_task is None
        assert channel.is_closed

    @pytest.mark.asyncio
    async def test_second_start_is_refused(self, session, make_channel) -> None:
        channel = make_channel([b"exit\r"])
        router = ChannelRequestRouter(session, channel)
        assert router.route(ChannelRequest("shell")) is True
        second = ChannelRequest("exec", pack_exec_request("echo twice"))
        assert router.route(second) is False
        assert second.accepted is False
        await router.wait_closed()
        assert "twice" not in channel.text

    @pytest.mark.asyncio
    async def test_terminal_attributes_survive_into_shell(
        self, session, make_channel, xterm_pty_payload
    ) -> None:
        channel = make_channel([b"\x04"])
        router = ChannelRequestRouter(session, channel)
        router.route(ChannelRequest("pty-req", xterm_pty_payload))
        router.route(ChannelRequest("shell"))
        await router.wait_closed()
        assert session.terminal is not None
        assert session.terminal.term_name == "xterm"

    @pytest.mark.asyncio
    async def test_wait_closed_without_session(self, router) -> None:
        await router.wait_closed()
