"""End-to-end tests against a real asyncssh listener on a loopback port."""

from __future__ import annotations

from pathlib import Path

import asyncssh
import pytest
import pytest_asyncio

from mockshell.config.settings import ServerConfig, Settings
from mockshell.ssh.server import generate_host_key, start_server


@pytest_asyncio.fixture
async def server_port(tmp_path: Path):
    key_path = tmp_path / "host_key"
    generate_host_key(key_path, algorithm="ssh-ed25519")
    # Port 0 lets the OS pick a free port; it is outside the validated range.
    server = ServerConfig.model_construct(
        host="127.0.0.1", port=0, host_key_path=str(key_path), server_version=None
    )
    acceptor = await start_server(Settings(server=server))
    try:
        yield acceptor.get_port()
    finally:
        acceptor.close()
        await acceptor.wait_closed()


def connect(port: int) -> asyncssh.SSHClientConnection:
    return asyncssh.connect(
        "127.0.0.1",
        port,
        username="tester",
        known_hosts=None,
        client_keys=None,
    )


class TestRoundTrip:
    @pytest.mark.asyncio
    async def test_exec_echo(self, server_port: int) -> None:
        async with connect(server_port) as conn:
            result = await conn.run("echo hello")
        assert result.stdout == "hello\r\n"
        assert result.exit_status == 0

    @pytest.mark.asyncio
    async def test_exec_unsupported(self, server_port: int) -> None:
        async with connect(server_port) as conn:
            result = await conn.run("ls -la")
        assert result.stdout == "Unsupported Command: ls -la\r\n"

    @pytest.mark.asyncio
    async def test_interactive_shell(self, server_port: int) -> None:
        async with connect(server_port) as conn:
            process = await conn.create_process(term_type="xterm", term_size=(80, 24))
            process.stdin.write("echo hi\rexit\r")
            output = await process.stdout.read()
        assert output.startswith("Mock shell started.")
        assert "echo hi\r\nhi\r\n$ " in output
        assert output.endswith("exit\r\nGoodbye!\r\n")
