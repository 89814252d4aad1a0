"""asyncssh server that hosts mockshell sessions.

Runs an SSH server with no client authentication. Every ``session``
channel gets its own Session, SSHChannelStream and
ChannelRequestRouter; asyncssh's decoded session callbacks are packed
back into RFC 4254 request payloads and routed like any other channel
request. Forwarded TCP and UNIX channel opens are rejected as unknown
channel types.
"""

from __future__ import annotations

import functools
import logging
import os
from pathlib import Path

import asyncssh

from mockshell.channel.router import (
    ChannelRequestRouter,
    UnknownChannelType,
    check_channel_type,
)
from mockshell.config.settings import Settings, ShellConfig
from mockshell.domain.models import ChannelRequest, Session
from mockshell.protocol.payloads import (
    ENV,
    EXEC,
    PTY_REQ,
    SHELL,
    WINDOW_CHANGE,
    pack_env_request,
    pack_exec_request,
    pack_pty_request,
    pack_string,
    pack_uint32,
    pack_window_change,
)
from mockshell.ssh.channel import SSHChannelStream

logger = logging.getLogger(__name__)

DIRECT_TCPIP = "direct-tcpip"
DIRECT_STREAMLOCAL = "direct-streamlocal@openssh.com"
SUBSYSTEM = "subsystem"
SIGNAL = "signal"
BREAK = "break"

DEFAULT_KEY_ALGORITHM = "ssh-rsa"


class HostKeyError(Exception):
    """Raised when the SSH host key cannot be loaded."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


# ---------------------------------------------------------------------------
# Per-channel session
# ---------------------------------------------------------------------------


class MockShellSession(asyncssh.SSHServerSession):
    """asyncssh session callbacks for one mockshell channel."""

    def __init__(self, shell_config: ShellConfig | None = None) -> None:
        self._shell_config = shell_config or ShellConfig()
        self._chan: asyncssh.SSHServerChannel | None = None
        self._stream: SSHChannelStream | None = None
        self._router: ChannelRequestRouter | None = None

    @property
    def router(self) -> ChannelRequestRouter | None:
        return self._router

    def connection_made(self, chan: asyncssh.SSHServerChannel) -> None:
        session = Session()
        self._chan = chan
        self._stream = SSHChannelStream(chan, session.session_id)
        self._router = ChannelRequestRouter(
            session,
            self._stream,
            banner=self._shell_config.banner,
            prompt=self._shell_config.prompt,
        )
        logger.debug("Session %s: channel opened", session.session_id)

    def connection_lost(self, exc: Exception | None) -> None:
        if self._stream is not None:
            self._stream.connection_lost(exc)
        if exc is not None:
            logger.warning("Channel closed with error: %s", exc)

    # -------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------

    def _route(self, name: str, payload: bytes = b"") -> bool:
        assert self._router is not None
        return self._router.route(ChannelRequest(name, payload))

    def _forward_environment(self) -> None:
        assert self._chan is not None
        for name, value in self._chan.get_environment().items():
            self._route(ENV, pack_env_request(name, value))

    def pty_requested(self, term_type: str | None, term_size: tuple[int, int, int, int],
                      term_modes: object) -> bool:
        width, height, pixel_width, pixel_height = term_size
        return self._route(
            PTY_REQ,
            pack_pty_request(term_type or "", width, height, pixel_width, pixel_height),
        )

    def shell_requested(self) -> bool:
        self._forward_environment()
        return self._route(SHELL)

    def exec_requested(self, command: str) -> bool:
        self._forward_environment()
        return self._route(EXEC, pack_exec_request(command))

    def subsystem_requested(self, subsystem: str) -> bool:
        return self._route(SUBSYSTEM, pack_string(subsystem))

    def terminal_size_changed(self, width: int, height: int,
                              pixwidth: int, pixheight: int) -> None:
        self._route(WINDOW_CHANGE, pack_window_change(width, height, pixwidth, pixheight))

    def signal_received(self, signal: str) -> None:
        self._route(SIGNAL, pack_string(signal))

    def break_received(self, msec: int) -> bool:
        return self._route(BREAK, pack_uint32(msec))

    # -------------------------------------------------------------------
    # Data
    # -------------------------------------------------------------------

    def data_received(self, data: bytes, datatype: int | None) -> None:
        assert self._stream is not None
        self._stream.feed_data(data)

    def eof_received(self) -> bool:
        assert self._stream is not None
        self._stream.feed_eof()
        # Keep the channel half-open; the session closes it when done
        return True

    def pause_writing(self) -> None:
        if self._stream is not None:
            self._stream.pause_writing()

    def resume_writing(self) -> None:
        if self._stream is not None:
            self._stream.resume_writing()


# ---------------------------------------------------------------------------
# Connection-level server
# ---------------------------------------------------------------------------


class MockShellServer(asyncssh.SSHServer):
    """Accepts any client without authentication and serves sessions."""

    def __init__(self, shell_config: ShellConfig | None = None) -> None:
        self._shell_config = shell_config or ShellConfig()
        self._peer: str = "unknown"

    def connection_made(self, conn: asyncssh.SSHServerConnection) -> None:
        peer = conn.get_extra_info("peername")
        if peer:
            self._peer = f"{peer[0]}:{peer[1]}"
        logger.info("Connection from %s", self._peer)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            logger.warning("Connection from %s lost: %s", self._peer, exc)
        else:
            logger.info("Connection from %s closed", self._peer)

    def begin_auth(self, username: str) -> bool:
        logger.info("Accepting user %r from %s without authentication", username, self._peer)
        return False

    def session_requested(self) -> MockShellSession:
        return MockShellSession(self._shell_config)

    def connection_requested(self, dest_host: str, dest_port: int,
                             orig_host: str, orig_port: int) -> bool:
        return self._open_channel(DIRECT_TCPIP)

    def unix_connection_requested(self, dest_path: str) -> bool:
        return self._open_channel(DIRECT_STREAMLOCAL)

    def _open_channel(self, channel_type: str) -> bool:
        try:
            check_channel_type(channel_type)
        except UnknownChannelType as e:
            logger.warning("Rejecting channel from %s: %s", self._peer, e)
            raise asyncssh.ChannelOpenError(
                asyncssh.OPEN_UNKNOWN_CHANNEL_TYPE, "unknown channel type"
            ) from e
        return True


# ---------------------------------------------------------------------------
# Host keys
# ---------------------------------------------------------------------------


def load_host_key(path: str | Path) -> asyncssh.SSHKey:
    """Read the server's private host key."""
    try:
        key = asyncssh.read_private_key(str(path))
    except (OSError, asyncssh.KeyImportError) as e:
        raise HostKeyError(f"Failed to load host key {path}: {e}", path=str(path)) from e
    logger.info("Loaded host key %s (%s)", path, key.get_algorithm())
    return key


def generate_host_key(path: str | Path, algorithm: str = DEFAULT_KEY_ALGORITHM) -> asyncssh.SSHKey:
    """Create a new private host key and write it to ``path``."""
    key = asyncssh.generate_private_key(algorithm)
    key.write_private_key(str(path))
    os.chmod(path, 0o600)
    logger.info("Wrote new %s host key to %s", algorithm, path)
    return key


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


async def start_server(settings: Settings) -> asyncssh.SSHAcceptor:
    """Start listening for SSH connections."""
    cfg = settings.server
    host_key = load_host_key(cfg.host_key_path)

    options = {}
    if cfg.server_version:
        options["server_version"] = cfg.server_version

    acceptor = await asyncssh.create_server(
        functools.partial(MockShellServer, settings.shell),
        cfg.host,
        cfg.port,
        server_host_keys=[host_key],
        line_editor=False,
        encoding=None,
        **options,
    )
    logger.info("mockshell listening on %s:%d", cfg.host, cfg.port)
    return acceptor


async def serve_forever(settings: Settings) -> None:
    """Run the SSH server until the listener is closed or cancelled."""
    acceptor = await start_server(settings)
    try:
        await acceptor.wait_closed()
    finally:
        acceptor.close()
        logger.info("mockshell stopped")
