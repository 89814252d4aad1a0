"""Channel request router.

Receives the named out-of-band requests sent on a session channel and
dispatches each one by name:

    pty-req        parse terminal attributes, store on the session, ack
    env            ack (the environment is not modelled)
    window-change  ack, update stored dimensions
    shell          ack, start the interactive session task
    exec           ack, start the one-shot session task
    anything else  close the channel without a reply

A malformed payload is fatal to its channel only: the channel is
closed and nothing propagates to sibling channels or the connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from mockshell.channel.base import Channel
from mockshell.domain.models import ChannelRequest, Session
from mockshell.protocol.payloads import (
    ENV,
    EXEC,
    PTY_REQ,
    SHELL,
    WINDOW_CHANGE,
    MalformedPayload,
    parse_env_request,
    parse_exec_request,
    parse_pty_request,
    parse_window_change,
)
from mockshell.shell.editor import DEFAULT_PROMPT
from mockshell.shell.session import DEFAULT_BANNER, SessionController

logger = logging.getLogger(__name__)

SESSION_CHANNEL_TYPE = "session"


class UnknownChannelType(Exception):
    """Raised when a channel of a type other than ``session`` is opened."""

    def __init__(self, channel_type: str) -> None:
        super().__init__(f"unknown channel type: {channel_type}")
        self.channel_type = channel_type


class UnknownRequestName(Exception):
    """Raised when a channel request has no handler."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown channel request: {name}")
        self.name = name


def check_channel_type(channel_type: str) -> None:
    """Accept only interactive session channels.

    Raises:
        UnknownChannelType: For any other channel type.
    """
    if channel_type != SESSION_CHANNEL_TYPE:
        raise UnknownChannelType(channel_type)


class ChannelRequestRouter:
    """Dispatches the requests of one channel to its session.

    The router owns the channel's Session and, once ``shell`` or
    ``exec`` is accepted, the task running the session controller.
    """

    def __init__(
        self,
        session: Session,
        channel: Channel,
        banner: str = DEFAULT_BANNER,
        prompt: str = DEFAULT_PROMPT,
    ) -> None:
        self._session = session
        self._channel = channel
        self._controller = SessionController(session, channel, banner=banner, prompt=prompt)
        self._task: asyncio.Task[None] | None = None
        self._handlers: dict[str, Callable[[ChannelRequest], None]] = {
            PTY_REQ: self._handle_pty_request,
            ENV: self._handle_env,
            WINDOW_CHANGE: self._handle_window_change,
            SHELL: self._handle_shell,
            EXEC: self._handle_exec,
        }

    @property
    def session(self) -> Session:
        return self._session

    @property
    def session_task(self) -> asyncio.Task[None] | None:
        return self._task

    def route(self, request: ChannelRequest) -> bool:
        """Dispatch one request and return whether it was acknowledged."""
        sid = self._session.session_id
        logger.debug("Session %s: request %s (%d bytes)", sid, request.name, len(request.payload))

        try:
            handler = self._lookup(request.name)
        except UnknownRequestName as e:
            logger.warning("Session %s: %s, closing channel", sid, e)
            self._channel.close()
            return False

        try:
            handler(request)
        except MalformedPayload as e:
            logger.warning("Session %s: malformed %s request: %s", sid, e.request, e)
            self._channel.close()
            return False

        return bool(request.accepted)

    async def wait_closed(self) -> None:
        """Wait for the session task, if one was started, to finish."""
        if self._task is not None:
            await self._task

    def _lookup(self, name: str) -> Callable[[ChannelRequest], None]:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownRequestName(name)
        return handler

    # -------------------------------------------------------------------
    # Terminal configuration
    # -------------------------------------------------------------------

    def _handle_pty_request(self, request: ChannelRequest) -> None:
        attrs = parse_pty_request(request.payload)
        self._session.terminal = attrs
        logger.info(
            "Session %s: PTY request TERM=%s; WIDTH=%d; HEIGHT=%d",
            self._session.session_id, attrs.term_name, attrs.width, attrs.height,
        )
        request.accept(True)

    def _handle_env(self, request: ChannelRequest) -> None:
        name, value = parse_env_request(request.payload)
        logger.debug("Session %s: env %s=%r (ignored)", self._session.session_id, name, value)
        request.accept(True)

    def _handle_window_change(self, request: ChannelRequest) -> None:
        width, height = parse_window_change(request.payload)
        if self._session.terminal is not None:
            self._session.terminal = self._session.terminal.resized(width, height)
        logger.debug("Session %s: window changed to %dx%d", self._session.session_id, width, height)
        request.accept(True)

    # -------------------------------------------------------------------
    # Session start
    # -------------------------------------------------------------------

    def _handle_shell(self, request: ChannelRequest) -> None:
        if self._session_started():
            request.accept(False)
            return
        request.accept(True)
        self._start(self._controller.run_interactive())

    def _handle_exec(self, request: ChannelRequest) -> None:
        command = parse_exec_request(request.payload)
        if self._session_started():
            request.accept(False)
            return
        request.accept(True)
        self._start(self._controller.run_once(command))

    def _session_started(self) -> bool:
        if self._task is None:
            return False
        logger.warning(
            "Session %s: session already started, refusing second start request",
            self._session.session_id,
        )
        return True

    def _start(self, coro) -> None:  # type: ignore[no-untyped-def]
        self._task = asyncio.create_task(coro, name=f"session-{self._session.session_id}")
        self._task.add_done_callback(self._on_session_done)

    def _on_session_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            logger.debug("Session %s: task cancelled", self._session.session_id)
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Session %s: session task failed: %s", self._session.session_id, exc,
                exc_info=exc,
            )
            self._channel.close()
