"""Channel implementation backed by an asyncssh server channel.

asyncssh delivers channel input through session callbacks
(``data_received``, ``eof_received``, ``connection_lost``). This
adapter buffers that input in an asyncio.StreamReader so the session
controller can ``await read()``, and holds writes back while the
transport has paused writing.
"""

from __future__ import annotations

import asyncio
import logging

import asyncssh

from mockshell.channel.base import Channel, StreamClosed, StreamReadFailure

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096


class SSHChannelStream(Channel):
    """Adapts an asyncssh SSHServerChannel to the Channel interface.

    The owning SSHServerSession forwards its callbacks to
    ``feed_data``/``feed_eof``/``connection_lost`` and
    ``pause_writing``/``resume_writing``.
    """

    def __init__(self, chan: asyncssh.SSHServerChannel, session_id: str = "") -> None:
        self._chan = chan
        self._session_id = session_id
        self._reader = asyncio.StreamReader()
        self._can_write = asyncio.Event()
        self._can_write.set()
        self._eof = False
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------
    # Transport side
    # -------------------------------------------------------------------

    def feed_data(self, data: bytes) -> None:
        if self._eof:
            logger.debug("Session %s: dropping %d bytes after EOF", self._session_id, len(data))
            return
        self._reader.feed_data(data)

    def feed_eof(self) -> None:
        if not self._eof:
            self._eof = True
            self._reader.feed_eof()

    def connection_lost(self, exc: Exception | None) -> None:
        self._closed = True
        if exc is not None and not self._eof:
            self._eof = True
            self._reader.set_exception(exc)
        else:
            self.feed_eof()
        # Release any writer blocked on backpressure
        self._can_write.set()

    def pause_writing(self) -> None:
        self._can_write.clear()

    def resume_writing(self) -> None:
        self._can_write.set()

    # -------------------------------------------------------------------
    # Session side
    # -------------------------------------------------------------------

    async def read(self) -> bytes:
        try:
            data = await self._reader.read(READ_CHUNK_SIZE)
        except (OSError, asyncssh.Error) as e:
            raise StreamReadFailure(str(e) or type(e).__name__, self._session_id) from e
        if not data:
            raise StreamClosed("end of input", self._session_id)
        return data

    async def write(self, data: bytes) -> None:
        await self._can_write.wait()
        if self._closed:
            logger.debug("Session %s: dropping write to closed channel", self._session_id)
            return
        self._chan.write(data)

    def send_exit_status(self, status: int) -> None:
        # asyncssh sends exit-status and then closes the channel
        if self._closed:
            return
        self._closed = True
        self._chan.exit(status)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._chan.close()
