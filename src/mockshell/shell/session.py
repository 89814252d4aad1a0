"""Session controller for one channel.

Drives a session in one of two delivery modes:

- interactive: banner and prompt, then keystrokes are fed through the
  LineEditor and each submitted line is answered by the interpreter.
- one-shot: a single command delivered with the ``exec`` request is
  answered, an exit status is reported and the channel is closed.
"""

from __future__ import annotations

import codecs
import logging

from mockshell.channel.base import Channel, StreamClosed, StreamReadFailure
from mockshell.domain.models import Session
from mockshell.shell.commands import run_command
from mockshell.shell.editor import DEFAULT_PROMPT, EditorSignal, LineEditor

logger = logging.getLogger(__name__)

DEFAULT_BANNER = "Mock shell started. Type 'exit' to close. \r\n"
EXIT_SUCCESS = 0


class SessionController:
    """Owns the lifecycle of one session on one channel."""

    def __init__(
        self,
        session: Session,
        channel: Channel,
        banner: str = DEFAULT_BANNER,
        prompt: str = DEFAULT_PROMPT,
    ) -> None:
        self._session = session
        self._channel = channel
        self._banner = banner
        self._prompt = prompt

    @property
    def session(self) -> Session:
        return self._session

    async def run_interactive(self) -> None:
        """Run the prompt loop until exit, logout or end of input."""
        editor = LineEditor(self._session.line, prompt=self._prompt)
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        sid = self._session.session_id

        logger.info("Session %s: interactive shell started", sid)
        try:
            await self._write(self._banner + self._prompt)
            while True:
                try:
                    data = await self._channel.read()
                except StreamClosed:
                    logger.debug("Session %s: end of input", sid)
                    break
                except StreamReadFailure as e:
                    logger.warning("Session %s: error reading from channel: %s", sid, e)
                    break

                for unit in decoder.decode(data):
                    result = editor.feed(unit)
                    if result.output:
                        await self._write(result.output)
                    if result.signal is EditorSignal.SUBMIT:
                        await self._write(run_command(result.line or ""))
                        await self._write(editor.prompt)
                    elif result.signal is EditorSignal.TERMINATE:
                        logger.info("Session %s: terminated by user", sid)
                        return
        finally:
            self._channel.close()

    async def run_once(self, command: str) -> None:
        """Answer a single out-of-band command and close the channel."""
        logger.info("Session %s: exec %r", self._session.session_id, command)
        try:
            await self._write(run_command(command))
            self._channel.send_exit_status(EXIT_SUCCESS)
        finally:
            self._channel.close()

    async def _write(self, text: str) -> None:
        await self._channel.write(text.encode("utf-8"))
