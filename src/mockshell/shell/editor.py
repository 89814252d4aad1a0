"""Line editor: the input state machine behind the interactive prompt.

Consumes the characters typed by the remote user one at a time,
maintains the session's line buffer and cursor, and produces the
terminal output that mirrors each edit. Multi-character escape
sequences are tracked with an explicit sub-state so a sequence split
across two reads resolves the same way as one delivered whole.

Key bindings::

    CR / LF        submit the line ("exit" terminates the session)
    DEL / BS       erase the character left of the cursor
    Ctrl+C         discard the line
    Ctrl+D         log out
    Ctrl+L         clear the screen
    ESC [ C / D    move the cursor right / left
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from mockshell.domain.models import LineState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Input control characters
# ---------------------------------------------------------------------------

CR = "\r"
LF = "\n"
BACKSPACE = "\x08"
DELETE = "\x7f"
CTRL_C = "\x03"
CTRL_D = "\x04"
CTRL_L = "\x0c"
ESC = "\x1b"

CSI_BRACKET = "["
CURSOR_RIGHT_ID = "C"
CURSOR_LEFT_ID = "D"

# ---------------------------------------------------------------------------
# Output sequences
# ---------------------------------------------------------------------------

NEWLINE = "\r\n"
DEFAULT_PROMPT = "$ "
EXIT_COMMAND = "exit"
GOODBYE = "Goodbye!\r\n"
LOGOUT = "\r\nlogout\r\n"
INTERRUPT_ECHO = "^C\r\n"
CURSOR_RIGHT = "\x1b[C"
CURSOR_LEFT = "\x1b[D"
CLEAR_SCREEN = "\x1b[H\x1b[2J"


class EditorSignal(str, enum.Enum):
    """What the session should do after a unit has been consumed."""

    CONTINUE = "continue"
    SUBMIT = "submit"
    TERMINATE = "terminate"


class EscapeState(enum.Enum):
    """Progress through an ``ESC [ <id>`` sequence."""

    NORMAL = enum.auto()
    AWAIT_BRACKET = enum.auto()
    AWAIT_IDENTIFIER = enum.auto()


@dataclass(frozen=True)
class EditResult:
    """Outcome of feeding one unit to the editor.

    ``output`` is the text to write to the terminal; ``line`` carries the
    submitted text when ``signal`` is SUBMIT.
    """

    signal: EditorSignal = EditorSignal.CONTINUE
    output: str = ""
    line: str | None = None


class LineEditor:
    """Editable command line bound to one session's LineState.

    Usage::

        editor = LineEditor(session.line)
        for unit in text:
            result = editor.feed(unit)
            await channel.write(result.output.encode())
            if result.signal is EditorSignal.SUBMIT:
                ...
    """

    def __init__(self, state: LineState, prompt: str = DEFAULT_PROMPT) -> None:
        self._state = state
        self._prompt = prompt
        self._escape = EscapeState.NORMAL

    @property
    def state(self) -> LineState:
        return self._state

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def escape_state(self) -> EscapeState:
        return self._escape

    def feed(self, unit: str) -> EditResult:
        """Consume a single character and apply its edit."""
        if self._escape is not EscapeState.NORMAL:
            return self._feed_escape(unit)

        if unit in (CR, LF):
            return self._submit()
        if unit in (DELETE, BACKSPACE):
            return self._erase_backward()
        if unit == CTRL_C:
            self._state.reset()
            return EditResult(output=INTERRUPT_ECHO + self._prompt)
        if unit == CTRL_D:
            return EditResult(EditorSignal.TERMINATE, LOGOUT)
        if unit == CTRL_L:
            return EditResult(output=CLEAR_SCREEN + self._prompt)
        if unit == ESC:
            self._escape = EscapeState.AWAIT_BRACKET
            return EditResult()
        if unit < " ":
            logger.debug("Ignoring control character 0x%02x", ord(unit))
            return EditResult()
        return self._insert(unit)

    # -------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------

    def _submit(self) -> EditResult:
        line = self._state.text
        if line.strip() == EXIT_COMMAND:
            return EditResult(EditorSignal.TERMINATE, NEWLINE + GOODBYE)
        self._state.reset()
        return EditResult(EditorSignal.SUBMIT, NEWLINE, line)

    def _erase_backward(self) -> EditResult:
        state = self._state
        if state.cursor == 0 or not state.buffer:
            return EditResult()
        del state.buffer[state.cursor - 1]
        state.cursor -= 1
        right = state.tail()
        # Step back over the erased column, redraw the tail, blank the
        # stale last column, then return to the logical cursor.
        output = "\b \b" + right + " " + "\b" * (len(right) + 1)
        return EditResult(output=output)

    def _insert(self, unit: str) -> EditResult:
        state = self._state
        if state.at_end:
            state.buffer.append(unit)
            state.cursor += 1
            return EditResult(output=unit)
        state.buffer.insert(state.cursor, unit)
        state.cursor += 1
        right = state.tail()
        return EditResult(output=unit + right + "\b" * len(right))

    # -------------------------------------------------------------------
    # Escape sequences
    # -------------------------------------------------------------------

    def _feed_escape(self, unit: str) -> EditResult:
        if self._escape is EscapeState.AWAIT_BRACKET:
            if unit == CSI_BRACKET:
                self._escape = EscapeState.AWAIT_IDENTIFIER
            else:
                self._escape = EscapeState.NORMAL
            return EditResult()

        self._escape = EscapeState.NORMAL
        state = self._state
        if unit == CURSOR_RIGHT_ID:
            if state.cursor < len(state.buffer):
                state.cursor += 1
                return EditResult(output=CURSOR_RIGHT)
        elif unit == CURSOR_LEFT_ID:
            if state.cursor > 0:
                state.cursor -= 1
                return EditResult(output=CURSOR_LEFT)
        return EditResult()
