"""Minimal command interpreter for the mock shell.

Maps one submitted command line to the text written back to the
terminal. Only ``echo`` is understood; every other line is reported as
unsupported.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

ECHO_PREFIX = "echo "
UNSUPPORTED_PREFIX = "Unsupported Command: "
LINE_BREAK = "\r\n"


def run_command(line: str) -> str:
    """Return the terminal response for a command line.

    The result always ends with a CR/LF line break.
    """
    logger.debug("Command input: %r", line)
    if line.startswith(ECHO_PREFIX):
        return line[len(ECHO_PREFIX):] + LINE_BREAK
    return UNSUPPORTED_PREFIX + line + LINE_BREAK
