"""Interactive shell emulation for mockshell.

The line editor turns raw keystrokes into an edited command line, the
command interpreter answers submitted lines, and the session controller
ties both to a channel.
"""

from mockshell.shell.commands import run_command
from mockshell.shell.editor import EditorSignal, EditResult, LineEditor
from mockshell.shell.session import SessionController

__all__ = [
    "EditResult",
    "EditorSignal",
    "LineEditor",
    "SessionController",
    "run_command",
]
