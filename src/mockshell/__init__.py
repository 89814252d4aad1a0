"""mockshell -- an SSH server that emulates an interactive shell prompt.

This package implements a line-editing terminal session on top of an
SSH channel. Keystrokes typed by the remote user drive a small input
state machine (cursor motion, backspace, Ctrl+C/D/L) and completed
lines are handed to a minimal command interpreter. Terminal
configuration requests (pty, env, window size) are serviced on the
same channel.
"""

__version__ = "0.1.0"
