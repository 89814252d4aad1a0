"""SSH transport binding for mockshell, built on asyncssh.

Provides the listening server, host key handling and the adapter that
turns asyncssh session callbacks into channel requests and a byte
stream for the session engine.
"""
