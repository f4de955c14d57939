"""Minimal client for bird's control socket."""

from __future__ import annotations

import re
import socket

_COMPLETION_RE = re.compile(rb"\d{4} ")
_CHUNK_SIZE = 65536


class BirdSocketError(Exception):
    """Raised when bird's control socket cannot be queried."""


def _read_reply(sock: socket.socket) -> bytes:
    """Read until a line opening with a four digit code and a space ends the reply."""
    buffer = bytearray()
    scanned = 0
    while True:
        chunk = sock.recv(_CHUNK_SIZE)
        if not chunk:
            raise BirdSocketError("connection closed before the reply was complete")
        buffer += chunk
        while (end := buffer.find(b"\n", scanned)) >= 0:
            line = bytes(buffer[scanned:end])
            scanned = end + 1
            if _COMPLETION_RE.match(line):
                return bytes(buffer[:scanned])


def query(socket_path: str, command: str) -> bytes:
    """Send ``command`` to the bird control socket and return the raw reply."""
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.connect(socket_path)
            _read_reply(sock)
            sock.sendall(command.encode() + b"\n")
            return _read_reply(sock)
    except OSError as exc:
        raise BirdSocketError(f"querying {socket_path!r} with {command!r} failed: {exc}") from exc