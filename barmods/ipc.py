"""Client for the sway IPC protocol over a Unix domain socket."""

from __future__ import annotations

import json
import logging
import os
import socket
import struct
import subprocess
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, List, Optional, Tuple, Union

log = logging.getLogger(__name__)

MAGIC = b"i3-ipc"
_LENGTHS = struct.Struct("=II")
HEADER_SIZE = len(MAGIC) + _LENGTHS.size
CLOSE_MARKER = b"close-sway-ipc"


class IpcError(RuntimeError):
    """Raised when talking to the compositor over IPC fails."""


class IpcType(IntEnum):
    """Message and event types of the sway IPC protocol."""

    COMMAND = 0
    GET_WORKSPACES = 1
    SUBSCRIBE = 2
    GET_OUTPUTS = 3
    GET_TREE = 4
    GET_MARKS = 5
    GET_BAR_CONFIG = 6
    GET_VERSION = 7
    GET_BINDING_MODES = 8
    GET_CONFIG = 9
    SEND_TICK = 10
    SYNC = 11
    GET_BINDING_STATE = 12
    GET_INPUTS = 100
    GET_SEATS = 101
    EVENT_WORKSPACE = 0x80000000
    EVENT_MODE = 0x80000002
    EVENT_WINDOW = 0x80000003
    EVENT_BARCONFIG_UPDATE = 0x80000004
    EVENT_BINDING = 0x80000005
    EVENT_SHUTDOWN = 0x80000006
    EVENT_TICK = 0x80000007
    EVENT_BAR_STATE_UPDATE = 0x80000014
    EVENT_INPUT = 0x80000015


@dataclass(frozen=True)
class IpcResponse:
    """One message received from the compositor."""

    size: int
    type: int
    payload: str

    def json(self) -> Any:
        """Decode the payload as JSON."""
        return json.loads(self.payload)


Handler = Callable[[IpcResponse], None]


def get_socket_path() -> str:
    """Return the IPC socket path from $SWAYSOCK or by asking sway."""
    env = os.environ.get("SWAYSOCK")
    if env is not None:
        return env
    try:
        result = subprocess.run(
            ["sway", "--get-socketpath"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise IpcError("Failed to get socket path") from exc
    out = result.stdout or ""
    if not out:
        raise IpcError("Socket path is empty")
    return out[:-1] if out.endswith("\n") else out


def encode_message(msg_type: int, payload: Union[str, bytes] = "") -> bytes:
    """Build a complete IPC message: magic, length, type and payload."""
    body = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    return MAGIC + _LENGTHS.pack(len(body), int(msg_type)) + body


def decode_header(data: bytes) -> Tuple[int, int]:
    """Return (payload length, message type) from a message header."""
    if len(data) < HEADER_SIZE:
        raise IpcError("Unable to receive IPC header")
    if data[: len(MAGIC)] != MAGIC:
        raise IpcError("Invalid IPC magic")
    return _LENGTHS.unpack(data[len(MAGIC) : HEADER_SIZE])


def _connect(path: str) -> socket.socket:
    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    except OSError as exc:
        raise IpcError("Unable to open Unix socket") from exc
    try:
        sock.connect(path)
    except OSError as exc:
        sock.close()
        raise IpcError("Unable to connect to Sway") from exc
    return sock


class SwayIpc:
    """Two connections to the compositor: one for commands, one for events."""

    def __init__(
        self,
        socket_path: Optional[str] = None,
        *,
        sockets: Optional[Tuple[socket.socket, socket.socket]] = None,
    ) -> None:
        if sockets is None:
            path = socket_path if socket_path is not None else get_socket_path()
            self._cmd = _connect(path)
            self._event = _connect(path)
        else:
            self._cmd, self._event = sockets
        self._lock = threading.Lock()
        self._closed = False
        self.cmd_handlers: List[Handler] = []
        self.event_handlers: List[Handler] = []

    def __enter__(self) -> "SwayIpc":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _read_exact(self, sock: socket.socket, size: int, what: str) -> Optional[bytes]:
        chunks = bytearray()
        while len(chunks) < size:
            try:
                chunk = sock.recv(size - len(chunks))
            except InterruptedError:
                continue
            except OSError as exc:
                if self._closed:
                    return None
                raise IpcError(f"Unable to receive IPC {what}") from exc
            if self._closed:
                return None
            if not chunk:
                raise IpcError(f"Unable to receive IPC {what}")
            chunks.extend(chunk)
        return bytes(chunks)

    def _recv(self, sock: socket.socket) -> IpcResponse:
        if self._closed:
            return IpcResponse(0, 0, "")
        header = self._read_exact(sock, HEADER_SIZE, "header")
        if header is None:
            return IpcResponse(0, 0, "")
        size, msg_type = decode_header(header)
        body = self._read_exact(sock, size, "payload") if size else b""
        if body is None:
            return IpcResponse(0, 0, "")
        return IpcResponse(size, msg_type, body.decode("utf-8", errors="replace"))

    def _send(self, sock: socket.socket, msg_type: int, payload: str) -> IpcResponse:
        message = encode_message(msg_type, payload)
        try:
            sock.sendall(message[:HEADER_SIZE])
        except OSError as exc:
            raise IpcError("Unable to send IPC header") from exc
        try:
            sock.sendall(message[HEADER_SIZE:])
        except OSError as exc:
            raise IpcError("Unable to send IPC payload") from exc
        return self._recv(sock)

    def send_cmd(self, msg_type: int, payload: str = "") -> IpcResponse:
        """Send a request on the command connection and hand the reply to the handlers."""
        with self._lock:
            response = self._send(self._cmd, msg_type, payload)
        for handler in list(self.cmd_handlers):
            handler(response)
        return response

    def subscribe(self, payload: Union[str, List[str]]) -> None:
        """Subscribe the event connection to the given event names."""
        text = payload if isinstance(payload, str) else json.dumps(payload)
        response = self._send(self._event, IpcType.SUBSCRIBE, text)
        try:
            reply = json.loads(response.payload)
        except ValueError:
            reply = None
        if reply != {"success": True}:
            raise IpcError("Unable to subscribe ipc event")

    def handle_event(self) -> IpcResponse:
        """Block for one event and hand it to the event handlers."""
        response = self._recv(self._event)
        for handler in list(self.event_handlers):
            handler(response)
        return response

    def close(self) -> None:
        """Close both connections, telling the peer by a malformed header."""
        if self._closed:
            return
        self._closed = True
        for sock in (self._cmd, self._event):
            try:
                sock.sendall(CLOSE_MARKER)
            except OSError:
                log.debug("peer already gone while closing IPC")
            sock.close()