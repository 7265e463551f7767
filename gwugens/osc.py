"""Sending and receiving Open Sound Control messages.

Messages carry 32-bit integers, floats and strings. Receiving servers are
shared between every :class:`OscIn` listening on the same port, and each
message is handed to all receivers registered for its path and type tags.
"""

from __future__ import annotations

import logging
import re
import socket
import struct
import threading
from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

_log = logging.getLogger(__name__)

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class OscError(Exception):
    """Raised on malformed messages, bad addresses and misuse of a receiver."""


class Proto(IntEnum):
    """Transport used to reach an OSC address."""

    UDP = 1
    UNIX = 2
    TCP = 4


# -- wire format -------------------------------------------------------------


def _pad(raw: bytes) -> bytes:
    return raw + b"\x00" * (4 - len(raw) % 4)


def _encode_string(text: str) -> bytes:
    return _pad(text.encode("utf-8"))


def _read_string(data: bytes, offset: int) -> tuple[str, int]:
    end = data.find(b"\x00", offset)
    if end < 0:
        raise OscError("unterminated string in message")
    try:
        text = data[offset:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise OscError("string is not valid UTF-8") from exc
    return text, (end // 4 + 1) * 4


def _read_struct(fmt: str, data: bytes, offset: int) -> tuple[Any, int]:
    size = struct.calcsize(fmt)
    if offset + size > len(data):
        raise OscError("message is truncated")
    (value,) = struct.unpack_from(fmt, data, offset)
    return value, offset + size


def encode_message(path: str, args: Iterable[Any] = ()) -> bytes:
    """Encode ``path`` and its arguments as an OSC message.

    Integers go out as ``i``, floats as ``d`` and strings as ``s``.
    """
    tags = [","]
    payload = bytearray()
    for position, arg in enumerate(args):
        if isinstance(arg, int):
            if not _INT32_MIN <= arg <= _INT32_MAX:
                raise OscError(f"integer argument {position} does not fit in 32 bits")
            tags.append("i")
            payload += struct.pack(">i", arg)
        elif isinstance(arg, float):
            tags.append("d")
            payload += struct.pack(">d", arg)
        elif isinstance(arg, str):
            tags.append("s")
            payload += _encode_string(arg)
        else:
            raise OscError(f"invalid type {type(arg).__name__!r} in arg {position}")
    return _encode_string(path) + _encode_string("".join(tags)) + bytes(payload)


def decode_message(data: bytes) -> tuple[str, str, list[Any]]:
    """Decode an OSC message into its path, type tags and arguments.

    Types ``i``, ``f``, ``d`` and ``s`` are understood; ``f`` and ``d``
    both give Python floats.
    """
    data = bytes(data)
    if data.startswith(b"#bundle"):
        raise OscError("bundles are not supported")
    path, offset = _read_string(data, 0)
    if not path.startswith("/"):
        raise OscError(f"invalid path {path!r}")
    if offset >= len(data):
        return path, "", []
    tags, offset = _read_string(data, offset)
    if not tags.startswith(","):
        raise OscError("missing type tag string")
    types = tags[1:]
    args: list[Any] = []
    for tag in types:
        if tag == "i":
            value, offset = _read_struct(">i", data, offset)
        elif tag == "f":
            value, offset = _read_struct(">f", data, offset)
        elif tag == "d":
            value, offset = _read_struct(">d", data, offset)
        elif tag == "s":
            value, offset = _read_string(data, offset)
        else:
            raise OscError(f"unhandled osc arg type {tag!r}")
        args.append(value)
    return path, types, args


_URL = re.compile(r"^osc(?:\.(udp|tcp|unix))?://(.*)$", re.IGNORECASE)


def parse_url(url: str) -> tuple[Proto, str, int | None]:
    """Split an ``osc.udp://host:port/`` style URL into protocol, host and port.

    For ``osc.unix://`` URLs the host is the socket path and the port is None.
    """
    match = _URL.match(url)
    if not match:
        raise OscError(f"not an OSC url: {url!r}")
    proto = Proto[(match.group(1) or "udp").upper()]
    rest = match.group(2)
    if proto is Proto.UNIX:
        if not rest:
            raise OscError(f"missing socket path in {url!r}")
        return proto, rest, None
    if rest.startswith("["):
        close = rest.find("]")
        if close < 0:
            raise OscError(f"unterminated IPv6 address in {url!r}")
        host, rest = rest[1:close], rest[close + 1:]
    else:
        host, _, rest = rest.partition(":")
        rest = ":" + rest if rest or _ else rest
    if not rest.startswith(":"):
        raise OscError(f"missing port in {url!r}")
    port_text = rest[1:].split("/", 1)[0]
    if not host or not port_text.isdigit():
        raise OscError(f"invalid host or port in {url!r}")
    return proto, host, _check_port(int(port_text))


def _check_port(port: Any) -> int:
    try:
        value = int(port)
    except (TypeError, ValueError) as exc:
        raise OscError(f"invalid port {port!r}") from exc
    if not 0 <= value <= 65535:
        raise OscError(f"port {value} out of range")
    return value


# -- sending -----------------------------------------------------------------


class OscOut:
    """Collect arguments and send them as messages to one address."""

    def __init__(self, host: str, port: int | str | None = None, proto: Proto = Proto.UDP) -> None:
        try:
            self.proto = Proto(proto)
        except ValueError as exc:
            raise OscError(f"unknown protocol {proto!r}") from exc
        if self.proto is Proto.UNIX:
            if not hasattr(socket, "AF_UNIX"):
                raise OscError("unix sockets are not available")
            self.port: int | None = None
        else:
            self.port = _check_port(port)
        if not host:
            raise OscError("missing host")
        self.host = host
        self._args: list[Any] = []
        self._sockets: dict[int, socket.socket] = {}
        self._stream: socket.socket | None = None
        self._closed = False

    @classmethod
    def from_url(cls, url: str) -> OscOut:
        """Create a sender from an OSC URL."""
        proto, host, port = parse_url(url)
        return cls(host, port, proto)

    def add_int(self, value: int) -> OscOut:
        """Append a 32-bit integer argument."""
        value = int(value)
        if not _INT32_MIN <= value <= _INT32_MAX:
            raise OscError("integer argument does not fit in 32 bits")
        self._args.append(value)
        return self

    def add_float(self, value: float) -> OscOut:
        """Append a floating-point argument."""
        self._args.append(float(value))
        return self

    def add_string(self, value: str) -> OscOut:
        """Append a string argument."""
        self._args.append(str(value))
        return self

    def send(self, path: str) -> bool:
        """Send the collected arguments to ``path`` and clear them.

        Returns False when the transport failed.
        """
        if self._closed:
            raise OscError("sender is closed")
        args, self._args = self._args, []
        message = encode_message(path, args)
        try:
            if self.proto is Proto.TCP:
                self._send_stream(message)
            elif self.proto is Proto.UNIX:
                self._datagram_socket(socket.AF_UNIX).sendto(message, self.host)
            else:
                family, addr = self._resolve()
                self._datagram_socket(family).sendto(message, addr)
        except OSError as exc:
            _log.warning("cannot send osc message to %s: %s", path, exc)
            return False
        return True

    def _resolve(self) -> tuple[int, Any]:
        infos = socket.getaddrinfo(self.host, self.port, type=socket.SOCK_DGRAM)
        family, _, _, _, addr = infos[0]
        return family, addr

    def _datagram_socket(self, family: int) -> socket.socket:
        sock = self._sockets.get(family)
        if sock is None:
            sock = socket.socket(family, socket.SOCK_DGRAM)
            self._sockets[family] = sock
        return sock

    def _send_stream(self, message: bytes) -> None:
        if self._stream is None:
            self._stream = socket.create_connection((self.host, self.port), timeout=5.0)
        try:
            self._stream.sendall(struct.pack(">I", len(message)) + message)
        except OSError:
            self._stream.close()
            self._stream = None
            raise

    def close(self) -> None:
        """Release the sockets."""
        self._closed = True
        for sock in self._sockets.values():
            sock.close()
        self._sockets.clear()
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> OscOut:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


# -- receiving ---------------------------------------------------------------


@dataclass(eq=False)
class _Method:
    path: str
    types: str
    clients: list[OscIn] = field(default_factory=list)


class _Server:
    """A UDP listener thread dispatching messages to registered receivers."""

    def __init__(self, port: int) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(("", port))
        except OSError:
            sock.close()
            raise
        sock.settimeout(0.05)
        self._sock = sock
        self.port: int = sock.getsockname()[1]
        self.refs = 0
        self.lock = threading.Lock()
        self.methods: dict[tuple[str, str], _Method] = {}
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name=f"osc-{self.port}", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                data, _ = self._sock.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                break
            try:
                path, types, args = decode_message(data)
            except OscError as exc:
                _log.warning("problem with osc: %s", exc)
                continue
            with self.lock:
                method = self.methods.get((path, types))
                clients = list(method.clients) if method else []
            for client in clients:
                client._deliver(list(args))

    def stop(self) -> None:
        self._stop.set()
        self._thread.join()
        self._sock.close()


_servers: dict[int, _Server] = {}
_servers_lock = threading.Lock()


def _acquire_server(port: int) -> _Server:
    with _servers_lock:
        server = _servers.get(port) if port else None
        if server is None:
            server = _Server(port)
            _servers[server.port] = server
        server.refs += 1
        return server


def _release_server(server: _Server) -> None:
    with _servers_lock:
        server.refs -= 1
        if server.refs:
            return
        _servers.pop(server.port, None)
    server.stop()


class OscIn:
    """Receive messages on a UDP port for the paths and types added to it."""

    def __init__(self, port: int = 0) -> None:
        port = _check_port(port)
        self._cond = threading.Condition()
        self._queue: deque[list[Any]] = deque()
        self._current: deque[Any] = deque()
        self._methods: list[_Method] = []
        try:
            self._server = _acquire_server(port)
        except OSError as exc:
            raise OscError(f"cannot listen on port {port}: {exc}") from exc
        self._closed = False

    @property
    def port(self) -> int:
        """The port the receiver listens on."""
        return self._server.port

    def add(self, path: str, types: str) -> None:
        """Accept messages sent to ``path`` whose type tags equal ``types``."""
        if self._closed:
            raise OscError("receiver is closed")
        server = self._server
        with server.lock:
            method = server.methods.get((path, types))
            if method is None:
                method = _Method(path, types)
                server.methods[(path, types)] = method
            if self not in method.clients:
                method.clients.append(self)
        if method not in self._methods:
            self._methods.append(method)

    def _deliver(self, args: list[Any]) -> None:
        with self._cond:
            self._queue.append(args)
            self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a message is queued; False if ``timeout`` ran out first."""
        with self._cond:
            return bool(self._cond.wait_for(lambda: bool(self._queue), timeout))

    def recv(self) -> bool:
        """Make the oldest queued message current; False when none is queued."""
        with self._cond:
            if not self._queue:
                return False
            self._current = deque(self._queue.popleft())
            return True

    def _take(self, kind: type, name: str) -> Any:
        if not self._current:
            raise OscError("no argument left in the current message")
        value = self._current[0]
        if not isinstance(value, kind):
            raise OscError(f"next argument is not {name}: {value!r}")
        self._current.popleft()
        return value

    def get_int(self) -> int:
        """Take the next argument of the current message as an integer."""
        return self._take(int, "an int")

    def get_float(self) -> float:
        """Take the next argument of the current message as a float."""
        return self._take(float, "a float")

    def get_string(self) -> str:
        """Take the next argument of the current message as a string."""
        return self._take(str, "a string")

    def close(self) -> None:
        """Stop receiving; the shared server stops with its last receiver."""
        if self._closed:
            return
        self._closed = True
        server = self._server
        with server.lock:
            for method in self._methods:
                if self in method.clients:
                    method.clients.remove(self)
                if not method.clients:
                    server.methods.pop((method.path, method.types), None)
        self._methods.clear()
        _release_server(server)

    def __enter__(self) -> OscIn:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()