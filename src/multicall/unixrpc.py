"""
Request/response calls into a running multicall process over a unix socket.

One connection carries exactly one exchange:

    client: connect -> write request JSON -> shut down write side
    server: read one JSON value -> handle -> write response JSON -> close
    client: read to EOF -> close

Requests and responses are pydantic models, encoded as a single JSON
document each. The server answers as soon as a complete request has been
read, so clients that keep their write side open are served too.

Example::

    class Arg(BaseModel):
        name: str

    class Result(BaseModel):
        length: int

    class LenHandler:
        def handle(self, arg: Arg) -> Result:
            return Result(length=len(arg.name))

    server = UnixRPCServer("/tmp/len.sock", LenHandler(), Arg)
    threading.Thread(target=server.loop, daemon=True).start()

    with UnixRPC("/tmp/len.sock", Result) as rpc:
        rpc.call(Arg(name="hello")).length  # 5
"""

from __future__ import annotations

import json
import logging
import os
import socket
from typing import Generic, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from multicall.exceptions import ConfigurationError, RPCError

logger = logging.getLogger(__name__)

ArgT = TypeVar("ArgT", bound=BaseModel)
ResultT = TypeVar("ResultT", bound=BaseModel)

_BUFSIZE = 65536


@runtime_checkable
class Handler(Protocol):
    """Server-side request handler.

    Methods:
        handle: Turn one decoded request into a response model.
    """

    def handle(self, arg): ...


def default_socket_path() -> str:
    """Socket path from the ``[rpc]`` config section.

    Raises:
        ConfigurationError: If no socket path is configured.
    """
    from multicall.config import Config

    path = Config.load().rpc.socket_path
    if not path:
        raise ConfigurationError(
            "no rpc socket path configured",
            suggestions=["Set socket_path in the [rpc] section of .multicall.toml"],
        )
    return path


def _read_all(conn: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = conn.recv(_BUFSIZE)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def _read_value(conn: socket.socket) -> object:
    """Read until one complete JSON value has arrived and return it decoded.

    The peer does not need to close its write side; trailing bytes after the
    first value are ignored.

    Raises:
        ValueError: If the stream ends before a valid JSON value.
    """
    decoder = json.JSONDecoder()
    buf = b""
    while True:
        chunk = conn.recv(_BUFSIZE)
        buf += chunk
        try:
            value, _ = decoder.raw_decode(buf.decode("utf-8").lstrip())
            return value
        except ValueError:
            if not chunk:
                raise


class UnixRPCServer(Generic[ArgT, ResultT]):
    """Serve one request per connection on a unix socket.

    A stale socket file at ``sock_path`` is removed before binding.

    Raises:
        RPCError: If the socket cannot be bound.
    """

    def __init__(
        self,
        sock_path: str | os.PathLike | None,
        handler: Handler,
        arg_type: type[ArgT],
    ):
        self.sock_path = os.fspath(sock_path) if sock_path else default_socket_path()
        self.handler = handler
        self.arg_type = arg_type
        self._closed = False

        try:
            os.remove(self.sock_path)
        except FileNotFoundError:
            pass

        self._sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            self._sock.bind(self.sock_path)
            self._sock.listen()
        except OSError as e:
            self._sock.close()
            raise RPCError("listen failed", context={"sock_addr": self.sock_path, "error": e}) from e

    def loop(self) -> None:
        """Accept and serve connections until :meth:`close` is called."""
        while not self._closed:
            try:
                conn, _ = self._sock.accept()
            except OSError as e:
                if self._closed:
                    return
                logger.warning("accept failed: %s", e)
                continue
            with conn:
                self.handle_conn(conn)

    def serve_once(self) -> None:
        """Accept and serve a single connection."""
        conn, _ = self._sock.accept()
        with conn:
            self.handle_conn(conn)

    def handle_conn(self, conn: socket.socket) -> None:
        """Run one exchange on an accepted connection.

        Decode and encode failures are logged; the connection is dropped and
        the server keeps serving.
        """
        try:
            arg = self.arg_type.model_validate(_read_value(conn))
        except (OSError, ValueError) as e:
            logger.warning("read arg failed (%s): %s", self.arg_type.__name__, e)
            return

        try:
            result = self.handler.handle(arg)
        except Exception:
            logger.exception("handler failed for %s", self.arg_type.__name__)
            return

        try:
            conn.sendall(result.model_dump_json().encode())
        except OSError as e:
            logger.warning("write result failed: %s", e)

    def close(self) -> None:
        """Stop serving and remove the socket file."""
        self._closed = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()
        try:
            os.remove(self.sock_path)
        except FileNotFoundError:
            pass

    def __enter__(self) -> UnixRPCServer[ArgT, ResultT]:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class UnixRPC(Generic[ArgT, ResultT]):
    """Client side of one request/response exchange.

    Raises:
        RPCError: If the socket cannot be reached.
    """

    def __init__(
        self,
        sock_path: str | os.PathLike | None,
        result_type: type[ResultT],
        timeout: float | None = None,
    ):
        self.sock_path = os.fspath(sock_path) if sock_path else default_socket_path()
        self.result_type = result_type
        self._used = False

        self._conn = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._conn.settimeout(timeout)
        try:
            self._conn.connect(self.sock_path)
        except OSError as e:
            self._conn.close()
            raise RPCError("dial unix failed", context={"sock_addr": self.sock_path, "error": e}) from e

    def call(self, arg: ArgT) -> ResultT:
        """Send ``arg`` and wait for the decoded response.

        Raises:
            RPCError: On a reused connection, I/O failure, empty or invalid
                response.
        """
        if self._used:
            raise RPCError("connection already used", context={"sock_addr": self.sock_path})
        self._used = True

        try:
            self._conn.sendall(arg.model_dump_json().encode())
            self._conn.shutdown(socket.SHUT_WR)
            data = _read_all(self._conn)
        except OSError as e:
            raise RPCError("rpc exchange failed", context={"arg_t": type(arg).__name__, "error": e}) from e

        if not data:
            raise RPCError(
                "empty response",
                context={"arg_t": type(arg).__name__},
                suggestions=["Check the server log for handler errors"],
            )
        try:
            return self.result_type.model_validate_json(data)
        except ValidationError as e:
            raise RPCError(
                "read result failed", context={"result_t": self.result_type.__name__, "error": e}
            ) from e

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> UnixRPC[ArgT, ResultT]:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
