"""Tests for the unix socket request/response channel."""

import shutil
import socket
import tempfile
import threading
import time
from pathlib import Path

import pytest
from pydantic import BaseModel

from multicall.exceptions import ConfigurationError, RPCError
from multicall.unixrpc import (
    Handler,
    UnixRPC,
    UnixRPCServer,
    _read_all,
    default_socket_path,
)


class Arg(BaseModel):
    name: str


class Result(BaseModel):
    length: int


class LenHandler:
    def handle(self, arg: Arg) -> Result:
        return Result(length=len(arg.name))


class FailingHandler:
    def handle(self, arg: Arg) -> Result:
        raise RuntimeError("handler broke")


@pytest.fixture
def sock_path():
    # Short directory: unix socket paths are limited to ~100 bytes
    directory = tempfile.mkdtemp(prefix="mc")
    yield Path(directory) / "rpc.sock"
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def server(sock_path):
    srv = UnixRPCServer(sock_path, LenHandler(), Arg)
    thread = threading.Thread(target=srv.loop, daemon=True)
    thread.start()
    yield srv
    srv.close()
    thread.join(timeout=5)


class TestUnixRPC:
    def test_handler_protocol(self):
        assert isinstance(LenHandler(), Handler)

    def test_call(self, server, sock_path):
        with UnixRPC(sock_path, Result, timeout=5) as rpc:
            result = rpc.call(Arg(name="hello"))
        assert result == Result(length=5)

    def test_many_connections(self, server, sock_path):
        for name in ["a", "bb", "ccc"]:
            with UnixRPC(sock_path, Result, timeout=5) as rpc:
                assert rpc.call(Arg(name=name)).length == len(name)

    def test_one_request_per_connection(self, server, sock_path):
        with UnixRPC(sock_path, Result, timeout=5) as rpc:
            rpc.call(Arg(name="x"))
            with pytest.raises(RPCError, match="connection already used"):
                rpc.call(Arg(name="y"))

    def test_bad_request_does_not_stop_server(self, server, sock_path):
        class Wrong(BaseModel):
            other: int

        with UnixRPC(sock_path, Result, timeout=5) as rpc:
            with pytest.raises(RPCError, match="empty response"):
                rpc.call(Wrong(other=1))
        with UnixRPC(sock_path, Result, timeout=5) as rpc:
            assert rpc.call(Arg(name="ok")).length == 2

    def test_client_keeps_write_side_open(self, server, sock_path):
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
            conn.settimeout(5)
            conn.connect(str(sock_path))
            conn.sendall(b'{"name": "hello"}\n')
            assert Result.model_validate_json(_read_all(conn)) == Result(length=5)

    def test_request_split_across_writes(self, server, sock_path):
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
            conn.settimeout(5)
            conn.connect(str(sock_path))
            conn.sendall(b'{"na')
            time.sleep(0.05)
            conn.sendall(b'me": "abc"}')
            assert Result.model_validate_json(_read_all(conn)) == Result(length=3)

    def test_truncated_request_does_not_stop_server(self, server, sock_path):
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as conn:
            conn.settimeout(5)
            conn.connect(str(sock_path))
            conn.sendall(b'{"name": ')
            conn.shutdown(socket.SHUT_WR)
            assert _read_all(conn) == b""
        with UnixRPC(sock_path, Result, timeout=5) as rpc:
            assert rpc.call(Arg(name="ok")).length == 2

    def test_handler_error(self, sock_path):
        with UnixRPCServer(sock_path, FailingHandler(), Arg) as srv:
            thread = threading.Thread(target=srv.serve_once, daemon=True)
            thread.start()
            with UnixRPC(sock_path, Result, timeout=5) as rpc:
                with pytest.raises(RPCError, match="empty response"):
                    rpc.call(Arg(name="x"))
            thread.join(timeout=5)

    def test_invalid_response(self, sock_path):
        class Other(BaseModel):
            missing: str

        with UnixRPCServer(sock_path, LenHandler(), Arg) as srv:
            thread = threading.Thread(target=srv.serve_once, daemon=True)
            thread.start()
            with UnixRPC(sock_path, Other, timeout=5) as rpc:
                with pytest.raises(RPCError, match="read result failed"):
                    rpc.call(Arg(name="x"))
            thread.join(timeout=5)

    def test_stale_socket_file_replaced(self, sock_path):
        sock_path.write_text("stale")
        with UnixRPCServer(sock_path, LenHandler(), Arg) as srv:
            thread = threading.Thread(target=srv.serve_once, daemon=True)
            thread.start()
            with UnixRPC(sock_path, Result, timeout=5) as rpc:
                assert rpc.call(Arg(name="abc")).length == 3
            thread.join(timeout=5)

    def test_close_removes_socket(self, sock_path):
        srv = UnixRPCServer(sock_path, LenHandler(), Arg)
        assert sock_path.exists()
        srv.close()
        assert not sock_path.exists()

    def test_dial_missing_socket(self, sock_path):
        with pytest.raises(RPCError, match="dial unix failed"):
            UnixRPC(sock_path, Result)


class TestDefaultSocketPath:
    def test_from_config(self, sock_path, monkeypatch):
        project = sock_path.parent
        (project / ".git").mkdir()
        (project / ".multicall.toml").write_text(f"[rpc]\nsocket_path = '{sock_path}'\n")
        monkeypatch.chdir(project)
        assert default_socket_path() == str(sock_path)

        with UnixRPCServer(None, LenHandler(), Arg) as srv:
            thread = threading.Thread(target=srv.serve_once, daemon=True)
            thread.start()
            with UnixRPC(None, Result, timeout=5) as rpc:
                assert rpc.call(Arg(name="cfg")).length == 3
            thread.join(timeout=5)

    def test_not_configured(self, tmp_path, monkeypatch):
        (tmp_path / ".git").mkdir()
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigurationError, match="no rpc socket path configured"):
            default_socket_path()
