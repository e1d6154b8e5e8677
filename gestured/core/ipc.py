"""
Reload endpoint.

One request, one reply, over a per-user Unix socket:
    client -> "reload\n"
    daemon -> "ok\n" | "error <reason>\n"
"""

from __future__ import annotations

import errno
import logging
import socket
import socketserver
import threading
from pathlib import Path
from typing import Optional

from gestured.core.errors import DaemonNotRunning, ReloadFailure, ReloadRequestError
from gestured.core.paths import socket_path
from gestured.core.settings import GestureActions

logger = logging.getLogger(__name__)

RELOAD = "reload"
REQUEST_TIMEOUT_S = 5.0


class _ReloadHandler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        line = self.rfile.readline().decode("utf-8", "replace").strip()
        if not line:
            # a liveness check from a starting daemon
            return
        if line != RELOAD:
            logger.warning("unknown request on reload socket: %r", line)
            self.wfile.write(f"error unknown request {line!r}\n".encode())
            return

        try:
            self.server.actions.reload()
        except ReloadFailure as e:
            logger.error("reload failed, keeping previous configuration: %s", e)
            self.wfile.write(f"error {e}\n".encode())
            return
        logger.debug("actions reloaded: %r", self.server.actions)
        self.wfile.write(b"ok\n")


class _Server(socketserver.UnixStreamServer):
    def __init__(self, path: Path, actions: GestureActions) -> None:
        self.actions = actions
        super().__init__(str(path), _ReloadHandler)


class ReloadServer:
    """Serves reload requests on a background thread for the daemon's lifetime."""

    def __init__(self, actions: GestureActions, path: Optional[Path] = None) -> None:
        self.actions = actions
        self.path = path or socket_path()
        self._server: Optional[_Server] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ReloadServer":
        """Raises OSError if another daemon already answers on the socket."""
        if self.path.exists():
            self._remove_stale()
        self._server = _Server(self.path, self.actions)
        self._thread = threading.Thread(target=self._server.serve_forever, name="gestured-reload", daemon=True)
        self._thread.start()
        logger.info("reload endpoint listening on %s", self.path)
        return self

    def _remove_stale(self) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(1.0)
        try:
            sock.connect(str(self.path))
        except (ConnectionRefusedError, FileNotFoundError):
            # left behind by a previous run
            logger.debug("removing stale socket %s", self.path)
            self.path.unlink(missing_ok=True)
            return
        except OSError as e:
            # not a socket at all (e.g. a plain file)
            if e.errno != errno.ENOTSOCK:
                raise
            self.path.unlink(missing_ok=True)
            return
        finally:
            sock.close()
        raise OSError(errno.EADDRINUSE, f"another gestured is already listening on {self.path}")

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread:
            self._thread.join(timeout=1)
        self.path.unlink(missing_ok=True)
        self._server = None

    def __enter__(self) -> "ReloadServer":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()


def request_reload(path: Optional[Path] = None, timeout: float = REQUEST_TIMEOUT_S) -> None:
    """
    Ask a running daemon to re-read its configuration.
    Raises DaemonNotRunning when nobody listens, ReloadRequestError otherwise.
    """
    path = path or socket_path()
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.settimeout(timeout)
    try:
        try:
            sock.connect(str(path))
        except (FileNotFoundError, ConnectionRefusedError) as e:
            raise DaemonNotRunning(f"gestured is not running ({path})") from e
        except OSError as e:
            raise ReloadRequestError(f"cannot reach gestured at {path}: {e}") from e

        try:
            sock.sendall(f"{RELOAD}\n".encode())
            with sock.makefile("rb") as f:
                reply = f.readline().decode("utf-8", "replace").strip()
        except socket.timeout as e:
            raise ReloadRequestError(f"no reply from gestured within {timeout:g}s") from e
        except OSError as e:
            raise ReloadRequestError(f"reload request failed: {e}") from e
    finally:
        sock.close()

    if reply != "ok":
        raise ReloadRequestError(reply or "connection closed without a reply")
