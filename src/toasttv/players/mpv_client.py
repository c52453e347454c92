"""
mpv JSON IPC client.

Requests are newline-terminated JSON objects ``{"command": [...],
"request_id": N}`` written to mpv's ``--input-ipc-server`` Unix socket.
Responses (and unsolicited events, which are ignored) arrive as
newline-terminated JSON on the same socket. A background reader thread
re-assembles lines across reads and resolves the pending future for each
``request_id``, so several callers may have requests in flight at once.

Every request waits at most ``request_timeout_s``; a socket that closes
fails all pending requests with :class:`PlayerConnectionError`.
"""

from __future__ import annotations

import json
import logging
import socket
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any

from toasttv.domain.entities import PlaybackStatus, PlayerState
from toasttv.infra.exceptions import (
    PlayerConnectionError,
    PlayerError,
    PlayerProtocolError,
    PlayerTimeoutError,
)
from toasttv.runtime.config import LogoConfig

from .base import MediaPlayer
from .logo import alignment_for_position, prescale_logo

_logger = logging.getLogger(__name__)

_RECV_SIZE = 4096


class MpvClient(MediaPlayer):
    def __init__(
        self,
        socket_path: str | Path,
        *,
        request_timeout_s: float = 5.0,
        logo_cache_dir: str | Path = "/tmp",
        logo_max_height: int = 120,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.socket_path = Path(socket_path)
        self.request_timeout_s = request_timeout_s
        self.logo_cache_dir = Path(logo_cache_dir)
        self.logo_max_height = logo_max_height

        self._sock: socket.socket | None = None
        self._reader: threading.Thread | None = None
        self._connected = False
        self._send_lock = threading.Lock()
        self._pending_lock = threading.Lock()
        self._pending: dict[int, Future] = {}
        self._request_id = 0

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _open_connection(self) -> None:
        if not self.socket_path.exists():
            raise PlayerConnectionError(f"mpv IPC socket does not exist: {self.socket_path}")

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(str(self.socket_path))
        except OSError:
            sock.close()
            raise

        self._sock = sock
        self._connected = True
        self._reader = threading.Thread(
            target=self._read_loop,
            args=(sock,),
            name="mpv-ipc-reader",
            daemon=True,
        )
        self._reader.start()
        _logger.info("Connected to mpv IPC socket: %s", self.socket_path)

    def disconnect(self) -> None:
        sock = self._sock
        self._sock = None
        self._connected = False
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            sock.close()
        reader = self._reader
        self._reader = None
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=1.0)
        self._fail_pending(PlayerConnectionError("Disconnected from mpv"))

    def _read_loop(self, sock: socket.socket) -> None:
        buffer = b""
        while True:
            try:
                chunk = sock.recv(_RECV_SIZE)
            except OSError as e:
                _logger.debug("mpv IPC read failed: %s", e)
                break
            if not chunk:
                break
            buffer += chunk
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                if line.strip():
                    self._dispatch(line)

        # Only the reader of the live socket may mark the client disconnected.
        if self._sock is sock:
            self._connected = False
            _logger.warning("mpv IPC socket closed: %s", self.socket_path)
        self._fail_pending(PlayerConnectionError("mpv IPC socket closed"))

    def _dispatch(self, line: bytes) -> None:
        try:
            message = json.loads(line)
        except ValueError:
            _logger.debug("Ignoring malformed mpv message: %r", line[:200])
            return
        if not isinstance(message, dict) or "request_id" not in message:
            return  # event

        with self._pending_lock:
            future = self._pending.pop(message["request_id"], None)
        if future is None:
            return

        error = message.get("error")
        if error and error != "success":
            future.set_exception(PlayerProtocolError(f"mpv error: {error}"))
        else:
            future.set_result(message.get("data"))

    def _fail_pending(self, error: PlayerError) -> None:
        with self._pending_lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for future in pending:
            if not future.done():
                future.set_exception(error)

    # ------------------------------------------------------------------
    # Request/response
    # ------------------------------------------------------------------

    def send(self, args: list[Any]) -> Any:
        """Send one command and wait for its correlated response data."""
        sock = self._sock
        if not self._connected or sock is None:
            raise PlayerConnectionError("Not connected to mpv")

        future: Future = Future()
        with self._send_lock:
            self._request_id += 1
            request_id = self._request_id
            with self._pending_lock:
                self._pending[request_id] = future
            payload = json.dumps({"command": args, "request_id": request_id}) + "\n"
            try:
                sock.sendall(payload.encode("utf-8"))
            except OSError as e:
                with self._pending_lock:
                    self._pending.pop(request_id, None)
                self._connected = False
                raise PlayerConnectionError(f"Failed to write to mpv: {e}") from e

        try:
            return future.result(timeout=self.request_timeout_s)
        except FutureTimeoutError:
            with self._pending_lock:
                self._pending.pop(request_id, None)
            raise PlayerTimeoutError(
                f"mpv did not answer {args[0]!r} within {self.request_timeout_s:.1f}s"
            ) from None

    def _get_property(self, name: str, default: Any) -> Any:
        try:
            value = self.send(["get_property", name])
        except PlayerTimeoutError:
            raise
        except PlayerProtocolError:
            # mpv answers "property unavailable" while idle or between files.
            return default
        return default if value is None else value

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def play(self, path: str) -> None:
        self.send(["loadfile", path, "replace"])
        self.send(["set_property", "pause", False])
        _logger.info("mpv playing: %s", path)

    def enqueue(self, path: str) -> None:
        self.send(["loadfile", path, "append"])

    def clear(self) -> None:
        self.send(["stop"])
        self.send(["playlist-clear"])

    def pause(self) -> None:
        self.send(["cycle", "pause"])

    def stop(self) -> None:
        self.send(["stop"])

    def next(self) -> None:
        self.send(["playlist-next"])

    def set_loop(self, enabled: bool) -> None:
        self.send(["set_property", "loop-playlist", "inf" if enabled else "no"])

    def get_status(self) -> PlaybackStatus:
        paused = self._get_property("pause", False)
        path = self._get_property("path", None)
        position = self._get_property("time-pos", 0)
        duration = self._get_property("duration", 0)
        idle = self._get_property("idle-active", False)

        if idle or not path:
            state = PlayerState.STOPPED
        elif paused:
            state = PlayerState.PAUSED
        else:
            state = PlayerState.PLAYING

        return PlaybackStatus(
            is_playing=state is PlayerState.PLAYING,
            state=state,
            current_file=path,
            position_seconds=int(position),
            duration_seconds=int(duration),
        )

    def update_logo(self, logo: LogoConfig) -> None:
        try:
            self.send(["vf", "remove", "@logo"])
        except PlayerError as e:
            _logger.debug("No previous logo filter to remove: %s", e)

        if not logo.enabled or not logo.image_path:
            return

        align = alignment_for_position(logo.position)
        final_path = prescale_logo(logo.image_path, self.logo_cache_dir, self.logo_max_height)
        final_path = final_path.replace("\\", "/")

        _logger.info("Setting logo overlay: path=%s align=%d opacity=%d", final_path, align, logo.opacity)
        try:
            # show-logo is handled by the logo.lua script loaded into mpv
            self.send(
                [
                    "script-message",
                    "show-logo",
                    final_path,
                    str(align),
                    str(logo.x or 0),
                    str(logo.y or 0),
                    str(logo.opacity),
                ]
            )
        except PlayerError as e:
            _logger.warning("Failed to set logo overlay: %s", e)
