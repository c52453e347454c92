"""
VLC RC-interface client.

The RC (telnet-style) interface answers with unframed free text and no
request correlation. Each command therefore clears the receive buffer,
writes one line, waits a fixed settle delay and returns whatever arrived.
A command lock serialises callers so replies never interleave.
"""

from __future__ import annotations

import logging
import re
import socket
import threading
import time
from typing import Any
from urllib.parse import unquote, urlparse

from toasttv.domain.entities import PlaybackStatus, PlayerState
from toasttv.infra.exceptions import PlayerConnectionError
from toasttv.runtime.config import LogoConfig

from .base import MediaPlayer

_logger = logging.getLogger(__name__)

_FIRST_INT = re.compile(r"\d+")
_NEW_INPUT = re.compile(r"\( new input: (.+?) \)")


def _first_int(text: str) -> int:
    match = _FIRST_INT.search(text)
    return int(match.group(0)) if match else 0


def _input_to_path(value: str) -> str:
    if value.startswith("file://"):
        return unquote(urlparse(value).path)
    return value


class VlcClient(MediaPlayer):
    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 4212,
        *,
        settle_delay_s: float = 0.1,
        connect_timeout_s: float = 5.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.host = host
        self.port = port
        self.settle_delay_s = settle_delay_s
        self.connect_timeout_s = connect_timeout_s

        self._sock: socket.socket | None = None
        self._reader: threading.Thread | None = None
        self._connected = False
        self._buffer = ""
        self._buffer_lock = threading.Lock()
        self._command_lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _open_connection(self) -> None:
        sock = socket.create_connection((self.host, self.port), timeout=self.connect_timeout_s)
        sock.settimeout(None)
        self._sock = sock
        self._connected = True
        self._reader = threading.Thread(
            target=self._read_loop,
            args=(sock,),
            name="vlc-rc-reader",
            daemon=True,
        )
        self._reader.start()
        _logger.info("Connected to VLC at %s:%d", self.host, self.port)

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
        _logger.info("Disconnected from VLC")

    def _read_loop(self, sock: socket.socket) -> None:
        while True:
            try:
                chunk = sock.recv(4096)
            except OSError:
                break
            if not chunk:
                break
            with self._buffer_lock:
                self._buffer += chunk.decode("utf-8", errors="replace")

        if self._sock is sock:
            self._connected = False
            _logger.warning("VLC RC connection closed")

    def send_command(self, command: str) -> str:
        """Send one RC command and return the text received within the settle delay."""
        with self._command_lock:
            sock = self._sock
            if not self._connected or sock is None:
                raise PlayerConnectionError("Not connected to VLC")

            with self._buffer_lock:
                self._buffer = ""
            try:
                sock.sendall(f"{command}\n".encode("utf-8"))
            except OSError as e:
                self._connected = False
                raise PlayerConnectionError(f"Failed to write to VLC: {e}") from e

            time.sleep(self.settle_delay_s)
            with self._buffer_lock:
                return self._buffer.strip()

    def play(self, path: str) -> None:
        self.send_command("clear")
        self.send_command(f"add {path}")
        self.send_command("play")
        _logger.info("VLC playing: %s", path)

    def enqueue(self, path: str) -> None:
        self.send_command(f"enqueue {path}")

    def clear(self) -> None:
        self.send_command("clear")

    def pause(self) -> None:
        self.send_command("pause")

    def stop(self) -> None:
        self.send_command("stop")

    def next(self) -> None:
        self.send_command("next")

    def set_loop(self, enabled: bool) -> None:
        self.send_command("loop on" if enabled else "loop off")
        _logger.info("Loop %s", "enabled" if enabled else "disabled")

    def get_status(self) -> PlaybackStatus:
        # Output of `status`: "( new input: file:///... )" ... "( state playing )"
        status_text = self.send_command("status")
        if "state playing" in status_text:
            state = PlayerState.PLAYING
        elif "state paused" in status_text:
            state = PlayerState.PAUSED
        else:
            state = PlayerState.STOPPED

        match = _NEW_INPUT.search(status_text)
        current_file = _input_to_path(match.group(1)) if match else None

        # get_length is unreliable around track changes; callers prefer the
        # indexed duration of the tracked item.
        position = _first_int(self.send_command("get_time"))
        duration = _first_int(self.send_command("get_length"))

        return PlaybackStatus(
            is_playing=state is PlayerState.PLAYING,
            state=state,
            current_file=current_file,
            position_seconds=position,
            duration_seconds=duration,
        )

    def update_logo(self, logo: LogoConfig) -> None:
        # Logo placement needs VLC's logo sub-source at launch time.
        _logger.info("VLC RC interface cannot place logo overlays at runtime; skipping")
