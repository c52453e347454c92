"""
External media player control clients.

Exports:
- MediaPlayer: abstract contract the playback loop drives
- PlayerKind, create_player: variant selection at composition time
- MpvClient: mpv JSON IPC over a Unix socket
- VlcClient: VLC RC interface over TCP
"""

from .base import MediaPlayer, PlayerKind, create_player
from .mpv_client import MpvClient
from .vlc_client import VlcClient

__all__ = ["MediaPlayer", "PlayerKind", "create_player", "MpvClient", "VlcClient"]
