"""
Custom exceptions for ToastTV operations.

This module provides custom exception classes for the error kinds the
playback core distinguishes: validation, missing resources, and player
connection/protocol failures.
"""


class ToastTVError(Exception):
    """Base exception for all ToastTV errors."""

    pass


class ValidationError(ToastTVError):
    """Raised when a configuration value is rejected before any state changes."""

    pass


class ResourceError(ToastTVError):
    """Raised when a referenced media item or file is not available."""

    pass


class PlayerError(ToastTVError):
    """Base class for failures talking to the external media player."""

    pass


class PlayerConnectionError(PlayerError):
    """Raised when the player is unreachable or the socket was lost."""

    pass


class PlayerProtocolError(PlayerError):
    """Raised when the player answers with an error or a malformed reply."""

    pass


class PlayerTimeoutError(PlayerProtocolError):
    """Raised when a correlated request receives no response in time."""

    pass
