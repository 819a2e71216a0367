"""Error types raised by the session pipeline and the API proxies."""

from __future__ import annotations

from typing import Optional


class SessionError(Exception):
    """Base class for failures surfaced by this service."""


class ConfigMissingError(SessionError):
    """No stored game configuration exists when a session is started."""


class TokenFetchError(SessionError):
    """The signed conversation URL could not be obtained."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConnectionFailedError(SessionError):
    """The streaming conversation could not be opened or broke mid-session."""


class ImageGenerationError(SessionError):
    """The image-generation service failed or returned no image URL."""


class MusicGenerationError(SessionError):
    """The music-generation service failed."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionClosedError(SessionError):
    """The session was ended and cannot be connected again."""
