"""Environment-driven settings for the application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_AGENT_ID = "agent_7701kc5gat2efqm8wbg84j7m2zbj"
DEFAULT_ELEVENLABS_BASE = "https://api.elevenlabs.io"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class AppSettings:
    """Values read once at startup and attached to `app.state.settings`.

    Attributes:
        elevenlabs_api_key: Secret for signed URLs and music generation.
        elevenlabs_agent_id: Conversational agent the play screen talks to.
        elevenlabs_base_url: REST base URL for ElevenLabs.
        fal_key: fal.ai credential, also read directly by `fal_client`.
        database_fresh_start: Wipe `app.db` when the app starts.
        illustration_debounce_seconds: Quiet window before a scene is drawn.
        illustration_min_chars: Narration must be longer than this to be drawn.
        log_level: Root logger level name.
    """

    elevenlabs_api_key: Optional[str] = None
    elevenlabs_agent_id: str = DEFAULT_AGENT_ID
    elevenlabs_base_url: str = DEFAULT_ELEVENLABS_BASE
    fal_key: Optional[str] = None
    database_fresh_start: bool = True
    illustration_debounce_seconds: float = 2.0
    illustration_min_chars: int = 20
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppSettings":
        return cls(
            elevenlabs_api_key=os.getenv("ELEVEN_LABS_API_KEY") or None,
            elevenlabs_agent_id=os.getenv("ELEVENLABS_AGENT_ID") or DEFAULT_AGENT_ID,
            elevenlabs_base_url=(os.getenv("ELEVENLABS_API_BASE") or DEFAULT_ELEVENLABS_BASE).rstrip("/"),
            fal_key=os.getenv("FAL_KEY") or None,
            database_fresh_start=_env_flag("DATABASE_FRESH_START", True),
            illustration_debounce_seconds=_env_float("ILLUSTRATION_DEBOUNCE_SECONDS", 2.0),
            illustration_min_chars=int(_env_float("ILLUSTRATION_MIN_CHARS", 20)),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
