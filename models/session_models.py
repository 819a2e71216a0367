"""Session domain models for live play sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class Speaker(str, Enum):
	"""Who produced an utterance."""

	NARRATOR = "narrator"
	PARTY = "party"

	@classmethod
	def from_role(cls, role: str) -> "Speaker":
		"""Map a conversation role (`agent`/`assistant` or `user`) to a speaker."""
		normalized = (role or "").strip().lower()
		if normalized in ("agent", "assistant"):
			return cls.NARRATOR
		if normalized == "user":
			return cls.PARTY
		raise ValueError(f"Unknown conversation role: {role!r}")


class ConnectionState(str, Enum):
	"""Lifecycle of the streaming conversational connection."""

	DISCONNECTED = "disconnected"
	CONNECTING = "connecting"
	CONNECTED = "connected"
	ERROR = "error"


@dataclass(frozen=True)
class Utterance:
	"""One turn of the transcript."""

	speaker: Speaker
	text: str
	id: str = field(default_factory=lambda: uuid.uuid4().hex)
	timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"speaker": self.speaker.value,
			"text": self.text,
			"timestamp": self.timestamp.isoformat(),
		}


@dataclass(frozen=True)
class SceneImage:
	"""Latest generated scene illustration."""

	url: str
	prompt: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		return {"url": self.url, "prompt": self.prompt}
