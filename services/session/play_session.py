"""Session context that owns every resource of one open play screen."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from uuid import uuid4

from models.game_config import GameConfiguration
from models.session_models import SceneImage
from services.errors import SessionClosedError
from services.session.connection_manager import Publish, SessionConnectionManager
from services.session.debounced_trigger import DEFAULT_DELAY_SECONDS, DEFAULT_MIN_LENGTH, DebouncedTrigger
from services.session.illustration_fetcher import IllustrationFetcher
from services.session.transcript_store import TranscriptStore

LOGGER = logging.getLogger(__name__)


class PlaySession:
	"""Compose transcript, debounce, illustration and connection for one session.

	Create it when the play screen opens, call `start`, and always call
	`aclose` (or use `async with`) when the screen goes away so the debounce
	timer and the conversation are released.
	"""

	def __init__(
		self,
		config: Optional[GameConfiguration],
		*,
		token_issuer: Callable[[], Awaitable[str]],
		transport_factory: Callable[[Any], Any],
		generate_image: Callable[[str], Awaitable[SceneImage]],
		publish: Publish,
		debounce_seconds: float = DEFAULT_DELAY_SECONDS,
		min_narration_length: int = DEFAULT_MIN_LENGTH,
		session_id: Optional[str] = None,
	) -> None:
		self.session_id = session_id or uuid4().hex
		self.publish = publish
		self.closed = False
		self.transcript = TranscriptStore()
		self.fetcher = IllustrationFetcher(generate_image, on_image=self._on_image, on_busy=self._on_busy)
		self.trigger = DebouncedTrigger(self.fetcher.request, delay=debounce_seconds, min_length=min_narration_length)
		self.connection = SessionConnectionManager(
			config,
			token_issuer=token_issuer,
			transport_factory=transport_factory,
			transcript=self.transcript,
			trigger=self.trigger,
			publish=publish,
		)

	async def start(self):
		"""Connect to the voice agent. Raises ConfigMissingError without a configuration."""
		self._ensure_open()
		return await self.connection.connect()

	async def reconnect(self):
		"""Retry the voice agent connection. Raises SessionClosedError once closed."""
		self._ensure_open()
		return await self.connection.reconnect()

	async def aclose(self) -> None:
		if self.closed:
			return
		self.closed = True
		await self.connection.end()
		LOGGER.info("Session %s closed after %d turns", self.session_id, len(self.transcript))

	async def __aenter__(self) -> "PlaySession":
		return self

	async def __aexit__(self, exc_type, exc, tb) -> None:
		await self.aclose()

	@property
	def scene_image(self) -> Optional[SceneImage]:
		return self.fetcher.current_image

	def snapshot(self) -> Dict[str, Any]:
		image = self.scene_image
		return {
			"session_id": self.session_id,
			"connection": self.connection.snapshot(),
			"transcript": [u.to_dict() for u in self.transcript],
			"scene_image": image.to_dict() if image else None,
			"illustration_busy": self.fetcher.busy,
			"closed": self.closed,
		}

	def _ensure_open(self) -> None:
		if self.closed:
			raise SessionClosedError("Session is closed; start a new session.")

	async def _on_image(self, image: SceneImage) -> None:
		await self.publish({"type": "scene.image", **image.to_dict()})

	async def _on_busy(self, busy: bool) -> None:
		await self.publish({"type": "illustration.busy", "busy": busy})
