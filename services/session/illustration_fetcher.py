"""Single-flight scene illustration requests."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from models.session_models import SceneImage

LOGGER = logging.getLogger(__name__)


class IllustrationFetcher:
	"""Generate at most one scene image at a time.

	While a request is in flight further requests are dropped, not queued.
	The busy flag is only set and cleared by `request` itself.
	"""

	def __init__(
		self,
		generate: Callable[[str], Awaitable[SceneImage]],
		on_image: Optional[Callable[[SceneImage], Awaitable[None]]] = None,
		on_busy: Optional[Callable[[bool], Awaitable[None]]] = None,
	) -> None:
		self.generate = generate
		self.on_image = on_image
		self.on_busy = on_busy
		self.current_image: Optional[SceneImage] = None
		self.dropped = 0
		self._busy = False

	@property
	def busy(self) -> bool:
		return self._busy

	async def request(self, text: str) -> Optional[SceneImage]:
		"""Generate an image for `text` unless one is already being generated."""
		if not text or not text.strip():
			return None
		if self._busy:
			self.dropped += 1
			LOGGER.debug("Illustration in flight; dropping narration (%d chars)", len(text))
			return None

		self._busy = True
		try:
			await self._notify_busy(True)
			try:
				image = await self.generate(text)
			except Exception as exc:  # pylint: disable=broad-exception-caught
				LOGGER.error("Image generation error: %s", exc)
				return None
			if image is None or not image.url:
				LOGGER.error("Image generation returned no URL")
				return None
			self.current_image = image
			if self.on_image is not None:
				await self.on_image(image)
			return image
		finally:
			self._busy = False
			await self._notify_busy(False)

	async def _notify_busy(self, busy: bool) -> None:
		if self.on_busy is None:
			return
		try:
			await self.on_busy(busy)
		except Exception as exc:  # pylint: disable=broad-exception-caught
			LOGGER.warning("Failed to publish illustration state: %s", exc)
