"""Debounce narration bursts into single illustration requests."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

LOGGER = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 2.0
DEFAULT_MIN_LENGTH = 20


class DebouncedTrigger:
	"""Run `action(text)` once narration has been quiet for `delay` seconds.

	Each qualifying `offer` cancels the previously scheduled call and arms a
	new one carrying the latest text, so only the last narration of a burst
	reaches the action. Must run on the event loop that owns the session.
	"""

	def __init__(
		self,
		action: Callable[[str], Awaitable[Any]],
		delay: float = DEFAULT_DELAY_SECONDS,
		min_length: int = DEFAULT_MIN_LENGTH,
	) -> None:
		self.action = action
		self.delay = delay
		self.min_length = min_length
		self._handle: Optional[asyncio.TimerHandle] = None
		self._tasks: Set[asyncio.Task] = set()

	@property
	def pending(self) -> bool:
		return self._handle is not None

	def qualifies(self, text: str) -> bool:
		return len(text or "") > self.min_length

	def offer(self, text: str) -> bool:
		"""Schedule the action for `text` if it is long enough. Returns whether it was scheduled."""
		if not self.qualifies(text):
			return False
		if self._handle is not None:
			self._handle.cancel()
		loop = asyncio.get_running_loop()
		self._handle = loop.call_later(self.delay, self._fire, text)
		return True

	def cancel(self) -> None:
		"""Drop the pending call and cancel any action still running."""
		if self._handle is not None:
			self._handle.cancel()
			self._handle = None
		for task in list(self._tasks):
			task.cancel()
		self._tasks.clear()

	def _fire(self, text: str) -> None:
		self._handle = None
		task = asyncio.ensure_future(self.action(text))
		self._tasks.add(task)
		task.add_done_callback(self._on_done)

	def _on_done(self, task: asyncio.Task) -> None:
		self._tasks.discard(task)
		if task.cancelled():
			return
		exc = task.exception()
		if exc is not None:
			LOGGER.error("Debounced action failed: %s", exc)
