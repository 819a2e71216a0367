"""Append-only transcript for a live session."""

from __future__ import annotations

from typing import Iterator, List, Tuple

from models.session_models import Speaker, Utterance


class TranscriptStore:
	"""Ordered history of narrator and party turns.

	There is no removal operation; the store lives as long as its session.
	"""

	def __init__(self) -> None:
		self._utterances: List[Utterance] = []

	def append(self, utterance: Utterance) -> Utterance:
		"""Add an utterance to the end of the transcript."""
		if not isinstance(utterance.speaker, Speaker):
			raise ValueError(f"Invalid speaker: {utterance.speaker!r}")
		if not utterance.text or not utterance.text.strip():
			raise ValueError("Utterance text is required.")
		self._utterances.append(utterance)
		return utterance

	@property
	def utterances(self) -> Tuple[Utterance, ...]:
		return tuple(self._utterances)

	def __len__(self) -> int:
		return len(self._utterances)

	def __iter__(self) -> Iterator[Utterance]:
		return iter(tuple(self._utterances))

	def as_text(self, limit: int = 15) -> str:
		"""Return the most recent turns as `SPEAKER: text` lines."""
		slice_ = self._utterances[-limit:] if limit else self._utterances
		return "\n".join(f"{u.speaker.value.upper()}: {u.text}" for u in slice_)
