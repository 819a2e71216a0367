"""Simple in-memory registry of open play sessions."""

from __future__ import annotations

from typing import Dict, List

from services.session.play_session import PlaySession


class SessionStore:
	"""Track the play sessions currently attached to a play screen."""

	def __init__(self) -> None:
		self._sessions: Dict[str, PlaySession] = {}

	def add(self, session: PlaySession) -> PlaySession:
		self._sessions[session.session_id] = session
		return session

	def get(self, session_id: str) -> PlaySession:
		"""Return a session or raise KeyError if missing."""
		session = self._sessions.get(session_id)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		return session

	def remove(self, session_id: str) -> None:
		self._sessions.pop(session_id, None)

	def ids(self) -> List[str]:
		return list(self._sessions)

	async def close_all(self) -> None:
		"""Tear down every open session, used on application shutdown."""
		for session_id in self.ids():
			session = self._sessions.pop(session_id)
			await session.aclose()
