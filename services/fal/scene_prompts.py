"""Prompt helpers for scene illustrations."""

from __future__ import annotations

import re

BASE_PROMPT = (
	"Fantasy RPG illustration, Dungeons & Dragons official artwork style, highly detailed digital painting, "
	"dramatic cinematic lighting, epic fantasy scene, rich colors, professional concept art quality: "
)

MAX_SCENE_CHARS = 400

_NON_VISUAL = [
	re.compile(r"What do you do\??", re.IGNORECASE),
	re.compile(r"What will you do\??", re.IGNORECASE),
	re.compile(r"How do you respond\??", re.IGNORECASE),
	re.compile(r"Roll for initiative[.!]?", re.IGNORECASE),
]


def extract_visual_scene(narration: str) -> str:
	"""Strip prompts to the players from narration and keep the scene description."""
	cleaned = narration
	for pattern in _NON_VISUAL:
		cleaned = pattern.sub("", cleaned)
	cleaned = re.sub(r"\?+", ".", cleaned).strip()
	if len(cleaned) > MAX_SCENE_CHARS:
		cleaned = cleaned[:MAX_SCENE_CHARS] + "..."
	return cleaned


def scene_prompt(narration: str) -> str:
	"""Return the full image prompt for a narration turn."""
	return f"{BASE_PROMPT}{extract_visual_scene(narration)}"
