"""Build the fixed-shape variable set handed to the voice agent."""

from __future__ import annotations

from typing import Dict

from models.game_config import MAX_PLAYERS, GameConfiguration


def build_dynamic_variables(config: GameConfiguration) -> Dict[str, str]:
	"""Return campaign and party variables; missing players become empty strings."""
	variables: Dict[str, str] = {
		"campaignLength": config.campaign_length or "",
		"campaignGenre": config.genre or "",
	}
	for number in range(1, MAX_PLAYERS + 1):
		player = config.players[number - 1] if len(config.players) >= number else None
		variables[f"player{number}Name"] = player.name if player else ""
		variables[f"player{number}Species"] = player.species if player else ""
		variables[f"player{number}Class"] = player.class_ if player else ""
	return variables
