"""Shared fixtures for the session service test suite."""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from models.game_config import GameConfiguration


@pytest.fixture
def heist_config() -> GameConfiguration:
    return GameConfiguration.model_validate(
        {
            "campaignLength": "short",
            "genre": "Heist",
            "players": [{"name": "Aria", "species": "Elf", "class": "Ranger"}],
        }
    )


@pytest.fixture
def full_party_config() -> GameConfiguration:
    return GameConfiguration.model_validate(
        {
            "musicTheme": "adventurous",
            "campaignLength": "normal",
            "genre": "Exploration",
            "players": [
                {"playerNumber": 1, "name": "Gahegus", "species": "Human", "class": "Fighter"},
                {"playerNumber": 2, "name": "Aria", "species": "Elf", "class": "Ranger"},
                {"playerNumber": 3, "name": "Borus", "species": "Dwarf", "class": "Cleric"},
            ],
        }
    )
