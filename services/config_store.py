"""Persisted game configuration slot."""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from dal.config_dal import ConfigDAL
from models.game_config import GameConfiguration
from services.errors import ConfigMissingError

LOGGER = logging.getLogger(__name__)

CONFIG_SLOT = "dnd-game-config"


class GameConfigStore:
    """Read and write the serialized GameConfiguration in the CONFIG table."""

    def __init__(self, dal: ConfigDAL, slot: str = CONFIG_SLOT) -> None:
        self.dal = dal
        self.slot = slot

    async def save(self, config: GameConfiguration) -> dict:
        document = config.to_storage()
        await self.dal.put(self.slot, json.dumps(document))
        LOGGER.info("Stored game configuration (%d players, genre=%s)", len(document["players"]), config.genre)
        return document

    async def load(self) -> Optional[GameConfiguration]:
        raw = await self.dal.get(self.slot)
        if raw is None:
            return None
        try:
            return GameConfiguration.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            LOGGER.error("Stored game configuration is unreadable: %s", exc)
            return None

    async def require(self) -> GameConfiguration:
        """Return the stored configuration or raise ConfigMissingError."""
        config = await self.load()
        if config is None:
            raise ConfigMissingError("No game configuration found. Configure your adventure first.")
        return config

    async def clear(self) -> bool:
        return await self.dal.delete(self.slot)
