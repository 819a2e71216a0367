"""Controller for the stored game configuration."""

from typing import Any, Dict

from fastapi import HTTPException, Request

from models.game_config import (
    CAMPAIGN_LENGTHS,
    CLASS_OPTIONS,
    MUSIC_THEMES,
    SPECIES_OPTIONS,
    GameConfiguration,
)
from services.config_store import GameConfigStore


async def save_config(request: Request, config: GameConfiguration) -> Dict[str, Any]:
    """Validate and store the configuration that the play screen will read."""
    errors = config.validation_errors()
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    store: GameConfigStore = request.app.state.config_store
    return await store.save(config)


async def load_config(request: Request) -> Dict[str, Any]:
    store: GameConfigStore = request.app.state.config_store
    config = await store.load()
    if config is None:
        raise HTTPException(status_code=404, detail="No game configuration found")
    return config.to_storage()


def config_options() -> Dict[str, Any]:
    """Return the choices offered by the configure screen."""
    return {
        "species": SPECIES_OPTIONS,
        "classes": CLASS_OPTIONS,
        "campaignLengths": CAMPAIGN_LENGTHS,
        "musicThemes": MUSIC_THEMES,
    }


async def delete_config(request: Request) -> Dict[str, Any]:
    """Forget the stored configuration so the next play session must be configured again."""
    store: GameConfigStore = request.app.state.config_store
    if not await store.clear():
        raise HTTPException(status_code=404, detail="No game configuration found")
    return {"deleted": True}
