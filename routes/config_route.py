"""FastAPI routes for the stored game configuration."""

from fastapi import APIRouter, HTTPException, Request

from controllers.config_controller import config_options, delete_config, load_config, save_config
from models.game_config import GameConfiguration

router = APIRouter(prefix="/api/config", tags=["config"])


@router.put("")
async def put_config(request: Request, payload: GameConfiguration):
    try:
        return await save_config(request, payload)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("")
async def get_config(request: Request):
    try:
        return await load_config(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.delete("")
async def delete_config_route(request: Request):
    try:
        return await delete_config(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/options")
async def get_config_options():
    """List the species, classes, campaign lengths and music themes on offer."""
    return config_options()
