import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from controllers.session_controller import default_conversation_factory
from dal.config_dal import ConfigDAL
from routes.config_route import router as config_router
from routes.image_route import router as image_router
from routes.music_route import router as music_router
from routes.realtime_ws import router as realtime_router
from routes.session_route import router as session_router
from routes.token_route import router as token_router
from services.config_store import GameConfigStore
from services.elevenlabs.music_service import MusicService
from services.elevenlabs.signed_url import SignedUrlService
from services.fal.scene_illustrator import SceneIllustrator
from services.session.session_store import SessionStore
from utils.database_init import AsyncDatabaseInitializer
from utils.settings import AppSettings

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

load_dotenv()  # Load environment variables from .env file if present

HTTP_TIMEOUT_SECONDS = 120.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - settings from the environment
      - the SQLite configuration slot (at DATABASE_DIR/app.db)
      - the shared httpx client and the ElevenLabs / fal.ai services
      - the registry of open play sessions
    and attach them to `app.state`.
    """
    settings = AppSettings.from_env()
    logging.basicConfig(level=settings.log_level)
    app.state.settings = settings

    db_initializer = AsyncDatabaseInitializer(fresh_start=settings.database_fresh_start)
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer
    app.state.config_store = GameConfigStore(ConfigDAL(db_initializer))

    if not settings.elevenlabs_api_key:
        logging.warning("ELEVEN_LABS_API_KEY not configured; voice sessions and music will fail")
    if not settings.fal_key:
        logging.warning("FAL_KEY not configured; scene illustrations will fail")

    http_client = httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)
    app.state.http_client = http_client
    app.state.signed_urls = SignedUrlService(
        http_client,
        settings.elevenlabs_api_key,
        settings.elevenlabs_agent_id,
        base_url=settings.elevenlabs_base_url,
    )
    app.state.music_service = MusicService(http_client, settings.elevenlabs_api_key, base_url=settings.elevenlabs_base_url)
    app.state.scene_illustrator = SceneIllustrator(settings.fal_key)
    app.state.conversation_factory = default_conversation_factory
    app.state.session_store = SessionStore()

    try:
        yield
    finally:
        await app.state.session_store.close_all()
        await http_client.aclose()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_request: Request, exc: StarletteHTTPException):
        """Render every HTTP error as `{"error": ...}`."""
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())})

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting which upstream credentials are configured.
        """
        state = request.app.state
        return {
            "ok": True,
            "db_initialized": hasattr(state, "db_initializer"),
            "elevenlabs_configured": bool(getattr(state, "signed_urls", None) and state.signed_urls.configured),
            "fal_configured": bool(getattr(state, "scene_illustrator", None) and state.scene_illustrator.configured),
            "open_sessions": len(state.session_store.ids()) if hasattr(state, "session_store") else 0,
        }

    # Register application routers
    app.include_router(token_router)
    app.include_router(image_router)
    app.include_router(music_router)
    app.include_router(config_router)
    app.include_router(session_router)
    app.include_router(realtime_router)

    return app


app = create_app()
