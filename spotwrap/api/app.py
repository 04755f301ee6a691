"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging in the worker process (so controller INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from spotwrap.api.state import AppState, get_state
from spotwrap.config import SPOTWRAP_WEB_ORIGIN, ensure_data_dir

# Import routes after state to avoid circular imports
from spotwrap.api.routes import alerts, playback, session, tracks

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = app.dependency_overrides.get(get_state, get_state)()
    ensure_data_dir()
    await state.auth.restore()
    logging.getLogger(__name__).info(
        "Session ready (%s)", state.session.authorization_status.value
    )

    yield

    await state.tasks.cancel_all()


app = FastAPI(
    title="Spotwrap API",
    description="Local REST API for the Spotify session controller",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[SPOTWRAP_WEB_ORIGIN] if SPOTWRAP_WEB_ORIGIN else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(session.router, prefix="/api/session", tags=["session"])
app.include_router(playback.router, prefix="/api/playback", tags=["playback"])
app.include_router(tracks.router, prefix="/api/tracks", tags=["tracks"])
app.include_router(alerts.router, prefix="/api/alerts", tags=["alerts"])
