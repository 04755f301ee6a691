"""Configuration: env, Spotify credentials, token cache, API server."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of spotwrap package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID etc. are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("SPOTWRAP_DATA_DIR", str(BASE_DIR / "data")))
SPOTIFY_TOKEN_CACHE = DATA_DIR / ".spotify-token"

# API
API_HOST = os.getenv("SPOTWRAP_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("SPOTWRAP_API_PORT", "8000"))

# Spotify (OAuth authorization code flow; tokens cached on disk by spotipy)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_REDIRECT_URI = os.getenv(
    "SPOTIFY_REDIRECT_URI", "http://localhost:8000/api/session/callback"
)
SPOTIFY_SCOPES = (
    "user-read-playback-state user-modify-playback-state "
    "user-read-currently-playing user-top-read"
)
# Force the consent dialog on every login (lets the user switch accounts)
SPOTIFY_SHOW_DIALOG = os.getenv("SPOTWRAP_SHOW_DIALOG", "0").lower() in ("1", "true", "yes")
# After OAuth callback, redirect here (e.g. http://localhost:5173 for Vite dev)
SPOTWRAP_WEB_ORIGIN = os.getenv("SPOTWRAP_WEB_ORIGIN", "")

# CSRF state sent with every authorization request
CSRF_STATE_LENGTH = 128

# Top tracks
TOP_TRACKS_LIMIT = int(os.getenv("SPOTWRAP_TOP_TRACKS_LIMIT", "10"))

# Alerts kept until the UI drains them
ALERT_HISTORY = 50


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
