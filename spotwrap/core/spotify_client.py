"""Spotify API client via Spotipy; async facade over the blocking library calls.

Tokens are cached on disk by spotipy's CacheFileHandler and refreshed by its
auth manager whenever a request finds them expired.
"""
import asyncio
import logging
import threading
import urllib.parse
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from requests.exceptions import RequestException
from spotipy import Spotify
from spotipy.cache_handler import CacheFileHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError
from starlette.concurrency import run_in_threadpool

from spotwrap import config
from spotwrap.core.csrf import states_match
from spotwrap.core.errors import (
    AccessDenied,
    AuthorizationError,
    RequestFailed,
    TokenExchangeFailed,
)
from spotwrap.models.device import Device
from spotwrap.models.playback import PlaybackRequest
from spotwrap.models.track import TimeRange, Track

logger = logging.getLogger(__name__)

# spotipy surfaces HTTP failures as SpotifyException and token endpoint
# failures as SpotifyOauthError; transport errors come straight from requests.
_LIBRARY_ERRORS = (SpotifyException, SpotifyOauthError, RequestException)


def parse_redirect(url: str) -> Dict[str, str]:
    """Return code/state/error/error_description from a redirect URL (missing keys omitted)."""
    parsed = urllib.parse.urlparse((url or "").strip())
    qs = urllib.parse.parse_qs(parsed.query)
    return {
        key: qs[key][0]
        for key in ("code", "state", "error", "error_description")
        if qs.get(key)
    }


def strip_query(url: str) -> str:
    """URL without query/fragment, for logging redirects without leaking the code."""
    parsed = urllib.parse.urlparse(url or "")
    return urllib.parse.urlunparse(parsed._replace(query="", fragment=""))


def _error_message(exc: Exception) -> str:
    if isinstance(exc, SpotifyException):
        return exc.msg or str(exc)
    if isinstance(exc, SpotifyOauthError):
        return getattr(exc, "error_description", None) or str(exc)
    return str(exc)


class SpotifyApi:
    """The operations the session controller needs from the Web API."""

    def __init__(
        self,
        *,
        client_id: str = config.SPOTIFY_CLIENT_ID,
        client_secret: str = config.SPOTIFY_CLIENT_SECRET,
        redirect_uri: str = config.SPOTIFY_REDIRECT_URI,
        scope: str = config.SPOTIFY_SCOPES,
        cache_path: str = str(config.SPOTIFY_TOKEN_CACHE),
        show_dialog: bool = config.SPOTIFY_SHOW_DIALOG,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope
        self.cache_path = cache_path
        self.show_dialog = show_dialog
        self._auth: Optional[SpotifyOAuth] = None
        self._cache: Optional[CacheFileHandler] = None
        self._lock = threading.Lock()

    # -----------------
    # Authorization
    # -----------------

    def _oauth(self) -> SpotifyOAuth:
        return self._auth_and_cache()[0]

    def _auth_and_cache(self) -> Tuple[SpotifyOAuth, CacheFileHandler]:
        """Auth manager and its cache handler, read together.

        Worker threads hold on to the returned pair, so a deauthorize() on the
        event loop cannot swap the cache out from under them.
        """
        if not self.client_id or not self.client_secret:
            raise AuthorizationError("SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set")
        with self._lock:
            if self._auth is None:
                self._cache = CacheFileHandler(cache_path=self.cache_path)
                self._auth = SpotifyOAuth(
                    client_id=self.client_id,
                    client_secret=self.client_secret,
                    redirect_uri=self.redirect_uri,
                    scope=self.scope,
                    cache_handler=self._cache,
                    show_dialog=self.show_dialog,
                    open_browser=False,
                )
            return self._auth, self._cache

    async def authorize(self, state: str) -> str:
        """Return the accounts.spotify.com URL the user must open to log in."""
        return self._oauth().get_authorize_url(state=state)

    async def request_access_and_refresh_tokens(
        self, redirect_url: str, state: Optional[str]
    ) -> None:
        """Exchange the code in redirect_url for tokens and cache them.

        The redirect's state must equal `state`, the value sent with the
        authorization request; otherwise nothing is exchanged or saved.
        If cancelled mid-exchange, the cache is put back the way it was once
        the worker thread finishes.
        """
        params = parse_redirect(redirect_url)
        error = params.get("error")
        if error == "access_denied":
            raise AccessDenied()
        if error:
            raise TokenExchangeFailed(params.get("error_description") or error)
        if not state:
            raise TokenExchangeFailed("No login is in progress. Please log in again.")
        if not states_match(state, params.get("state")):
            raise TokenExchangeFailed(
                "The authorization response did not match this login attempt. Please log in again."
            )
        code = params.get("code")
        if not code:
            raise TokenExchangeFailed("The redirect did not include an authorization code.")

        auth, cache = self._auth_and_cache()
        previous = await run_in_threadpool(cache.get_cached_token)
        # A worker thread cannot be interrupted; on cancel, let it finish and undo its write
        exchange = asyncio.ensure_future(
            run_in_threadpool(auth.get_access_token, code=code, as_dict=False, check_cache=False)
        )
        try:
            await asyncio.shield(exchange)
        except asyncio.CancelledError:
            await self._discard_exchange(exchange, cache, previous)
            raise
        except _LIBRARY_ERRORS as e:
            raise TokenExchangeFailed(_error_message(e)) from e

    async def _discard_exchange(
        self, exchange: asyncio.Future, cache: CacheFileHandler, previous: Optional[dict]
    ) -> None:
        try:
            await exchange
        except _LIBRARY_ERRORS:
            return
        if previous:
            await run_in_threadpool(cache.save_token_to_cache, previous)
        else:
            await self.deauthorize()
        logger.info("Login cancelled; discarded the tokens it retrieved")

    def _valid_token(self) -> Optional[dict]:
        auth, cache = self._auth_and_cache()
        return auth.validate_token(cache.get_cached_token())

    async def has_valid_token(self) -> bool:
        """True if a cached token exists and is still valid (refreshing it if needed)."""
        if not self.client_id or not self.client_secret:
            return False
        try:
            token_info = await run_in_threadpool(self._valid_token)
        except _LIBRARY_ERRORS as e:
            logger.warning("Cached Spotify token unusable: %s", _error_message(e))
            return False
        return token_info is not None

    async def deauthorize(self) -> None:
        """Forget the cached tokens. Spotify has no revoke endpoint."""
        path = Path(self.cache_path)
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            logger.warning("Could not remove token cache %s: %s", path, e)
        with self._lock:
            self._auth = None
            self._cache = None

    # -----------------
    # Web API
    # -----------------

    def _spotify(self) -> Spotify:
        """Authenticated client; never falls back to spotipy's interactive prompt."""
        if not self.client_id or not self.client_secret:
            raise RequestFailed("Not logged in to Spotify.")
        auth, cache = self._auth_and_cache()
        if auth.validate_token(cache.get_cached_token()) is None:
            raise RequestFailed("Not logged in to Spotify.")
        return Spotify(auth_manager=auth)

    async def _call(self, method: str, *args, **kwargs):
        def call():
            return getattr(self._spotify(), method)(*args, **kwargs)

        try:
            return await run_in_threadpool(call)
        except _LIBRARY_ERRORS as e:
            raise RequestFailed(_error_message(e)) from e

    async def available_devices(self) -> List[Device]:
        data = await self._call("devices")
        return [Device.from_spotify_data(d) for d in (data or {}).get("devices") or []]

    async def play(self, request: PlaybackRequest, device_id: str) -> None:
        await self._call(
            "start_playback", device_id=device_id, **request.to_start_playback_kwargs()
        )

    async def current_user_top_tracks(
        self, time_range: TimeRange, offset: int = 0, limit: int = config.TOP_TRACKS_LIMIT
    ) -> List[Track]:
        data = await self._call(
            "current_user_top_tracks",
            limit=limit,
            offset=offset,
            time_range=TimeRange(time_range).value,
        )
        return [Track.from_spotify_data(t) for t in (data or {}).get("items") or []]
