"""OAuth login state machine: unauthenticated -> authorizing -> authorized.

Every authorization request carries a fresh CSRF state. When a redirect comes
back, that state is consumed (handed to the token exchange, which rejects a
mismatch) and immediately replaced, so a captured redirect cannot be replayed.
"""
import asyncio
import logging
import urllib.parse
from typing import Callable

from spotwrap import config
from spotwrap.core.csrf import generate_state
from spotwrap.core.errors import InvalidRedirect, RedirectInProgress, SpotwrapError
from spotwrap.core.spotify_client import strip_query
from spotwrap.models.session import AuthorizationStatus, Session

logger = logging.getLogger(__name__)


class AuthorizationFlowController:
    """Sole writer of Session. begin_login/handle_redirect/logout writes are serialized."""

    def __init__(
        self,
        session: Session,
        api,
        *,
        redirect_uri: str = config.SPOTIFY_REDIRECT_URI,
        state_factory: Callable[[], str] = generate_state,
    ) -> None:
        self.session = session
        self._api = api
        self._callback = urllib.parse.urlparse(redirect_uri)
        self._new_state = state_factory
        self._lock = asyncio.Lock()
        # Bumped on logout so an exchange that finishes afterwards is not applied
        self._logout_count = 0

    async def restore(self) -> bool:
        """Pick up a cached token from a previous run."""
        async with self._lock:
            if await self._api.has_valid_token():
                self.session.authorization_status = AuthorizationStatus.AUTHORIZED
                logger.info("Restored Spotify authorization from token cache")
        return self.session.is_authorized

    async def begin_login(self) -> str:
        """Issue a new CSRF state and return the authorization URL to open.

        Moves unauthenticated to authorizing. An already authorized session
        stays authorized (e.g. switching accounts) until a redirect succeeds
        or logout() is called.
        """
        async with self._lock:
            previous = (self.session.authorization_status, self.session.csrf_state)
            state = self._new_state()
            self.session.csrf_state = state
            if not self.session.is_authorized:
                self.session.authorization_status = AuthorizationStatus.AUTHORIZING
            try:
                url = await self._api.authorize(state)
            except SpotwrapError:
                self.session.authorization_status, self.session.csrf_state = previous
                raise
        logger.info("Login started")
        return url

    def _is_callback(self, url: str) -> bool:
        parsed = urllib.parse.urlparse(url or "")
        if parsed.scheme.lower() != self._callback.scheme.lower():
            return False
        expected_path = self._callback.path.rstrip("/")
        return not expected_path or parsed.path.rstrip("/") == expected_path

    async def handle_redirect(self, url: str) -> None:
        """Exchange the redirect's code for tokens.

        Raises InvalidRedirect (session untouched), RedirectInProgress when a
        previous redirect is still being exchanged (the new one is rejected,
        not queued), or the AuthorizationError from the exchange. On failure
        authorization_status keeps its previous value.
        """
        if not self._is_callback(url):
            logger.warning("Not handling URL: unexpected scheme: '%s'", strip_query(url))
            raise InvalidRedirect()

        async with self._lock:
            if self.session.is_retrieving_tokens:
                logger.warning("Rejecting redirect: token exchange already in progress")
                raise RedirectInProgress()
            self.session.is_retrieving_tokens = True
            expected_state = self.session.csrf_state
            self.session.csrf_state = self._new_state()
            logout_count = self._logout_count

        logger.info("Received redirect from Spotify: '%s'", strip_query(url))
        succeeded = False
        try:
            await self._api.request_access_and_refresh_tokens(url, expected_state)
            succeeded = True
        except SpotwrapError as e:
            logger.warning("Couldn't retrieve access and refresh tokens: %s", e)
            raise
        finally:
            self.session.is_retrieving_tokens = False

        if logout_count != self._logout_count:
            logger.info("Logged out during token exchange; discarding new tokens")
            await self._api.deauthorize()
            return
        if succeeded:
            self.session.authorization_status = AuthorizationStatus.AUTHORIZED
            logger.info("Authorized with Spotify")

    async def logout(self) -> None:
        """Forget tokens and return to unauthenticated. No-op when already logged out."""
        async with self._lock:
            if (
                self.session.authorization_status is AuthorizationStatus.UNAUTHENTICATED
                and self.session.csrf_state is None
            ):
                logger.debug("Logout: already logged out")
                return
            await self._api.deauthorize()
            self._logout_count += 1
            self.session.csrf_state = None
            self.session.authorization_status = AuthorizationStatus.UNAUTHENTICATED
        logger.info("Logged out")
