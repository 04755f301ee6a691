"""Test the spotipy adapter (spotipy itself is mocked)"""

import asyncio
import json
import threading
from unittest.mock import patch

import pytest
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from spotwrap.core.errors import (
    AccessDenied,
    AuthorizationError,
    RequestFailed,
    TokenExchangeFailed,
)
from spotwrap.core.spotify_client import SpotifyApi, parse_redirect, strip_query
from spotwrap.models.playback import PlaybackRequest
from spotwrap.models.track import TimeRange

CALLBACK = "http://localhost:8000/api/session/callback"
STATE = "s" * 128


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / ".spotify-token"


@pytest.fixture
def oauth():
    with patch("spotwrap.core.spotify_client.SpotifyOAuth") as oauth_cls:
        instance = oauth_cls.return_value
        instance.validate_token.return_value = {"access_token": "at"}
        instance.get_authorize_url.side_effect = lambda state=None: f"https://accounts.spotify.com/authorize?state={state}"
        yield instance


@pytest.fixture
def spotify():
    with patch("spotwrap.core.spotify_client.Spotify") as spotify_cls:
        yield spotify_cls.return_value


@pytest.fixture
def api(cache_path):
    return SpotifyApi(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri=CALLBACK,
        cache_path=str(cache_path),
    )


class TestRedirectParsing:

    def test_parse_redirect(self):
        parsed = parse_redirect(f"{CALLBACK}?code=AAA&state=BBB")
        assert parsed == {"code": "AAA", "state": "BBB"}

    def test_parse_error_redirect(self):
        parsed = parse_redirect(f"{CALLBACK}?error=access_denied&state=BBB")
        assert parsed == {"error": "access_denied", "state": "BBB"}

    def test_strip_query_hides_code(self):
        assert strip_query(f"{CALLBACK}?code=secret&state=x") == CALLBACK


class TestTokenExchange:

    @pytest.mark.asyncio
    async def test_matching_state_exchanges_code(self, api, oauth):
        await api.request_access_and_refresh_tokens(f"{CALLBACK}?code=AAA&state={STATE}", STATE)

        oauth.get_access_token.assert_called_once_with(code="AAA", as_dict=False, check_cache=False)

    @pytest.mark.asyncio
    async def test_mismatched_state_exchanges_nothing(self, api, oauth, cache_path):
        with pytest.raises(TokenExchangeFailed):
            await api.request_access_and_refresh_tokens(f"{CALLBACK}?code=AAA&state=forged", STATE)

        oauth.get_access_token.assert_not_called()
        assert not cache_path.exists()

    @pytest.mark.asyncio
    async def test_state_never_issued_exchanges_nothing(self, api, oauth):
        with pytest.raises(TokenExchangeFailed):
            await api.request_access_and_refresh_tokens(f"{CALLBACK}?code=AAA&state={STATE}", None)

        oauth.get_access_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_state_in_redirect_fails(self, api, oauth):
        with pytest.raises(TokenExchangeFailed):
            await api.request_access_and_refresh_tokens(f"{CALLBACK}?code=AAA", STATE)

        oauth.get_access_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_code_fails(self, api, oauth):
        with pytest.raises(TokenExchangeFailed):
            await api.request_access_and_refresh_tokens(f"{CALLBACK}?state={STATE}", STATE)

    @pytest.mark.asyncio
    async def test_access_denied(self, api, oauth):
        with pytest.raises(AccessDenied):
            await api.request_access_and_refresh_tokens(
                f"{CALLBACK}?error=access_denied&state={STATE}", STATE
            )

    @pytest.mark.asyncio
    async def test_other_error_uses_description(self, api, oauth):
        with pytest.raises(TokenExchangeFailed) as excinfo:
            await api.request_access_and_refresh_tokens(
                f"{CALLBACK}?error=server_error&error_description=Try+later&state={STATE}", STATE
            )

        assert excinfo.value.message == "Try later"

    @pytest.mark.asyncio
    async def test_library_failure_becomes_token_exchange_failed(self, api, oauth):
        oauth.get_access_token.side_effect = SpotifyOauthError(
            "error: invalid_grant", error="invalid_grant", error_description="Invalid authorization code"
        )

        with pytest.raises(TokenExchangeFailed) as excinfo:
            await api.request_access_and_refresh_tokens(f"{CALLBACK}?code=AAA&state={STATE}", STATE)

        assert excinfo.value.message == "Invalid authorization code"


class TestCancelledExchange:

    @staticmethod
    def slow_exchange(cache_path, started, release):
        def exchange(**kwargs):
            started.set()
            release.wait(5)
            cache_path.write_text(json.dumps({"access_token": "late"}))
            return "late"
        return exchange

    async def cancel_midway(self, api, oauth, cache_path):
        started, release = threading.Event(), threading.Event()
        oauth.get_access_token.side_effect = self.slow_exchange(cache_path, started, release)
        task = asyncio.create_task(
            api.request_access_and_refresh_tokens(f"{CALLBACK}?code=AAA&state={STATE}", STATE)
        )
        await asyncio.to_thread(started.wait, 5)
        task.cancel()
        release.set()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_tokens_written_after_cancel_are_removed(self, api, oauth, cache_path):
        await self.cancel_midway(api, oauth, cache_path)

        assert not cache_path.exists()

    @pytest.mark.asyncio
    async def test_previous_tokens_are_put_back(self, api, oauth, cache_path):
        cache_path.write_text(json.dumps({"access_token": "old", "refresh_token": "rt"}))

        await self.cancel_midway(api, oauth, cache_path)

        assert json.loads(cache_path.read_text())["access_token"] == "old"


class TestAuthorization:

    @pytest.mark.asyncio
    async def test_authorize_url_carries_state(self, api, oauth):
        url = await api.authorize(STATE)

        assert STATE in url
        oauth.get_authorize_url.assert_called_once_with(state=STATE)

    @pytest.mark.asyncio
    async def test_missing_credentials(self, cache_path):
        api = SpotifyApi(client_id="", client_secret="", cache_path=str(cache_path))

        assert not await api.has_valid_token()
        with pytest.raises(AuthorizationError):
            await api.authorize(STATE)

    @pytest.mark.asyncio
    async def test_has_valid_token(self, api, oauth):
        assert await api.has_valid_token()

        oauth.validate_token.return_value = None
        assert not await api.has_valid_token()

    @pytest.mark.asyncio
    async def test_deauthorize_removes_cache_and_is_idempotent(self, api, cache_path):
        cache_path.write_text('{"access_token": "at"}')

        await api.deauthorize()
        await api.deauthorize()

        assert not cache_path.exists()

    @pytest.mark.asyncio
    async def test_deauthorize_while_validating_in_worker(self, api, oauth):
        def deauthorize_midway(token_info):
            asyncio.run(api.deauthorize())
            return {"access_token": "at"}

        oauth.validate_token.side_effect = deauthorize_midway

        assert await api.has_valid_token()
        oauth.validate_token.side_effect = None
        assert await api.has_valid_token()


class TestWebApi:

    @pytest.mark.asyncio
    async def test_available_devices(self, api, oauth, spotify):
        spotify.devices.return_value = {"devices": [
            {"id": "1", "is_active": False, "is_restricted": False, "name": "Phone"},
            {"id": None, "is_active": True, "is_restricted": False, "name": "Web"},
        ]}

        devices = await api.available_devices()

        assert [d.id for d in devices] == ["1", None]
        assert devices[1].is_active

    @pytest.mark.asyncio
    async def test_play_passes_context_and_device(self, api, oauth, spotify):
        request = PlaybackRequest(track_uri="t:7", context_uri="a:42", offset_uri="t:7")

        await api.play(request, "dev1")

        spotify.start_playback.assert_called_once_with(
            device_id="dev1", context_uri="a:42", offset={"uri": "t:7"}
        )

    @pytest.mark.asyncio
    async def test_top_tracks(self, api, oauth, spotify, sample_track_data):
        spotify.current_user_top_tracks.return_value = {"items": [sample_track_data]}

        result = await api.current_user_top_tracks(TimeRange.LONG_TERM, 0, 10)

        spotify.current_user_top_tracks.assert_called_once_with(limit=10, offset=0, time_range="long_term")
        assert result[0].album.uri == "spotify:album:42"

    @pytest.mark.asyncio
    async def test_http_error_becomes_request_failed(self, api, oauth, spotify):
        spotify.devices.side_effect = SpotifyException(503, -1, "Service unavailable")

        with pytest.raises(RequestFailed) as excinfo:
            await api.available_devices()

        assert excinfo.value.message == "Service unavailable"

    @pytest.mark.asyncio
    async def test_not_logged_in(self, api, oauth, spotify):
        oauth.validate_token.return_value = None

        with pytest.raises(RequestFailed):
            await api.available_devices()

        spotify.devices.assert_not_called()
