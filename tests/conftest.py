"""Test configuration and fixtures"""

import asyncio
from typing import List, Optional

import pytest

from spotwrap.core.auth_flow import AuthorizationFlowController
from spotwrap.core.csrf import states_match
from spotwrap.core.errors import AccessDenied, TokenExchangeFailed
from spotwrap.core.spotify_client import parse_redirect
from spotwrap.models.device import Device
from spotwrap.models.playback import PlaybackRequest
from spotwrap.models.session import Session
from spotwrap.models.track import TimeRange, Track

CALLBACK_URI = "http://testserver/api/session/callback"


class FakeSpotifyApi:
    """In-memory stand-in for SpotifyApi that records every call.

    Set a *_gate event to hold the matching call until the test releases it.
    """

    def __init__(self, devices: Optional[List[Device]] = None, token_valid: bool = False):
        self.devices: List[Device] = list(devices or [])
        self.top_tracks = {}
        self.token_valid = token_valid
        self.tokens_saved = False
        self.calls = []
        self.exchange_error: Optional[Exception] = None
        self.devices_error: Optional[Exception] = None
        self.play_error: Optional[Exception] = None
        self.exchange_gate: Optional[asyncio.Event] = None
        self.devices_gates: List[asyncio.Event] = []

    def calls_to(self, name: str) -> list:
        return [c for c in self.calls if c[0] == name]

    async def authorize(self, state: str) -> str:
        self.calls.append(("authorize", state))
        return f"https://accounts.spotify.com/authorize?state={state}"

    async def request_access_and_refresh_tokens(self, redirect_url: str, state: Optional[str]) -> None:
        self.calls.append(("exchange", redirect_url, state))
        if self.exchange_gate is not None:
            await self.exchange_gate.wait()
        params = parse_redirect(redirect_url)
        if params.get("error") == "access_denied":
            raise AccessDenied()
        if not states_match(state, params.get("state")):
            raise TokenExchangeFailed("state mismatch")
        if self.exchange_error is not None:
            raise self.exchange_error
        self.tokens_saved = True
        self.token_valid = True

    async def has_valid_token(self) -> bool:
        return self.token_valid

    async def deauthorize(self) -> None:
        self.calls.append(("deauthorize",))
        self.tokens_saved = False
        self.token_valid = False

    async def available_devices(self) -> List[Device]:
        index = len(self.calls_to("devices"))
        self.calls.append(("devices",))
        if index < len(self.devices_gates):
            await self.devices_gates[index].wait()
        if self.devices_error is not None:
            raise self.devices_error
        return list(self.devices)

    async def play(self, request: PlaybackRequest, device_id: str) -> None:
        self.calls.append(("play", request, device_id))
        if self.play_error is not None:
            raise self.play_error

    async def current_user_top_tracks(self, time_range: TimeRange, offset: int = 0, limit: int = 10) -> List[Track]:
        self.calls.append(("top_tracks", time_range, offset, limit))
        entry = self.top_tracks[TimeRange(time_range)]
        if isinstance(entry, tuple):
            gate, result = entry
            await gate.wait()
        else:
            result = entry
        if isinstance(result, Exception):
            raise result
        return list(result)


def device(id_, active=False, restricted=False, name=""):
    return Device(id=id_, is_active=active, is_restricted=restricted, name=name or f"Device {id_}")


def redirect_url(state: Optional[str], code: str = "AQD-code", base: str = CALLBACK_URI) -> str:
    if state is None:
        return f"{base}?code={code}"
    return f"{base}?code={code}&state={state}"


@pytest.fixture
def api():
    return FakeSpotifyApi()


@pytest.fixture
def session():
    return Session()


@pytest.fixture
def controller(session, api):
    return AuthorizationFlowController(session, api, redirect_uri=CALLBACK_URI)


@pytest.fixture
def sample_track_data():
    """Sample /me/top/tracks item"""
    return {
        "id": "track7",
        "uri": "spotify:track:7",
        "name": "Test Song",
        "artists": [{"id": "artist_123", "name": "Test Artist"}],
        "album": {"id": "album42", "uri": "spotify:album:42", "name": "Test Album"},
    }
