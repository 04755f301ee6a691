"""Shared application state (injected into routes)."""
from spotwrap.core.alerts import AlertChannel
from spotwrap.core.auth_flow import AuthorizationFlowController
from spotwrap.core.device_resolver import DeviceResolver
from spotwrap.core.errors import SpotwrapError
from spotwrap.core.playback import PlaybackDispatcher
from spotwrap.core.spotify_client import SpotifyApi
from spotwrap.core.tasks import TaskRegistry
from spotwrap.core.top_tracks import TopTracksLoader
from spotwrap.models.session import Session


class AppState:
    """One session per process; every component is wired to the same api and session."""

    def __init__(self, api=None, *, redirect_uri: str | None = None) -> None:
        self.api = api if api is not None else SpotifyApi()
        self.session = Session()
        auth_kwargs = {"redirect_uri": redirect_uri} if redirect_uri else {}
        self.auth = AuthorizationFlowController(self.session, self.api, **auth_kwargs)
        self.devices = DeviceResolver(self.api)
        self.playback = PlaybackDispatcher(self.api, self.devices)
        self.top_tracks = TopTracksLoader(self.api)
        self.alerts = AlertChannel()
        self.tasks = TaskRegistry()

    def report(self, error: SpotwrapError) -> None:
        """Turn a failure into an alert for the UI."""
        self.alerts.publish(error.alert())


_state = AppState()


def get_state() -> AppState:
    return _state
