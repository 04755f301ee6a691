"""Core services: authorization flow, device resolution, playback, top tracks."""
from spotwrap.core.auth_flow import AuthorizationFlowController
from spotwrap.core.device_resolver import DeviceResolver
from spotwrap.core.playback import PlaybackDispatcher
from spotwrap.core.top_tracks import TopTracksLoader

__all__ = [
    "AuthorizationFlowController",
    "DeviceResolver",
    "PlaybackDispatcher",
    "TopTracksLoader",
]
