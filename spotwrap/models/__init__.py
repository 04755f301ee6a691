"""Data models for session, devices, tracks, and playback."""
from spotwrap.models.alert import Alert
from spotwrap.models.device import Device
from spotwrap.models.playback import PlaybackRequest
from spotwrap.models.session import AuthorizationStatus, Session
from spotwrap.models.track import Album, TimeRange, Track

__all__ = [
    "Alert",
    "Album",
    "AuthorizationStatus",
    "Device",
    "PlaybackRequest",
    "Session",
    "TimeRange",
    "Track",
]
