"""Resolve a device, then play a track on it."""
import logging

from spotwrap.core.device_resolver import DeviceResolver
from spotwrap.core.errors import MissingTrackReference, NoAvailableDevice, RequestFailed
from spotwrap.models.device import Device
from spotwrap.models.playback import PlaybackRequest
from spotwrap.models.track import Track

logger = logging.getLogger(__name__)

PLAY_ALERT_TITLE = "Couldn't Play Track"


def build_playback_request(track: Track) -> PlaybackRequest:
    """Play from the track's album when its URI is known, otherwise the bare track."""
    if not track.uri:
        raise MissingTrackReference()
    album_uri = track.album.uri if track.album is not None else None
    if album_uri:
        return PlaybackRequest(track_uri=track.uri, context_uri=album_uri, offset_uri=track.uri)
    return PlaybackRequest(track_uri=track.uri)


class PlaybackDispatcher:
    def __init__(self, api, resolver: DeviceResolver) -> None:
        self._api = api
        self._resolver = resolver

    async def play_track(self, track: Track) -> Device:
        """Issue exactly one play command and return the device it went to.

        No retry: MissingTrackReference, NoAvailableDevice, RequestFailed and
        SupersededRequest are left for the caller.
        """
        request = build_playback_request(track)
        try:
            device = await self._resolver.resolve()
            if device is None:
                raise NoAvailableDevice()
            await self._api.play(request, device.id)
        except RequestFailed as e:
            logger.warning("Couldn't play %s: %s", track.uri, e)
            raise RequestFailed(e.message, title=PLAY_ALERT_TITLE) from e
        logger.info("Playing %s on %s", track.uri, device.name or device.id)
        return device
