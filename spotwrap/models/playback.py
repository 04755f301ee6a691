"""Play command sent to a device."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlaybackRequest:
    """What to play: either a context with an offset, or a single track."""
    track_uri: str
    context_uri: Optional[str] = None
    offset_uri: Optional[str] = None

    def to_start_playback_kwargs(self) -> dict:
        """Keyword arguments for spotipy's Spotify.start_playback."""
        if self.context_uri:
            kwargs = {"context_uri": self.context_uri}
            if self.offset_uri:
                kwargs["offset"] = {"uri": self.offset_uri}
            return kwargs
        return {"uris": [self.track_uri]}
