"""Track and album references from the Spotify catalog."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TimeRange(str, Enum):
    """Window for /me/top/tracks."""
    SHORT_TERM = "short_term"
    MEDIUM_TERM = "medium_term"
    LONG_TERM = "long_term"


@dataclass(frozen=True)
class Album:
    uri: Optional[str]
    name: str = ""

    @classmethod
    def from_spotify_data(cls, data: dict) -> "Album":
        return cls(uri=data.get("uri"), name=data.get("name") or "")


@dataclass(frozen=True)
class Track:
    """Catalog track. uri and id are absent for local files and some podcasts."""
    uri: Optional[str]
    id: Optional[str] = None
    name: str = ""
    album: Optional[Album] = None
    artists: List[str] = field(default_factory=list)

    @classmethod
    def from_spotify_data(cls, data: dict) -> "Track":
        album = data.get("album")
        return cls(
            uri=data.get("uri"),
            id=data.get("id"),
            name=data.get("name") or "",
            album=Album.from_spotify_data(album) if album else None,
            artists=[a.get("name", "") for a in data.get("artists") or []],
        )

    def to_dict(self) -> dict:
        return {
            "uri": self.uri,
            "id": self.id,
            "name": self.name,
            "album": (
                {"uri": self.album.uri, "name": self.album.name} if self.album else None
            ),
            "artists": list(self.artists),
        }
