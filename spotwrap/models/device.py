"""Playback device as reported by /me/player/devices."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Device:
    """Remote endpoint that can accept a play command.

    A device without an id cannot be targeted; a restricted device rejects
    Web API commands.
    """
    id: Optional[str]
    is_restricted: bool
    is_active: bool
    name: str = ""
    type: str = ""
    volume_percent: Optional[int] = None

    @property
    def is_usable(self) -> bool:
        return not self.is_restricted and self.id is not None

    @classmethod
    def from_spotify_data(cls, data: dict) -> "Device":
        return cls(
            id=data.get("id"),
            is_restricted=bool(data.get("is_restricted", False)),
            is_active=bool(data.get("is_active", False)),
            name=data.get("name") or "",
            type=data.get("type") or "",
            volume_percent=data.get("volume_percent"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "is_active": self.is_active,
            "is_restricted": self.is_restricted,
            "volume_percent": self.volume_percent,
        }
