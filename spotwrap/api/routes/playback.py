"""Devices and play command."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from spotwrap.api.state import AppState, get_state
from spotwrap.core.errors import SpotwrapError, SupersededRequest
from spotwrap.models.track import Album, Track

router = APIRouter()

SUPERSEDED_DETAIL = "Superseded by a newer request."


class AlbumBody(BaseModel):
    uri: Optional[str] = None
    name: str = ""


class TrackBody(BaseModel):
    """Track as listed by /api/tracks/top (uri may be missing)."""
    uri: Optional[str] = None
    id: Optional[str] = None
    name: str = ""
    album: Optional[AlbumBody] = None
    artists: List[str] = []

    def to_track(self) -> Track:
        album = Album(uri=self.album.uri, name=self.album.name) if self.album else None
        return Track(
            uri=self.uri, id=self.id, name=self.name, album=album, artists=list(self.artists)
        )


@router.get("/devices")
async def list_devices(state: AppState = Depends(get_state)):
    """Return available devices and the one a play command would target."""
    try:
        devices, selected = await state.tasks.run(state.devices.devices())
    except SupersededRequest:
        raise HTTPException(status_code=409, detail=SUPERSEDED_DETAIL)
    except SpotwrapError as e:
        state.report(e)
        raise HTTPException(status_code=e.status_code, detail=e.alert().to_dict())
    return {
        "devices": [d.to_dict() for d in devices],
        "selected_device_id": selected.id if selected else None,
    }


@router.post("/play")
async def play_track(body: TrackBody, state: AppState = Depends(get_state)):
    """Play the track on the active device (or the first usable one)."""
    try:
        device = await state.tasks.run(state.playback.play_track(body.to_track()))
    except SupersededRequest:
        raise HTTPException(status_code=409, detail=SUPERSEDED_DETAIL)
    except SpotwrapError as e:
        state.report(e)
        raise HTTPException(status_code=e.status_code, detail=e.alert().to_dict())
    return {"ok": True, "device": device.to_dict()}
