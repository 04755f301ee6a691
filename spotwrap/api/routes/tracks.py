"""Current user's top tracks."""
from fastapi import APIRouter, Depends, HTTPException, Query

from spotwrap.api.state import AppState, get_state
from spotwrap.config import TOP_TRACKS_LIMIT
from spotwrap.core.errors import SpotwrapError
from spotwrap.models.track import TimeRange

router = APIRouter()


@router.get("")
def get_loaded_tracks(state: AppState = Depends(get_state)):
    """Return the currently displayed top tracks without reloading."""
    return state.top_tracks.to_dict()


@router.get("/top")
async def load_top_tracks(
    time_range: TimeRange = TimeRange.SHORT_TERM,
    offset: int = Query(0, ge=0),
    limit: int = Query(TOP_TRACKS_LIMIT, ge=1, le=50),
    state: AppState = Depends(get_state),
):
    """Reload top tracks; a newer reload replaces any older one still in flight."""
    try:
        await state.tasks.run(state.top_tracks.load(time_range, offset, limit))
    except SpotwrapError as e:
        state.report(e)
        raise HTTPException(status_code=e.status_code, detail=e.alert().to_dict())
    return state.top_tracks.to_dict()
