"""Pending user-facing alerts."""
from fastapi import APIRouter, Depends

from spotwrap.api.state import AppState, get_state

router = APIRouter()


@router.get("")
def drain_alerts(state: AppState = Depends(get_state)):
    """Return queued alerts ({title, message}) and clear them."""
    return [a.to_dict() for a in state.alerts.drain()]
