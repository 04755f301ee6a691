"""Spotify OAuth: login URL, redirect callback, logout."""
import html

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from spotwrap.api.state import AppState, get_state
from spotwrap.config import SPOTWRAP_WEB_ORIGIN
from spotwrap.core.errors import SpotwrapError

router = APIRouter()


class CompleteLoginBody(BaseModel):
    """The full redirect URL (with ?code=...&state=...) copied from the browser."""
    redirect_url: str


@router.get("")
def get_session(state: AppState = Depends(get_state)):
    """Return authorization status and whether tokens are being retrieved."""
    return state.session.to_dict()


@router.post("/login")
async def login(state: AppState = Depends(get_state)):
    """Start a login: returns the Spotify authorization URL to open."""
    try:
        auth_url = await state.tasks.run(state.auth.begin_login())
    except SpotwrapError as e:
        state.report(e)
        raise HTTPException(status_code=e.status_code, detail=e.alert().to_dict())
    return {"auth_url": auth_url, **state.session.to_dict()}


@router.get("/callback")
async def spotify_callback(request: Request, state: AppState = Depends(get_state)):
    """Exchange code for tokens, then redirect to web app or show the outcome."""
    try:
        await state.tasks.run(state.auth.handle_redirect(str(request.url)))
    except SpotwrapError as e:
        state.report(e)
        return HTMLResponse(
            f"<body><p>{html.escape(e.title)}</p><p>{html.escape(e.message)}</p></body>",
            status_code=e.status_code,
        )
    if SPOTWRAP_WEB_ORIGIN:
        redirect_url = f"{SPOTWRAP_WEB_ORIGIN.rstrip('/')}/?spotify=success"
        return RedirectResponse(url=redirect_url, status_code=302)
    return HTMLResponse(
        "<body><p>Spotify linked successfully. You can close this window.</p></body>"
    )


@router.post("/complete-login")
async def complete_login(body: CompleteLoginBody, state: AppState = Depends(get_state)):
    """
    Finish a login from a pasted redirect URL (when the browser could not reach
    the callback, e.g. the app runs on another machine).
    """
    try:
        await state.tasks.run(state.auth.handle_redirect(body.redirect_url.strip()))
    except SpotwrapError as e:
        state.report(e)
        raise HTTPException(status_code=e.status_code, detail=e.alert().to_dict())
    return {"ok": True, **state.session.to_dict()}


@router.post("/logout")
async def logout(state: AppState = Depends(get_state)):
    """Clear the Spotify token so the user is logged out."""
    await state.auth.logout()
    return {"ok": True, **state.session.to_dict()}
