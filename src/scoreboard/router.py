import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

import config
from scoreboard.export import ExportError, card_rows, render_results_png, summary_text
from scoreboard.functions import compute_standings, export_filename
from scoreboard.models import EditorSession
from scoreboard.store import (
    LastMatchError,
    MatchNotFound,
    PlayerNotFound,
    SessionNotFound,
    TournamentStore,
)
from scoreboard.summary import generate_tournament_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scoreboard", tags=["Scoreboard"])
templates = Jinja2Templates(directory=Path(__file__).resolve().parent.parent / "templates")

# In-memory storage, one entry per editor session
store = TournamentStore()

EXPORT_FAILED_NOTICE = "Could not download image. Please try again."
SUMMARY_PENDING_NOTICE = "A summary is already being generated."


def _get_session(sid: str) -> EditorSession:
    try:
        return store.get(sid)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Scoreboard not found")


def _redirect(session: EditorSession) -> RedirectResponse:
    return RedirectResponse(f"/scoreboard/session/{session.id}", status_code=303)


# Routes

@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(request, "scoreboard/index.html", {
        "sessions": store.list_sessions(),
    })

@router.post("/session/create")
async def create_session():
    session = store.create_session()
    return _redirect(session)

@router.head("/session/{sid}")
async def session_exists(sid: str):
    _get_session(sid)
    return Response(status_code=200)

@router.get("/session/{sid}", response_class=HTMLResponse)
async def session_view(request: Request, sid: str, match: Optional[int] = None):
    session = _get_session(sid)
    if match is not None:
        try:
            store.select_match(session, match)
        except MatchNotFound:
            raise HTTPException(status_code=404, detail="Match not found")

    data = session.data
    return templates.TemplateResponse(request, "scoreboard/editor.html", {
        "session": session,
        "tournament": data,
        "standings": card_rows(compute_standings(data.players)),
        "summary_text": summary_text(session.summary, config.AI_AVAILABLE),
        "active_match": data.find_match(session.active_match_id),
        "notice": session.pop_notice(),
        "ai_available": config.AI_AVAILABLE,
    })

@router.get("/session/{sid}/standings")
async def session_standings(sid: str):
    session = _get_session(sid)
    return {
        "title": session.data.title,
        "date": session.data.date,
        "match_count": len(session.data.matches),
        "standings": [asdict(s) for s in compute_standings(session.data.players)],
    }

@router.post("/session/{sid}/details")
async def update_details(
    sid: str,
    title: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
):
    session = _get_session(sid)
    store.update_details(session, title=title, date=date)
    return _redirect(session)

@router.post("/session/{sid}/match/add")
async def add_match(sid: str):
    session = _get_session(sid)
    store.add_match(session)
    return _redirect(session)

@router.post("/session/{sid}/match/{match_id}/remove")
async def remove_match(sid: str, match_id: int):
    session = _get_session(sid)
    try:
        store.remove_match(session, match_id)
    except LastMatchError as e:
        session.notice = str(e)
    except MatchNotFound:
        raise HTTPException(status_code=404, detail="Match not found")
    return _redirect(session)

@router.post("/session/{sid}/player/add")
async def add_player(sid: str):
    session = _get_session(sid)
    store.add_player(session)
    return _redirect(session)

@router.post("/session/{sid}/player/{player_id}/remove")
async def remove_player(sid: str, player_id: int):
    session = _get_session(sid)
    store.remove_player(session, player_id)
    return _redirect(session)

@router.post("/session/{sid}/player/{player_id}/rename")
async def rename_player(sid: str, player_id: int, name: str = Form("")):
    session = _get_session(sid)
    try:
        store.rename_player(session, player_id, name.strip())
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    return _redirect(session)

@router.post("/session/{sid}/player/{player_id}/result")
async def set_result(
    sid: str,
    player_id: int,
    match_id: int = Form(...),
    kills: Optional[str] = Form(None),
    placement: Optional[str] = Form(None),
):
    session = _get_session(sid)
    try:
        for field, raw in (("kills", kills), ("placement", placement)):
            if raw is None:
                continue
            store.set_result(session, player_id, match_id, field, raw)
    except PlayerNotFound:
        raise HTTPException(status_code=404, detail="Player not found")
    except MatchNotFound:
        raise HTTPException(status_code=404, detail="Match not found")
    session.active_match_id = match_id
    return _redirect(session)

@router.post("/session/{sid}/players/bulk")
async def bulk_replace_players(sid: str, names: str = Form("")):
    session = _get_session(sid)
    store.bulk_replace_players(session, names)
    return _redirect(session)

@router.post("/session/{sid}/summary")
async def generate_summary(sid: str):
    session = _get_session(sid)
    if session.is_loading_summary:
        session.notice = SUMMARY_PENDING_NOTICE
        return _redirect(session)

    session.is_loading_summary = True
    session.summary = ""
    try:
        standings = compute_standings(session.data.players)
        session.summary = await generate_tournament_summary(standings, len(session.data.matches))
    finally:
        session.is_loading_summary = False
    return _redirect(session)

@router.get("/session/{sid}/export.png")
async def export_image(sid: str):
    session = _get_session(sid)
    data = session.data
    try:
        png = await run_in_threadpool(
            render_results_png, data, compute_standings(data.players), session.summary, config.AI_AVAILABLE
        )
    except ExportError:
        logger.exception("Export of scoreboard %s failed", session.id)
        session.notice = EXPORT_FAILED_NOTICE
        return _redirect(session)

    filename = export_filename(data.title)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.post("/session/{sid}/delete")
async def delete_session(sid: str):
    store.delete(sid)
    return RedirectResponse("/scoreboard/", status_code=303)
