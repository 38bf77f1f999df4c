"""
REST API for the APA 9-Ball scorer.
Thin wrappers around the rack engine; matches live in process memory.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from backend.apa import (
    ApaMatch,
    MatchStateError,
    MatchValidationError,
    Player,
    calculate_match_points,
    compute_ppi,
    format_ppi,
    parse_match_point_outcome,
    parse_one_away_scope,
)
from backend.config import cors_origins

logger = logging.getLogger(__name__)

# ---------- In-memory match registry ----------
_MATCHES: dict[str, ApaMatch] = {}


def get_match(match_id: str) -> ApaMatch:
    """Raises KeyError for an unknown match."""
    return _MATCHES[match_id]


def clear_matches() -> None:
    _MATCHES.clear()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield
    clear_matches()


# ---------- FastAPI app ----------
app = FastAPI(
    title="APA 9-Ball Scorer API",
    description="Rack-by-rack APA 9-Ball scoring with match-point conversion",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request/Response models ----------


class CreateMatchRequest(BaseModel):
    player1_skill_level: int = Field(..., ge=1, le=9)
    player2_skill_level: int = Field(..., ge=1, le=9)
    lag_winner: Player = Field(Player.A, description="Seat that won the lag and breaks first")
    one_away_scope: str | None = Field(None, description="player, rack or target; default from APA_ONE_AWAY_SCOPE")


class DefensiveShotRequest(BaseModel):
    player: Player
    delta: int = Field(1, ge=-1, le=1)


def _match_response(match: ApaMatch) -> dict[str, Any]:
    session = match.session
    totals = session.totals
    reached = session.target_reached_player
    live = session.live_update()
    return {
        "match_id": match.match_id,
        "rack_number": session.rack_number,
        "balls": [v.to_dict() for v in session.ball_views],
        "totals": {
            "player1_points": totals.player_a_points,
            "player2_points": totals.player_b_points,
            "dead_points": totals.dead_points,
            "total": totals.total,
        },
        "live": {
            "player1_points": live.player1_points,
            "player2_points": live.player2_points,
        },
        "rack_error": session.rack_error,
        "active_player": session.active_player.value,
        "shared_innings": session.shared_innings,
        "dead_ball_mode": session.dead_ball_mode,
        "target_reached_player": reached.value if reached else None,
        "can_end_rack": session.can_end_rack,
        "can_turn_over": session.can_turn_over,
        "summary": match.summary(),
    }


def _lookup(match_id: str) -> ApaMatch:
    try:
        return get_match(match_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Match not found")


# ---------- Routes ----------


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/matches")
def create_match(req: CreateMatchRequest) -> dict[str, Any]:
    try:
        scope = parse_one_away_scope(req.one_away_scope) if req.one_away_scope else None
        match = ApaMatch(
            req.player1_skill_level,
            req.player2_skill_level,
            req.lag_winner,
            one_away_scope=scope,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _MATCHES[match.match_id] = match
    logger.info("Created match %s", match.match_id)
    return _match_response(match)


@app.get("/matches/{match_id}")
def read_match(match_id: str) -> dict[str, Any]:
    return _match_response(_lookup(match_id))


@app.delete("/matches/{match_id}")
def delete_match(match_id: str) -> dict[str, str]:
    _lookup(match_id)
    del _MATCHES[match_id]
    return {"status": "deleted", "match_id": match_id}


@app.post("/matches/{match_id}/balls/{ball_number}")
def click_ball(match_id: str, ball_number: int) -> dict[str, Any]:
    match = _lookup(match_id)
    try:
        changed = match.session.click_ball(ball_number)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"changed": changed, **_match_response(match)}


@app.post("/matches/{match_id}/dead-ball-mode")
def toggle_dead_ball_mode(match_id: str) -> dict[str, Any]:
    match = _lookup(match_id)
    match.session.toggle_dead_ball_mode()
    return _match_response(match)


@app.post("/matches/{match_id}/turn-over")
def turn_over(match_id: str) -> dict[str, Any]:
    match = _lookup(match_id)
    changed = match.session.turn_over()
    return {"changed": changed, **_match_response(match)}


@app.post("/matches/{match_id}/defensive-shots")
def adjust_defensive_shots(match_id: str, req: DefensiveShotRequest) -> dict[str, Any]:
    match = _lookup(match_id)
    match.session.adjust_defensive_shots(req.player, req.delta)
    return _match_response(match)


@app.post("/matches/{match_id}/reset-rack")
def reset_rack(match_id: str) -> dict[str, Any]:
    match = _lookup(match_id)
    match.session.reset_rack()
    return _match_response(match)


@app.post("/matches/{match_id}/end-rack")
def end_rack(match_id: str) -> dict[str, Any]:
    match = _lookup(match_id)
    try:
        result = match.end_rack()
    except MatchStateError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=400, detail=match.session.rack_error or "Rack cannot be ended yet")
    validation_error = None
    if match.is_complete:
        try:
            match.validate_for_save()
        except MatchValidationError as e:
            validation_error = str(e)
    return {"rack": result.to_dict(), "validation_error": validation_error, **_match_response(match)}


@app.get("/match-points")
def match_points(
    loser_skill_level: int = Query(..., description="Loser's skill level (1-9)"),
    loser_points: int = Query(..., ge=0),
) -> dict[str, Any]:
    outcome = calculate_match_points(loser_skill_level, loser_points)
    split = parse_match_point_outcome(outcome)
    return {"outcome": outcome, "winner": split.winner, "loser": split.loser}


@app.get("/ppi")
def ppi(
    score: str = Query(...),
    innings: str = Query(...),
    defensive_shots: str = Query("0"),
) -> dict[str, Any]:
    result = compute_ppi(score, innings, defensive_shots)
    return {"value": result.value, "is_valid": result.is_valid, "display": format_ppi(result)}


# ---------- Run with: uvicorn backend.api:app --reload ----------
