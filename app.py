from __future__ import annotations

import logging
import os
import random
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from board.hexpos import Pos
from board.render_ascii import render_map_ascii
from board.units import PlayerID
from skirmish.ai import wander
from skirmish.battlefield import Battlefield
from skirmish.combat import CombatStats
from scenarios.skirmish import build_battlefield

logger = logging.getLogger(__name__)

app = FastAPI(title="Hex Skirmish")
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def map_path() -> Optional[str]:
    return os.environ.get("HEXSKIRMISH_MAP_PATH") or None


def rng_seed() -> Optional[int]:
    raw = os.environ.get("HEXSKIRMISH_SEED")
    return int(raw) if raw else None


@dataclass
class GameSession:
    battlefield: Battlefield
    rng: random.Random
    pending: Optional[CombatStats] = None


# In-memory only: games do not survive a restart.
SESSIONS: Dict[str, GameSession] = {}


def _new_session() -> str:
    path = map_path()
    map_text = Path(path).read_text(encoding="utf-8") if path else None
    game_id = str(uuid.uuid4())
    SESSIONS[game_id] = GameSession(battlefield=build_battlefield(map_text), rng=random.Random(rng_seed()))
    logger.info("Created game %s (map=%s)", game_id, path or "default")
    return game_id


def _load_session(game_id: str) -> GameSession:
    session = SESSIONS.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No such game")
    return session


def _tail(lines: list[str], n: int = 50) -> list[str]:
    if n <= 0:
        return []
    return lines[-n:]


def _parse_pos(parts: list[str]) -> Pos:
    x, y, z = (int(p) for p in parts)
    return Pos(x, y, z)


def _apply_command(session: GameSession, command: str, viewer: str = "A") -> list[str]:
    """
    Minimal command surface:
      move <unit_id> <x> <y> <z>
      attack <unit_id> <x> <y> <z>   (stores a preview)
      confirm | withdraw
      wander <unit_id>
      next [<unit_id>]   (next unit of the viewer with movement left)
      end
    """
    cmd = command.strip()
    if not cmd:
        return ["(no command)"]

    bf = session.battlefield
    parts = cmd.split()
    head = parts[0].lower()

    if head in ("move", "attack"):
        if len(parts) != 5:
            return [f"Usage: {head} <unit_id> <x> <y> <z>"]
        try:
            unit_id = int(parts[1])
            target = _parse_pos(parts[2:])
        except ValueError as e:
            return [f"ERROR: {e}"]
        if unit_id not in bf.units:
            return [f"ERROR: no such unit {unit_id}"]

        if head == "move":
            ok, msg = bf.move_unit_to(unit_id, target)
            if not ok:
                return [f"ERROR: {msg}"]
            # A preview is only valid for the board it was built on.
            session.pending = None
            return [msg]

        stats = bf.prepare_attack(unit_id, target)
        if stats is None:
            return [f"ERROR: {target} cannot be attacked by unit {unit_id}"]
        session.pending = stats
        return ["Expected results"] + stats.summary_lines()

    if head == "confirm":
        if session.pending is None:
            return ["ERROR: no attack pending"]
        stats, session.pending = session.pending, None
        try:
            bf.confirm_attack(stats, session.rng)
        except (ValueError, KeyError) as e:
            return [f"ERROR: {e}"]
        return stats.summary_lines()

    if head == "withdraw":
        if session.pending is None:
            return ["ERROR: no attack pending"]
        session.pending = None
        return ["Attack withdrawn."]

    if head == "wander":
        if len(parts) != 2:
            return ["Usage: wander <unit_id>"]
        try:
            unit_id = int(parts[1])
        except ValueError:
            return ["unit_id must be an integer"]
        if unit_id not in bf.units:
            return [f"ERROR: no such unit {unit_id}"]
        if not wander(bf, unit_id, session.rng):
            return [f"Unit {unit_id} stays put."]
        session.pending = None
        return [f"Unit {unit_id} wandered."]

    if head == "next":
        after: Optional[int] = None
        if len(parts) == 2:
            try:
                after = int(parts[1])
            except ValueError:
                return ["unit_id must be an integer"]
        uid = bf.units.next_active_unit(after, PlayerID(viewer))
        if uid is None:
            return [f"No unit of {viewer} can move."]
        return [f"Next: unit {uid} ({bf.units.get(uid).name})."]

    if head == "end":
        session.pending = None
        bf.new_turn()
        return [f"Turn {bf.turn}."]

    return [f"Unknown command: {cmd}"]


def _pos_dict(pos: Pos) -> dict[str, int]:
    return {"x": pos.x, "y": pos.y, "z": pos.z}


def _ui_state(game_id: str, viewer: str = "A", selected: Optional[int] = None) -> dict[str, Any]:
    session = _load_session(game_id)
    bf = session.battlefield
    # Render for viewer: their units print upper-case.
    viewer_player = PlayerID(viewer)
    # Cells the selected unit can reach are marked on the map.
    reachable = bf.reachable_positions(selected) if selected is not None and selected in bf.units else {}
    units = [
        {
            "unit_id": u.unit_id,
            "name": u.name,
            "owner": u.owner.name,
            "pos": _pos_dict(u.pos),
            "hp": u.hp,
            "movements": u.movements,
        }
        for u in bf.units.units_sorted()
    ]
    return {
        "game_id": game_id,
        "viewer": viewer,
        "turn_number": bf.turn,
        "units": units,
        "army": [u.unit_id for u in bf.units.owned_by(viewer_player)],
        "next_unit": bf.units.next_active_unit(selected, viewer_player),
        "selected": selected,
        "map_text": render_map_ascii(bf.terrain, bf.units, viewer=viewer_player, highlight=reachable),
        "log_tail": "\n".join(_tail(bf.log, 60)),
        "pending": session.pending.summary_lines() if session.pending is not None else None,
    }


@app.get("/", response_class=HTMLResponse)
def index(request: Request, game_id: Optional[str] = None, viewer: str = "A", selected: Optional[int] = None):
    # If no game exists yet, create one and redirect to it.
    if game_id is None:
        return RedirectResponse(url=f"/?game_id={_new_session()}&viewer={viewer}", status_code=302)

    state = _ui_state(game_id, viewer, selected)
    return templates.TemplateResponse(request, "index.html", {**state, "games": sorted(SESSIONS)})


@app.get("/games")
def list_games():
    return {"games": sorted(SESSIONS)}


@app.post("/games")
def create_game():
    return {"game_id": _new_session()}


@app.get("/games/{game_id}/state")
def get_state(game_id: str, viewer: str = "A", selected: Optional[int] = None):
    return _ui_state(game_id, viewer, selected)


@app.get("/games/{game_id}/units/{unit_id}/reachable")
def get_reachable(game_id: str, unit_id: int):
    bf = _load_session(game_id).battlefield
    if unit_id not in bf.units:
        raise HTTPException(status_code=404, detail="No such unit")
    reachable = bf.reachable_positions(unit_id)
    return {
        "unit_id": unit_id,
        "reachable": [
            {
                "pos": _pos_dict(pos),
                "cost": a.cost,
                "exhausting": a.is_exhausting,
                "attack": a.is_attack,
                "path": [_pos_dict(p) for p in a.path],
            }
            for pos, a in sorted(reachable.items(), key=lambda kv: kv[0].as_tuple())
        ],
    }


@app.post("/games/{game_id}/command")
def post_command(game_id: str, payload: Dict[str, Any]):
    session = _load_session(game_id)
    command = str(payload.get("command", ""))
    viewer = str(payload.get("viewer", "A"))
    logger.info("Game %s command: %s", game_id, command)

    out = _apply_command(session, command, viewer)
    return {"events": out, "state": _ui_state(game_id, viewer)}


@app.post("/ui/command", response_class=HTMLResponse)
def ui_command(
    request: Request,
    game_id: str = Form(...),
    viewer: str = Form("A"),
    command: str = Form(""),
):
    session = _load_session(game_id)
    events = _apply_command(session, command, viewer)

    state = _ui_state(game_id, viewer)
    return templates.TemplateResponse(
        request,
        "index.html",
        {**state, "games": sorted(SESSIONS), "last_events": "\n".join(events)},
    )
