# bisca_advisor/snapshot.py
from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .cards import card_to_dict, dict_to_card
from .state import (
    GameConfig,
    GameState,
    GameStatus,
    PlayedCard,
    Player,
    PlayerId,
    PlayStyle,
    Recommendation,
    RecommendationDetails,
    RiskLevel,
    Round,
    SideId,
    StyleAnalysis,
    StyleCounts,
    Team,
    TeamId,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
STORAGE_SLOT = "bisca-game-storage"


def _side_to_str(side: Optional[SideId]) -> Optional[str]:
    return side.value if side is not None else None


def _side_from_str(value: Optional[str]) -> Optional[SideId]:
    if value is None:
        return None
    if value.startswith("team"):
        return TeamId(value)
    return PlayerId(value)


def _round_to_dict(r: Round) -> Dict[str, Any]:
    return {
        "number": r.number,
        "played_cards": [
            {
                "card": card_to_dict(pc.card),
                "player_id": pc.player_id.value,
                "order": pc.order,
            }
            for pc in r.played_cards
        ],
        "winner": _side_to_str(r.winner),
        "points_won": r.points_won,
        "complete": r.complete,
    }


def _round_from_dict(d: Dict[str, Any]) -> Round:
    return Round(
        number=int(d["number"]),
        played_cards=[
            PlayedCard(
                card=dict_to_card(pc["card"]),
                player_id=PlayerId(pc["player_id"]),
                order=int(pc["order"]),
            )
            for pc in d.get("played_cards", [])
        ],
        winner=PlayerId(d["winner"]) if d.get("winner") else None,
        points_won=int(d.get("points_won", 0)),
        complete=bool(d.get("complete", False)),
    )


def _recommendation_to_dict(rec: Recommendation) -> Dict[str, Any]:
    return {
        "card": card_to_dict(rec.card),
        "priority": rec.priority,
        "reason": rec.reason,
        "risk_level": rec.risk_level.value,
        "win_probability": rec.win_probability,
        "details": {
            "hand_strength": rec.details.hand_strength,
            "remaining_card_count": rec.details.remaining_card_count,
            "trump_probability": rec.details.trump_probability,
            "points_at_stake": rec.details.points_at_stake,
        },
    }


def _recommendation_from_dict(d: Dict[str, Any]) -> Recommendation:
    details = d["details"]
    return Recommendation(
        card=dict_to_card(d["card"]),
        priority=int(d["priority"]),
        reason=d["reason"],
        risk_level=RiskLevel(d["risk_level"]),
        win_probability=int(d["win_probability"]),
        details=RecommendationDetails(
            hand_strength=int(details["hand_strength"]),
            remaining_card_count=int(details["remaining_card_count"]),
            trump_probability=int(details["trump_probability"]),
            points_at_stake=int(details["points_at_stake"]),
        ),
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Serialize a GameState to a JSON-compatible dict."""
    config = state.config
    return {
        "schema_version": SCHEMA_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "status": state.status.value,
        "config": {
            "player_count": config.player_count,
            "player_names": list(config.player_names),
            "user_id": config.user_id.value,
            "trump": card_to_dict(config.trump) if config.trump else None,
        },
        "players": [
            {
                "id": p.id.value,
                "name": p.name,
                "points": p.points,
                "won_cards": [card_to_dict(c) for c in p.won_cards],
                "hand_size": p.hand_size,
                "is_user": p.is_user,
            }
            for p in state.players.values()
        ],
        "teams": (
            [
                {
                    "id": t.id.value,
                    "name": t.name,
                    "member_ids": [pid.value for pid in t.member_ids],
                    "points": t.points,
                    "won_cards": [card_to_dict(c) for c in t.won_cards],
                }
                for t in state.teams.values()
            ]
            if state.teams is not None
            else None
        ),
        "trump": card_to_dict(state.trump) if state.trump else None,
        "rounds": [_round_to_dict(r) for r in state.rounds],
        "current_round": (
            _round_to_dict(state.current_round) if state.current_round else None
        ),
        "next_player": _side_to_str(state.next_player),
        "first_player_of_game": _side_to_str(state.first_player_of_game),
        "cards_remaining_in_deck": state.cards_remaining_in_deck,
        "played_cards": [card_to_dict(c) for c in state.played_cards],
        "user_hand": [card_to_dict(c) for c in state.user_hand],
        "winner": _side_to_str(state.winner),
        "style_analyses": [
            {
                "player_id": a.player_id.value,
                "style": a.style.value,
                "confidence": a.confidence,
                "aggressive_plays": a.counts.aggressive_plays,
                "defensive_plays": a.counts.defensive_plays,
                "total_plays": a.counts.total_plays,
            }
            for a in state.style_analyses.values()
        ],
        "current_recommendation": (
            _recommendation_to_dict(state.current_recommendation)
            if state.current_recommendation
            else None
        ),
    }


def state_from_dict(d: Dict[str, Any]) -> GameState:
    """Deserialize a GameState from a dict produced by state_to_dict."""
    config_d = d.get("config", {})
    config = GameConfig(
        player_count=int(config_d.get("player_count", 2)),
        player_names=list(config_d.get("player_names", [])),
        user_id=PlayerId(config_d.get("user_id", PlayerId.PLAYER1.value)),
        trump=dict_to_card(config_d["trump"]) if config_d.get("trump") else None,
    )

    players = {}
    for p in d.get("players", []):
        player = Player(
            id=PlayerId(p["id"]),
            name=p["name"],
            points=int(p.get("points", 0)),
            won_cards=[dict_to_card(c) for c in p.get("won_cards", [])],
            hand_size=int(p.get("hand_size", 0)),
            is_user=bool(p.get("is_user", False)),
        )
        players[player.id] = player

    teams = None
    if d.get("teams") is not None:
        teams = {}
        for t in d["teams"]:
            team = Team(
                id=TeamId(t["id"]),
                name=t["name"],
                member_ids=[PlayerId(pid) for pid in t["member_ids"]],
                points=int(t.get("points", 0)),
                won_cards=[dict_to_card(c) for c in t.get("won_cards", [])],
            )
            teams[team.id] = team

    analyses = {}
    for a in d.get("style_analyses", []):
        analysis = StyleAnalysis(
            player_id=PlayerId(a["player_id"]),
            style=PlayStyle(a.get("style", PlayStyle.UNDETERMINED.value)),
            confidence=int(a.get("confidence", 0)),
            counts=StyleCounts(
                aggressive_plays=int(a.get("aggressive_plays", 0)),
                defensive_plays=int(a.get("defensive_plays", 0)),
                total_plays=int(a.get("total_plays", 0)),
            ),
        )
        analyses[analysis.player_id] = analysis

    recommendation = d.get("current_recommendation")
    return GameState(
        status=GameStatus(d.get("status", GameStatus.SETUP.value)),
        config=config,
        players=players,
        teams=teams,
        trump=dict_to_card(d["trump"]) if d.get("trump") else None,
        rounds=[_round_from_dict(r) for r in d.get("rounds", [])],
        current_round=(
            _round_from_dict(d["current_round"]) if d.get("current_round") else None
        ),
        next_player=PlayerId(d["next_player"]) if d.get("next_player") else None,
        first_player_of_game=(
            PlayerId(d["first_player_of_game"])
            if d.get("first_player_of_game")
            else None
        ),
        cards_remaining_in_deck=int(d.get("cards_remaining_in_deck", 40)),
        played_cards=[dict_to_card(c) for c in d.get("played_cards", [])],
        user_hand=[dict_to_card(c) for c in d.get("user_hand", [])],
        winner=_side_from_str(d.get("winner")),
        style_analyses=analyses,
        current_recommendation=(
            _recommendation_from_dict(recommendation) if recommendation else None
        ),
    )


def state_to_json(state: GameState) -> str:
    return json.dumps(state_to_dict(state), indent=2, ensure_ascii=False)


def state_from_json(s: str) -> GameState:
    return state_from_dict(json.loads(s))


@runtime_checkable
class SnapshotStore(Protocol):
    """Key-value storage for session snapshots."""

    def load(self, slot: str) -> Optional[Dict[str, Any]]:
        """Return the snapshot stored under `slot`, or None."""
        raise NotImplementedError

    def save(self, slot: str, snapshot: Dict[str, Any]) -> None:
        raise NotImplementedError


class MemoryStore:
    """In-process store, handy for tests and embedding."""

    def __init__(self) -> None:
        self._slots: Dict[str, Dict[str, Any]] = {}

    def load(self, slot: str) -> Optional[Dict[str, Any]]:
        data = self._slots.get(slot)
        return json.loads(json.dumps(data)) if data is not None else None

    def save(self, slot: str, snapshot: Dict[str, Any]) -> None:
        self._slots[slot] = json.loads(json.dumps(snapshot))


class JsonFileStore:
    """
    All slots in one JSON file.

    Every save rewrites the whole file through a temporary sibling that is
    then swapped in with `os.replace`, so a crash mid-write leaves the
    previous file intact.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        """Raises ValueError when the file exists but is not a JSON object."""
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def load(self, slot: str) -> Optional[Dict[str, Any]]:
        return self._read_all().get(slot)

    def save(self, slot: str, snapshot: Dict[str, Any]) -> None:
        try:
            data = self._read_all()
        except ValueError as exc:
            logger.warning("Discarding unreadable snapshot file %s: %s", self.path, exc)
            data = {}
        data[slot] = snapshot
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        os.replace(tmp_path, self.path)
