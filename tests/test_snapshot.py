# tests/test_snapshot.py
import json
import random

import pytest

from bisca_advisor.cards import Card, Rank, Suit
from bisca_advisor.engine import (
    FinalizeRound,
    RegisterPlay,
    RequestRecommendation,
    StartGame,
    UpdateUserHand,
    apply_action,
    new_game_state,
)
from bisca_advisor.snapshot import (
    SCHEMA_VERSION,
    JsonFileStore,
    MemoryStore,
    SnapshotStore,
    state_from_dict,
    state_from_json,
    state_to_dict,
    state_to_json,
)
from bisca_advisor.state import GameConfig, GameStatus, PlayerId, TeamId

TRUMP = Card(Rank.TWO, Suit.SPADES)


def _game_in_progress(player_count=2):
    state, _ = apply_action(
        new_game_state(),
        StartGame(GameConfig(player_count=player_count, trump=TRUMP, player_names=["Ana", "Rui"])),
        rng=random.Random(5),
    )
    state, _ = apply_action(state, UpdateUserHand([Card(Rank.ACE, Suit.HEARTS)]))
    state, _ = apply_action(state, RequestRecommendation())
    state, _ = apply_action(
        state, RegisterPlay(PlayerId.PLAYER1, Card(Rank.FIVE, Suit.CLUBS))
    )
    state, _ = apply_action(
        state, RegisterPlay(PlayerId.PLAYER2, Card(Rank.KING, Suit.CLUBS))
    )
    state, _ = apply_action(state, FinalizeRound())
    return state


def test_state_survives_json_roundtrip():
    state = _game_in_progress()
    restored = state_from_json(state_to_json(state))

    assert restored == state
    assert restored.status == GameStatus.IN_PROGRESS
    assert restored.players[PlayerId.PLAYER2].name == "Rui"
    assert restored.rounds[0].winner == PlayerId.PLAYER2


def test_four_player_teams_roundtrip():
    state = _game_in_progress(player_count=4)
    data = state_to_dict(state)
    assert [t["id"] for t in data["teams"]] == ["team_a", "team_b"]

    restored = state_from_dict(json.loads(json.dumps(data)))
    assert restored.teams[TeamId.TEAM_A].member_ids == [
        PlayerId.PLAYER1,
        PlayerId.PLAYER3,
    ]


def test_finished_team_winner_roundtrip():
    state = new_game_state()
    state.status = GameStatus.FINISHED
    state.winner = TeamId.TEAM_B
    assert state_from_dict(state_to_dict(state)).winner == TeamId.TEAM_B


def test_snapshot_metadata():
    data = state_to_dict(new_game_state())
    assert data["schema_version"] == SCHEMA_VERSION
    assert "saved_at" in data
    assert data["status"] == "setup"


def test_memory_store_isolates_copies():
    store = MemoryStore()
    assert isinstance(store, SnapshotStore)
    assert store.load("slot") is None

    snapshot = state_to_dict(new_game_state())
    store.save("slot", snapshot)
    snapshot["status"] = "finished"
    assert store.load("slot")["status"] == "setup"


def test_json_file_store_keeps_slots_apart(tmp_path):
    store = JsonFileStore(tmp_path / "nested" / "session.json")
    assert store.load("a") is None

    store.save("a", {"value": 1})
    store.save("b", {"value": 2})

    reopened = JsonFileStore(tmp_path / "nested" / "session.json")
    assert reopened.load("a") == {"value": 1}
    assert reopened.load("b") == {"value": 2}


def test_json_file_store_rejects_non_object_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("[1, 2]", encoding="utf-8")
    store = JsonFileStore(path)

    with pytest.raises(ValueError):
        store.load("a")

    store.save("a", {"value": 1})
    assert store.load("a") == {"value": 1}
