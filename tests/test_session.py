# tests/test_session.py
import json
import logging
import random

from bisca_advisor.cards import Card, Rank, Suit
from bisca_advisor.session import GameSession
from bisca_advisor.snapshot import STORAGE_SLOT, JsonFileStore, MemoryStore
from bisca_advisor.state import GameConfig, GameStatus, PlayerId

TRUMP = Card(Rank.TWO, Suit.SPADES)


class FailingStore:
    def load(self, slot):
        return None

    def save(self, slot, snapshot):
        raise OSError("disk full")


class CountingStore(MemoryStore):
    def __init__(self):
        super().__init__()
        self.saves = 0

    def save(self, slot, snapshot):
        self.saves += 1
        super().save(slot, snapshot)


def test_session_persists_successful_actions():
    store = CountingStore()
    session = GameSession(store=store, rng=random.Random(1))

    assert session.start(GameConfig(trump=TRUMP)).success
    assert store.saves == 1
    assert store.load(STORAGE_SLOT)["status"] == "in_progress"

    # Rejected actions leave the stored snapshot alone.
    assert not session.register_played_card(
        PlayerId.PLAYER2, Card(Rank.ACE, Suit.HEARTS)
    ).success
    assert store.saves == 1


def test_restore_resumes_saved_game():
    store = MemoryStore()
    session = GameSession(store=store)
    session.start(GameConfig(trump=TRUMP))
    session.register_played_card(PlayerId.PLAYER1, Card(Rank.ACE, Suit.HEARTS))

    resumed = GameSession.restore(store)
    assert resumed.state == session.state
    assert resumed.trick_leader().winner_id == PlayerId.PLAYER1


def test_restore_from_empty_store():
    session = GameSession.restore(MemoryStore())
    assert session.state.status == GameStatus.SETUP


def test_failing_store_does_not_roll_back(caplog):
    session = GameSession(store=FailingStore())
    with caplog.at_level(logging.WARNING):
        result = session.start(GameConfig(trump=TRUMP))

    assert result.success
    assert session.state.status == GameStatus.IN_PROGRESS
    assert "Could not persist session snapshot" in caplog.text


def test_read_helpers():
    session = GameSession()
    assert session.trick_leader() is None

    session.start(GameConfig(trump=TRUMP))
    session.update_user_hand([Card(Rank.ACE, Suit.HEARTS), Card(Rank.TWO, Suit.CLUBS)])
    assert len(session.recommendations()) == 2
    assert session.request_recommendation().success

    session.register_played_card(PlayerId.PLAYER1, Card(Rank.TWO, Suit.CLUBS))
    session.register_played_card(PlayerId.PLAYER2, Card(Rank.ACE, Suit.CLUBS))
    assert session.finalize_round().success

    card = session.scorecard()
    assert card.leader == PlayerId.PLAYER2
    assert card.difference == 11
    assert card.remaining_points == 109
    p2 = next(side for side in card.sides if side.id == PlayerId.PLAYER2)
    assert p2.stats.rounds_won == 1
    assert p2.stats.win_rate == 100

    assert session.reset().success
    assert session.state.status == GameStatus.SETUP


def test_restore_ignores_truncated_snapshot_file(tmp_path, caplog):
    path = tmp_path / "session.json"
    path.write_text('{"bisca-game-storage": {"status": "in_prog', encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        session = GameSession.restore(JsonFileStore(path))

    assert session.state.status == GameStatus.SETUP
    assert "Ignoring unreadable session snapshot" in caplog.text


def test_restore_ignores_snapshot_with_bad_values(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({STORAGE_SLOT: {"status": "bogus"}}), encoding="utf-8")

    session = GameSession.restore(JsonFileStore(path))
    assert session.state.status == GameStatus.SETUP


def test_save_replaces_unreadable_snapshot_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("not json", encoding="utf-8")
    session = GameSession.restore(JsonFileStore(path))

    assert session.start(GameConfig(trump=TRUMP)).success

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved[STORAGE_SLOT]["status"] == "in_progress"
    assert [p.name for p in tmp_path.iterdir()] == ["session.json"]

    resumed = GameSession.restore(JsonFileStore(path))
    assert resumed.state == session.state
