# tests/test_cli.py
import io
import json

from bisca_advisor.cards import Card, Rank, Suit
from bisca_advisor.cli import CommandLoop, build_config, main, parse_args
from bisca_advisor.session import GameSession
from bisca_advisor.snapshot import STORAGE_SLOT, MemoryStore
from bisca_advisor.state import GameConfig, PlayerId


def _loop():
    config = GameConfig(trump=Card(Rank.TWO, Suit.SPADES))
    return CommandLoop(GameSession(store=MemoryStore()), config)


def test_parse_args_defaults():
    args = parse_args([])
    assert args.players == 2
    assert args.user == 1
    assert args.trump is None
    assert not args.no_restore


def test_build_config():
    args = parse_args(["--players", "4", "--names", "Ana", "Rui", "--user", "3", "--trump", "7h"])
    config = build_config(args)
    assert config.player_count == 4
    assert config.player_names == ["Ana", "Rui"]
    assert config.user_id == PlayerId.PLAYER3
    assert config.trump == Card(Rank.SEVEN, Suit.HEARTS)


def test_command_loop_plays_a_trick():
    loop = _loop()
    assert "Game started" in loop.run_command("start")

    assert "invalid-turn" in loop.run_command("play 2 7H")
    out = loop.run_command("play 1 2H")
    assert "Card registered" in out
    assert "first card (sets the suit)" in out
    assert loop.run_command("leader") == "2♥ - first card (sets the suit)"

    loop.run_command("play player2 7♥")
    assert loop.run_command("finish") == "Round finished! Winner: Player 2 (+10 points)"

    score = loop.run_command("score")
    assert "Player 2: 10 points" in score
    assert "Points still in play: 110" in score


def test_command_loop_advice():
    loop = _loop()
    loop.run_command("start")
    assert "missing-context" in loop.run_command("recommend")

    loop.run_command("hand AH 2C")
    out = loop.run_command("recommend")
    assert out.startswith("Recommendation:")
    assert "A♥: priority" in out

    assert loop.run_command("explain AH").startswith("A♥: ")
    assert "undetermined" in loop.run_command("styles")


def test_command_loop_bad_input():
    loop = _loop()
    assert loop.run_command("") == ""
    assert loop.run_command("bogus").startswith("Unknown command")
    assert loop.run_command("play 1 XX") == "Error: Not a card: 'XX'"
    assert loop.run_command("play 9 AH") == "Error: No seat 9"
    assert loop.run_command("play 1").startswith("Error: usage")
    assert "Commands:" in loop.run_command("help")


def test_export(tmp_path):
    loop = _loop()
    loop.run_command("start")
    loop.run_command("play 1 2H")
    loop.run_command("play 2 7H")
    loop.run_command("finish")

    path = tmp_path / "rounds.csv"
    assert loop.run_command(f"export {path}") == f"Wrote 2 rows to {path}"
    assert path.exists()


def test_main_runs_commands_and_saves_session(tmp_path, monkeypatch):
    monkeypatch.setenv("BISCA_RESULTS_DIR", str(tmp_path))
    monkeypatch.setenv("BISCA_SEED", "3")
    stdin = io.StringIO("start\nplay 1 AH\nquit\nplay 2 2H\n")
    stdout = io.StringIO()

    main(["--no-restore", "--trump", "2S"], stdin=stdin, stdout=stdout)

    output = stdout.getvalue()
    assert "Game started" in output
    assert "Card registered" in output

    saved = json.loads((tmp_path / "session.json").read_text(encoding="utf-8"))
    snapshot = saved[STORAGE_SLOT]
    assert snapshot["status"] == "in_progress"
    assert len(snapshot["played_cards"]) == 1
