# bisca_advisor/cli.py
from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Callable, Dict, List, Optional, TextIO

from .advisor import explain_card
from .cards import Card, parse_card
from .config import load_settings
from .engine import ActionResult
from .game_log import write_round_history_csv
from .paths import resolve_results_path
from .session import GameSession
from .snapshot import JsonFileStore
from .state import GameConfig, PlayerId
from .style import describe_style

HELP_TEXT = """\
Commands:
  start                     start a game with the command-line settings
  play <seat> <card>        register a card, e.g. "play 2 7S" or "play 1 A♥"
  hand <card> [<card> ...]  replace the cards you hold
  recommend                 rank your hand and show the best card
  explain <card>            verdict on one card of your hand
  finish                    finalize the current trick
  leader                    who is winning the current trick
  score                     running score
  styles                    observed play style per player
  export <file.csv>         write the round history as CSV
  reset                     discard the game
  quit                      leave (the session is kept)"""


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        description=(
            "Track a Bisca game as it is played and get advice on which "
            "card to play next."
        )
    )
    parser.add_argument(
        "--players",
        type=int,
        choices=(2, 4),
        default=2,
        help="Number of players (default: 2).",
    )
    parser.add_argument(
        "--names",
        nargs="+",
        default=[],
        help="Player names in seat order.",
    )
    parser.add_argument(
        "--user",
        type=int,
        default=1,
        help="Your seat number (default: 1).",
    )
    parser.add_argument(
        "--trump",
        type=str,
        default=None,
        help='Trump card, e.g. "7S" or "A♠". Drawn from a shuffled deck if omitted.',
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Logging level (DEBUG, INFO, WARNING, ...). Default: %(default)s.",
    )
    parser.add_argument(
        "--no-restore",
        action="store_true",
        help="Ignore any saved session and start from setup.",
    )
    return parser.parse_args(argv)


def _parse_player(text: str) -> PlayerId:
    if text.isdigit():
        seat = int(text)
        if not 1 <= seat <= 4:
            raise ValueError(f"No seat {seat}")
        return PlayerId.from_seat(seat)
    return PlayerId(text.lower())


def _parse_cards(tokens: List[str]) -> List[Card]:
    cards: List[Card] = []
    for token in tokens:
        card = parse_card(token)
        if card is None:
            raise ValueError(f"Not a card: {token!r}")
        cards.append(card)
    return cards


def _format_result(result: ActionResult) -> str:
    if result.success:
        return result.message or "OK"
    return f"Error ({result.error_kind}): {result.error}"


class CommandLoop:
    """Maps text commands onto the session's action API."""

    def __init__(self, session: GameSession, config: GameConfig) -> None:
        self.session = session
        self.config = config
        self._commands: Dict[str, Callable[[List[str]], str]] = {
            "start": self._start,
            "play": self._play,
            "hand": self._hand,
            "recommend": self._recommend,
            "explain": self._explain,
            "finish": self._finish,
            "leader": self._leader,
            "score": self._score,
            "styles": self._styles,
            "export": self._export,
            "reset": self._reset,
            "help": lambda _args: HELP_TEXT,
        }

    def run_command(self, line: str) -> str:
        tokens = line.split()
        if not tokens:
            return ""
        name, args = tokens[0].lower(), tokens[1:]
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}. Type 'help'."
        try:
            return handler(args)
        except ValueError as exc:
            return f"Error: {exc}"

    def _start(self, args: List[str]) -> str:
        return _format_result(self.session.start(self.config))

    def _play(self, args: List[str]) -> str:
        if len(args) != 2:
            raise ValueError("usage: play <seat> <card>")
        player_id = _parse_player(args[0])
        (card,) = _parse_cards(args[1:])
        result = self.session.register_played_card(player_id, card)
        lines = [_format_result(result)]
        leader = self.session.trick_leader()
        if result.success and leader is not None:
            lines.append(f"Leading: {leader.reason}")
        return "\n".join(lines)

    def _hand(self, args: List[str]) -> str:
        return _format_result(self.session.update_user_hand(_parse_cards(args)))

    def _recommend(self, args: List[str]) -> str:
        result = self.session.request_recommendation()
        if not result.success:
            return _format_result(result)
        lines = [_format_result(result)]
        for rec in self.session.recommendations():
            lines.append(
                f"  {rec.card}: priority {rec.priority}, "
                f"risk {rec.risk_level.value}, "
                f"win {rec.win_probability}%, "
                f"trump risk {rec.details.trump_probability}%"
            )
        return "\n".join(lines)

    def _explain(self, args: List[str]) -> str:
        if len(args) != 1:
            raise ValueError("usage: explain <card>")
        (card,) = _parse_cards(args)
        return f"{card}: {explain_card(card, self.session.state)}"

    def _finish(self, args: List[str]) -> str:
        return _format_result(self.session.finalize_round())

    def _leader(self, args: List[str]) -> str:
        leader = self.session.trick_leader()
        if leader is None:
            return "No card played in this trick yet."
        return leader.reason

    def _score(self, args: List[str]) -> str:
        card = self.session.scorecard()
        lines = []
        for side in card.sides:
            stats = side.stats
            lines.append(
                f"{side.name}: {stats.points} points ({stats.percentage}%), "
                f"{stats.rounds_won}/{stats.total_rounds} rounds won"
            )
        leader = next(
            (side.name for side in card.sides if side.id == card.leader), "none"
        )
        lines.append(f"Leader: {leader} by {card.difference}")
        lines.append(f"Points still in play: {card.remaining_points}")
        return "\n".join(lines)

    def _styles(self, args: List[str]) -> str:
        state = self.session.state
        if not state.style_analyses:
            return "No game in progress."
        return "\n".join(
            f"{state.players[pid].name}: {describe_style(analysis)}"
            for pid, analysis in state.style_analyses.items()
            if pid in state.players
        )

    def _export(self, args: List[str]) -> str:
        if len(args) != 1:
            raise ValueError("usage: export <file.csv>")
        path = resolve_results_path(args[0])
        count = write_round_history_csv(self.session.state, path)
        return f"Wrote {count} rows to {path}"

    def _reset(self, args: List[str]) -> str:
        return _format_result(self.session.reset())


def build_config(args: argparse.Namespace) -> GameConfig:
    trump = None
    if args.trump:
        trump = parse_card(args.trump)
        if trump is None:
            raise SystemExit(f"Invalid trump card: {args.trump!r}")
    return GameConfig(
        player_count=args.players,
        player_names=list(args.names),
        user_id=PlayerId.from_seat(args.user),
        trump=trump,
    )


def main(
    argv: List[str] | None = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> None:
    args = parse_args(argv)
    settings = load_settings()
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not 1 <= args.user <= args.players:
        raise SystemExit(f"Seat {args.user} is not part of a {args.players}-player game")

    rng = random.Random(settings.seed) if settings.seed is not None else None
    store = JsonFileStore(resolve_results_path(settings.snapshot_file))
    if args.no_restore:
        session = GameSession(store=store, rng=rng)
    else:
        session = GameSession.restore(store, rng=rng)
    logging.info("Session status: %s", session.state.status.value)

    loop = CommandLoop(session, build_config(args))
    print("Bisca advisor. Type 'help' for commands.", file=stdout)
    for line in stdin:
        if line.strip().lower() in ("quit", "exit"):
            break
        output = loop.run_command(line)
        if output:
            print(output, file=stdout)


if __name__ == "__main__":
    main()
