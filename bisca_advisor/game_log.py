# bisca_advisor/game_log.py
from __future__ import annotations

import csv
from typing import Any, Dict, List

from .cards import card_str, total_points
from .state import GameState

FIELDNAMES = [
    "round_number",
    "order",
    "player_id",
    "player_name",
    "card",
    "card_points",
    "winner_id",
    "points_won",
    "winner_total_points",
]


def build_round_rows(game_state: GameState) -> List[Dict[str, Any]]:
    """
    One row per card of every finished round, in play order.

    `winner_total_points` is the trick winner's running total right after
    that round, recomputed from the history so it does not depend on the
    final player totals. Unfinished rounds are skipped.
    """
    running: Dict[str, int] = {pid.value: 0 for pid in game_state.players}
    rows: List[Dict[str, Any]] = []

    for round_state in game_state.rounds:
        if not round_state.complete or round_state.winner is None:
            continue
        ordered = sorted(round_state.played_cards, key=lambda pc: pc.order)
        winner_key = round_state.winner.value
        running[winner_key] = running.get(winner_key, 0) + total_points(
            [pc.card for pc in ordered]
        )

        for played in ordered:
            player = game_state.players.get(played.player_id)
            rows.append(
                {
                    "round_number": round_state.number,
                    "order": played.order,
                    "player_id": played.player_id.value,
                    "player_name": player.name if player else None,
                    "card": card_str(played.card),
                    "card_points": played.card.points,
                    "winner_id": winner_key,
                    "points_won": round_state.points_won,
                    "winner_total_points": running[winner_key],
                }
            )

    return rows


def write_round_history_csv(game_state: GameState, path) -> int:
    """
    Write the round history to a CSV file and return the number of rows.

    `path` can be a string or any path-like object accepted by `open`.
    """
    rows = build_round_rows(game_state)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        for row in rows:
            writer.writerow({field: row.get(field) for field in FIELDNAMES})

    return len(rows)
