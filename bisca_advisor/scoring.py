# bisca_advisor/scoring.py
from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import List, Optional, Sequence, Union

from .cards import TOTAL_POINTS, Card, total_points
from .state import GameState, Player, PlayerId, Round, SideId, Team

Side = Union[Player, Team]


@dataclass
class PlayerStatistics:
    side_id: SideId
    points: int
    percentage: int
    rounds_won: int
    total_rounds: int
    win_rate: int  # percentage of completed rounds won
    average_points_per_won_round: int


@dataclass
class SideScore:
    id: SideId
    name: str
    stats: PlayerStatistics
    # Per-member statistics; empty for a single player.
    members: List[PlayerStatistics] = field(default_factory=list)


@dataclass
class Scorecard:
    sides: List[SideScore]
    difference: int
    leader: Optional[SideId]
    remaining_points: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return int(math.floor(value + 0.5))


def credit_trick(side: Side, cards: Sequence[Card]) -> None:
    """Give a trick's cards to the player or team that won it."""
    side.won_cards.extend(cards)
    side.points = total_points(side.won_cards)


def remaining_points(played_cards: Sequence[Card]) -> int:
    return TOTAL_POINTS - total_points(played_cards)


def points_percentage(points: int) -> int:
    return round_half_up(points / TOTAL_POINTS * 100)


def points_difference(points: int, opponent_points: int) -> int:
    return points - opponent_points


def is_winning(points: float, opponent_points: float) -> bool:
    return points > opponent_points


def _member_ids(side: Side) -> List[PlayerId]:
    if isinstance(side, Team):
        return list(side.member_ids)
    return [side.id]


def statistics(side: Side, rounds: Sequence[Round]) -> PlayerStatistics:
    """Round-based statistics for a player, or for a team from its members' wins."""
    members = _member_ids(side)
    completed = [r for r in rounds if r.complete]
    rounds_won = sum(1 for r in completed if r.winner in members)

    win_rate = round_half_up(rounds_won / len(completed) * 100) if completed else 0
    average = round_half_up(side.points / rounds_won) if rounds_won else 0

    return PlayerStatistics(
        side_id=side.id,
        points=side.points,
        percentage=points_percentage(side.points),
        rounds_won=rounds_won,
        total_rounds=len(completed),
        win_rate=win_rate,
        average_points_per_won_round=average,
    )


def scorecard(state: GameState) -> Scorecard:
    """
    Running score for either seating topology.

    Two players are scored individually; four players are scored per team
    with each member's statistics attached.
    """
    sides: List[SideScore] = []
    if state.teams:
        for team in state.teams.values():
            sides.append(
                SideScore(
                    id=team.id,
                    name=team.name,
                    stats=statistics(team, state.rounds),
                    members=[
                        statistics(state.players[pid], state.rounds)
                        for pid in team.member_ids
                    ],
                )
            )
    else:
        for player in state.players.values():
            sides.append(
                SideScore(
                    id=player.id,
                    name=player.name,
                    stats=statistics(player, state.rounds),
                )
            )

    leader: Optional[SideId] = None
    difference = 0
    if len(sides) == 2:
        first, second = sides[0].stats, sides[1].stats
        difference = abs(points_difference(first.points, second.points))
        if first.points > second.points:
            leader = first.side_id
        elif second.points > first.points:
            leader = second.side_id

    return Scorecard(
        sides=sides,
        difference=difference,
        leader=leader,
        remaining_points=remaining_points(state.played_cards),
    )


def can_still_win(points: float, opponent_points: float, remaining: int) -> bool:
    """True once past half the deck's points, or while the remainder can still overtake."""
    if points > TOTAL_POINTS / 2:
        return True
    return points + remaining > opponent_points


def win_probability(points: float, opponent_points: float, remaining: int) -> int:
    """Rough 0-100 chance of winning from the current point balance."""
    if not can_still_win(points, opponent_points, remaining):
        return 0
    if points > TOTAL_POINTS / 2:
        return 100
    if remaining <= 0:
        # Nothing left to play and can_still_win held: already ahead.
        return 100
    probability = 50 + 50 * (points - opponent_points) / remaining
    probability = max(0.0, min(100.0, probability))
    return round_half_up(probability)
