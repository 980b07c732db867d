# bisca_advisor/turns.py
from __future__ import annotations

from typing import List, Optional, Sequence

from .cards import TOTAL_CARDS
from .state import PlayerId, TeamId

SEAT_CYCLE: List[PlayerId] = [
    PlayerId.PLAYER1,
    PlayerId.PLAYER2,
    PlayerId.PLAYER3,
    PlayerId.PLAYER4,
]

# Cards dealt to each player at the start of a 2-player game.
TWO_PLAYER_HAND = 3
FOUR_PLAYER_HAND = TOTAL_CARDS // 4


def check_player_count(player_count: int) -> None:
    if player_count not in (2, 4):
        raise ValueError("Bisca supports 2 or 4 players")


def seats_for(player_count: int) -> List[PlayerId]:
    """Seats in use for the given player count, in seat order."""
    check_player_count(player_count)
    return SEAT_CYCLE[:player_count]


def team_of(player_id: PlayerId) -> TeamId:
    """Seats 1 and 3 form team A, seats 2 and 4 team B."""
    if player_id.seat % 2 == 1:
        return TeamId.TEAM_A
    return TeamId.TEAM_B


def team_members(team_id: TeamId) -> List[PlayerId]:
    return [pid for pid in SEAT_CYCLE if team_of(pid) == team_id]


def _rotate_from(start: PlayerId) -> List[PlayerId]:
    index = SEAT_CYCLE.index(start)
    return SEAT_CYCLE[index:] + SEAT_CYCLE[:index]


def play_order(
    player_count: int,
    previous_winner: Optional[PlayerId],
    opening_player: Optional[PlayerId] = None,
) -> List[PlayerId]:
    """
    Seating rotation for the next trick.

    2 players: player 1 then player 2 for the first trick, afterwards the
    previous trick's winner leads.

    4 players: the seat cycle rotated to start at the previous winner, or at
    the opening player for the first trick. While the opening player is not
    yet known the rotation starts at player 1; it is recomputed once the
    game's first card fixes it.
    """
    check_player_count(player_count)
    if player_count == 2:
        if previous_winner is None:
            return [PlayerId.PLAYER1, PlayerId.PLAYER2]
        other = (
            PlayerId.PLAYER2
            if previous_winner == PlayerId.PLAYER1
            else PlayerId.PLAYER1
        )
        return [previous_winner, other]

    if previous_winner is not None:
        return _rotate_from(previous_winner)
    return _rotate_from(opening_player or PlayerId.PLAYER1)


def next_player(
    order: Sequence[PlayerId],
    current: PlayerId,
    cards_played: int,
) -> Optional[PlayerId]:
    """
    Seat after `current` in `order`.

    None when the trick is complete: `current` is last in the order, or every
    seat in the order has already played.
    """
    if cards_played >= len(order):
        return None
    index = list(order).index(current)
    if index + 1 >= len(order):
        return None
    return order[index + 1]


def cards_in_hand(round_number: int, player_count: int) -> int:
    """
    Cards each player holds when trick `round_number` (1-based) starts.

    With 2 players hands are refilled to three cards while the stock lasts,
    then shrink by one per trick. With 4 players all cards are dealt up front.
    """
    check_player_count(player_count)
    if player_count == 2:
        total_tricks = TOTAL_CARDS // 2
        return max(0, min(TWO_PLAYER_HAND, total_tricks + 1 - round_number))
    return max(0, FOUR_PLAYER_HAND + 1 - round_number)


def cards_in_deck(round_number: int, player_count: int) -> int:
    """Undrawn stock (trump card included) when trick `round_number` starts."""
    check_player_count(player_count)
    if player_count == 4:
        return 0
    stock = TOTAL_CARDS - 2 * TWO_PLAYER_HAND
    return max(0, stock - 2 * (round_number - 1))
