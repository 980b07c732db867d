# bisca_advisor/rules.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .cards import TOTAL_CARDS, Card, compare_cards, is_trump, total_points
from .state import PlayedCard, Player, PlayerId, Round, SideId, TeamId
from .turns import check_player_count, team_of


@dataclass
class TrickLeader:
    winning_play: PlayedCard
    winner_id: PlayerId
    reason: str


@dataclass
class TrickResult:
    winner: PlayerId
    points_won: int


def _fold_winner(ordered: List[PlayedCard], trump: Optional[Card]) -> PlayedCard:
    # The first card leads; only a strictly stronger card takes over.
    lead = ordered[0]
    winning = lead
    for played in ordered[1:]:
        if compare_cards(played.card, winning.card, trump, lead.card) > 0:
            winning = played
    return winning


def _winning_reason(
    card: Card,
    lead_card: Card,
    trump: Optional[Card],
    cards_played: int,
) -> str:
    if is_trump(card, trump):
        if cards_played == 1:
            return f"{card} - only card played"
        return f"{card} wins - strongest trump"
    if card.suit == lead_card.suit:
        if cards_played == 1:
            return f"{card} - first card (sets the suit)"
        return f"{card} wins - strongest of the lead suit"
    return f"{card} wins"


def current_trick_leader(
    played_cards: Sequence[PlayedCard],
    trump: Optional[Card],
) -> Optional[TrickLeader]:
    """
    Who is winning a trick that may still be in progress.

    Returns None if no card has been played yet.
    """
    if not played_cards:
        return None
    ordered = sorted(played_cards, key=lambda pc: pc.order)
    winning = _fold_winner(ordered, trump)
    reason = _winning_reason(
        winning.card, ordered[0].card, trump, len(ordered)
    )
    return TrickLeader(
        winning_play=winning,
        winner_id=winning.player_id,
        reason=reason,
    )


def finalize_trick(round_state: Round, trump: Optional[Card]) -> Optional[TrickResult]:
    """
    Winner and points of a completed trick.

    Returns None for an empty trick; callers treat that as their own error.
    """
    if not round_state.played_cards:
        return None
    ordered = sorted(round_state.played_cards, key=lambda pc: pc.order)
    winning = _fold_winner(ordered, trump)
    return TrickResult(
        winner=winning.player_id,
        points_won=total_points([pc.card for pc in ordered]),
    )


def validate_play(card: Card, hand: Sequence[Card]) -> bool:
    """Any card held may be played; there is no obligation to follow suit."""
    return card in hand


def is_game_over(played_cards: Sequence[Card]) -> bool:
    return len(played_cards) >= TOTAL_CARDS


def game_winner(
    players: Dict[PlayerId, Player],
    player_count: int,
) -> Optional[SideId]:
    """
    Overall winner once every card is played.

    2 players: the player with more points. 4 players: the team with more
    points. A tie has no winner.
    """
    check_player_count(player_count)
    if player_count == 2:
        p1 = players[PlayerId.PLAYER1].points
        p2 = players[PlayerId.PLAYER2].points
        if p1 > p2:
            return PlayerId.PLAYER1
        if p2 > p1:
            return PlayerId.PLAYER2
        return None

    team_points: Dict[TeamId, int] = {TeamId.TEAM_A: 0, TeamId.TEAM_B: 0}
    for pid, player in players.items():
        team_points[team_of(pid)] += player.points
    if team_points[TeamId.TEAM_A] > team_points[TeamId.TEAM_B]:
        return TeamId.TEAM_A
    if team_points[TeamId.TEAM_B] > team_points[TeamId.TEAM_A]:
        return TeamId.TEAM_B
    return None
