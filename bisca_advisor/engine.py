# bisca_advisor/engine.py
from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
import random
from typing import List, Optional, Tuple, Union

from .advisor import best_recommendation
from .cards import Card, build_deck, find_card, remove_card, shuffle
from .errors import (
    BiscaError,
    InvalidConfigurationError,
    InvalidStateError,
    InvalidTurnError,
    MissingContextError,
    UnresolvableTrickError,
)
from .rules import finalize_trick, game_winner, is_game_over
from .scoring import credit_trick
from .state import (
    GameConfig,
    GameState,
    GameStatus,
    PlayedCard,
    Player,
    PlayerId,
    Round,
    SideId,
    Team,
    TeamId,
)
from .style import initial_style, update_style
from .turns import (
    cards_in_deck,
    cards_in_hand,
    next_player,
    play_order,
    seats_for,
    team_members,
    team_of,
)

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------------
# Actions
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class StartGame:
    config: GameConfig


@dataclass(frozen=True)
class RegisterPlay:
    player_id: PlayerId
    card: Card


@dataclass(frozen=True)
class UpdateUserHand:
    cards: List[Card] = field(default_factory=list)


@dataclass(frozen=True)
class RequestRecommendation:
    pass


@dataclass(frozen=True)
class FinalizeRound:
    pass


@dataclass(frozen=True)
class ResetGame:
    pass


Action = Union[
    StartGame,
    RegisterPlay,
    UpdateUserHand,
    RequestRecommendation,
    FinalizeRound,
    ResetGame,
]


@dataclass
class ActionResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None


def new_game_state() -> GameState:
    """A fresh state waiting in setup."""
    return GameState()


def apply_action(
    state: GameState,
    action: Action,
    rng: Optional[random.Random] = None,
) -> Tuple[GameState, ActionResult]:
    """
    Apply one action and return (new_state, result).

    `state` is never mutated. On a rejected action the original state is
    returned together with a failed result.
    """
    if isinstance(action, ResetGame):
        logger.info("Game reset")
        return new_game_state(), ActionResult(success=True, message="Game reset")

    new_state = copy.deepcopy(state)
    try:
        if isinstance(action, StartGame):
            message = _start(new_state, action.config, rng)
        elif isinstance(action, RegisterPlay):
            message = _register_play(new_state, action.player_id, action.card)
        elif isinstance(action, UpdateUserHand):
            message = _update_user_hand(new_state, action.cards)
        elif isinstance(action, RequestRecommendation):
            message = _request_recommendation(new_state)
        elif isinstance(action, FinalizeRound):
            message = _finalize_round(new_state)
        else:
            raise TypeError(f"Unknown action: {action!r}")
    except BiscaError as exc:
        logger.info(
            "Rejected %s (%s): %s", type(action).__name__, exc.kind, exc
        )
        return state, ActionResult(
            success=False, error=str(exc), error_kind=exc.kind
        )

    return new_state, ActionResult(success=True, message=message)


# -------------------------------------------------------------------------
# Handlers (mutate the copy they are given)
# -------------------------------------------------------------------------


def _player_name(state: GameState, player_id: Optional[PlayerId]) -> str:
    if player_id is None:
        return "unknown"
    player = state.players.get(player_id)
    return player.name if player else player_id.value


def _side_name(state: GameState, side_id: Optional[SideId]) -> str:
    if side_id is None:
        return "Tie"
    if isinstance(side_id, TeamId) and state.teams:
        return state.teams[side_id].name
    return _player_name(state, side_id)


def _start(
    state: GameState,
    config: GameConfig,
    rng: Optional[random.Random],
) -> str:
    if state.status != GameStatus.SETUP:
        raise InvalidStateError("A game is already running; reset it first")
    if config.player_count not in (2, 4):
        raise InvalidConfigurationError("Bisca is played by 2 or 4 players")
    seats = seats_for(config.player_count)
    if config.user_id not in seats:
        raise InvalidConfigurationError(
            f"{config.user_id.value} is not seated in a "
            f"{config.player_count}-player game"
        )

    deck = shuffle(build_deck(), rng)
    trump = config.trump if config.trump is not None else deck[-1]

    hand_size = cards_in_hand(1, config.player_count)
    players = {}
    for index, pid in enumerate(seats):
        if index < len(config.player_names) and config.player_names[index]:
            name = config.player_names[index]
        else:
            name = f"Player {pid.seat}"
        players[pid] = Player(
            id=pid,
            name=name,
            hand_size=hand_size,
            is_user=pid == config.user_id,
        )

    teams = None
    if config.player_count == 4:
        teams = {}
        for team_id in (TeamId.TEAM_A, TeamId.TEAM_B):
            members = team_members(team_id)
            teams[team_id] = Team(
                id=team_id,
                name=" & ".join(players[pid].name for pid in members),
                member_ids=members,
            )

    state.status = GameStatus.IN_PROGRESS
    state.config = config
    state.players = players
    state.teams = teams
    state.trump = trump
    state.rounds = []
    state.current_round = Round(number=1)
    state.first_player_of_game = None
    state.next_player = play_order(config.player_count, None, None)[0]
    state.cards_remaining_in_deck = cards_in_deck(1, config.player_count)
    state.played_cards = []
    state.winner = None
    state.style_analyses = {pid: initial_style(pid) for pid in seats}
    state.current_recommendation = None

    logger.info(
        "Started %d-player game, trump %s, user %s",
        config.player_count,
        trump,
        config.user_id.value,
    )
    return "Game started. Enter the cards in your hand."


def _register_play(state: GameState, player_id: PlayerId, card: Card) -> str:
    if state.status != GameStatus.IN_PROGRESS:
        raise InvalidStateError("Game is not in progress")
    round_state = state.current_round
    if round_state is None:
        raise MissingContextError("No active round")
    if player_id not in state.players:
        raise InvalidTurnError(f"{player_id.value} is not seated in this game")
    if len(round_state.played_cards) >= state.player_count:
        raise InvalidTurnError("Trick is complete; finalize the round first")
    if round_state.has_played(player_id):
        raise InvalidTurnError(
            f"{_player_name(state, player_id)} already played in this trick"
        )
    if find_card(state.played_cards, card) != -1:
        raise InvalidTurnError(f"{card} has already been played")

    opening_unknown = state.first_player_of_game is None
    # With 4 players anyone may open the game; from then on seats rotate.
    strict = state.player_count == 2 or not opening_unknown
    if strict and state.next_player != player_id:
        raise InvalidTurnError(
            f"It is not {_player_name(state, player_id)}'s turn"
        )

    trick_before = list(round_state.played_cards)
    round_state.played_cards.append(
        PlayedCard(card=card, player_id=player_id, order=len(trick_before) + 1)
    )
    state.played_cards.append(card)

    player = state.players[player_id]
    player.hand_size = max(0, player.hand_size - 1)

    is_user = player_id == state.user_id
    if is_user:
        state.user_hand = remove_card(state.user_hand, card)

    analysis = state.style_analyses.get(player_id) or initial_style(player_id)
    state.style_analyses[player_id] = update_style(
        analysis,
        card,
        trick_before,
        state.trump,
        state.user_hand if is_user else [],
    )

    if opening_unknown:
        state.first_player_of_game = player_id
        logger.info("Opening player fixed: %s", player_id.value)

    order = play_order(
        state.player_count,
        state.previous_round_winner,
        state.first_player_of_game,
    )
    state.next_player = next_player(
        order, player_id, len(round_state.played_cards)
    )
    state.current_recommendation = None

    if len(round_state.played_cards) == state.player_count:
        return "Trick complete! Finalize the round to see the result."
    return f"Card registered. Next: {_player_name(state, state.next_player)}"


def _update_user_hand(state: GameState, cards: List[Card]) -> str:
    state.user_hand = list(cards)
    return "Hand updated"


def _request_recommendation(state: GameState) -> str:
    if not state.user_hand:
        raise MissingContextError("Enter the cards in your hand first")
    recommendation = best_recommendation(state)
    state.current_recommendation = recommendation
    if recommendation is None:
        return "No recommendation available"
    return f"Recommendation: {recommendation.card} - {recommendation.reason}"


def _finalize_round(state: GameState) -> str:
    round_state = state.current_round
    if round_state is None:
        raise MissingContextError("No active round")
    result = finalize_trick(round_state, state.trump)
    if result is None:
        raise UnresolvableTrickError("Cannot resolve a trick with no cards played")
    if len(round_state.played_cards) < state.player_count:
        raise MissingContextError(
            f"Trick incomplete: {len(round_state.played_cards)} of "
            f"{state.player_count} cards played"
        )

    round_state.winner = result.winner
    round_state.points_won = result.points_won
    round_state.complete = True

    trick_cards = [
        pc.card for pc in sorted(round_state.played_cards, key=lambda pc: pc.order)
    ]
    credit_trick(state.players[result.winner], trick_cards)
    if state.teams:
        credit_trick(state.teams[team_of(result.winner)], trick_cards)
    state.rounds.append(round_state)

    logger.info(
        "Round %d won by %s (+%d points)",
        round_state.number,
        result.winner.value,
        result.points_won,
    )

    if is_game_over(state.played_cards):
        state.winner = game_winner(state.players, state.player_count)
        state.status = GameStatus.FINISHED
        state.current_round = None
        state.next_player = None
        logger.info("Game finished, winner: %s", _side_name(state, state.winner))
        return f"Game over! Winner: {_side_name(state, state.winner)}"

    number = len(state.rounds) + 1
    state.current_round = Round(number=number)
    state.next_player = play_order(
        state.player_count, result.winner, state.first_player_of_game
    )[0]
    hand_size = cards_in_hand(number, state.player_count)
    for player in state.players.values():
        player.hand_size = hand_size
    state.cards_remaining_in_deck = cards_in_deck(number, state.player_count)

    return (
        f"Round finished! Winner: {_player_name(state, result.winner)} "
        f"(+{result.points_won} points)"
    )
