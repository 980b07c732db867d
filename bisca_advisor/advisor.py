# bisca_advisor/advisor.py
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

from .cards import Card, build_deck, compare_cards, find_card, is_trump, total_points
from .scoring import is_winning, remaining_points, round_half_up, win_probability
from .state import (
    GameState,
    Recommendation,
    RecommendationDetails,
    RiskLevel,
)
from .style import style_adjustment

logger = logging.getLogger(__name__)

TRUMP_BONUS = 20
STYLE_WEIGHT = 10


@dataclass
class ReasonContext:
    trick_points: int
    is_first_play: bool
    is_winning: bool
    remaining_points: int
    risk_level: RiskLevel
    trump_probability: int


def remaining_cards(played_cards: Sequence[Card]) -> List[Card]:
    """Cards of the deck not yet seen on the table."""
    return [c for c in build_deck() if find_card(played_cards, c) == -1]


def trump_probability(
    remaining: Sequence[Card],
    trump: Optional[Card],
    opponent_count: int,
) -> int:
    """Chance (0-100) that at least one opponent holds a trump."""
    if trump is None or not remaining:
        return 0
    remaining_trumps = sum(1 for c in remaining if is_trump(c, trump))
    if remaining_trumps == 0:
        return 0
    per_opponent = remaining_trumps / len(remaining)
    probability = 1 - (1 - per_opponent) ** opponent_count
    return round_half_up(probability * 100)


def hand_strength(card: Card, trump: Optional[Card], remaining: Sequence[Card]) -> int:
    """
    Contextual strength of leading with `card`: rank strength and points,
    a trump bonus, discounted by the share of unseen cards that beat it.
    """
    score = card.strength * 5 + card.points * 2
    if is_trump(card, trump):
        score += TRUMP_BONUS
    if remaining:
        beaten_by = sum(
            1 for c in remaining if compare_cards(c, card, trump, card) > 0
        )
        score *= 1 - 0.5 * (beaten_by / len(remaining))
    return round_half_up(score)


def risk_level(
    card: Card,
    trick_points: int,
    trump_prob: int,
    trump: Optional[Card],
) -> RiskLevel:
    at_stake = card.points + trick_points

    if is_trump(card, trump) and at_stake >= 20 and trump_prob > 50:
        return RiskLevel.HIGH
    if card.points >= 10:
        if trump_prob > 60:
            return RiskLevel.VERY_HIGH
        if trump_prob > 40:
            return RiskLevel.HIGH
        return RiskLevel.MEDIUM
    if card.strength >= 9 and at_stake >= 15:
        return RiskLevel.MEDIUM
    if card.strength <= 5 and card.points == 0:
        return RiskLevel.VERY_LOW
    return RiskLevel.LOW


def recommendation_reason(
    card: Card,
    context: ReasonContext,
    trump: Optional[Card],
) -> str:
    card_is_trump = is_trump(card, trump)
    reasons: List[str] = []

    if context.is_first_play:
        if card.points == 0 and card.strength <= 6:
            reasons.append("Weak card, ideal for opening the trick")
        elif card.points >= 10 and context.is_winning:
            reasons.append("You are ahead, you can risk going for points")
        elif card_is_trump and card.strength >= 9:
            reasons.append("Strong trump to secure points")
    else:
        if context.trick_points >= 15:
            if card_is_trump or card.strength >= 9:
                reasons.append(
                    f"{context.trick_points} points at stake, worth trying to win"
                )
            elif card.points == 0 and card.strength <= 5:
                reasons.append(
                    "Many points at stake, better not to risk a good card"
                )
        elif context.trick_points == 0:
            reasons.append("No points in the trick, save your strong cards")

    if not context.is_winning and context.remaining_points < 40:
        reasons.append("You are behind, you need to play more aggressively")

    if context.risk_level == RiskLevel.VERY_LOW:
        reasons.append("Safe play")
    elif context.risk_level == RiskLevel.VERY_HIGH:
        reasons.append("Risky play, but it may pay off")

    if context.trump_probability > 70 and not card_is_trump and card.points >= 10:
        reasons.append("Careful: an opponent very likely holds trump")

    if not reasons:
        return "Reasonable play in the current context."
    return ". ".join(reasons) + "."


def recommend_card(
    card: Card,
    state: GameState,
    remaining: Sequence[Card],
    opponent_count: int,
) -> Recommendation:
    """Score one card of the user's hand."""
    current = state.current_round
    trick_cards = [pc.card for pc in current.played_cards] if current else []
    is_first_play = not trick_cards
    trick_points = total_points(trick_cards)

    trump_prob = trump_probability(remaining, state.trump, opponent_count)
    strength = hand_strength(card, state.trump, remaining)
    risk = risk_level(card, trick_points, trump_prob, state.trump)

    user = state.players.get(state.user_id)
    user_points = user.points if user else 0
    opponents_points = sum(
        p.points for pid, p in state.players.items() if pid != state.user_id
    )
    average_opponent = opponents_points / opponent_count if opponent_count else 0
    ahead = is_winning(user_points, average_opponent)
    points_left = remaining_points(state.played_cards)

    priority: float = strength
    strong = card.points >= 10 or card.strength >= 9
    weak = card.points == 0 and card.strength <= 6
    for pid, analysis in state.style_analyses.items():
        if pid == state.user_id:
            continue
        adjustment = style_adjustment(analysis.style, analysis.confidence)
        if adjustment.prefer_aggressive and strong:
            priority += STYLE_WEIGHT * adjustment.factor
        elif adjustment.prefer_defensive and weak:
            priority += STYLE_WEIGHT * adjustment.factor
    priority = max(0.0, min(100.0, priority))

    reason = recommendation_reason(
        card,
        ReasonContext(
            trick_points=trick_points,
            is_first_play=is_first_play,
            is_winning=ahead,
            remaining_points=points_left,
            risk_level=risk,
            trump_probability=trump_prob,
        ),
        state.trump,
    )

    return Recommendation(
        card=card,
        priority=round_half_up(priority),
        reason=reason,
        risk_level=risk,
        win_probability=win_probability(user_points, average_opponent, points_left),
        details=RecommendationDetails(
            hand_strength=strength,
            remaining_card_count=len(remaining),
            trump_probability=trump_prob,
            points_at_stake=trick_points + card.points,
        ),
    )


def generate_recommendations(state: GameState) -> List[Recommendation]:
    """
    Rank every card of the user's tracked hand, best first.

    The sort is stable: cards with equal priority keep their hand order.
    """
    if not state.user_hand:
        return []
    remaining = remaining_cards(state.played_cards)
    opponent_count = state.player_count - 1
    recommendations = [
        recommend_card(card, state, remaining, opponent_count)
        for card in state.user_hand
    ]
    ranked = sorted(recommendations, key=lambda r: r.priority, reverse=True)
    logger.debug(
        "Ranked hand: %s",
        ", ".join(f"{r.card}={r.priority}" for r in ranked),
    )
    return ranked


def best_recommendation(state: GameState) -> Optional[Recommendation]:
    ranked = generate_recommendations(state)
    return ranked[0] if ranked else None


def explain_card(card: Card, state: GameState) -> str:
    """One-line verdict on playing `card`, whether or not it ranks first."""
    recommendation = recommend_card(
        card,
        state,
        remaining_cards(state.played_cards),
        state.player_count - 1,
    )
    return (
        f"{recommendation.reason} "
        f"(priority {recommendation.priority}/100, "
        f"risk {recommendation.risk_level.value})"
    )
