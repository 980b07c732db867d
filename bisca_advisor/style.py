# bisca_advisor/style.py
from __future__ import annotations

from dataclasses import dataclass, replace
import enum
from typing import Optional, Sequence

from .cards import Card, is_trump, total_points
from .scoring import round_half_up
from .state import PlayedCard, PlayerId, PlayStyle, Round, StyleAnalysis, StyleCounts

# Plays observed before a style is assigned.
MIN_PLAYS_FOR_STYLE = 3
# Share of plays of one kind needed to call a player aggressive/defensive.
DOMINANT_RATIO = 0.6
# Below this confidence an opponent's style does not influence advice.
MIN_ADJUSTMENT_CONFIDENCE = 50


class PlayKind(enum.Enum):
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    NEUTRAL = "neutral"


@dataclass
class StyleAdjustment:
    prefer_aggressive: bool = False
    prefer_defensive: bool = False
    factor: float = 0.0


def _is_strong(card: Card) -> bool:
    return card.strength >= 9 or card.points >= 10


def classify_play(
    card: Card,
    trick_before: Sequence[PlayedCard],
    trump: Optional[Card],
    known_hand: Sequence[Card],
) -> PlayKind:
    """
    Classify a single play.

    `trick_before` holds the cards already in the trick when `card` was
    played; `known_hand` is what we know the player still holds (usually
    only known for the user). Trick points include `card` itself.
    """
    opening = not trick_before
    trick_points = total_points([pc.card for pc in trick_before] + [card])

    # Ace or Seven thrown in.
    if card.points >= 10:
        return PlayKind.AGGRESSIVE
    # King or better in trump.
    if is_trump(card, trump) and card.strength >= 9:
        return PlayKind.AGGRESSIVE
    # Contesting a trick that carries points.
    if not opening and trick_points >= 10 and card.strength >= 7:
        return PlayKind.AGGRESSIVE

    # Held back a strong card while points were on the table.
    if (
        card.strength <= 5
        and any(_is_strong(c) for c in known_hand)
        and trick_points >= 10
    ):
        return PlayKind.DEFENSIVE
    if card.points == 0 and card.strength <= 6:
        return PlayKind.DEFENSIVE

    return PlayKind.NEUTRAL


def initial_style(player_id: PlayerId) -> StyleAnalysis:
    return StyleAnalysis(player_id=player_id)


def update_style(
    analysis: StyleAnalysis,
    card: Card,
    trick_before: Sequence[PlayedCard],
    trump: Optional[Card],
    known_hand: Sequence[Card],
) -> StyleAnalysis:
    """Return a new analysis that accounts for one more play."""
    kind = classify_play(card, trick_before, trump, known_hand)

    counts = replace(analysis.counts)
    if kind == PlayKind.AGGRESSIVE:
        counts.aggressive_plays += 1
    elif kind == PlayKind.DEFENSIVE:
        counts.defensive_plays += 1
    counts.total_plays += 1

    style = PlayStyle.UNDETERMINED
    confidence = 0
    if counts.total_plays >= MIN_PLAYS_FOR_STYLE:
        aggressive_ratio = counts.aggressive_plays / counts.total_plays
        defensive_ratio = counts.defensive_plays / counts.total_plays
        if aggressive_ratio >= DOMINANT_RATIO:
            style = PlayStyle.AGGRESSIVE
            confidence = min(100, round_half_up(aggressive_ratio * 100))
        elif defensive_ratio >= DOMINANT_RATIO:
            style = PlayStyle.DEFENSIVE
            confidence = min(100, round_half_up(defensive_ratio * 100))
        else:
            style = PlayStyle.BALANCED
            confidence = round_half_up(
                (1 - abs(aggressive_ratio - defensive_ratio)) * 100
            )

    return StyleAnalysis(
        player_id=analysis.player_id,
        style=style,
        confidence=confidence,
        counts=counts,
    )


def analyze_history(
    player_id: PlayerId,
    rounds: Sequence[Round],
    trump: Optional[Card],
    known_hand: Sequence[Card],
) -> StyleAnalysis:
    """
    Rebuild a player's analysis by replaying recorded rounds.

    Hands held at the time are not recorded, so `known_hand` stands in for
    every play.
    """
    analysis = initial_style(player_id)
    for round_state in rounds:
        ordered = sorted(round_state.played_cards, key=lambda pc: pc.order)
        for index, played in enumerate(ordered):
            if played.player_id != player_id:
                continue
            analysis = update_style(
                analysis, played.card, ordered[:index], trump, known_hand
            )
            break
    return analysis


def describe_style(analysis: StyleAnalysis) -> str:
    if analysis.confidence < 40:
        return "Play pattern still undetermined; more plays are needed."
    if analysis.style == PlayStyle.AGGRESSIVE:
        return (
            f"Aggressive player ({analysis.confidence}% confidence). "
            "Tends to play strong cards to collect points."
        )
    if analysis.style == PlayStyle.DEFENSIVE:
        return (
            f"Defensive player ({analysis.confidence}% confidence). "
            "Tends to keep strong cards and discard weak ones."
        )
    if analysis.style == PlayStyle.BALANCED:
        return (
            f"Balanced player ({analysis.confidence}% confidence). "
            "Alternates between aggressive and defensive plays."
        )
    return "Play pattern still undetermined."


def style_adjustment(style: PlayStyle, confidence: int) -> StyleAdjustment:
    """
    How an opponent's style should bias the user's choice.

    Aggressive opponents push toward defensive play and vice versa; a
    balanced opponent gives only a weak, neutral nudge.
    """
    if confidence < MIN_ADJUSTMENT_CONFIDENCE:
        return StyleAdjustment()

    factor = confidence / 100
    if style == PlayStyle.AGGRESSIVE:
        return StyleAdjustment(prefer_defensive=True, factor=factor)
    if style == PlayStyle.DEFENSIVE:
        return StyleAdjustment(prefer_aggressive=True, factor=factor)
    if style == PlayStyle.BALANCED:
        return StyleAdjustment(factor=factor * 0.5)
    if style == PlayStyle.UNDETERMINED:
        return StyleAdjustment()
    raise ValueError(f"Unknown play style: {style!r}")
