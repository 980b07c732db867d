# tests/test_style.py
import pytest

from bisca_advisor.cards import Card, Rank, Suit
from bisca_advisor.state import PlayedCard, PlayerId, PlayStyle, Round
from bisca_advisor.style import (
    PlayKind,
    analyze_history,
    classify_play,
    describe_style,
    initial_style,
    style_adjustment,
    update_style,
)

TRUMP = Card(Rank.TWO, Suit.SPADES)
P2 = PlayerId.PLAYER2


def _observe(cards):
    analysis = initial_style(P2)
    for card in cards:
        analysis = update_style(analysis, card, [], TRUMP, [])
    return analysis


def test_classify_play():
    assert classify_play(Card(Rank.ACE, Suit.HEARTS), [], TRUMP, []) == PlayKind.AGGRESSIVE
    assert classify_play(Card(Rank.KING, Suit.SPADES), [], TRUMP, []) == PlayKind.AGGRESSIVE
    assert classify_play(Card(Rank.THREE, Suit.HEARTS), [], TRUMP, []) == PlayKind.DEFENSIVE
    assert classify_play(Card(Rank.KING, Suit.HEARTS), [], TRUMP, []) == PlayKind.NEUTRAL


def test_contesting_a_loaded_trick_is_aggressive():
    before = [
        PlayedCard(card=Card(Rank.ACE, Suit.CLUBS), player_id=PlayerId.PLAYER1, order=1)
    ]
    assert classify_play(Card(Rank.QUEEN, Suit.CLUBS), before, TRUMP, []) == PlayKind.AGGRESSIVE


def test_holding_back_strong_card_is_defensive():
    before = [
        PlayedCard(card=Card(Rank.SEVEN, Suit.CLUBS), player_id=PlayerId.PLAYER2, order=1)
    ]
    hand = [Card(Rank.ACE, Suit.HEARTS)]
    # A King would contest the trick; a Four while holding an Ace does not.
    assert classify_play(Card(Rank.FOUR, Suit.CLUBS), before, TRUMP, hand) == PlayKind.DEFENSIVE


def test_undetermined_before_three_plays():
    analysis = _observe([Card(Rank.ACE, Suit.HEARTS), Card(Rank.SEVEN, Suit.HEARTS)])
    assert analysis.style == PlayStyle.UNDETERMINED
    assert analysis.confidence == 0
    assert analysis.counts.total_plays == 2


def test_aggressive_player():
    analysis = _observe(
        [
            Card(Rank.ACE, Suit.HEARTS),
            Card(Rank.SEVEN, Suit.HEARTS),
            Card(Rank.ACE, Suit.CLUBS),
        ]
    )
    assert analysis.style == PlayStyle.AGGRESSIVE
    assert analysis.confidence == 100
    assert describe_style(analysis).startswith("Aggressive player (100% confidence)")


def test_defensive_player():
    analysis = _observe(
        [
            Card(Rank.TWO, Suit.HEARTS),
            Card(Rank.THREE, Suit.CLUBS),
            Card(Rank.FOUR, Suit.DIAMONDS),
        ]
    )
    assert analysis.style == PlayStyle.DEFENSIVE
    assert analysis.confidence == 100


def test_balanced_player():
    analysis = _observe(
        [
            Card(Rank.ACE, Suit.HEARTS),
            Card(Rank.TWO, Suit.CLUBS),
            Card(Rank.KING, Suit.DIAMONDS),
        ]
    )
    assert analysis.style == PlayStyle.BALANCED
    assert analysis.confidence == 100


def test_update_style_does_not_mutate():
    analysis = initial_style(P2)
    updated = update_style(analysis, Card(Rank.ACE, Suit.HEARTS), [], TRUMP, [])
    assert analysis.counts.total_plays == 0
    assert updated.counts.total_plays == 1


def test_analyze_history_replays_rounds():
    rounds = [
        Round(
            number=n,
            played_cards=[
                PlayedCard(card=Card(Rank.TWO, suit), player_id=PlayerId.PLAYER1, order=1),
                PlayedCard(card=Card(Rank.ACE, suit), player_id=P2, order=2),
            ],
            complete=True,
        )
        for n, suit in enumerate((Suit.HEARTS, Suit.CLUBS, Suit.DIAMONDS), start=1)
    ]
    analysis = analyze_history(P2, rounds, TRUMP, [])
    assert analysis.style == PlayStyle.AGGRESSIVE
    assert analysis.counts.aggressive_plays == 3


def test_describe_low_confidence():
    assert "undetermined" in describe_style(initial_style(P2))


def test_style_adjustment():
    adj = style_adjustment(PlayStyle.AGGRESSIVE, 80)
    assert adj.prefer_defensive and not adj.prefer_aggressive
    assert adj.factor == pytest.approx(0.8)

    adj = style_adjustment(PlayStyle.DEFENSIVE, 60)
    assert adj.prefer_aggressive

    adj = style_adjustment(PlayStyle.BALANCED, 100)
    assert not adj.prefer_aggressive and not adj.prefer_defensive
    assert adj.factor == pytest.approx(0.5)

    assert style_adjustment(PlayStyle.AGGRESSIVE, 40).factor == 0


def test_trick_points_include_the_card_being_played():
    before = [
        PlayedCard(card=Card(Rank.KING, Suit.HEARTS), player_id=PlayerId.PLAYER1, order=1),
        PlayedCard(card=Card(Rank.JACK, Suit.HEARTS), player_id=P2, order=2),
    ]
    # 4 + 3 on the table plus the King's own 4 reaches 10.
    assert classify_play(Card(Rank.KING, Suit.CLUBS), before, TRUMP, []) == PlayKind.AGGRESSIVE
    assert classify_play(Card(Rank.JACK, Suit.CLUBS), before, TRUMP, []) == PlayKind.AGGRESSIVE
    # 4 + 3 + 2 stays below 10.
    assert classify_play(Card(Rank.QUEEN, Suit.CLUBS), before, TRUMP, []) == PlayKind.NEUTRAL
    # A single King on the table is not enough.
    assert classify_play(Card(Rank.KING, Suit.CLUBS), before[:1], TRUMP, []) == PlayKind.NEUTRAL
