# bisca_advisor/cards.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, TypeVar
import enum
import random
import re

T = TypeVar("T")


class Suit(enum.Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    SPADES = "spades"
    CLUBS = "clubs"


class Rank(enum.Enum):
    ACE = "A"
    SEVEN = "7"
    KING = "K"
    JACK = "J"
    QUEEN = "Q"
    SIX = "6"
    FIVE = "5"
    FOUR = "4"
    THREE = "3"
    TWO = "2"


CARD_POINTS: Dict[Rank, int] = {
    Rank.ACE: 11,
    Rank.SEVEN: 10,
    Rank.KING: 4,
    Rank.JACK: 3,
    Rank.QUEEN: 2,
    Rank.SIX: 0,
    Rank.FIVE: 0,
    Rank.FOUR: 0,
    Rank.THREE: 0,
    Rank.TWO: 0,
}

# Trick-taking order, distinct from CARD_POINTS.
CARD_STRENGTH: Dict[Rank, int] = {
    Rank.ACE: 11,
    Rank.SEVEN: 10,
    Rank.KING: 9,
    Rank.JACK: 8,
    Rank.QUEEN: 7,
    Rank.SIX: 6,
    Rank.FIVE: 5,
    Rank.FOUR: 4,
    Rank.THREE: 3,
    Rank.TWO: 2,
}

TOTAL_POINTS = 120
TOTAL_CARDS = 40

SUIT_SYMBOLS: Dict[Suit, str] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.SPADES: "♠",
    Suit.CLUBS: "♣",
}

_SUIT_ALIASES: Dict[str, Suit] = {
    "♥": Suit.HEARTS,
    "h": Suit.HEARTS,
    "♦": Suit.DIAMONDS,
    "d": Suit.DIAMONDS,
    "♠": Suit.SPADES,
    "s": Suit.SPADES,
    "♣": Suit.CLUBS,
    "c": Suit.CLUBS,
}

_CARD_PATTERN = re.compile(r"^([AKQJ2-7])([♥♦♠♣HDSC])\ufe0f?$", re.IGNORECASE)


@dataclass(frozen=True)
class Card:
    """
    A card of the 40-card deck (no 8, 9 or 10).

    Equality is structural on (rank, suit). Point value and strength are
    looked up from the rank tables, so they can never disagree with it.
    """
    rank: Rank
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.rank, Rank):
            raise ValueError(f"Invalid rank: {self.rank!r}")
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit!r}")

    @property
    def points(self) -> int:
        return CARD_POINTS[self.rank]

    @property
    def strength(self) -> int:
        return CARD_STRENGTH[self.rank]

    def __str__(self) -> str:
        return f"{self.rank.value}{SUIT_SYMBOLS[self.suit]}"


def card_str(card: Card) -> str:
    return str(card)


def parse_card(text: str) -> Optional[Card]:
    """
    Parse a card from text such as "7♠", "A♥️" or the ASCII forms "7S"/"ah".

    Returns None when the text does not name a card of the deck.
    """
    match = _CARD_PATTERN.match(text.strip())
    if not match:
        return None
    rank_text, suit_text = match.groups()
    rank = Rank(rank_text.upper())
    suit = _SUIT_ALIASES[suit_text.lower()]
    return Card(rank, suit)


def card_to_dict(card: Card) -> Dict[str, Any]:
    """Convert a Card to a JSON-serializable dict."""
    return {
        "rank": card.rank.value,
        "suit": card.suit.value,
        "points": card.points,
    }


def dict_to_card(data: Dict[str, Any]) -> Card:
    """Convert a dict back into a Card. The stored points are ignored."""
    return Card(Rank(data["rank"]), Suit(data["suit"]))


def build_deck() -> List[Card]:
    """Build the 40-card deck, each (rank, suit) exactly once."""
    deck = [Card(rank, suit) for suit in Suit for rank in Rank]
    if len(deck) != TOTAL_CARDS:
        raise RuntimeError("Deck must contain exactly 40 cards")
    return deck


def shuffle(cards: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of `cards` (Fisher-Yates). Uses `rng` if given."""
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def cards_equal(a: Card, b: Card) -> bool:
    return a.rank == b.rank and a.suit == b.suit


def find_card(cards: Sequence[Card], target: Card) -> int:
    """Index of the first card equal to `target`, or -1."""
    for i, card in enumerate(cards):
        if cards_equal(card, target):
            return i
    return -1


def remove_card(cards: Sequence[Card], target: Card) -> List[Card]:
    """Return a copy of `cards` without the first match of `target`."""
    index = find_card(cards, target)
    if index == -1:
        return list(cards)
    return list(cards[:index]) + list(cards[index + 1:])


def total_points(cards: Sequence[Card]) -> int:
    return sum(card.points for card in cards)


def is_trump(card: Card, trump: Optional[Card]) -> bool:
    if trump is None:
        return False
    return card.suit == trump.suit


def _compare_strength(a: Card, b: Card) -> int:
    if a.strength > b.strength:
        return 1
    if a.strength < b.strength:
        return -1
    return 0


def compare_cards(a: Card, b: Card, trump: Optional[Card], lead_card: Card) -> int:
    """
    Compare two cards played in the same trick.

    Returns 1 if `a` beats `b`, -1 if `b` beats `a`, 0 otherwise.

    1. Trump beats non-trump.
    2. Two trumps compare by strength.
    3. Otherwise a card of the lead suit beats one that is not.
    4. Two lead-suit cards compare by strength.
    5. Two cards both off the lead suit return 0: callers keep the card
       already leading the trick.
    """
    a_trump = is_trump(a, trump)
    b_trump = is_trump(b, trump)

    if a_trump and not b_trump:
        return 1
    if b_trump and not a_trump:
        return -1
    if a_trump and b_trump:
        return _compare_strength(a, b)

    a_follows = a.suit == lead_card.suit
    b_follows = b.suit == lead_card.suit

    if a_follows and not b_follows:
        return 1
    if b_follows and not a_follows:
        return -1
    if a_follows and b_follows:
        return _compare_strength(a, b)

    return 0
