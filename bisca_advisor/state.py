# bisca_advisor/state.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union
import enum

from .cards import TOTAL_CARDS, Card


class PlayerId(enum.Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"
    PLAYER3 = "player3"
    PLAYER4 = "player4"

    @property
    def seat(self) -> int:
        return int(self.value[-1])

    @classmethod
    def from_seat(cls, seat: int) -> "PlayerId":
        return cls(f"player{seat}")


class TeamId(enum.Enum):
    TEAM_A = "team_a"  # seats 1 and 3
    TEAM_B = "team_b"  # seats 2 and 4


# A game is won either by a player (2 players) or a team (4 players).
SideId = Union[PlayerId, TeamId]


class GameStatus(enum.Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class PlayStyle(enum.Enum):
    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    UNDETERMINED = "undetermined"


class RiskLevel(enum.Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


@dataclass
class Player:
    id: PlayerId
    name: str
    points: int = 0
    won_cards: List[Card] = field(default_factory=list)
    hand_size: int = 0
    is_user: bool = False


@dataclass
class Team:
    id: TeamId
    name: str
    member_ids: List[PlayerId]
    points: int = 0
    won_cards: List[Card] = field(default_factory=list)


@dataclass
class PlayedCard:
    card: Card
    player_id: PlayerId
    # 1-based position within the trick
    order: int


@dataclass
class Round:
    number: int
    played_cards: List[PlayedCard] = field(default_factory=list)
    winner: Optional[PlayerId] = None
    points_won: int = 0
    complete: bool = False

    def has_played(self, player_id: PlayerId) -> bool:
        return any(pc.player_id == player_id for pc in self.played_cards)


@dataclass
class StyleCounts:
    aggressive_plays: int = 0
    defensive_plays: int = 0
    total_plays: int = 0


@dataclass
class StyleAnalysis:
    player_id: PlayerId
    style: PlayStyle = PlayStyle.UNDETERMINED
    confidence: int = 0  # 0-100
    counts: StyleCounts = field(default_factory=StyleCounts)


@dataclass
class RecommendationDetails:
    hand_strength: int
    remaining_card_count: int
    trump_probability: int  # chance an opponent holds trump, 0-100
    points_at_stake: int


@dataclass
class Recommendation:
    card: Card
    priority: int  # 0-100, higher is better
    reason: str
    risk_level: RiskLevel
    win_probability: int  # 0-100
    details: RecommendationDetails


@dataclass
class GameConfig:
    player_count: int = 2
    player_names: List[str] = field(default_factory=list)
    user_id: PlayerId = PlayerId.PLAYER1
    # Pre-chosen trump card; drawn from the shuffled deck when omitted.
    trump: Optional[Card] = None


@dataclass
class GameState:
    status: GameStatus = GameStatus.SETUP
    config: GameConfig = field(default_factory=GameConfig)
    players: Dict[PlayerId, Player] = field(default_factory=dict)
    teams: Optional[Dict[TeamId, Team]] = None
    trump: Optional[Card] = None
    rounds: List[Round] = field(default_factory=list)
    current_round: Optional[Round] = None
    next_player: Optional[PlayerId] = None
    # Set once, by whoever plays the game's first card.
    first_player_of_game: Optional[PlayerId] = None
    cards_remaining_in_deck: int = TOTAL_CARDS
    played_cards: List[Card] = field(default_factory=list)
    user_hand: List[Card] = field(default_factory=list)
    winner: Optional[SideId] = None
    style_analyses: Dict[PlayerId, StyleAnalysis] = field(default_factory=dict)
    current_recommendation: Optional[Recommendation] = None

    @property
    def player_count(self) -> int:
        return self.config.player_count

    @property
    def user_id(self) -> PlayerId:
        return self.config.user_id

    @property
    def previous_round_winner(self) -> Optional[PlayerId]:
        if not self.rounds:
            return None
        return self.rounds[-1].winner
