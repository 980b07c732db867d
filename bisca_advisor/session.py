# bisca_advisor/session.py
from __future__ import annotations

import logging
import random
from typing import List, Optional

from .advisor import generate_recommendations
from .cards import Card
from .engine import (
    Action,
    ActionResult,
    FinalizeRound,
    RegisterPlay,
    RequestRecommendation,
    ResetGame,
    StartGame,
    UpdateUserHand,
    apply_action,
    new_game_state,
)
from .rules import TrickLeader, current_trick_leader
from .scoring import Scorecard, scorecard
from .snapshot import STORAGE_SLOT, SnapshotStore, state_from_dict, state_to_dict
from .state import GameConfig, GameState, PlayerId, Recommendation

logger = logging.getLogger(__name__)


class GameSession:
    """
    Host-side owner of one GameState.

    Every action goes through `apply_action`; after a successful transition
    the new state is mirrored to the optional store. A failing store is
    logged and otherwise ignored, the in-memory state stays authoritative.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        store: Optional[SnapshotStore] = None,
        slot: str = STORAGE_SLOT,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = state if state is not None else new_game_state()
        self.store = store
        self.slot = slot
        self.rng = rng

    @classmethod
    def restore(
        cls,
        store: SnapshotStore,
        slot: str = STORAGE_SLOT,
        rng: Optional[random.Random] = None,
    ) -> "GameSession":
        """
        Resume from the store's slot, or start fresh when it is empty.

        A snapshot that cannot be read or decoded is logged and ignored;
        the next successful action overwrites it.
        """
        state = None
        try:
            snapshot = store.load(slot)
            if snapshot is not None:
                state = state_from_dict(snapshot)
                logger.info("Restored session from slot %s", slot)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable session snapshot in slot %s: %s", slot, exc)
            state = None
        return cls(state=state, store=store, slot=slot, rng=rng)

    # ---------------------------------------------------------------------
    # Action API
    # ---------------------------------------------------------------------

    def dispatch(self, action: Action) -> ActionResult:
        self.state, result = apply_action(self.state, action, rng=self.rng)
        if result.success:
            self._persist()
        return result

    def start(self, config: GameConfig) -> ActionResult:
        return self.dispatch(StartGame(config))

    def register_played_card(self, player_id: PlayerId, card: Card) -> ActionResult:
        return self.dispatch(RegisterPlay(player_id, card))

    def update_user_hand(self, cards: List[Card]) -> ActionResult:
        return self.dispatch(UpdateUserHand(list(cards)))

    def request_recommendation(self) -> ActionResult:
        return self.dispatch(RequestRecommendation())

    def finalize_round(self) -> ActionResult:
        return self.dispatch(FinalizeRound())

    def reset(self) -> ActionResult:
        return self.dispatch(ResetGame())

    # ---------------------------------------------------------------------
    # Read helpers
    # ---------------------------------------------------------------------

    def scorecard(self) -> Scorecard:
        return scorecard(self.state)

    def trick_leader(self) -> Optional[TrickLeader]:
        if self.state.current_round is None:
            return None
        return current_trick_leader(
            self.state.current_round.played_cards, self.state.trump
        )

    def recommendations(self) -> List[Recommendation]:
        return generate_recommendations(self.state)

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.slot, state_to_dict(self.state))
        except Exception as exc:
            logger.warning("Could not persist session snapshot: %s", exc)
