"""
Game Session - Owns the one live GameState.

LIFECYCLE:
1. Session starts -> load any saved in-progress game as a resume offer
2. Host resumes (saved state becomes live) or discards (storage cleared)
3. During the game:
   - UI taps and timer ticks become Actions
   - Actions are applied one at a time through the reducer
   - The live state is replaced wholesale after each change
   - Observers (audio, wake lock, UI) are told about the change
   - The snapshot is saved while the game is in progress
4. Game finishes or is reset -> saved snapshot cleared

PERSISTENCE RULES:
- Saving happens after the new state exists, never before
- A storage failure is logged and the game carries on in memory
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import threading

from ..engine_core.state import GameState, Screen, create_new_game_state
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.clock import Clock, NonDecreasingClock, SystemClock
from ..engine_core.shuffle import EntropySource, SystemEntropy
from ..storage import GameStore, MemoryGameStore, SavedGame, StorageError


logger = logging.getLogger(__name__)

StateObserver = Callable[[GameState, GameState], None]


def is_in_progress(state: GameState) -> bool:
    """
    Whether a state is worth saving.

    A started game counts until it reaches the final screen; before
    round 1, any entered player or item counts.
    """
    if state.current_round is not None:
        return state.screen is not Screen.FINAL
    return bool(state.players) or bool(state.items)


@dataclass(frozen=True)
class ResumeOffer:
    """A saved game the host may pick up again."""
    state: GameState
    saved_at_ms: int


class GameSession:
    """
    A single game session on the host device.

    Usage:
        session = GameSession(store=FileGameStore())
        if session.resume_offer():
            session.resume()

        session.dispatch(Action.start_word_entry())
        ...
        session.tick()  # from a periodic timer while a turn runs
    """

    def __init__(
        self,
        store: GameStore | None = None,
        clock: Clock | None = None,
        entropy: EntropySource | None = None,
    ):
        self.store = store or MemoryGameStore()
        self.clock = NonDecreasingClock(clock or SystemClock())
        self.reducer = Reducer(entropy=entropy or SystemEntropy(), clock=self.clock)

        self._state = create_new_game_state()
        self._lock = threading.RLock()
        self._observers: list[StateObserver] = []
        self._offer: ResumeOffer | None = self._load_offer()

    @property
    def state(self) -> GameState:
        return self._state

    # =========================================================================
    # Resume
    # =========================================================================

    def _load_offer(self) -> ResumeOffer | None:
        saved: SavedGame | None = self.store.load()
        if saved is None:
            return None
        if not is_in_progress(saved.state):
            logger.info("Saved game is not in progress, clearing it")
            self._clear_store()
            return None
        logger.info("Found saved game on screen %s", saved.state.screen.value)
        return ResumeOffer(state=saved.state, saved_at_ms=saved.saved_at_ms)

    def resume_offer(self) -> ResumeOffer | None:
        return self._offer

    def resume(self) -> GameState:
        """Make the saved game the live game."""
        with self._lock:
            if self._offer is None:
                raise LookupError("No saved game to resume")
            old, self._state = self._state, self._offer.state
            self._offer = None
            logger.info("Resumed saved game on screen %s", self._state.screen.value)
            self._notify(old, self._state)
            return self._state

    def discard_saved(self):
        """Drop the saved game and keep the fresh one."""
        with self._lock:
            if self._offer is not None:
                logger.info("Discarded saved game")
            self._offer = None
            self._clear_store()

    # =========================================================================
    # Actions
    # =========================================================================

    def dispatch(self, action: Action) -> ActionResult:
        """
        Apply one action to the live state.

        Calls are serialized, so two taps in the same frame are applied one
        after the other. Acting on a fresh game while a resume offer is
        pending declines the offer.
        """
        with self._lock:
            if self._offer is not None:
                logger.info("New action while a saved game was on offer; discarding it")
                self._offer = None

            old = self._state
            result = self.reducer.apply(old, action)

            if result.ignored:
                logger.debug("Ignored %s: %s", action.action_type.value, result.error)
                return result
            if result.error:
                logger.debug("Rejected %s: %s", action.action_type.value, result.error)

            new = result.new_state
            if new is old:
                return result

            self._state = new
            logger.debug("Applied %s -> %s", action.action_type.value, new.screen.value)
            if new.screen is Screen.FINAL and old.screen is not Screen.FINAL:
                logger.info("Game finished")

            self._persist(new)
            self._notify(old, new)
            return result

    def tick(self, now_ms: int | None = None) -> ActionResult:
        """Feed the turn timer with the current time."""
        if now_ms is None:
            now_ms = self.clock.now_ms()
        return self.dispatch(Action.sync_timer(now_ms))

    # =========================================================================
    # Observers
    # =========================================================================

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """
        Register observer(old_state, new_state), called after each change.

        Returns a function that unsubscribes it.
        """
        self._observers.append(observer)

        def unsubscribe():
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, old: GameState, new: GameState):
        for observer in list(self._observers):
            try:
                observer(old, new)
            except Exception:
                logger.exception("State observer %r failed", observer)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _persist(self, state: GameState):
        try:
            if is_in_progress(state):
                self.store.save(state, self.clock.now_ms())
            else:
                self.store.clear()
        except StorageError:
            logger.exception("Could not persist game state")

    def _clear_store(self):
        try:
            self.store.clear()
        except StorageError:
            logger.exception("Could not clear saved game")
