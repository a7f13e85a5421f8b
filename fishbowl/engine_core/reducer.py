"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state, given a clock and entropy
- Screen preconditions first: actions from the wrong screen are ignored
- Handlers raise engine errors; apply() converts them to an ActionResult
- Delegates draws to PoolEngine, scoring and undo to the ledger

Screen flow:
    hostSetup -> wordEntry <-> entryHandoff -> ready -> turnHandoff
    -> turnStart -> turnActive -> timeUp -> turnHandoff ...
                              \\-> roundComplete -> turnHandoff | final
    final -> hostSetup (restart)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math

from .state import (
    Carryover, GameState, Screen, Team, TeamId, EventType, Item, Player, RoundScores,
    ITEMS_PER_PLAYER, FINAL_ROUND, MIN_PLAYERS, MAX_PLAYERS,
    MIN_TURN_SECONDS, MAX_TURN_SECONDS, ROUNDS,
    clamp_int, create_new_game_state, round_name,
)
from .action import Action, ActionType, ActionResult
from .errors import FishbowlError, PreconditionError, ValidationError
from .normalize import normalize_item_text
from .pools import PoolEngine
from .shuffle import EntropySource, SystemEntropy
from .clock import Clock, SystemClock
from .events import append_event, new_id
from . import ledger


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    The clock timestamps events and turn ends; the entropy source drives
    every shuffle.
    """
    entropy: EntropySource = field(default_factory=SystemEntropy)
    clock: Clock = field(default_factory=SystemClock)

    def __post_init__(self):
        self.pool_engine = PoolEngine(entropy=self.entropy)

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Never raises for engine errors. Returns ActionResult with the new
        state, or the old state (possibly carrying last_error) on failure.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                state,
                error_code="NO_HANDLER",
            )

        try:
            return handler(state, action)
        except PreconditionError as e:
            return ActionResult.failure(str(e), state, error_code=e.error_code)
        except FishbowlError as e:
            return ActionResult.failure(
                str(e),
                state._copy_with(last_error=str(e)),
                error_code=e.error_code,
            )

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.HOST_SET_TEAM_NAME: self._handle_set_team_name,
            ActionType.HOST_SET_PLAYER_COUNT: self._handle_set_player_count,
            ActionType.HOST_SET_TIMER: self._handle_set_timer,
            ActionType.HOST_START_WORD_ENTRY: self._handle_start_word_entry,
            ActionType.ENTRY_SUBMIT_PLAYER: self._handle_submit_player,
            ActionType.ENTRY_ACK_HANDOFF: self._handle_entry_ack,
            ActionType.READY_START_ROUND1: self._handle_start_round1,
            ActionType.HANDOFF_ACK: self._handle_handoff_ack,
            ActionType.TURN_START: self._handle_turn_start,
            ActionType.TURN_SYNC_TIMER: self._handle_sync_timer,
            ActionType.TURN_GUESSED: self._handle_guessed,
            ActionType.TURN_PASSED: self._handle_passed,
            ActionType.TURN_UNDO: self._handle_undo,
            ActionType.TIME_UP_ACK: self._handle_time_up_ack,
            ActionType.ROUND_PROCEED: self._handle_round_proceed,
            ActionType.HOST_RESTART_ROUND: self._handle_restart_round,
            ActionType.HOST_RESTART_GAME: self._handle_restart_game,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Preconditions
    # =========================================================================

    @staticmethod
    def _require_screen(state: GameState, action: Action, *screens: Screen):
        if state.screen not in screens:
            raise PreconditionError(
                f"{action.action_type.value} not allowed on {state.screen.value}"
            )

    @staticmethod
    def _require_setup_editable(state: GameState, action: Action):
        if not state.is_setup_editable:
            raise PreconditionError(
                f"{action.action_type.value} not allowed once the game has started"
            )

    # =========================================================================
    # Host setup
    # =========================================================================

    def _handle_set_team_name(self, state: GameState, action: Action) -> ActionResult:
        self._require_setup_editable(state, action)
        team_id = action.payload.team_id
        if team_id is None or action.payload.name is None:
            raise PreconditionError("Team id and name are required")

        teams = dict(state.teams)
        teams[team_id] = Team(team_id=team_id, name=action.payload.name)
        return ActionResult.success_with_state(
            state._copy_with(teams=teams, last_error=None),
            changes=[f"Team {team_id.value} renamed to {action.payload.name}"],
        )

    def _handle_set_player_count(self, state: GameState, action: Action) -> ActionResult:
        self._require_setup_editable(state, action)
        if action.payload.player_count is None:
            raise PreconditionError("Player count is required")

        count = clamp_int(action.payload.player_count, MIN_PLAYERS, MAX_PLAYERS)
        return ActionResult.success_with_state(
            state._copy_with(player_count=count, last_error=None),
            changes=[f"Player count set to {count}"],
        )

    def _handle_set_timer(self, state: GameState, action: Action) -> ActionResult:
        self._require_setup_editable(state, action)
        round_number = action.payload.round
        if round_number not in ROUNDS or action.payload.seconds is None:
            raise PreconditionError("A round (1-3) and seconds are required")

        seconds = clamp_int(action.payload.seconds, MIN_TURN_SECONDS, MAX_TURN_SECONDS)
        return ActionResult.success_with_state(
            state._copy_with(
                timer_settings=state.timer_settings.with_round(round_number, seconds),
                last_error=None,
            ),
            changes=[f"Round {round_number} timer set to {seconds}s"],
        )

    def _handle_start_word_entry(self, state: GameState, action: Action) -> ActionResult:
        """Reset everything but the host's setup and open word entry."""
        self._require_setup_editable(state, action)
        baseline = create_new_game_state()
        new_state = baseline._copy_with(
            screen=Screen.WORD_ENTRY,
            teams=state.teams,
            player_count=state.player_count,
            timer_settings=state.timer_settings,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=["Word entry started"],
        )

    # =========================================================================
    # Word entry
    # =========================================================================

    def _handle_submit_player(self, state: GameState, action: Action) -> ActionResult:
        """
        Accept one player's three items.

        Each item must be valid, must not duplicate any stored item and
        must not duplicate an earlier item in the same submission.
        """
        self._require_screen(state, action, Screen.WORD_ENTRY)
        payload = action.payload
        player_name = (payload.player_name or "").strip()
        if not player_name:
            raise ValidationError("Please enter a player name.")
        if payload.team_id is None:
            raise ValidationError("Please choose a team.")
        if state.entry_index >= state.player_count:
            raise PreconditionError("All players have already entered items")
        if len(payload.items) != ITEMS_PER_PLAYER:
            raise ValidationError(f"Please enter exactly {ITEMS_PER_PLAYER} items.")

        existing = {item.normalized_text: item.text for item in state.items}
        seen_in_entry: dict[str, int] = {}
        accepted = []
        for i, raw in enumerate(payload.items):
            result = normalize_item_text(raw)
            if not result.is_valid:
                raise ValidationError(f"Item {i + 1}: {result.error}")

            if result.normalized_text in existing:
                raise ValidationError(
                    f"Item {i + 1} is a duplicate of an existing entry: "
                    f"\"{existing[result.normalized_text]}\"."
                )

            if result.normalized_text in seen_in_entry:
                prev = seen_in_entry[result.normalized_text]
                raise ValidationError(f"Item {i + 1} duplicates Item {prev + 1}.")

            seen_in_entry[result.normalized_text] = i
            accepted.append(result)

        player = Player(
            player_id=new_id("player"),
            name=player_name,
            team_id=payload.team_id,
            entry_index=state.entry_index,
        )
        items = tuple(
            Item(
                item_id=new_id("word"),
                text=r.display_text,
                normalized_text=r.normalized_text,
                owner_player_id=player.player_id,
            )
            for r in accepted
        )

        next_index = state.entry_index + 1
        is_done = next_index >= state.player_count
        new_state = state._copy_with(
            players=state.players + (player,),
            items=state.items + items,
            starting_team_round1=state.starting_team_round1 or payload.team_id,
            entry_index=next_index,
            screen=Screen.READY if is_done else Screen.ENTRY_HANDOFF,
            last_error=None,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{player_name} added {ITEMS_PER_PLAYER} items for {state.team_name(payload.team_id)}"],
        )

    def _handle_entry_ack(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.ENTRY_HANDOFF)
        return ActionResult.success_with_state(
            state._copy_with(screen=Screen.WORD_ENTRY, last_error=None),
        )

    def _handle_start_round1(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.READY)
        if len(state.items) != state.player_count * ITEMS_PER_PLAYER:
            raise ValidationError("Incorrect number of items in fishbowl.")

        start_team = state.starting_team_round1 or TeamId.A
        new_state = self._begin_round(state, 1, start_team, pending_carryover=None)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Round 1 started, {state.team_name(start_team)} first"],
        )

    # =========================================================================
    # Turn play
    # =========================================================================

    def _handle_handoff_ack(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.TURN_HANDOFF)
        return ActionResult.success_with_state(
            state._copy_with(screen=Screen.TURN_START, last_error=None),
        )

    def _handle_turn_start(self, state: GameState, action: Action) -> ActionResult:
        """
        Start the timed turn.

        Pending carryover seconds, if any, replace the round default and are
        consumed here. They are only ever set for the right starting team.
        """
        self._require_screen(state, action, Screen.TURN_START)
        if state.current_round is None:
            raise PreconditionError("No round in progress")

        pools = self.pool_engine.ensure_ready(state.pools, [it.item_id for it in state.items])
        pools = self.pool_engine.draw_if_needed(pools)
        new_state = state._copy_with(pools=pools)

        if pools.is_complete:
            return ActionResult.success_with_state(
                self._complete_round(new_state),
                changes=[f"Round {state.current_round} has no items left"],
            )

        round_number = state.current_round
        pending = state.pending_carryover_seconds
        duration = pending if pending and pending > 0 else state.timer_settings.seconds_for(round_number)

        now = self.clock.now_ms()
        new_state = new_state._copy_with(
            screen=Screen.TURN_ACTIVE,
            turn_duration_seconds=duration,
            turn_end_epoch_ms=now + duration * 1000,
            timer_seconds_remaining=duration,
            undo_stack=(),
            pending_carryover_seconds=None,
            last_error=None,
        )
        new_state = append_event(
            new_state,
            EventType.TURN_STARTED,
            now,
            round=round_number,
            team=state.current_team_turn,
            note=f"Turn started ({duration}s)",
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{state.team_name(state.current_team_turn)} turn started ({duration}s)"],
        )

    def _handle_sync_timer(self, state: GameState, action: Action) -> ActionResult:
        """
        Recompute remaining time from the turn's end epoch.

        Ticks that only count down leave last_error alone; reaching zero
        clears it like any other screen change.
        """
        self._require_screen(state, action, Screen.TURN_ACTIVE)
        if state.turn_end_epoch_ms is None:
            raise PreconditionError("Turn timer is not running")

        now = action.payload.now_ms if action.payload.now_ms is not None else self.clock.now_ms()
        remaining = max(0, math.ceil((state.turn_end_epoch_ms - now) / 1000))
        if remaining == state.timer_seconds_remaining:
            return ActionResult.success_with_state(state)
        if remaining > 0:
            return ActionResult.success_with_state(
                state._copy_with(timer_seconds_remaining=remaining),
            )

        # Time's up: the presented item goes back into play, unscored
        in_flight = state.current_item
        pools = state.pools
        if pools is not None:
            pools = self.pool_engine.return_current(pools)

        new_state = state._copy_with(
            screen=Screen.TIME_UP,
            pools=pools,
            timer_seconds_remaining=0,
            turn_end_epoch_ms=None,
            turn_duration_seconds=None,
            undo_stack=(),
            last_error=None,
        )
        new_state = append_event(
            new_state,
            EventType.TIME_UP,
            now,
            round=state.current_round,
            team=state.current_team_turn,
            item_id=in_flight.item_id if in_flight else None,
            item_text=in_flight.text if in_flight else None,
            note="Time up",
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Time up for {state.team_name(state.current_team_turn)}"],
        )

    def _handle_guessed(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.TURN_ACTIVE)
        item = self._require_current_item(state)
        round_number = state.current_round
        team = state.current_team_turn

        new_state = ledger.record_guess(state, item)
        new_state = new_state._copy_with(
            pools=self.pool_engine.mark_guessed(state.pools),
            last_error=None,
        )
        new_state = append_event(
            new_state,
            EventType.WORD_GUESSED,
            self.clock.now_ms(),
            round=round_number,
            team=team,
            item_id=item.item_id,
            item_text=item.text,
            points_delta=1,
        )
        changes = [f"{state.team_name(team)} guessed \"{item.text}\""]

        # Last item: the round ends inside this same action
        if new_state.pools.is_complete:
            new_state = self._complete_round(new_state)
            changes.append(f"Round {round_number} complete")

        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_passed(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.TURN_ACTIVE)
        item = self._require_current_item(state)

        new_state = ledger.record_pass(state, item)
        new_state = new_state._copy_with(
            pools=self.pool_engine.pass_current(state.pools),
            last_error=None,
        )
        new_state = append_event(
            new_state,
            EventType.WORD_PASSED,
            self.clock.now_ms(),
            round=state.current_round,
            team=state.current_team_turn,
            item_id=item.item_id,
            item_text=item.text,
            points_delta=0,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"{state.team_name(state.current_team_turn)} passed \"{item.text}\""],
        )

    def _handle_undo(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.TURN_ACTIVE)
        new_state, entry = ledger.undo_last(state)
        new_state = new_state._copy_with(last_error=None)
        new_state = append_event(
            new_state,
            EventType.UNDO,
            self.clock.now_ms(),
            round=state.current_round,
            team=state.current_team_turn,
            item_id=entry.item_id,
            item_text=entry.item_text,
            points_delta=-entry.points_delta if entry.points_delta else 0,
            note=f"Undo {entry.kind.value}",
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Undid {entry.kind.value} of \"{entry.item_text}\""],
        )

    def _handle_time_up_ack(self, state: GameState, action: Action) -> ActionResult:
        self._require_screen(state, action, Screen.TIME_UP)
        next_team = state.current_team_turn.other
        return ActionResult.success_with_state(
            state._copy_with(
                screen=Screen.TURN_HANDOFF,
                current_team_turn=next_team,
                last_error=None,
            ),
            changes=[f"{state.team_name(next_team)} is up next"],
        )

    def _handle_round_proceed(self, state: GameState, action: Action) -> ActionResult:
        """
        Leave the round-complete screen.

        The team that finished the round starts the next one, and gets the
        carryover seconds only if the carryover was recorded for them.
        """
        self._require_screen(state, action, Screen.ROUND_COMPLETE)
        if state.current_round is None:
            raise PreconditionError("No round in progress")

        round_number = state.current_round
        if round_number == FINAL_ROUND:
            return ActionResult.success_with_state(
                state._copy_with(screen=Screen.FINAL, last_error=None),
                changes=["Game over"],
            )

        starter = state.round_finisher_team.get(round_number, state.current_team_turn)
        carry = state.carryover_for_next_round
        pending = carry.seconds if carry and carry.team_id is starter and carry.seconds > 0 else None

        new_state = self._begin_round(state, round_number + 1, starter, pending_carryover=pending)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Round {round_number + 1} started, {state.team_name(starter)} first"],
        )

    # =========================================================================
    # Host restarts
    # =========================================================================

    def _handle_restart_round(self, state: GameState, action: Action) -> ActionResult:
        """Zero the current round's score and replay it from the same starter."""
        if state.screen is Screen.TURN_ACTIVE:
            raise PreconditionError("Cannot restart a round while a turn is running")
        if state.current_round is None:
            raise PreconditionError("No round in progress")

        round_number = state.current_round
        starter = state.round_start_team.get(round_number, state.current_team_turn)
        scores = state.scores_by_round.with_round(round_number, RoundScores())

        new_state = state._copy_with(
            scores_by_round=scores,
            current_team_turn=starter,
            carryover_for_next_round=None,
            pending_carryover_seconds=None,
            pools=self.pool_engine.ensure_ready(None, [it.item_id for it in state.items]),
            turn_end_epoch_ms=None,
            turn_duration_seconds=None,
            timer_seconds_remaining=None,
            undo_stack=(),
            screen=Screen.TURN_HANDOFF,
            last_error=None,
        )
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Round {round_number} restarted"],
        )

    def _handle_restart_game(self, state: GameState, action: Action) -> ActionResult:
        return ActionResult.success_with_state(
            create_new_game_state(),
            changes=["Game restarted"],
        )

    # =========================================================================
    # Internal transitions
    # =========================================================================

    def _begin_round(
        self,
        state: GameState,
        round_number: int,
        starter: TeamId,
        pending_carryover: int | None,
    ) -> GameState:
        """Enter a round at the turn handoff screen and log ROUND_STARTED."""
        pools = None
        if round_number == 1:
            pools = self.pool_engine.ensure_ready(None, [it.item_id for it in state.items])

        new_state = state._copy_with(
            current_round=round_number,
            current_team_turn=starter,
            round_start_team={**state.round_start_team, round_number: starter},
            carryover_for_next_round=None,
            pending_carryover_seconds=pending_carryover,
            pools=pools,
            turn_end_epoch_ms=None,
            turn_duration_seconds=None,
            timer_seconds_remaining=None,
            undo_stack=(),
            screen=Screen.TURN_HANDOFF,
            last_error=None,
        )
        return append_event(
            new_state,
            EventType.ROUND_STARTED,
            self.clock.now_ms(),
            round=round_number,
            team=starter,
            note=f"Round {round_number} started ({round_name(round_number)})",
        )

    def _complete_round(self, state: GameState) -> GameState:
        """
        Close the current round.

        Time left on a running turn becomes carryover for the finishing
        team, except after the final round.
        """
        round_number = state.current_round
        finisher = state.current_team_turn
        now = self.clock.now_ms()
        if state.turn_end_epoch_ms is not None:
            remaining = max(0, math.ceil((state.turn_end_epoch_ms - now) / 1000))
        else:
            remaining = state.timer_seconds_remaining or 0

        carryover = None
        if round_number < FINAL_ROUND and remaining > 0:
            carryover = Carryover(seconds=remaining, team_id=finisher)

        new_state = state._copy_with(
            screen=Screen.ROUND_COMPLETE,
            round_finisher_team={**state.round_finisher_team, round_number: finisher},
            carryover_for_next_round=carryover,
            pending_carryover_seconds=None,
            turn_end_epoch_ms=None,
            turn_duration_seconds=None,
            timer_seconds_remaining=None,
            undo_stack=(),
            last_error=None,
        )
        return append_event(
            new_state,
            EventType.ROUND_COMPLETED,
            now,
            round=round_number,
            team=finisher,
            note=f"Round {round_number} complete",
        )

    @staticmethod
    def _require_current_item(state: GameState) -> Item:
        if state.current_round is None or state.pools is None or state.pools.current_item_id is None:
            raise PreconditionError("No item is currently presented")
        item = state.get_item(state.pools.current_item_id)
        if item is None:
            raise PreconditionError(f"Unknown item {state.pools.current_item_id}")
        return item


def apply_action(state: GameState, action: Action, reducer: Reducer | None = None) -> ActionResult:
    """
    Convenience function to apply an action.

    Uses a default Reducer (system clock and entropy) unless one is given.
    """
    reducer = reducer or Reducer()
    return reducer.apply(state, action)
