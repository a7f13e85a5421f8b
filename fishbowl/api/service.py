"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine Actions
2. Routes them through the live GameSession
3. Formats state, events and results for the host UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    ActionRequest,
    ActionName,
    # Responses
    ActionResponse,
    GameStateResponse,
    EventsResponse,
    ResultsResponse,
    ResumeOfferResponse,
    # Shared
    TeamInfo,
    PlayerInfo,
    ItemInfo,
    TimerSettingsInfo,
    RoundScoreInfo,
    CarryoverInfo,
    EventInfo,
    # Enums
    ErrorCode,
    EventName,
    TeamName,
)
from ..engine_core.state import EventType, GameState, Screen, TeamId, ROUNDS, round_name
from ..engine_core.events import events_of_type
from ..engine_core.action import Action, ActionPayload, ActionResult, ActionType
from ..engine_core.scoring import final_results
from ..session import GameSession


# Fields that must be present for the API to build each action
REQUIRED_FIELDS = {
    ActionName.HOST_SET_TEAM_NAME: ("team_id", "name"),
    ActionName.HOST_SET_PLAYER_COUNT: ("player_count",),
    ActionName.HOST_SET_TIMER: ("round", "seconds"),
    ActionName.ENTRY_SUBMIT_PLAYER: ("team_id", "items"),
}


def _team(team_id: TeamId) -> TeamName:
    return TeamName(team_id.value)


def state_to_response(state: GameState) -> GameStateResponse:
    """Build the host view of a state."""
    scores = state.scores_by_round
    current_item = None
    if state.screen is Screen.TURN_ACTIVE and state.current_item is not None:
        current_item = ItemInfo(item_id=state.current_item.item_id, text=state.current_item.text)

    can_undo = (
        state.screen is Screen.TURN_ACTIVE
        and bool(state.undo_stack)
        and state.undo_stack[-1].round == state.current_round
    )

    return GameStateResponse(
        screen=state.screen.value,
        teams=[
            TeamInfo(team_id=_team(t), name=state.team_name(t), total_score=scores.total(t))
            for t in TeamId
        ],
        player_count=state.player_count,
        timer_settings=TimerSettingsInfo(
            round1_seconds=state.timer_settings.round1_seconds,
            round2_seconds=state.timer_settings.round2_seconds,
            round3_seconds=state.timer_settings.round3_seconds,
        ),
        entry_index=state.entry_index,
        players=[
            PlayerInfo(
                player_id=p.player_id,
                name=p.name,
                team_id=_team(p.team_id),
                entry_index=p.entry_index,
            )
            for p in state.players
        ],
        item_count=len(state.items),
        current_round=state.current_round,
        round_name=round_name(state.current_round) if state.current_round else None,
        current_team_turn=_team(state.current_team_turn),
        current_item=current_item,
        items_remaining=state.pools.remaining_count if state.pools else None,
        scores=_round_scores(state),
        timer_seconds_remaining=state.timer_seconds_remaining,
        turn_duration_seconds=state.turn_duration_seconds,
        turn_end_epoch_ms=state.turn_end_epoch_ms,
        carryover=CarryoverInfo(
            seconds=state.carryover_for_next_round.seconds,
            team_id=_team(state.carryover_for_next_round.team_id),
        ) if state.carryover_for_next_round else None,
        pending_carryover_seconds=state.pending_carryover_seconds,
        can_undo=can_undo,
        last_error=state.last_error,
    )


def _round_scores(state: GameState) -> list[RoundScoreInfo]:
    return [
        RoundScoreInfo(
            round=r,
            round_name=round_name(r),
            a=state.scores_by_round.for_round(r).a,
            b=state.scores_by_round.for_round(r).b,
        )
        for r in ROUNDS
    ]


@dataclass
class FishbowlService:
    """
    Main API service for the host UI.

    Usage:
        service = FishbowlService()

        # Apply a UI action
        response = service.apply_action(ActionRequest(type="TURN_GUESSED"))

        # Advance the timer
        response = service.tick()
    """
    session: GameSession = field(default_factory=GameSession)

    def build_action(self, request: ActionRequest) -> Action:
        """
        Convert a request into an engine Action.

        Raises ValueError when a required field is missing.
        """
        missing = [
            name for name in REQUIRED_FIELDS.get(request.type, ())
            if getattr(request, name) is None
        ]
        if missing:
            raise ValueError(f"{request.type.value} requires: {', '.join(missing)}")

        payload = ActionPayload(
            team_id=TeamId(request.team_id.value) if request.team_id else None,
            name=request.name,
            player_count=request.player_count,
            round=request.round,
            seconds=request.seconds,
            player_name=request.player_name or "",
            items=tuple(request.items or ()),
            now_ms=request.now_ms,
        )
        action_type = ActionType(request.type.value)
        if action_type is ActionType.TURN_SYNC_TIMER and payload.now_ms is None:
            return Action.sync_timer(self.session.clock.now_ms())
        return Action(action_type, payload)

    def get_state(self) -> GameStateResponse:
        return state_to_response(self.session.state)

    def apply_action(self, request: ActionRequest) -> ActionResponse:
        result = self.session.dispatch(self.build_action(request))
        return self._result_to_response(result)

    def tick(self, now_ms: int | None = None) -> ActionResponse:
        return self._result_to_response(self.session.tick(now_ms))

    def restart_game(self) -> ActionResponse:
        return self._result_to_response(self.session.dispatch(Action.restart_game()))

    def get_events(self, event_type: EventName | None = None) -> EventsResponse:
        """The event log, oldest first, optionally only one type of entry."""
        state = self.session.state
        if event_type is None:
            entries = list(state.events)
        else:
            entries = events_of_type(state, EventType(event_type.value))

        events = [
            EventInfo(
                event_id=e.event_id,
                timestamp_ms=e.timestamp_ms,
                type=e.event_type.value,
                round=e.round,
                team=_team(e.team) if e.team else None,
                item_id=e.item_id,
                item_text=e.item_text,
                points_delta=e.points_delta,
                note=e.note,
            )
            for e in entries
        ]
        return EventsResponse(events=events, count=len(events))

    def get_results(self) -> ResultsResponse:
        state = self.session.state
        results = final_results(state)
        return ResultsResponse(
            rounds=_round_scores(state),
            teams=[
                TeamInfo(team_id=_team(t), name=state.team_name(t), total_score=results.totals[t])
                for t in TeamId
            ],
            winner=_team(results.winner) if results.winner else None,
            winner_name=state.team_name(results.winner) if results.winner else None,
            is_tie=results.is_tie,
            is_final=state.screen is Screen.FINAL,
        )

    def get_resume_offer(self) -> ResumeOfferResponse | None:
        offer = self.session.resume_offer()
        if offer is None:
            return None
        saved = offer.state
        return ResumeOfferResponse(
            saved_at_ms=offer.saved_at_ms,
            screen=saved.screen.value,
            current_round=saved.current_round,
            player_count=saved.player_count,
            players_entered=len(saved.players),
            item_count=len(saved.items),
        )

    def resume(self) -> GameStateResponse:
        """Resume the saved game. Raises LookupError if there is none."""
        return state_to_response(self.session.resume())

    def discard_saved(self):
        self.session.discard_saved()

    @staticmethod
    def _result_to_response(result: ActionResult) -> ActionResponse:
        return ActionResponse(
            success=result.success,
            error=result.error,
            error_code=ErrorCode(result.error_code) if result.error_code in ErrorCode.__members__ else None,
            changes=result.state_changes,
            state=state_to_response(result.new_state),
        )
