"""
Final results - totals per team and the winner.

The winner is the team with the strictly higher total over all three
rounds. Equal totals are a tie; there is no tiebreak round.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import GameState, TeamId, ROUNDS


@dataclass(frozen=True)
class FinalResults:
    totals: dict[TeamId, int]
    by_round: dict[int, dict[TeamId, int]]
    winner: TeamId | None

    @property
    def is_tie(self) -> bool:
        return self.winner is None


def final_results(state: GameState) -> FinalResults:
    scores = state.scores_by_round
    totals = {team: scores.total(team) for team in TeamId}
    by_round = {
        r: {team: scores.for_round(r).get(team) for team in TeamId}
        for r in ROUNDS
    }

    winner = None
    if totals[TeamId.A] > totals[TeamId.B]:
        winner = TeamId.A
    elif totals[TeamId.B] > totals[TeamId.A]:
        winner = TeamId.B

    return FinalResults(totals=totals, by_round=by_round, winner=winner)
