"""
Tests for the command-line interface.
"""

import pytest

from ..cli import main
from ..engine_core.state import RoundScores, Screen, ScoresByRound
from ..storage import FileGameStore


@pytest.fixture
def saved_dir(tmp_path, active_state):
    scores = ScoresByRound(round1=RoundScores(a=4, b=2))
    FileGameStore(data_dir=tmp_path).save(active_state._copy_with(scores_by_round=scores), 1)
    return tmp_path


class TestCli:

    def test_status_without_saved_game(self, tmp_path, capsys):
        main(["--data-dir", str(tmp_path), "status"])
        assert "No saved game." in capsys.readouterr().out

    def test_status(self, saved_dir, capsys):
        main(["--data-dir", str(saved_dir), "status"])
        out = capsys.readouterr().out
        assert f"Screen: {Screen.TURN_ACTIVE.value}" in out
        assert "Teams: Blue vs Red" in out
        assert "Round: 1 (Describe)" in out

    def test_results(self, saved_dir, capsys):
        main(["--data-dir", str(saved_dir), "results"])
        out = capsys.readouterr().out
        assert "Leader: Blue" in out

    def test_clear(self, saved_dir, capsys):
        main(["--data-dir", str(saved_dir), "clear"])
        assert "Saved game deleted." in capsys.readouterr().out
        assert FileGameStore(data_dir=saved_dir).load() is None

    def test_no_command(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["--data-dir", str(tmp_path)])
