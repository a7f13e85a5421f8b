"""
Game Store - Persists the one in-progress game.

The store:
- Holds at most one saved snapshot (the live game)
- Is written after every state change while a game is in progress
- Is cleared when the game returns to a clean or finished state
- Treats an unreadable snapshot as "no saved game" and deletes it

Design decisions:
- Simple file-based storage, one JSON file
- Atomic writes (temp file + rename) so a crash never leaves half a file
- In-memory store for tests and ephemeral sessions
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
import logging
import os
import tempfile

from ..engine_core.state import GameState
from .codec import SavedGame, SnapshotError, decode_saved_game, encode_saved_game


logger = logging.getLogger(__name__)

SAVE_FILE_NAME = "game_v1.json"


class StorageError(Exception):
    """Saving or clearing the snapshot failed."""


class GameStore(ABC):
    """Persistence port for the live game snapshot."""

    @abstractmethod
    def save(self, state: GameState, saved_at_ms: int) -> None:
        ...

    @abstractmethod
    def load(self) -> SavedGame | None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class MemoryGameStore(GameStore):
    """Keeps the snapshot in memory. Nothing survives the process."""

    def __init__(self):
        self._saved: SavedGame | None = None
        self.save_count = 0

    def save(self, state: GameState, saved_at_ms: int) -> None:
        self._saved = SavedGame(state=state, saved_at_ms=saved_at_ms)
        self.save_count += 1

    def load(self) -> SavedGame | None:
        return self._saved

    def clear(self) -> None:
        self._saved = None


class FileGameStore(GameStore):
    """
    JSON file store.

    Usage:
        store = FileGameStore(data_dir="~/.fishbowl")
        saved = store.load()
        if saved:
            offer_resume(saved.state)
    """

    def __init__(self, data_dir: str | Path | None = None):
        if data_dir is None:
            data_dir = Path.home() / ".fishbowl"
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.data_dir / SAVE_FILE_NAME

    def save(self, state: GameState, saved_at_ms: int) -> None:
        payload = encode_saved_game(SavedGame(state=state, saved_at_ms=saved_at_ms))
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=".game_", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Could not save game to {self.path}: {e}") from e

    def load(self) -> SavedGame | None:
        """
        Load the saved game.

        Returns None if nothing is saved or the file is unreadable.
        """
        if not self.path.exists():
            return None

        try:
            return decode_saved_game(self.path.read_bytes())
        except (OSError, SnapshotError) as e:
            # Invalid snapshot, delete it
            logger.warning("Discarding unreadable saved game %s: %s", self.path, e)
            try:
                self.path.unlink(missing_ok=True)
            except OSError as unlink_error:
                logger.warning("Could not delete saved game %s: %s", self.path, unlink_error)
            return None

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not clear saved game {self.path}: {e}") from e
