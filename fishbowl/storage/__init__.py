"""
Storage - Persistence for the live game snapshot.

Only one thing is ever persisted: the current in-progress GameState, so
a game survives the host device closing the app. Finished or blank games
leave nothing behind.
"""

from .codec import SavedGame, SnapshotError, state_to_dict, state_from_dict
from .store import GameStore, MemoryGameStore, FileGameStore, StorageError

__all__ = [
    "SavedGame",
    "SnapshotError",
    "state_to_dict",
    "state_from_dict",
    "GameStore",
    "MemoryGameStore",
    "FileGameStore",
    "StorageError",
]
