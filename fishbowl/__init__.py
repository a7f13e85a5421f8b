"""
Fishbowl - Single-device party game engine

Two teams take turns clearing a shared bowl of words and phrases across
three rounds (Describe, Charades, One-word clue). The engine provides:
- An immutable game state and a pure reducer
- Fair item serving with passing and reshuffling
- Turn timers with carryover between rounds
- Scoring, undo and an append-only event log
- Snapshot persistence and a local HTTP API for the UI
"""

__version__ = "0.1.0"
