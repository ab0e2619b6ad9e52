"""Process-wide state for the game currently being watched."""

from .game_state import GameSnapshot, LiveGameState, StateChanged

__all__ = ["GameSnapshot", "LiveGameState", "StateChanged"]
