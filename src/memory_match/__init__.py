from .deck import Card, generate
from .engine import GameEngine, GameState, MATCH_AWARD, MISMATCH_PENALTY
from .scheduler import AsyncioScheduler, Handle, ManualScheduler, Scheduler, ThreadingScheduler

__all__ = [
    "Card",
    "generate",
    "GameEngine",
    "GameState",
    "MATCH_AWARD",
    "MISMATCH_PENALTY",
    "Scheduler",
    "Handle",
    "ManualScheduler",
    "AsyncioScheduler",
    "ThreadingScheduler",
]
