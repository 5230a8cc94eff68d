"""Deterministic, headless deck-state engine for the Collapse deck builder.

IMPORTANT: This package does no file or network I/O; persistence lives in
`collapse.services`.
"""

from .actions import Action, Draw, FinalizePlay, StartPlay, ToggleAttach
from .builder import DeckStatus, build_deck_array, deck_status, is_valid
from .capacity import can_admit, capacity_used
from .play import ActivePlay
from .rules import BASE_TARGET, MIN_NULLS
from .session import Session, StepResult, new_session, step
from .state import BuilderState, DiscardEntry, HandEntry, SavedDeck
from .types import Card, CardCatalog, CardCategory, CardDetail

__all__ = [
    "Action",
    "ActivePlay",
    "BASE_TARGET",
    "BuilderState",
    "Card",
    "CardCatalog",
    "CardCategory",
    "CardDetail",
    "DeckStatus",
    "DiscardEntry",
    "Draw",
    "FinalizePlay",
    "HandEntry",
    "MIN_NULLS",
    "SavedDeck",
    "Session",
    "StartPlay",
    "StepResult",
    "ToggleAttach",
    "build_deck_array",
    "can_admit",
    "capacity_used",
    "deck_status",
    "is_valid",
    "new_session",
    "step",
]
