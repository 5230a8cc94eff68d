from __future__ import annotations

from dataclasses import dataclass


# -------- Builder --------
@dataclass(frozen=True)
class AdjustBaseCount:
    card_id: str
    delta: int


@dataclass(frozen=True)
class AdjustModCount:
    card_id: str
    delta: int


@dataclass(frozen=True)
class AdjustNullCount:
    delta: int


@dataclass(frozen=True)
class AdjustModifierCapacity:
    delta: int


@dataclass(frozen=True)
class ResetBuilder:
    pass


# -------- Deck operations --------
@dataclass(frozen=True)
class GenerateDeck:
    shuffle: bool = True


@dataclass(frozen=True)
class ShuffleDeck:
    pass


@dataclass(frozen=True)
class Draw:
    pass


@dataclass(frozen=True)
class ResetDeck:
    pass


@dataclass(frozen=True)
class ToggleLock:
    pass


@dataclass(frozen=True)
class SetHandLimit:
    limit: int


@dataclass(frozen=True)
class DiscardFromHand:
    card_id: str
    all_copies: bool = False


@dataclass(frozen=True)
class DiscardFromDeck:
    count: int = 1


@dataclass(frozen=True)
class ReturnDiscardToDeck:
    shuffle: bool = True
    to_top: bool = True


@dataclass(frozen=True)
class ReturnDiscardItemToDeck:
    index: int


@dataclass(frozen=True)
class ReturnDiscardGroupToDeck:
    card_id: str
    all_copies: bool = True
    shuffle_moved: bool = False
    reshuffle_deck: bool = False


@dataclass(frozen=True)
class ReturnDiscardItemToHand:
    index: int


@dataclass(frozen=True)
class ReturnDiscardGroupToHand:
    card_id: str
    all_copies: bool = False


# -------- Saved decks --------
@dataclass(frozen=True)
class SaveDeck:
    name: str


@dataclass(frozen=True)
class LoadSavedDeck:
    name: str


@dataclass(frozen=True)
class DeleteSavedDeck:
    name: str


# -------- Play selection --------
@dataclass(frozen=True)
class StartPlay:
    card_id: str


@dataclass(frozen=True)
class ToggleAttach:
    card_id: str


@dataclass(frozen=True)
class FinalizePlay:
    pass


@dataclass(frozen=True)
class CancelPlay:
    pass


Action = (
    AdjustBaseCount
    | AdjustModCount
    | AdjustNullCount
    | AdjustModifierCapacity
    | ResetBuilder
    | GenerateDeck
    | ShuffleDeck
    | Draw
    | ResetDeck
    | ToggleLock
    | SetHandLimit
    | DiscardFromHand
    | DiscardFromDeck
    | ReturnDiscardToDeck
    | ReturnDiscardItemToDeck
    | ReturnDiscardGroupToDeck
    | ReturnDiscardItemToHand
    | ReturnDiscardGroupToHand
    | SaveDeck
    | LoadSavedDeck
    | DeleteSavedDeck
    | StartPlay
    | ToggleAttach
    | FinalizePlay
    | CancelPlay
)

PLAY_ACTIONS = (StartPlay, ToggleAttach, FinalizePlay, CancelPlay)

ACTION_TYPES: dict[str, type] = {
    "adjust_base": AdjustBaseCount,
    "adjust_mod": AdjustModCount,
    "adjust_null": AdjustNullCount,
    "adjust_capacity": AdjustModifierCapacity,
    "reset_builder": ResetBuilder,
    "generate_deck": GenerateDeck,
    "shuffle": ShuffleDeck,
    "draw": Draw,
    "reset_deck": ResetDeck,
    "toggle_lock": ToggleLock,
    "set_hand_limit": SetHandLimit,
    "discard_from_hand": DiscardFromHand,
    "discard_from_deck": DiscardFromDeck,
    "return_discard_to_deck": ReturnDiscardToDeck,
    "return_discard_item_to_deck": ReturnDiscardItemToDeck,
    "return_discard_group_to_deck": ReturnDiscardGroupToDeck,
    "return_discard_item_to_hand": ReturnDiscardItemToHand,
    "return_discard_group_to_hand": ReturnDiscardGroupToHand,
    "save_deck": SaveDeck,
    "load_saved_deck": LoadSavedDeck,
    "delete_saved_deck": DeleteSavedDeck,
    "start_play": StartPlay,
    "toggle_attach": ToggleAttach,
    "finalize_play": FinalizePlay,
    "cancel_play": CancelPlay,
}

_TYPE_NAMES: dict[type, str] = {cls: name for name, cls in ACTION_TYPES.items()}


def action_type(a: Action) -> str:
    return _TYPE_NAMES.get(type(a), "unknown")
