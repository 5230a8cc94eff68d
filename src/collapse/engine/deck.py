"""Deck / hand / discard transitions.

The deck is LIFO: the last element is the top card. Every transition
returns True when it changed the state and False when it was refused;
refused transitions leave the state untouched.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone

from .builder import build_deck_array
from .state import BuilderState, DiscardEntry, HandEntry, SavedDeck
from .types import CardCatalog, DiscardOrigin


@dataclass(frozen=True)
class Stack:
    card_id: str
    count: int
    indices: tuple[int, ...]


def _shuffle(rng: random.Random, items: list[str]) -> None:
    # random.shuffle is an in-place Fisher-Yates
    rng.shuffle(items)


def generate_deck(state: BuilderState, catalog: CardCatalog, rng: random.Random, shuffle: bool = True) -> bool:
    deck = build_deck_array(state, catalog)
    if shuffle:
        _shuffle(rng, deck)
    state.deck = deck
    return True


def shuffle_deck(state: BuilderState, rng: random.Random) -> bool:
    if not state.deck:
        return False
    _shuffle(rng, state.deck)
    return True


def reset_deck(state: BuilderState, catalog: CardCatalog, rng: random.Random) -> bool:
    deck = build_deck_array(state, catalog)
    _shuffle(rng, deck)
    state.deck = deck
    state.hand = []
    state.discard = []
    return True


def recycle_discard(state: BuilderState, rng: random.Random) -> bool:
    """Shuffle the discard pile's ids onto the top of the deck."""
    if not state.discard:
        return False
    ids = state.discard_ids()
    _shuffle(rng, ids)
    state.deck.extend(ids)
    state.discard = []
    return True


def draw(state: BuilderState, rng: random.Random) -> str | None:
    """Draw one card. Returns the drawn id, or None if refused."""
    if not state.is_locked:
        return None
    if len(state.hand) >= state.hand_limit:
        return None
    if not state.deck and not recycle_discard(state, rng):
        return None
    card_id = state.deck.pop()
    state.hand.append(HandEntry(card_id=card_id, status="unspent"))
    return card_id


def toggle_lock(state: BuilderState) -> bool:
    state.is_locked = not state.is_locked
    return True


def set_hand_limit(state: BuilderState, limit: int) -> bool:
    # Lowering the limit never evicts cards already in hand.
    nxt = max(0, limit)
    if nxt == state.hand_limit:
        return False
    state.hand_limit = nxt
    return True


# -------- Hand -> Discard --------
def discard_from_hand(
    state: BuilderState,
    card_id: str,
    all_copies: bool = False,
    origin: DiscardOrigin = "discarded",
) -> bool:
    removed: list[HandEntry] = []
    if all_copies:
        for i in range(len(state.hand) - 1, -1, -1):
            if state.hand[i].card_id == card_id:
                removed.append(state.hand.pop(i))
    else:
        for i, h in enumerate(state.hand):
            if h.card_id == card_id:
                removed.append(state.hand.pop(i))
                break
    if not removed:
        return False
    state.discard.extend(DiscardEntry(card_id=r.card_id, origin=origin) for r in removed)
    return True


def discard_from_deck(state: BuilderState, count: int = 1) -> bool:
    """Mill up to `count` cards from the top of the deck."""
    if not state.deck or count <= 0:
        return False
    for _ in range(count):
        if not state.deck:
            break
        state.discard.append(DiscardEntry(card_id=state.deck.pop(), origin="discarded"))
    return True


# -------- Discard -> Deck --------
def return_discard_to_deck(
    state: BuilderState, rng: random.Random, shuffle: bool = True, to_top: bool = True
) -> bool:
    if not state.discard:
        return False
    ids = state.discard_ids()
    if shuffle:
        _shuffle(rng, ids)
    if to_top:
        state.deck.extend(ids)
    else:
        state.deck[:0] = ids
    if shuffle:
        _shuffle(rng, state.deck)
    state.discard = []
    return True


def return_discard_item_to_deck(state: BuilderState, index: int) -> bool:
    if index < 0 or index >= len(state.discard):
        return False
    entry = state.discard.pop(index)
    state.deck.append(entry.card_id)
    return True


def return_discard_group_to_deck(
    state: BuilderState,
    rng: random.Random,
    card_id: str,
    all_copies: bool = True,
    shuffle_moved: bool = False,
    reshuffle_deck: bool = False,
) -> bool:
    if all_copies:
        moved = [x.card_id for x in state.discard if x.card_id == card_id]
        if not moved:
            return False
        state.discard = [x for x in state.discard if x.card_id != card_id]
    else:
        idx = next((i for i, x in enumerate(state.discard) if x.card_id == card_id), -1)
        if idx == -1:
            return False
        moved = [state.discard.pop(idx).card_id]
    if shuffle_moved:
        _shuffle(rng, moved)
    state.deck.extend(moved)
    if reshuffle_deck:
        _shuffle(rng, state.deck)
    return True


# -------- Discard -> Hand --------
def return_discard_item_to_hand(state: BuilderState, index: int) -> bool:
    if state.hand_space() <= 0:
        return False
    if index < 0 or index >= len(state.discard):
        return False
    entry = state.discard.pop(index)
    state.hand.append(HandEntry(card_id=entry.card_id, status="unspent"))
    return True


def return_discard_group_to_hand(state: BuilderState, card_id: str, all_copies: bool = False) -> bool:
    """Move the most recently discarded copies of `card_id` back to hand.

    Moves one copy, or with `all_copies` as many as the hand has room for; the
    rest stay in the discard pile.
    """
    space = state.hand_space()
    if space <= 0:
        return False
    moved: list[DiscardEntry] = []
    for i in range(len(state.discard) - 1, -1, -1):
        if len(moved) >= space:
            break
        if state.discard[i].card_id == card_id:
            moved.append(state.discard.pop(i))
            if not all_copies:
                break
    if not moved:
        return False
    state.hand.extend(HandEntry(card_id=m.card_id, status="unspent") for m in moved)
    return True


# -------- Saved decks --------
def save_deck(state: BuilderState, name: str, now: datetime | None = None) -> bool:
    name = name.strip()
    if not name:
        return False
    ts = now or datetime.now(tz=timezone.utc)
    state.saved_decks[name] = SavedDeck(
        name=name,
        deck=list(state.deck),
        base_counts=dict(state.base_counts),
        mod_counts=dict(state.mod_counts),
        null_count=state.null_count,
        modifier_capacity=state.modifier_capacity,
        created_at=ts.isoformat(),
    )
    state.deck_name = name
    return True


def load_saved_deck(state: BuilderState, name: str) -> bool:
    sd = state.saved_decks.get(name)
    if sd is None:
        return False
    state.deck = list(sd.deck)
    state.base_counts = dict(sd.base_counts)
    state.mod_counts = dict(sd.mod_counts)
    state.null_count = sd.null_count
    state.modifier_capacity = sd.modifier_capacity
    state.deck_name = sd.name
    state.is_locked = False
    state.hand = []
    state.discard = []
    return True


def delete_saved_deck(state: BuilderState, name: str) -> bool:
    if name not in state.saved_decks:
        return False
    del state.saved_decks[name]
    return True


# -------- Display helpers --------
def hand_stacks(state: BuilderState) -> list[Stack]:
    return _stacks(state.hand_ids())


def discard_stacks(state: BuilderState) -> list[Stack]:
    return _stacks(state.discard_ids())


def _stacks(ids: list[str]) -> list[Stack]:
    groups: dict[str, list[int]] = {}
    for i, cid in enumerate(ids):
        groups.setdefault(cid, []).append(i)
    return [Stack(card_id=cid, count=len(idxs), indices=tuple(idxs)) for cid, idxs in groups.items()]
