"""Deck assembly: selection-count edits, legality checks and deck expansion.

Every `adjust_*` function returns True when it changed the state and
False when the edit was refused; a refused edit leaves the state as it
was.
"""

from __future__ import annotations

from dataclasses import dataclass

from .capacity import can_admit, capacity_used
from .rules import BASE_TARGET, DEFAULT_HAND_LIMIT, DEFAULT_MODIFIER_CAPACITY, MIN_NULLS
from .state import BuilderState, initial_counts
from .types import CardCatalog


@dataclass(frozen=True)
class DeckStatus:
    base_total: int
    null_count: int
    capacity_used: int
    modifier_capacity: int
    base_valid: bool
    null_valid: bool
    mod_valid: bool
    warnings: tuple[str, ...]

    @property
    def is_valid(self) -> bool:
        return self.base_valid and self.null_valid and self.mod_valid


def base_total(state: BuilderState) -> int:
    return sum(state.base_counts.values())


def is_valid(state: BuilderState, catalog: CardCatalog) -> bool:
    return deck_status(state, catalog).is_valid


def deck_status(state: BuilderState, catalog: CardCatalog) -> DeckStatus:
    total = base_total(state)
    used = capacity_used(state.mod_counts, catalog)
    base_ok = total == BASE_TARGET
    null_ok = state.null_count >= MIN_NULLS
    mod_ok = used <= state.modifier_capacity
    warnings: list[str] = []
    if not base_ok:
        warnings.append(f"Deck must contain exactly {BASE_TARGET} base cards.")
    if not null_ok:
        warnings.append(f"Minimum of {MIN_NULLS} Nulls required.")
    if not mod_ok:
        warnings.append("Reduce modifier cards or raise capacity.")
    return DeckStatus(
        base_total=total,
        null_count=state.null_count,
        capacity_used=used,
        modifier_capacity=state.modifier_capacity,
        base_valid=base_ok,
        null_valid=null_ok,
        mod_valid=mod_ok,
        warnings=tuple(warnings),
    )


def adjust_base_count(state: BuilderState, catalog: CardCatalog, card_id: str, delta: int) -> bool:
    # Base edits are allowed while the deck is locked.
    if catalog.category(card_id) != "base":
        return False
    current = state.base_counts.get(card_id, 0)
    nxt = max(0, current + delta)
    if nxt == current:
        return False
    if base_total(state) - current + nxt > BASE_TARGET:
        return False
    state.base_counts[card_id] = nxt
    return True


def adjust_mod_count(state: BuilderState, catalog: CardCatalog, card_id: str, delta: int) -> bool:
    if state.is_locked:
        return False
    if catalog.category(card_id) != "modifier":
        return False
    current = state.mod_counts.get(card_id, 0)
    if delta > 0 and not can_admit(
        state.mod_counts, state.modifier_capacity, card_id, catalog, copies=delta
    ):
        return False
    nxt = max(0, current + delta)
    if nxt == current:
        return False
    state.mod_counts[card_id] = nxt
    return True


def adjust_null_count(state: BuilderState, delta: int) -> bool:
    if state.is_locked:
        return False
    nxt = max(MIN_NULLS, state.null_count + delta)
    if nxt == state.null_count:
        return False
    state.null_count = nxt
    return True


def adjust_modifier_capacity(state: BuilderState, delta: int) -> bool:
    nxt = max(0, state.modifier_capacity + delta)
    if nxt == state.modifier_capacity:
        return False
    state.modifier_capacity = nxt
    return True


def build_deck_array(state: BuilderState, catalog: CardCatalog) -> list[str]:
    """Canonical unshuffled deck: bases, then modifiers, then nulls."""
    out: list[str] = []
    for cid, qty in state.base_counts.items():
        out.extend([cid] * qty)
    for cid, qty in state.mod_counts.items():
        out.extend([cid] * qty)
    null_card = catalog.get_null_card()
    if null_card is not None:
        out.extend([null_card.id] * state.null_count)
    return out


def reset_builder(state: BuilderState, catalog: CardCatalog) -> bool:
    """Back to a fresh builder. Saved decks survive."""
    state.base_counts = initial_counts(c.id for c in catalog.get_base_cards())
    state.mod_counts = initial_counts(c.id for c in catalog.get_modifier_cards())
    state.null_count = MIN_NULLS
    state.modifier_capacity = DEFAULT_MODIFIER_CAPACITY
    state.deck = []
    state.hand = []
    state.discard = []
    state.is_locked = False
    state.hand_limit = DEFAULT_HAND_LIMIT
    state.deck_name = ""
    return True
