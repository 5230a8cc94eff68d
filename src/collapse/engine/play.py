"""Play selection: pick one base card from hand, attach modifiers, commit.

The in-progress play is `None` (idle) or an `ActivePlay` (selecting). It
lives beside the builder state, never inside it, and every transition
re-checks the hand before acting.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .capacity import can_admit
from .deck import discard_from_hand
from .state import BuilderState
from .types import CardCatalog


@dataclass(frozen=True)
class ActivePlay:
    base_id: str
    mods: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict[str, object]:
        return {"base_id": self.base_id, "mods": sorted(self.mods)}


def start_play(
    play: ActivePlay | None, state: BuilderState, catalog: CardCatalog, card_id: str
) -> ActivePlay | None:
    if play is not None:
        return play
    if catalog.category(card_id) != "base" or not state.has_unspent(card_id):
        return play
    return ActivePlay(base_id=card_id)


def toggle_attach(
    play: ActivePlay | None, state: BuilderState, catalog: CardCatalog, card_id: str
) -> ActivePlay | None:
    if play is None:
        return None
    if card_id in play.mods:
        return replace(play, mods=play.mods - {card_id})
    if catalog.category(card_id) != "modifier" or not state.has_unspent(card_id):
        return play
    if not state.has_unspent(play.base_id):
        return play
    # Deck selection and already-queued mods both count against capacity.
    if not can_admit(state.mod_counts, state.modifier_capacity, card_id, catalog, queued=play.mods):
        return play
    return replace(play, mods=play.mods | {card_id})


def finalize_play(play: ActivePlay | None, state: BuilderState) -> ActivePlay | None:
    """Move the base and its modifiers from hand to discard as played.

    Returns the resulting selection: None once committed, or `play`
    unchanged when the base is no longer in hand.
    """
    if play is None or not play.base_id:
        return None
    if not state.has_unspent(play.base_id):
        return play
    discard_from_hand(state, play.base_id, origin="played")
    for mod_id in sorted(play.mods):
        if state.has_unspent(mod_id):
            discard_from_hand(state, mod_id, origin="played")
    return None


def cancel_play(play: ActivePlay | None) -> ActivePlay | None:
    return None


def reconcile_play(play: ActivePlay | None, state: BuilderState) -> ActivePlay | None:
    """Drop a play whose base left the hand; detach mods no longer held."""
    if play is None:
        return None
    if not state.has_unspent(play.base_id):
        return None
    held = frozenset(m for m in play.mods if state.has_unspent(m))
    if held != play.mods:
        return replace(play, mods=held)
    return play
