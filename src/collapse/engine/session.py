from __future__ import annotations

import dataclasses
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable

from . import builder, deck, play
from .actions import (
    PLAY_ACTIONS,
    Action,
    AdjustBaseCount,
    AdjustModCount,
    AdjustModifierCapacity,
    AdjustNullCount,
    CancelPlay,
    DeleteSavedDeck,
    DiscardFromDeck,
    DiscardFromHand,
    Draw,
    FinalizePlay,
    GenerateDeck,
    LoadSavedDeck,
    ResetBuilder,
    ResetDeck,
    ReturnDiscardGroupToDeck,
    ReturnDiscardGroupToHand,
    ReturnDiscardItemToDeck,
    ReturnDiscardItemToHand,
    ReturnDiscardToDeck,
    SaveDeck,
    SetHandLimit,
    ShuffleDeck,
    StartPlay,
    ToggleAttach,
    ToggleLock,
    action_type,
)
from .play import ActivePlay
from .state import BuilderState
from .types import CardCatalog

Event = dict[str, object]


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    reason: str | None = None


@dataclass
class Session:
    catalog: CardCatalog
    state: BuilderState
    seed: int
    rng: random.Random
    play: ActivePlay | None = None
    clock: Callable[[], datetime] = _utcnow
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)


def _draw_refusal(state: BuilderState) -> str:
    if not state.is_locked:
        return "Lock the deck before drawing."
    if len(state.hand) >= state.hand_limit:
        return "Hand is full."
    return "Deck and discard are empty."


def _apply_play(session: Session, action: Action) -> tuple[bool, str | None]:
    state = session.state
    before = session.play
    if isinstance(action, StartPlay):
        if before is not None:
            return False, "A play is already in progress."
        session.play = play.start_play(before, state, session.catalog, action.card_id)
        if session.play is None:
            return False, "Choose an unspent base card from your hand."
        return True, None
    if isinstance(action, ToggleAttach):
        if before is None:
            return False, "Select a base before attaching modifiers."
        session.play = play.toggle_attach(before, state, session.catalog, action.card_id)
        if session.play == before:
            return False, "Cannot attach that modifier."
        return True, None
    if isinstance(action, FinalizePlay):
        if before is None:
            return False, "No play in progress."
        session.play = play.finalize_play(before, state)
        if session.play is not None:
            return False, "The selected base is no longer in hand."
        return True, None
    if isinstance(action, CancelPlay):
        if before is None:
            return False, "No play in progress."
        session.play = play.cancel_play(before)
        return True, None
    return False, "Unknown action."


def _apply(session: Session, action: Action) -> tuple[bool, str | None]:
    state = session.state
    cards = session.catalog
    rng = session.rng

    if isinstance(action, AdjustBaseCount):
        return builder.adjust_base_count(state, cards, action.card_id, action.delta), "Base count unchanged."
    if isinstance(action, AdjustModCount):
        ok = builder.adjust_mod_count(state, cards, action.card_id, action.delta)
        return ok, "Deck is locked." if state.is_locked else "Modifier count unchanged."
    if isinstance(action, AdjustNullCount):
        ok = builder.adjust_null_count(state, action.delta)
        return ok, "Deck is locked." if state.is_locked else "Null count unchanged."
    if isinstance(action, AdjustModifierCapacity):
        return builder.adjust_modifier_capacity(state, action.delta), "Capacity unchanged."
    if isinstance(action, ResetBuilder):
        return builder.reset_builder(state, cards), None

    if isinstance(action, GenerateDeck):
        return deck.generate_deck(state, cards, rng, shuffle=action.shuffle), None
    if isinstance(action, ShuffleDeck):
        return deck.shuffle_deck(state, rng), "Deck is empty."
    if isinstance(action, ResetDeck):
        return deck.reset_deck(state, cards, rng), None
    if isinstance(action, ToggleLock):
        return deck.toggle_lock(state), None
    if isinstance(action, SetHandLimit):
        return deck.set_hand_limit(state, action.limit), "Hand limit unchanged."
    if isinstance(action, DiscardFromHand):
        return deck.discard_from_hand(state, action.card_id, all_copies=action.all_copies), "Card not in hand."
    if isinstance(action, DiscardFromDeck):
        return deck.discard_from_deck(state, action.count), "Deck is empty."
    if isinstance(action, ReturnDiscardToDeck):
        return deck.return_discard_to_deck(state, rng, action.shuffle, action.to_top), "Discard is empty."
    if isinstance(action, ReturnDiscardItemToDeck):
        return deck.return_discard_item_to_deck(state, action.index), "No discard entry at that position."
    if isinstance(action, ReturnDiscardGroupToDeck):
        ok = deck.return_discard_group_to_deck(
            state,
            rng,
            action.card_id,
            all_copies=action.all_copies,
            shuffle_moved=action.shuffle_moved,
            reshuffle_deck=action.reshuffle_deck,
        )
        return ok, "Card not in discard."
    if isinstance(action, ReturnDiscardItemToHand):
        ok = deck.return_discard_item_to_hand(state, action.index)
        return ok, "Hand is full." if state.hand_space() <= 0 else "No discard entry at that position."
    if isinstance(action, ReturnDiscardGroupToHand):
        ok = deck.return_discard_group_to_hand(state, action.card_id, all_copies=action.all_copies)
        return ok, "Hand is full." if state.hand_space() <= 0 else "Card not in discard."
    if isinstance(action, SaveDeck):
        return deck.save_deck(state, action.name, now=session.clock()), "Deck name is required."
    if isinstance(action, LoadSavedDeck):
        return deck.load_saved_deck(state, action.name), "No saved deck with that name."
    if isinstance(action, DeleteSavedDeck):
        return deck.delete_saved_deck(state, action.name), "No saved deck with that name."
    return False, "Unknown action."


def step(session: Session, action: Action) -> StepResult:
    """Apply a single command to the session.

    Mutates `session` in place. A refused command changes nothing and
    comes back with ok=False and a short reason for display; there are no
    exceptions for illegal moves.
    """
    # Log first so replay sees every attempted command
    session.action_log.append(action)
    mark = len(session.event_log)
    state = session.state

    if isinstance(action, PLAY_ACTIONS):
        ok, reason = _apply_play(session, action)
    elif isinstance(action, Draw):
        reshuffle = not state.deck and bool(state.discard)
        drawn = deck.draw(state, session.rng)
        ok = drawn is not None
        reason = None if ok else _draw_refusal(state)
        if ok and reshuffle:
            session.event_log.append({"type": "DISCARD_RESHUFFLED", "deck_size": len(state.deck) + 1})
        if ok:
            session.event_log.append({"type": "CARD_DRAWN", "card_id": drawn})
    else:
        ok, reason = _apply(session, action)

    if not ok:
        return StepResult(ok=False, events=[], reason=reason or "Not allowed.")

    if not isinstance(action, Draw):
        ev: Event = {"type": action_type(action).upper()}
        ev.update(dataclasses.asdict(action))
        session.event_log.append(ev)

    if not isinstance(action, PLAY_ACTIONS) and session.play is not None:
        reconciled = play.reconcile_play(session.play, state)
        if reconciled is None:
            session.event_log.append({"type": "PLAY_DROPPED", "base_id": session.play.base_id})
        session.play = reconciled

    return StepResult(ok=True, events=session.event_log[mark:])


def new_session(
    catalog: CardCatalog,
    seed: int,
    state: BuilderState | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Session:
    return Session(
        catalog=catalog,
        state=state if state is not None else BuilderState.default(catalog),
        seed=seed,
        rng=random.Random(seed),
        clock=clock or _utcnow,
    )


def replay(
    catalog: CardCatalog,
    seed: int,
    actions: Iterable[Action],
    state: BuilderState | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Session:
    session = new_session(catalog, seed, state=state, clock=clock)
    for a in actions:
        step(session, a)
    return session
