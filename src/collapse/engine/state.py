from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .rules import (
    DEFAULT_HAND_LIMIT,
    DEFAULT_MODIFIER_CAPACITY,
    MIN_NULLS,
    SNAPSHOT_VERSION,
)
from .types import (
    DISCARD_ORIGINS,
    HAND_STATUSES,
    CardCatalog,
    DiscardOrigin,
    HandStatus,
)

logger = logging.getLogger(__name__)

CountMap = dict[str, int]


def _is_int(v: object) -> bool:
    # bool is an int subclass; JSON true/false is never a count
    return isinstance(v, int) and not isinstance(v, bool)


def initial_counts(card_ids: Iterable[str]) -> CountMap:
    return {cid: 0 for cid in card_ids}


def restore_counts(raw: object, card_ids: Iterable[str]) -> CountMap:
    """Intersect a persisted count map with the current catalog subset.

    Keys come out in catalog order; stale ids disappear and malformed or
    negative values fall back to zero.
    """
    counts = initial_counts(card_ids)
    if not isinstance(raw, dict):
        return counts
    for cid in counts:
        v = raw.get(cid, 0)
        if _is_int(v) and v > 0:
            counts[cid] = v
    return counts


def _restore_ids(raw: object, catalog: CardCatalog) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [x for x in raw if isinstance(x, str) and x in catalog.cards]


def _int_field(d: Mapping[str, object], key: str, default: int, minimum: int) -> int:
    v = d.get(key, default)
    if not _is_int(v):
        if key in d:
            logger.warning("Ignoring malformed %s=%r", key, v)
        return default
    return max(minimum, v)


@dataclass
class HandEntry:
    card_id: str
    status: HandStatus = "unspent"

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "HandEntry | None":
        cid = d.get("id")
        if not isinstance(cid, str):
            return None
        status = d.get("status", "unspent")
        if status not in HAND_STATUSES:
            status = "unspent"
        return HandEntry(card_id=cid, status=status)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, object]:
        return {"id": self.card_id, "status": self.status}


@dataclass
class DiscardEntry:
    card_id: str
    origin: DiscardOrigin = "discarded"

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "DiscardEntry | None":
        cid = d.get("id")
        if not isinstance(cid, str):
            return None
        origin = d.get("origin", "discarded")
        if origin not in DISCARD_ORIGINS:
            origin = "discarded"
        return DiscardEntry(card_id=cid, origin=origin)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, object]:
        return {"id": self.card_id, "origin": self.origin}


@dataclass
class SavedDeck:
    name: str
    deck: list[str]
    base_counts: CountMap
    mod_counts: CountMap
    null_count: int
    modifier_capacity: int
    created_at: str

    @staticmethod
    def from_dict(d: Mapping[str, object], catalog: CardCatalog) -> "SavedDeck | None":
        name = d.get("name")
        if not isinstance(name, str):
            return None
        created = d.get("created_at", "")
        return SavedDeck(
            name=name,
            deck=_restore_ids(d.get("deck"), catalog),
            base_counts=restore_counts(d.get("base_counts"), (c.id for c in catalog.get_base_cards())),
            mod_counts=restore_counts(d.get("mod_counts"), (c.id for c in catalog.get_modifier_cards())),
            null_count=_int_field(d, "null_count", MIN_NULLS, MIN_NULLS),
            modifier_capacity=_int_field(d, "modifier_capacity", DEFAULT_MODIFIER_CAPACITY, 0),
            created_at=created if isinstance(created, str) else "",
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "deck": list(self.deck),
            "base_counts": dict(self.base_counts),
            "mod_counts": dict(self.mod_counts),
            "null_count": self.null_count,
            "modifier_capacity": self.modifier_capacity,
            "created_at": self.created_at,
        }


@dataclass
class BuilderState:
    """Everything the deck builder persists between sessions.

    Only the engine modules mutate it; callers go through `step`.
    """

    base_counts: CountMap
    mod_counts: CountMap
    null_count: int = MIN_NULLS
    modifier_capacity: int = DEFAULT_MODIFIER_CAPACITY
    deck: list[str] = field(default_factory=list)
    hand: list[HandEntry] = field(default_factory=list)
    discard: list[DiscardEntry] = field(default_factory=list)
    is_locked: bool = False
    hand_limit: int = DEFAULT_HAND_LIMIT
    deck_name: str = ""
    saved_decks: dict[str, SavedDeck] = field(default_factory=dict)

    @staticmethod
    def default(catalog: CardCatalog) -> "BuilderState":
        return BuilderState(
            base_counts=initial_counts(c.id for c in catalog.get_base_cards()),
            mod_counts=initial_counts(c.id for c in catalog.get_modifier_cards()),
        )

    @staticmethod
    def from_dict(d: Mapping[str, object], catalog: CardCatalog) -> "BuilderState":
        hand: list[HandEntry] = []
        hand_raw = d.get("hand", [])
        if isinstance(hand_raw, list):
            for h in hand_raw:
                if isinstance(h, dict):
                    entry = HandEntry.from_dict(h)
                    if entry is not None and entry.card_id in catalog.cards:
                        hand.append(entry)

        discard: list[DiscardEntry] = []
        discard_raw = d.get("discard", [])
        if isinstance(discard_raw, list):
            for x in discard_raw:
                if isinstance(x, dict):
                    entry2 = DiscardEntry.from_dict(x)
                    if entry2 is not None and entry2.card_id in catalog.cards:
                        discard.append(entry2)

        saved: dict[str, SavedDeck] = {}
        saved_raw = d.get("saved_decks", {})
        if isinstance(saved_raw, dict):
            for key, sd in saved_raw.items():
                if not isinstance(key, str) or not isinstance(sd, dict):
                    continue
                deck = SavedDeck.from_dict(sd, catalog)
                if deck is not None:
                    saved[key] = deck

        locked = d.get("is_locked", False)
        name = d.get("deck_name", "")

        return BuilderState(
            base_counts=restore_counts(d.get("base_counts"), (c.id for c in catalog.get_base_cards())),
            mod_counts=restore_counts(d.get("mod_counts"), (c.id for c in catalog.get_modifier_cards())),
            null_count=_int_field(d, "null_count", MIN_NULLS, MIN_NULLS),
            modifier_capacity=_int_field(d, "modifier_capacity", DEFAULT_MODIFIER_CAPACITY, 0),
            deck=_restore_ids(d.get("deck"), catalog),
            hand=hand,
            discard=discard,
            is_locked=locked if isinstance(locked, bool) else False,
            hand_limit=_int_field(d, "hand_limit", DEFAULT_HAND_LIMIT, 0),
            deck_name=name if isinstance(name, str) else "",
            saved_decks=saved,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "version": SNAPSHOT_VERSION,
            "base_counts": dict(self.base_counts),
            "mod_counts": dict(self.mod_counts),
            "null_count": self.null_count,
            "modifier_capacity": self.modifier_capacity,
            "deck": list(self.deck),
            "hand": [h.to_dict() for h in self.hand],
            "discard": [x.to_dict() for x in self.discard],
            "is_locked": self.is_locked,
            "hand_limit": self.hand_limit,
            "deck_name": self.deck_name,
            "saved_decks": {k: v.to_dict() for k, v in self.saved_decks.items()},
        }

    # -------- Queries --------
    def hand_ids(self) -> list[str]:
        return [h.card_id for h in self.hand]

    def discard_ids(self) -> list[str]:
        return [x.card_id for x in self.discard]

    def hand_space(self) -> int:
        return max(0, self.hand_limit - len(self.hand))

    def has_unspent(self, card_id: str) -> bool:
        return any(h.card_id == card_id and h.status == "unspent" for h in self.hand)
