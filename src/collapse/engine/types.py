from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CardCategory = Literal["base", "modifier", "null"]
HandStatus = Literal["unspent", "played"]
DiscardOrigin = Literal["played", "discarded"]

CARD_CATEGORIES: tuple[CardCategory, ...] = ("base", "modifier", "null")
HAND_STATUSES: tuple[HandStatus, ...] = ("unspent", "played")
DISCARD_ORIGINS: tuple[DiscardOrigin, ...] = ("played", "discarded")


@dataclass(frozen=True)
class CardDetail:
    label: str
    value: str


@dataclass(frozen=True)
class Card:
    id: str
    name: str
    category: CardCategory
    cost: int
    text: str
    details: tuple[CardDetail, ...] = ()

    def matches(self, needle: str) -> bool:
        """Case-insensitive match on name, text or any detail value."""
        needle = needle.strip().lower()
        if not needle:
            return True
        fields = [self.name, self.text, " ".join(d.value for d in self.details)]
        return any(needle in f.lower() for f in fields)


@dataclass(frozen=True)
class CardCatalog:
    """Immutable card catalog used by the engine.

    Card order follows the source file and is the order used when a deck
    is expanded from selection counts.
    """

    cards: dict[str, Card]

    def get(self, card_id: str) -> Card:
        return self.cards[card_id]

    def find(self, card_id: str) -> Card | None:
        return self.cards.get(card_id)

    def cost(self, card_id: str) -> int:
        # Unknown ids cost nothing.
        card = self.cards.get(card_id)
        return card.cost if card is not None else 0

    def category(self, card_id: str) -> CardCategory | None:
        card = self.cards.get(card_id)
        return card.category if card is not None else None

    def get_all_cards(self) -> list[Card]:
        return list(self.cards.values())

    def get_base_cards(self) -> list[Card]:
        return [c for c in self.cards.values() if c.category == "base"]

    def get_modifier_cards(self) -> list[Card]:
        return [c for c in self.cards.values() if c.category == "modifier"]

    def get_null_card(self) -> Card | None:
        for c in self.cards.values():
            if c.category == "null":
                return c
        return None

    def search_modifiers(self, needle: str) -> list[Card]:
        return [c for c in self.get_modifier_cards() if c.matches(needle)]
