from __future__ import annotations

from typing import Iterable, Mapping

from .types import CardCatalog


def capacity_used(mod_counts: Mapping[str, int], catalog: CardCatalog) -> int:
    """Total modifier cost of the current selection: sum of count x cost."""
    return sum(max(0, qty) * catalog.cost(cid) for cid, qty in mod_counts.items())


def capacity_remaining(mod_counts: Mapping[str, int], capacity: int, catalog: CardCatalog) -> int:
    return max(0, capacity - capacity_used(mod_counts, catalog))


def can_admit(
    mod_counts: Mapping[str, int],
    capacity: int,
    candidate_id: str,
    catalog: CardCatalog,
    *,
    copies: int = 1,
    queued: Iterable[str] = (),
) -> bool:
    """True if `copies` more of `candidate_id` fit under `capacity`.

    `queued` lists ids already reserved on top of the selection (the
    modifiers attached to an in-progress play).
    """
    used = capacity_used(mod_counts, catalog)
    used += sum(catalog.cost(cid) for cid in queued)
    return used + catalog.cost(candidate_id) * max(0, copies) <= capacity
