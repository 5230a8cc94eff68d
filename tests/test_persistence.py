from __future__ import annotations

import json
import logging

from collapse.engine.actions import (
    AdjustModCount,
    DiscardFromHand,
    Draw,
    GenerateDeck,
    SaveDeck,
    ToggleLock,
)
from collapse.engine.session import step
from collapse.engine.state import BuilderState
from collapse.services.storage import BuilderStore


def test_store_round_trip(tmp_path, legal_session) -> None:
    s = legal_session
    step(s, AdjustModCount(card_id="mod_fortify", delta=2))
    step(s, GenerateDeck())
    step(s, SaveDeck(name="Tempo"))
    step(s, ToggleLock())
    step(s, Draw())
    step(s, Draw())
    step(s, DiscardFromHand(card_id=s.state.hand[0].card_id))

    store = BuilderStore(tmp_path / "deck_builder.json", s.catalog)
    store.save(s.state)
    restored = store.load()

    assert restored.to_dict() == s.state.to_dict()
    assert restored.is_locked
    assert restored.saved_decks["Tempo"].created_at == "2026-01-02T03:04:05+00:00"
    assert not (tmp_path / "deck_builder.json.tmp").exists()


def test_missing_file_gives_defaults(tmp_path, catalog) -> None:
    store = BuilderStore(tmp_path / "nope.json", catalog)
    assert store.load().to_dict() == BuilderState.default(catalog).to_dict()


def test_corrupt_file_gives_defaults(tmp_path, catalog, caplog) -> None:
    path = tmp_path / "deck_builder.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        state = BuilderStore(path, catalog).load()
    assert state.deck == []
    assert "Could not read" in caplog.text


def test_deeply_nested_file_gives_defaults(tmp_path, catalog, caplog) -> None:
    path = tmp_path / "deck_builder.json"
    path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        state = BuilderStore(path, catalog).load()
    assert state.to_dict() == BuilderState.default(catalog).to_dict()
    assert "Could not read" in caplog.text


def test_non_object_top_level_gives_defaults(tmp_path, catalog) -> None:
    path = tmp_path / "deck_builder.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    state = BuilderStore(path, catalog).load()
    assert state.null_count == 5
    assert state.hand_limit == 5


def test_bad_fields_fall_back_one_by_one(catalog) -> None:
    raw = {
        "base_counts": {"base_strike": 3, "base_guard": -2, "retired_base": 4, "base_dash": "x"},
        "mod_counts": "oops",
        "null_count": 2,
        "modifier_capacity": True,
        "deck": ["base_strike", "retired_base", 7, "null"],
        "hand": [
            {"id": "base_guard", "status": "tapped"},
            {"id": "retired_base"},
            {"status": "unspent"},
            "base_strike",
        ],
        "discard": [{"id": "mod_chain", "origin": "played"}, {"id": "null", "origin": "burned"}],
        "is_locked": "yes",
        "hand_limit": -3,
        "deck_name": 12,
        "saved_decks": {"ok": {"name": "ok", "deck": ["null"]}, "broken": [1]},
    }
    state = BuilderState.from_dict(raw, catalog)

    assert state.base_counts["base_strike"] == 3
    assert state.base_counts["base_guard"] == 0
    assert state.base_counts["base_dash"] == 0
    assert "retired_base" not in state.base_counts
    assert list(state.base_counts) == [c.id for c in catalog.get_base_cards()]
    assert all(v == 0 for v in state.mod_counts.values())
    assert state.null_count == 5
    assert state.modifier_capacity == 10
    assert state.deck == ["base_strike", "null"]
    assert [(h.card_id, h.status) for h in state.hand] == [("base_guard", "unspent")]
    assert [(x.card_id, x.origin) for x in state.discard] == [("mod_chain", "played"), ("null", "discarded")]
    assert state.is_locked is False
    assert state.hand_limit == 0
    assert state.deck_name == ""
    assert list(state.saved_decks) == ["ok"]
    assert state.saved_decks["ok"].null_count == 5


def test_snapshot_carries_version(catalog) -> None:
    data = BuilderState.default(catalog).to_dict()
    assert data["version"] == 2
    # must be plain JSON
    json.dumps(data)
