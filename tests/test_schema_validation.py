from __future__ import annotations

import json

import pytest

from collapse.paths import get_paths
from collapse.services.content import ContentError, ContentService


def test_content_schemas_validate() -> None:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    content.validate_all()


def test_catalog_subsets(catalog) -> None:
    assert len(catalog.get_base_cards()) == 15
    assert all(c.category == "modifier" for c in catalog.get_modifier_cards())
    null = catalog.get_null_card()
    assert null is not None and null.id == "null"
    assert len(catalog.get_all_cards()) == len(catalog.cards)


def test_unknown_card_costs_nothing(catalog) -> None:
    assert catalog.cost("mod_extend") == 3
    assert catalog.cost("no_such_card") == 0
    assert catalog.category("no_such_card") is None
    assert catalog.get("mod_extend").name == "Extend"
    with pytest.raises(KeyError):
        catalog.get("no_such_card")


def test_modifier_search_matches_name_text_and_details(catalog) -> None:
    assert [c.id for c in catalog.search_modifiers("ricochet")] == ["mod_ricochet"]
    assert [c.id for c in catalog.search_modifiers("LIFESTEAL")] == ["mod_siphon"]
    assert "mod_extend" in [c.id for c in catalog.search_modifiers("range")]
    assert len(catalog.search_modifiers("  ")) == len(catalog.get_modifier_cards())


def _write_cards(tmp_path, cards) -> ContentService:
    (tmp_path / "cards.json").write_text(json.dumps({"version": 1, "cards": cards}), encoding="utf-8")
    return ContentService(tmp_path, get_paths().schema_dir)


def test_schema_rejects_unknown_category(tmp_path) -> None:
    content = _write_cards(
        tmp_path,
        [{"id": "x", "name": "X", "category": "spell", "cost": 0, "text": ""}],
    )
    with pytest.raises(ContentError, match="Schema validation failed"):
        content.load_catalog()


def test_catalog_requires_a_null_card(tmp_path) -> None:
    content = _write_cards(
        tmp_path,
        [{"id": "b", "name": "B", "category": "base", "cost": 0, "text": ""}],
    )
    with pytest.raises(ContentError, match="null card"):
        content.load_catalog()


def test_missing_catalog_file(tmp_path) -> None:
    content = ContentService(tmp_path, get_paths().schema_dir)
    with pytest.raises(ContentError, match="Missing content file"):
        content.load_catalog()
