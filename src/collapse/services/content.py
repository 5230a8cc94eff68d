from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from collapse.engine.types import CARD_CATEGORIES, Card, CardCatalog, CardDetail


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_details(raw: object) -> tuple[CardDetail, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ContentError("details must be a list")
    out: list[CardDetail] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        out.append(CardDetail(label=_require_str(item, "label"), value=_require_str(item, "value")))
    return tuple(out)


def parse_catalog(raw: object) -> CardCatalog:
    """Build a catalog from an already schema-checked `cards.json` document."""
    if not isinstance(raw, dict):
        raise ContentError("cards.json must be an object")
    raw_cards = raw.get("cards")
    if not isinstance(raw_cards, list):
        raise ContentError("cards.json.cards must be a list")

    cards: dict[str, Card] = {}
    for item in raw_cards:
        if not isinstance(item, dict):
            continue
        card_id = _require_str(item, "id")
        if card_id in cards:
            raise ContentError(f"Duplicate card id: {card_id}")
        category = _require_str(item, "category")
        if category not in CARD_CATEGORIES:
            raise ContentError(f"Unknown category for {card_id}: {category}")
        cost = _require_int(item, "cost")
        if cost < 0:
            raise ContentError(f"Invalid cost for {card_id}")
        card = Card(
            id=card_id,
            name=_require_str(item, "name"),
            category=category,  # type: ignore[arg-type]
            cost=cost,
            text=str(item.get("text", "")),
            details=_parse_details(item.get("details")),
        )
        cards[card.id] = card

    catalog = CardCatalog(cards=cards)
    if catalog.get_null_card() is None:
        raise ContentError("Catalog must contain a null card")
    return catalog


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_catalog(self) -> CardCatalog:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        schema = _load_json(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))
        return parse_catalog(raw)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_catalog()
