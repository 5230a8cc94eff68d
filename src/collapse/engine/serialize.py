from __future__ import annotations

import dataclasses
from typing import Mapping

from .actions import ACTION_TYPES, Action, action_type
from .session import Session


def action_to_dict(a: Action) -> dict[str, object]:
    out: dict[str, object] = {"type": action_type(a)}
    out.update(dataclasses.asdict(a))
    return out


def _field_ok(value: object, annotation: object) -> bool:
    # Annotations are strings under postponed evaluation.
    if annotation in ("int", int):
        return isinstance(value, int) and not isinstance(value, bool)
    if annotation in ("bool", bool):
        return isinstance(value, bool)
    if annotation in ("str", str):
        return isinstance(value, str)
    return False


def action_from_dict(d: Mapping[str, object]) -> Action | None:
    """Rebuild an action from `action_to_dict` output.

    Returns None if the type is unrecognised, a required field is missing
    or a field has the wrong JSON type.
    """
    t = d.get("type")
    cls = ACTION_TYPES.get(t) if isinstance(t, str) else None
    if cls is None:
        return None
    kwargs: dict[str, object] = {}
    for f in dataclasses.fields(cls):
        if f.name not in d:
            continue
        if not _field_ok(d[f.name], f.type):
            return None
        kwargs[f.name] = d[f.name]
    try:
        return cls(**kwargs)
    except TypeError:
        return None


def snapshot(session: Session) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the session."""
    return {
        "seed": session.seed,
        "state": session.state.to_dict(),
        "active_play": session.play.to_dict() if session.play is not None else None,
        "action_log": [action_to_dict(a) for a in session.action_log],
    }
