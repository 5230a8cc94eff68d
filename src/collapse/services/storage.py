from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from collapse.engine.state import BuilderState
from collapse.engine.types import CardCatalog

logger = logging.getLogger(__name__)


class BuilderStore:
    """JSON file persistence for the deck builder state.

    Loading never fails: a missing, unreadable or malformed file yields
    defaults, and individual bad fields fall back on their own.
    """

    def __init__(self, path: Path, catalog: CardCatalog) -> None:
        self._path = path
        self.catalog = catalog

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> BuilderState:
        if not self._path.exists():
            return BuilderState.default(self.catalog)
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Could not read %s, starting fresh: %s", self._path, e)
            return BuilderState.default(self.catalog)
        if not isinstance(raw, dict):
            logger.warning("Ignoring %s: top level is not an object", self._path)
            return BuilderState.default(self.catalog)
        return BuilderState.from_dict(raw, self.catalog)

    def save(self, state: BuilderState) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Write then rename so readers never see a half-written snapshot.
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(state.to_dict(), indent=2), encoding="utf-8")
        os.replace(tmp, self._path)
