from __future__ import annotations

from datetime import datetime, timezone

import pytest

from collapse.engine.rules import BASE_TARGET
from collapse.engine.session import Session, new_session
from collapse.engine.types import CardCatalog
from collapse.paths import get_paths
from collapse.services.content import ContentService

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def catalog() -> CardCatalog:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_catalog()


@pytest.fixture
def session(catalog: CardCatalog) -> Session:
    return new_session(catalog, seed=1234, clock=lambda: FIXED_NOW)


@pytest.fixture
def legal_session(session: Session) -> Session:
    """26 base cards spread over the catalog, 5 nulls, no modifiers."""
    bases = session.catalog.get_base_cards()
    for i in range(BASE_TARGET):
        cid = bases[i % len(bases)].id
        session.state.base_counts[cid] += 1
    return session
