from __future__ import annotations

# Deck composition
BASE_TARGET = 26
MIN_NULLS = 5

# Builder defaults
DEFAULT_MODIFIER_CAPACITY = 10
DEFAULT_HAND_LIMIT = 5

SNAPSHOT_VERSION = 2
