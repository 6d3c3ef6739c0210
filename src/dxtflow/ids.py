from __future__ import annotations
import itertools
import uuid
from typing import Callable

# prefix -> new id, e.g. "node" -> "node-3f2a9c1b04de"
IdFactory = Callable[[str], str]


def uuid_ids(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class SequentialIds:
    """Monotonic counter ids. Deterministic, handy for tests and demos."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"


def make_id_factory(strategy: str) -> IdFactory:
    if strategy == "uuid":
        return uuid_ids
    if strategy == "sequential":
        return SequentialIds()
    raise ValueError(f"Unknown id strategy '{strategy}'. Use one of: uuid, sequential")
