"""RGAA criteria catalog — static reference data loaded once, shared read-only.

The catalog is packaged as ``rgaa_audit/data/rgaa.json`` and never persisted
per audit.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources


@dataclass(frozen=True)
class CriterionRef:
    topic: int
    criterion: int


@dataclass(frozen=True)
class Topic:
    number: int
    title: str
    criteria: tuple[int, ...]


@dataclass(frozen=True)
class CriteriaCatalog:
    referential: str
    topics: tuple[Topic, ...]
    criteria: tuple[CriterionRef, ...]
    _lookup: frozenset[CriterionRef] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_lookup", frozenset(self.criteria))

    def __len__(self) -> int:
        return len(self.criteria)

    def __contains__(self, item: object) -> bool:
        return item in self._lookup


def parse_catalog(raw: dict) -> CriteriaCatalog:
    topics = tuple(
        Topic(number=t["number"], title=t["topic"], criteria=tuple(t["criteria"]))
        for t in raw["topics"]
    )
    criteria = tuple(
        CriterionRef(topic=t.number, criterion=c) for t in topics for c in t.criteria
    )
    return CriteriaCatalog(referential=raw["referential"], topics=topics, criteria=criteria)


@lru_cache(maxsize=1)
def get_catalog() -> CriteriaCatalog:
    """Load the packaged catalog (cached for the life of the process)."""
    text = resources.files("rgaa_audit.data").joinpath("rgaa.json").read_text(encoding="utf-8")
    return parse_catalog(json.loads(text))
