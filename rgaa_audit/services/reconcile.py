"""Nested-collection reconciliation: diff stored rows against a desired state.

Pure functions over plain records (ORM rows, Pydantic models, anything with
attributes). Nothing here touches a session; the audit service applies the
resulting diff to the ORM collections.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from operator import attrgetter
from typing import Any, Generic, TypeVar

RowT = TypeVar("RowT")
ItemT = TypeVar("ItemT")

KeyFunc = Callable[[Any], Hashable]


def _plain(value: Any) -> Any:
    # Normalize enum members to the value stored on ORM rows
    return value.value if isinstance(value, Enum) else value


def natural_key(*fields: str) -> KeyFunc:
    """Key over *fields*, comparing enum members and stored strings equally."""
    getter = attrgetter(*fields)

    def _key(record: Any) -> Hashable:
        raw = getter(record)
        if isinstance(raw, tuple):
            return tuple(_plain(v) for v in raw)
        return _plain(raw)

    return _key


# Natural keys mirror the uniqueness constraints of each table (minus audit_id).
RECIPIENT_KEY = natural_key("email")
TOOL_KEY = natural_key("name", "function", "url")
ENVIRONMENT_KEY = natural_key(
    "platform",
    "operating_system",
    "operating_system_version",
    "assistive_technology",
    "assistive_technology_version",
    "browser",
    "browser_version",
)
# Pages are matched on their identifier; new pages carry none.
PAGE_KEY = natural_key("id")


@dataclass
class CollectionDiff(Generic[RowT, ItemT]):
    to_delete: list[RowT] = field(default_factory=list)
    to_update: list[tuple[RowT, ItemT]] = field(default_factory=list)
    to_insert: list[ItemT] = field(default_factory=list)


def reconcile(
    existing: Iterable[RowT],
    desired: Iterable[ItemT],
    key: KeyFunc,
) -> CollectionDiff[RowT, ItemT]:
    """Compute the deletes / updates / inserts turning *existing* into *desired*.

    - Desired items whose key is ``None`` are always inserted.
    - Desired items sharing a key collapse to the last one.
    - Stored rows whose key is absent from *desired* are deleted.
    - Desired items whose key matches no stored row are inserted; callers
      that match on identifiers must reject such items beforehand.
    """
    keyless: list[ItemT] = []
    by_key: dict[Hashable, ItemT] = {}
    for item in desired:
        item_key = key(item)
        if item_key is None:
            keyless.append(item)
        else:
            by_key[item_key] = item

    diff: CollectionDiff[RowT, ItemT] = CollectionDiff()
    matched: set[Hashable] = set()
    for row in existing:
        row_key = key(row)
        if row_key in by_key and row_key not in matched:
            diff.to_update.append((row, by_key[row_key]))
            matched.add(row_key)
        else:
            diff.to_delete.append(row)

    diff.to_insert.extend(item for k, item in by_key.items() if k not in matched)
    diff.to_insert.extend(keyless)
    return diff
