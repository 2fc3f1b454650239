"""Unit tests for the nested-collection diff."""

from types import SimpleNamespace

from rgaa_audit.domain.enums import Platform
from rgaa_audit.schemas.audit import EnvironmentIn, PageIn, RecipientIn, ToolIn
from rgaa_audit.services.reconcile import (
    ENVIRONMENT_KEY,
    PAGE_KEY,
    RECIPIENT_KEY,
    TOOL_KEY,
    reconcile,
)


def _row(**fields):
    return SimpleNamespace(**fields)


def test_delete_update_insert():
    a = _row(email="a@x.fr", name="A")
    b = _row(email="b@x.fr", name="B")
    c = _row(email="c@x.fr", name="C")
    b2 = RecipientIn(name="B bis", email="b@x.fr")
    d = RecipientIn(name="D", email="d@x.fr")

    diff = reconcile([a, b, c], [b2, d], RECIPIENT_KEY)

    assert diff.to_delete == [a, c]
    assert diff.to_update == [(b, b2)]
    assert diff.to_insert == [d]


def test_empty_desired_deletes_everything():
    rows = [_row(email="a@x.fr"), _row(email="b@x.fr")]
    diff = reconcile(rows, [], RECIPIENT_KEY)
    assert diff.to_delete == rows
    assert diff.to_update == []
    assert diff.to_insert == []


def test_duplicate_desired_keys_collapse_to_last():
    first = RecipientIn(name="First", email="same@x.fr")
    last = RecipientIn(name="Last", email="same@x.fr")
    diff = reconcile([], [first, last], RECIPIENT_KEY)
    assert diff.to_insert == [last]


def test_tool_key_uses_all_identifying_fields():
    stored = _row(name="NVDA", function="Lecteur d'écran", url="https://nvda.fr")
    same = ToolIn(name="NVDA", function="Lecteur d'écran", url="https://nvda.fr")
    other_url = ToolIn(name="NVDA", function="Lecteur d'écran", url="https://nvaccess.org")

    assert reconcile([stored], [same], TOOL_KEY).to_update == [(stored, same)]

    diff = reconcile([stored], [other_url], TOOL_KEY)
    assert diff.to_delete == [stored]
    assert diff.to_insert == [other_url]


def test_environment_enum_matches_stored_string():
    fields = {
        "operating_system": "Windows",
        "operating_system_version": "11",
        "assistive_technology": "NVDA",
        "assistive_technology_version": "2024.1",
        "browser": "Firefox",
        "browser_version": "125",
    }
    stored = _row(platform="desktop", **fields)
    desired = EnvironmentIn(platform=Platform.DESKTOP, **fields)

    diff = reconcile([stored], [desired], ENVIRONMENT_KEY)

    assert diff.to_update == [(stored, desired)]
    assert diff.to_delete == []
    assert diff.to_insert == []


def test_pages_without_id_are_always_inserted():
    home = _row(id="p1", name="Accueil", url="/")
    new_one = PageIn(name="Contact", url="/contact")
    new_two = PageIn(name="Contact", url="/contact")
    kept = PageIn(id="p1", name="Accueil v2", url="/")

    diff = reconcile([home], [new_one, kept, new_two], PAGE_KEY)

    assert diff.to_update == [(home, kept)]
    assert diff.to_insert == [new_one, new_two]
    assert diff.to_delete == []
