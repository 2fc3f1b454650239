"""API tests for criterion results and example images."""

import pytest

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _result(page_id, topic, criterion, status, **extra):
    return {"pageId": page_id, "topic": topic, "criterion": criterion, "status": status, **extra}


def _find(results, page_id, topic, criterion):
    return next(
        r for r in results
        if r["pageId"] == page_id and r["topic"] == topic and r["criterion"] == criterion
    )


# ═══════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_results_matrix_includes_transverse_page(client, created_audit):
    resp = await client.get(f"/api/v1/audits/{created_audit['editUniqueId']}/results")
    assert resp.status_code == 200
    results = resp.json()["data"]

    assert len(results) == 3 * 106
    page_ids = [r["pageId"] for r in results[::106]]
    expected = [p["id"] for p in created_audit["pages"]] + [created_audit["transversePage"]["id"]]
    assert page_ids == expected
    assert all(r["status"] == "NOT_TESTED" and r["id"] is None for r in results)


@pytest.mark.asyncio
async def test_update_results(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    transverse_id = created_audit["transversePage"]["id"]

    resp = await client.patch(
        f"/api/v1/audits/{edit_id}/results",
        json={
            "data": [
                _result(
                    page_id, 1, 1, "NOT_COMPLIANT",
                    errorDescription="Image sans alternative",
                    userImpact="BLOCKING",
                    quickWin=True,
                ),
                _result(transverse_id, 12, 1, "COMPLIANT", compliantComment="OK"),
            ]
        },
    )
    assert resp.status_code == 204

    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    first = _find(results, page_id, 1, 1)
    assert first["status"] == "NOT_COMPLIANT"
    assert first["userImpact"] == "BLOCKING"
    assert first["quickWin"] is True
    assert first["id"] is not None
    assert _find(results, transverse_id, 12, 1)["compliantComment"] == "OK"
    assert len(results) == 3 * 106


@pytest.mark.asyncio
async def test_update_results_is_idempotent(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    body = {"data": [_result(page_id, 2, 1, "NOT_APPLICABLE", notApplicableComment="Pas de cadre")]}

    await client.patch(f"/api/v1/audits/{edit_id}/results", json=body)
    first = _find((await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"], page_id, 2, 1)

    await client.patch(f"/api/v1/audits/{edit_id}/results", json=body)
    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    second = _find(results, page_id, 2, 1)

    assert second == first
    assert sum(1 for r in results if r["id"] is not None) == 1


@pytest.mark.asyncio
async def test_duplicate_triples_in_batch_last_wins(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    body = {
        "data": [
            _result(page_id, 3, 1, "NOT_COMPLIANT"),
            _result(page_id, 3, 1, "COMPLIANT"),
        ]
    }

    resp = await client.patch(f"/api/v1/audits/{edit_id}/results", json=body)
    assert resp.status_code == 204
    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    assert _find(results, page_id, 3, 1)["status"] == "COMPLIANT"


@pytest.mark.asyncio
async def test_unknown_criterion_is_rejected(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    body = {"data": [_result(page_id, 1, 1, "COMPLIANT"), _result(page_id, 14, 1, "COMPLIANT")]}

    resp = await client.patch(f"/api/v1/audits/{edit_id}/results", json=body)
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    # Nothing from the batch was written
    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    assert all(r["id"] is None for r in results)


@pytest.mark.asyncio
async def test_page_of_another_audit_is_rejected(client, created_audit, audit_payload):
    other = (await client.post("/api/v1/audits", json=audit_payload)).json()["data"]
    body = {"data": [_result(other["pages"][0]["id"], 1, 1, "COMPLIANT")]}

    resp = await client.patch(f"/api/v1/audits/{created_audit['editUniqueId']}/results", json=body)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_results_of_deleted_audit_are_gone(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    await client.delete(f"/api/v1/audits/{edit_id}")
    resp = await client.get(f"/api/v1/audits/{edit_id}/results")
    assert resp.status_code == 410


# ═══════════════════════════════════════════════════════
# EXAMPLE IMAGES
# ═══════════════════════════════════════════════════════

async def _upload(client, audit, content=PNG, content_type="image/png", filename="capture%20%C3%A9cran.png"):
    return await client.post(
        f"/api/v1/audits/{audit['editUniqueId']}/results/examples",
        data={"pageId": audit["pages"][0]["id"], "topic": "1", "criterion": "2"},
        files={"image": (filename, content, content_type)},
    )


@pytest.mark.asyncio
async def test_upload_example_image(client, created_audit, storage, tmp_path):
    resp = await _upload(client, created_audit)
    assert resp.status_code == 201, resp.text
    image = resp.json()["data"]

    assert image["filename"] == "capture écran.png"
    assert image["contentType"] == "image/png"
    assert image["sizeBytes"] == len(PNG)
    assert image["url"].startswith("/uploads/")
    assert "storageKey" not in image

    stored = list((tmp_path / "uploads").rglob("*.png"))
    assert len(stored) == 1
    assert stored[0].read_bytes() == PNG

    # The image materialized a NOT_TESTED result
    edit_id = created_audit["editUniqueId"]
    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    row = _find(results, created_audit["pages"][0]["id"], 1, 2)
    assert row["status"] == "NOT_TESTED"
    assert [i["id"] for i in row["exampleImages"]] == [image["id"]]

    resp = await client.put(f"/api/v1/audits/{edit_id}/publish")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_upload_keeps_existing_result(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    await client.patch(
        f"/api/v1/audits/{edit_id}/results",
        json={"data": [_result(page_id, 1, 2, "NOT_COMPLIANT")]},
    )

    assert (await _upload(client, created_audit)).status_code == 201
    assert (await _upload(client, created_audit)).status_code == 201

    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    row = _find(results, page_id, 1, 2)
    assert row["status"] == "NOT_COMPLIANT"
    assert len(row["exampleImages"]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content, content_type, expected",
    [
        (b"%PDF-1.4", "application/pdf", 415),
        (b"", "image/png", 400),
        (b"\x00" * 2_000_001, "image/png", 413),
    ],
)
async def test_upload_validation(client, created_audit, content, content_type, expected):
    resp = await _upload(client, created_audit, content=content, content_type=content_type)
    assert resp.status_code == expected


@pytest.mark.asyncio
async def test_upload_for_unknown_criterion(client, created_audit):
    resp = await client.post(
        f"/api/v1/audits/{created_audit['editUniqueId']}/results/examples",
        data={"pageId": created_audit["pages"][0]["id"], "topic": "1", "criterion": "42"},
        files={"image": ("a.png", PNG, "image/png")},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_delete_example_image(client, created_audit, tmp_path):
    edit_id = created_audit["editUniqueId"]
    image = (await _upload(client, created_audit)).json()["data"]

    resp = await client.delete(f"/api/v1/audits/{edit_id}/results/examples/{image['id']}")
    assert resp.status_code == 204
    assert list((tmp_path / "uploads").rglob("*.png")) == []

    results = (await client.get(f"/api/v1/audits/{edit_id}/results")).json()["data"]
    assert _find(results, created_audit["pages"][0]["id"], 1, 2)["exampleImages"] == []

    resp = await client.delete(f"/api/v1/audits/{edit_id}/results/examples/{image['id']}")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_image_of_another_audit_cannot_be_deleted(client, created_audit, audit_payload):
    other = (await client.post("/api/v1/audits", json=audit_payload)).json()["data"]
    image = (await _upload(client, other)).json()["data"]

    resp = await client.delete(
        f"/api/v1/audits/{created_audit['editUniqueId']}/results/examples/{image['id']}"
    )
    assert resp.status_code == 404


# ═══════════════════════════════════════════════════════
# SERVING EXAMPLE IMAGES
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_example_image_is_served_at_its_url(client, created_audit):
    image = (await _upload(client, created_audit)).json()["data"]

    resp = await client.get(image["url"])
    assert resp.status_code == 200
    assert resp.content == PNG
    assert resp.headers["content-type"] == "image/png"


@pytest.mark.asyncio
async def test_images_of_deleted_audit_are_gone(client, created_audit):
    image = (await _upload(client, created_audit)).json()["data"]

    resp = await client.delete(f"/api/v1/audits/{created_audit['editUniqueId']}")
    assert resp.status_code == 204

    resp = await client.get(image["url"])
    assert resp.status_code == 410
    assert resp.json()["error"]["code"] == "GONE"


@pytest.mark.asyncio
async def test_unknown_image_url_is_not_found(client):
    resp = await client.get("/uploads/00000000-0000-0000-0000-000000000000/nothing.png")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_deleted_image_is_no_longer_served(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    image = (await _upload(client, created_audit)).json()["data"]
    await client.delete(f"/api/v1/audits/{edit_id}/results/examples/{image['id']}")

    resp = await client.get(image["url"])
    assert resp.status_code == 404


# ═══════════════════════════════════════════════════════
# EDITION DATE AFTER PUBLICATION
# ═══════════════════════════════════════════════════════

async def _edition_date(client, edit_id):
    return (await client.get(f"/api/v1/audits/{edit_id}")).json()["data"]["editionDate"]


@pytest.mark.asyncio
async def test_results_update_after_publication_sets_edition_date(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    await client.put(f"/api/v1/audits/{edit_id}/publish")
    assert await _edition_date(client, edit_id) is None

    resp = await client.patch(
        f"/api/v1/audits/{edit_id}/results",
        json={"data": [_result(page_id, 1, 1, "COMPLIANT")]},
    )
    assert resp.status_code == 204
    assert await _edition_date(client, edit_id) is not None


@pytest.mark.asyncio
async def test_results_update_before_publication_leaves_edition_date_empty(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    await client.patch(
        f"/api/v1/audits/{edit_id}/results",
        json={"data": [_result(page_id, 1, 1, "COMPLIANT")]},
    )
    assert await _edition_date(client, edit_id) is None


@pytest.mark.asyncio
async def test_image_upload_after_publication_sets_edition_date(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    await client.put(f"/api/v1/audits/{edit_id}/publish")

    assert (await _upload(client, created_audit)).status_code == 201
    assert await _edition_date(client, edit_id) is not None


@pytest.mark.asyncio
async def test_image_delete_after_publication_sets_edition_date(client, created_audit):
    edit_id = created_audit["editUniqueId"]
    page_id = created_audit["pages"][0]["id"]
    image = (await _upload(client, created_audit)).json()["data"]
    # The upload materialized a NOT_TESTED result: score it so publication passes
    await client.patch(
        f"/api/v1/audits/{edit_id}/results",
        json={"data": [_result(page_id, 1, 2, "NOT_COMPLIANT")]},
    )
    resp = await client.put(f"/api/v1/audits/{edit_id}/publish")
    assert resp.status_code == 200
    assert await _edition_date(client, edit_id) is None

    resp = await client.delete(f"/api/v1/audits/{edit_id}/results/examples/{image['id']}")
    assert resp.status_code == 204
    assert await _edition_date(client, edit_id) is not None
