"""
Ente registry tests: CRUD, folio assignment, type normalisation and the
role checks every record route goes through.
"""

import pytest
from httpx import AsyncClient

ENTES = "/api/v1/entes"


async def _create(client: AsyncClient, headers, **overrides) -> dict:
    payload = {"name": "Instituto de Vivienda", "type": "OPD", "creation_date": "2001-05-10"}
    payload.update(overrides)
    resp = await client.post(ENTES, json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_assigns_folio(async_client: AsyncClient, editor_headers):
    created = await _create(async_client, editor_headers)
    assert created["folio"].startswith("REPOPA-")

    resp = await async_client.get(f"{ENTES}/{created['id']}", headers=editor_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Instituto de Vivienda"
    assert body["type"] == "OPD"
    assert body["status"] == "Activo"
    assert body["creation_date"] == "2001-05-10"


@pytest.mark.asyncio
async def test_folios_are_unique(async_client: AsyncClient, editor_headers):
    folios = {(await _create(async_client, editor_headers, name=f"Ente {i}"))["folio"] for i in range(3)}
    assert len(folios) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw,stored",
    [
        ("Organismo", "OPD"),
        ("fideicomiso", "Fideicomiso"),
        ("FI", "Fideicomiso"),
        ("Empresa Pública", "EPEM"),
        ("epem", "EPEM"),
    ],
)
async def test_entity_type_is_normalised(async_client: AsyncClient, admin_headers, raw, stored):
    created = await _create(async_client, admin_headers, type=raw)
    resp = await async_client.get(f"{ENTES}/{created['id']}", headers=admin_headers)
    assert resp.json()["type"] == stored


@pytest.mark.asyncio
async def test_unknown_entity_type_is_rejected(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(ENTES, json={"name": "X", "type": "Secretaria"}, headers=admin_headers)
    assert resp.status_code == 422

    listing = await async_client.get(ENTES, params={"type": "Secretaria"}, headers=admin_headers)
    assert listing.status_code == 422


@pytest.mark.asyncio
async def test_blank_name_is_rejected(async_client: AsyncClient, admin_headers):
    resp = await async_client.post(ENTES, json={"name": "   ", "type": "OPD"}, headers=admin_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_filters(async_client: AsyncClient, admin_headers, reader_headers):
    await _create(async_client, admin_headers, name="Fideicomiso Agrario", type="Fideicomiso")
    await _create(async_client, admin_headers, name="Transporte 100%", type="EPEM")
    await _create(async_client, admin_headers, name="Archivo Historico", type="OPD", status="Inactivo")

    every = await async_client.get(ENTES, headers=reader_headers)
    assert [e["name"] for e in every.json()] == [
        "Archivo Historico",
        "Fideicomiso Agrario",
        "Transporte 100%",
    ]

    trusts = await async_client.get(ENTES, params={"type": "FI"}, headers=reader_headers)
    assert [e["name"] for e in trusts.json()] == ["Fideicomiso Agrario"]

    inactive = await async_client.get(ENTES, params={"status": "Inactivo"}, headers=reader_headers)
    assert [e["name"] for e in inactive.json()] == ["Archivo Historico"]

    # LIKE metacharacters are matched literally
    pct = await async_client.get(ENTES, params={"search": "100%"}, headers=reader_headers)
    assert [e["name"] for e in pct.json()] == ["Transporte 100%"]
    none = await async_client.get(ENTES, params={"search": "%"}, headers=reader_headers)
    assert [e["name"] for e in none.json()] == ["Transporte 100%"]


@pytest.mark.asyncio
async def test_update_keeps_unsent_fields(async_client: AsyncClient, editor_headers):
    created = await _create(async_client, editor_headers, purpose="Vivienda social")

    resp = await async_client.put(
        f"{ENTES}/{created['id']}",
        json={"type": "Fideicomiso", "creation_date": "", "has_historical_records": True},
        headers=editor_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "Fideicomiso"
    assert body["creation_date"] is None
    assert body["has_historical_records"] is True
    assert body["purpose"] == "Vivienda social"
    assert body["folio"] == created["folio"]


@pytest.mark.asyncio
async def test_missing_ente_is_404(async_client: AsyncClient, admin_headers):
    assert (await async_client.get(f"{ENTES}/999", headers=admin_headers)).status_code == 404
    assert (await async_client.delete(f"{ENTES}/999", headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_delete_is_admin_only(async_client: AsyncClient, admin_headers, editor_headers):
    created = await _create(async_client, editor_headers)
    url = f"{ENTES}/{created['id']}"

    denied = await async_client.delete(url, headers=editor_headers)
    assert denied.status_code == 403
    assert denied.json()["detail"] == "Insufficient permissions"

    ok = await async_client.delete(url, headers=admin_headers)
    assert ok.status_code == 200
    assert ok.json()["success"] is True
    assert (await async_client.get(url, headers=admin_headers)).status_code == 404


@pytest.mark.asyncio
async def test_read_only_role_cannot_write(async_client: AsyncClient, admin_headers, reader_headers):
    created = await _create(async_client, admin_headers)
    url = f"{ENTES}/{created['id']}"

    assert (await async_client.get(url, headers=reader_headers)).status_code == 200
    post = await async_client.post(ENTES, json={"name": "X", "type": "OPD"}, headers=reader_headers)
    assert post.status_code == 403
    put = await async_client.put(url, json={"name": "Y"}, headers=reader_headers)
    assert put.status_code == 403
    assert (await async_client.delete(url, headers=reader_headers)).status_code == 403


@pytest.mark.asyncio
async def test_anonymous_requests_are_unauthorised(async_client: AsyncClient):
    assert (await async_client.get(ENTES)).status_code == 401
    resp = await async_client.post(ENTES, json={"name": "X", "type": "OPD"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_update_rejects_blank_name(async_client: AsyncClient, editor_headers):
    created = await _create(async_client, editor_headers)
    url = f"{ENTES}/{created['id']}"

    resp = await async_client.put(url, json={"name": "   "}, headers=editor_headers)
    assert resp.status_code == 422

    renamed = await async_client.put(url, json={"name": "  Instituto Renovado "}, headers=editor_headers)
    assert renamed.json()["name"] == "Instituto Renovado"


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"skip": -1}, {"limit": -5}, {"limit": 0}, {"limit": 501}])
async def test_out_of_range_paging_is_rejected(async_client: AsyncClient, reader_headers, params):
    resp = await async_client.get(ENTES, params=params, headers=reader_headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_paging(async_client: AsyncClient, admin_headers):
    for name in ("A", "B", "C"):
        await _create(async_client, admin_headers, name=name)
    resp = await async_client.get(ENTES, params={"skip": 1, "limit": 1}, headers=admin_headers)
    assert [e["name"] for e in resp.json()] == ["B"]
