"""
Regression tests for behaviour callers depend on across every entity.

1. Rejected paging requests never reach the database
2. A page is exactly the matching slice of the sorted set
3. Unknown sort orders are rejected regardless of casing
4. Update / Patch / Delete on an unknown id fail with "No data found!"
5. X-Query-Count reports the statements actually issued
6. CORS must not set allow_credentials=true with allow_origins=*
"""
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from emr.exceptions import ApplicationError
from emr.schemas import GenericSchema
from emr.services import ENTITY_SERVICES, generic_service

ALL_SERVICES = [ENTITY_SERVICES[name] for name in sorted(ENTITY_SERVICES)]


# ---------------------------------------------------------------------------
# 1. Rejected paging issues no query
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("service", ALL_SERVICES, ids=repr)
@pytest.mark.parametrize("page_number, page_size", [(1, 0), (0, 10), (-3, 5), (2, -1)])
async def test_invalid_paging_issues_no_query(
    db_session: AsyncSession, statement_log, service, page_number, page_size
):
    with pytest.raises(ApplicationError):
        await service.get(db_session, page_number=page_number, page_size=page_size)
    assert statement_log == []


# ---------------------------------------------------------------------------
# 2. Page slices
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("page_size", [1, 3, 4, 7, 11])
async def test_pages_partition_the_sorted_set(db_session: AsyncSession, page_size: int):
    names = [f"Generic {i:02d}" for i in range(10)]
    for name in reversed(names):
        await generic_service.create(db_session, GenericSchema(item_name=name))

    collected = []
    page_number = 1
    while True:
        rows = await generic_service.get(
            db_session, page_number=page_number, page_size=page_size, sort_field="itemName"
        )
        assert len(rows) <= page_size
        expected = names[(page_number - 1) * page_size:page_number * page_size]
        assert [r.item_name for r in rows] == expected
        if not rows:
            break
        collected.extend(r.item_name for r in rows)
        page_number += 1

    assert collected == names


# ---------------------------------------------------------------------------
# 3. Sort order
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("sort_order", ["ascending", "up", "", "des", "asc desc"])
async def test_unknown_sort_order_rejected(db_session: AsyncSession, sort_order: str):
    with pytest.raises(ApplicationError) as exc_info:
        await generic_service.get(db_session, sort_field="item_name", sort_order=sort_order)
    assert exc_info.value.message == "Invalid sort order. Use 'asc' or 'desc'"


@pytest.mark.asyncio
@pytest.mark.parametrize("sort_order", ["ASC", "Desc", " desc "])
async def test_sort_order_is_case_insensitive(db_session: AsyncSession, sort_order: str):
    await generic_service.create(db_session, GenericSchema(item_name="Only"))
    rows = await generic_service.get(db_session, sort_field="item_name", sort_order=sort_order)
    assert [r.item_name for r in rows] == ["Only"]


# ---------------------------------------------------------------------------
# 4. Writes against an unknown id
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("service", ALL_SERVICES, ids=repr)
async def test_writes_on_unknown_id_fail(db_session: AsyncSession, service):
    missing = uuid.uuid4()

    with pytest.raises(ApplicationError) as exc_info:
        await service.update(db_session, missing, service.schema())
    assert exc_info.value.status_code == 404

    with pytest.raises(ApplicationError) as exc_info:
        await service.patch(db_session, missing, [])
    assert exc_info.value.status_code == 404

    with pytest.raises(ApplicationError) as exc_info:
        await service.delete(db_session, missing)
    assert exc_info.value.message == "No data found!"


@pytest.mark.asyncio
@pytest.mark.parametrize("service", ALL_SERVICES, ids=repr)
async def test_create_then_get_by_id_round_trips(db_session: AsyncSession, service):
    entity_id = await service.create(db_session, service.schema())
    data = await service.get_by_id(db_session, entity_id, ",".join(service.writable_fields))
    assert data["id"] == entity_id
    assert set(data) == {"id", *service.writable_fields}


# ---------------------------------------------------------------------------
# 5. X-Query-Count reports actual query count
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_query_count_header_for_list(async_client: AsyncClient):
    await async_client.post("/api/generic", json={"item_name": "Counted"})

    resp = await async_client.get("/api/generic")
    assert resp.status_code == 200
    assert int(resp.headers["x-query-count"]) == 1


@pytest.mark.asyncio
async def test_query_count_header_rejected_paging(async_client: AsyncClient):
    resp = await async_client.get("/api/generic", params={"pageSize": 0})
    assert resp.status_code == 400
    assert int(resp.headers["x-query-count"]) == 0


@pytest.mark.asyncio
async def test_query_count_header_includes_eager_loads(async_client: AsyncClient, patient_with_comorbidity):
    """A projected related field costs one extra SELECT for the relation."""
    patient_id, _ = patient_with_comorbidity

    resp = await async_client.get(f"/api/patient/{patient_id}", params={"fields": "first_name"})
    assert int(resp.headers["x-query-count"]) == 1

    resp = await async_client.get(
        f"/api/patient/{patient_id}", params={"fields": "first_name,comorbidity.name"}
    )
    assert int(resp.headers["x-query-count"]) == 2


# ---------------------------------------------------------------------------
# 6. CORS headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_no_credentials_with_wildcard_origin(async_client: AsyncClient):
    """
    When allow_origins=["*"], the response must NOT include
    Access-Control-Allow-Credentials: true, which browsers reject.
    """
    resp = await async_client.options(
        "/api/patient",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    cred_header = resp.headers.get("access-control-allow-credentials", "").lower()
    assert cred_header != "true", (
        "CORS must not combine allow_origins=* with allow_credentials=true"
    )
