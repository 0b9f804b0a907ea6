import pytest
from postgrest.exceptions import APIError

from care_site.storage.records import (
    FetchResult,
    RowFilter,
    RowOrder,
    fetch_one,
    fetch_rows,
)
from conftest import FakeSupabase

BRANCH_ROWS = [
    {"id": 1, "city": "Pittsburgh", "slug": "pittsburgh"},
    {"id": 2, "city": "Atlanta", "slug": "atlanta"},
]


@pytest.mark.asyncio
async def test_fetch_rows_applies_filter_and_order():
    client = FakeSupabase(
        tables={
            "team_members": [
                {"id": 1, "name": "Zoe", "category": "board", "order_rank": 2},
                {"id": 2, "name": "Amy", "category": "board", "order_rank": 1},
                {"id": 3, "name": "Bob", "category": "intern"},
            ]
        }
    )

    result = await fetch_rows(
        client,
        "team_members",
        where=RowFilter("category", "board"),
        order=RowOrder("order_rank"),
    )

    assert result.ok
    assert [r["name"] for r in result.rows] == ["Amy", "Zoe"]
    query = client.executed[0]
    assert query.filters == [("category", "board")]
    assert query.orders == [("order_rank", False)]


@pytest.mark.asyncio
async def test_descending_order_is_passed_as_desc():
    client = FakeSupabase(tables={"branches": BRANCH_ROWS})
    await fetch_rows(client, "branches", order=RowOrder("city", ascending=False))
    assert client.executed[0].orders == [("city", True)]


@pytest.mark.asyncio
async def test_api_error_becomes_error_value():
    error = APIError({"message": "relation does not exist", "code": "42P01"})
    client = FakeSupabase(tables={"branches": error})

    result = await fetch_rows(client, "branches")

    assert not result.ok
    assert result.rows == []
    assert result.error == "Failed to load branches"


@pytest.mark.asyncio
async def test_network_error_becomes_error_value_without_retry():
    client = FakeSupabase(tables={"events": ConnectionError("network down")})

    result = await fetch_rows(client, "events")

    assert result.error == "An unexpected error occurred"
    assert len(client.executed) == 1


@pytest.mark.asyncio
async def test_missing_client_is_reported():
    result = await fetch_rows(None, "events")
    assert not result.ok
    assert result.collection == "events"


@pytest.mark.asyncio
async def test_fetch_one_with_no_match_is_empty_not_error():
    client = FakeSupabase(tables={"branches": BRANCH_ROWS})

    result = await fetch_one(client, "branches", "slug", "nonexistent")

    assert result.ok
    assert result.rows == []
    assert client.executed[0].limit_n == 1


def test_fetch_result_ok_flag():
    assert FetchResult(collection="x").ok
    assert not FetchResult(collection="x", error="nope").ok
