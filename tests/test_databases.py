"""Tests for the retrying database (collection) client."""

import pytest
from unittest.mock import AsyncMock, patch

from notion_client import APIErrorCode

from prd_reader.notion.client import NotionClient
from prd_reader.notion.databases import CollectionClient
from prd_reader.notion.retry import RetryPolicy


class FakeAPIError(Exception):
    def __init__(self, code, status):
        super().__init__(f"{status} {code}")
        self.code = code
        self.status = status


def page(page_id, title):
    return {
        "id": page_id,
        "url": f"https://www.notion.so/{page_id}",
        "properties": {"Name": {"type": "title", "title": [{"plain_text": title}]}},
    }


FIRST_PAGE = {"results": [page("r1", "One")], "has_more": True, "next_cursor": "c1"}
SECOND_PAGE = {"results": [page("r2", "Two")], "has_more": False, "next_cursor": None}


@pytest.fixture
def notion_client():
    with patch("prd_reader.notion.client.AsyncClient"):
        client = NotionClient(api_key="test-key")
    client.client.databases.query = AsyncMock()
    return client


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def collection_client(notion_client, sleeps):
    async def sleep(delay):
        sleeps.append(delay)

    return CollectionClient(notion_client, RetryPolicy(max_attempts=3, base_delay=1.0, sleep=sleep))


@pytest.mark.asyncio
async def test_query_returns_rows_in_order(collection_client, notion_client):
    notion_client.client.databases.query.side_effect = [FIRST_PAGE, SECOND_PAGE]

    rows = await collection_client.query("db-1")

    assert [(r.id, r.title) for r in rows] == [("r1", "One"), ("r2", "Two")]
    assert rows[0].properties == {"Name": "One"}


@pytest.mark.asyncio
async def test_failure_mid_pagination_restarts_from_first_page(
    collection_client, notion_client, sleeps
):
    query = notion_client.client.databases.query
    query.side_effect = [
        FIRST_PAGE,
        FakeAPIError(APIErrorCode.RateLimited, 429),
        FIRST_PAGE,
        SECOND_PAGE,
    ]

    rows = await collection_client.query("db-1")

    assert [r.id for r in rows] == ["r1", "r2"]
    cursors = [call.kwargs.get("start_cursor") for call in query.await_args_list]
    assert cursors == [None, "c1", None, "c1"]
    assert sleeps == [1.0]


@pytest.mark.asyncio
async def test_terminal_error_propagates_immediately(collection_client, notion_client, sleeps):
    error = FakeAPIError(APIErrorCode.ObjectNotFound, 404)
    notion_client.client.databases.query.side_effect = [error]

    with pytest.raises(FakeAPIError) as exc_info:
        await collection_client.query("db-1")

    assert exc_info.value is error
    assert notion_client.client.databases.query.await_count == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(collection_client, notion_client, sleeps):
    notion_client.client.databases.query.side_effect = [
        FakeAPIError(APIErrorCode.ServiceUnavailable, 503) for _ in range(3)
    ]

    with pytest.raises(FakeAPIError):
        await collection_client.query("db-1")

    assert notion_client.client.databases.query.await_count == 3
    assert sleeps == [1.0, 2.0]
