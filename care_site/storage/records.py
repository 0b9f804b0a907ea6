"""Read-only row queries against the Supabase tables.

Every function here resolves to a ``FetchResult``; errors are returned as
values and never raised, and nothing is retried automatically. Retrying is
the caller's decision (see ``care_site.shell.state.Section.retry``).
"""

from typing import Any, Dict, List, NamedTuple, Optional

from loguru import logger
from postgrest import APIResponse
from postgrest.exceptions import APIError
from pydantic import BaseModel, Field
from supabase import AsyncClient


class RowFilter(NamedTuple):
    """Equality predicate: ``field = value``."""

    field: str
    value: Any


class RowOrder(NamedTuple):
    field: str
    ascending: bool = True


class FetchResult(BaseModel):
    """Rows returned by one query, or the error that replaced them."""

    collection: str
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def fetch_rows(
    supabase_client: AsyncClient,
    collection: str,
    *,
    where: Optional[RowFilter] = None,
    order: Optional[RowOrder] = None,
    columns: str = "*",
    limit: Optional[int] = None,
) -> FetchResult:
    """
    Fetches the rows of a collection, optionally filtered and ordered.

    Args:
        supabase_client: An initialized async Supabase client instance.
        collection: Table name, e.g. "branches".
        where: Optional equality filter.
        order: Optional ordering; the store's ordering is preserved as returned.
        columns: PostgREST select expression.
        limit: Optional maximum number of rows.

    Returns:
        A FetchResult holding either the rows or a human-readable error.
    """
    if not supabase_client:
        logger.error(f"Supabase client not provided to fetch '{collection}'.")
        return FetchResult(
            collection=collection, error="The data service is not available."
        )

    logger.debug(
        f"Fetching '{collection}' (filter={where}, order={order}, limit={limit})"
    )

    try:
        query = supabase_client.table(collection).select(columns)
        if where is not None:
            query = query.eq(where.field, where.value)
        if order is not None:
            query = query.order(order.field, desc=not order.ascending)
        if limit is not None:
            query = query.limit(limit)
        response: APIResponse = await query.execute()

        rows = response.data or []
        logger.info(f"Fetched {len(rows)} rows from '{collection}'.")
        return FetchResult(collection=collection, rows=rows)

    except APIError as e:
        logger.error(f"Supabase API error fetching '{collection}': {e.message}")
        logger.debug(f"Full APIError details: {e}")
        return FetchResult(
            collection=collection, error=f"Failed to load {collection.replace('_', ' ')}"
        )
    except Exception as e:
        logger.error(f"An unexpected error occurred fetching '{collection}': {e}")
        logger.exception("Traceback:")
        return FetchResult(collection=collection, error="An unexpected error occurred")


async def fetch_one(
    supabase_client: AsyncClient, collection: str, field: str, value: Any
) -> FetchResult:
    """Detail lookup by a unique field. Zero rows is not an error."""
    return await fetch_rows(
        supabase_client, collection, where=RowFilter(field, value), limit=1
    )
