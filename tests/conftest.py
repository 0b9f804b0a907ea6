"""Shared fixtures: settings environment and in-memory Supabase fakes.

The environment variables must be set before ``care_site.config.settings`` is
imported, since it builds its settings object at import time.
"""

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ["SUPABASE_URL"] = "https://demo.supabase.co"
os.environ["SUPABASE_KEY"] = "anon-test-key-0123456789"
os.environ["FEATURED_BRANCH"] = "Pittsburgh"

SUPABASE_URL = os.environ["SUPABASE_URL"]


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Records the query chain and answers from the fake's table rows."""

    def __init__(self, fake: "FakeSupabase", table: str):
        self.fake = fake
        self.table = table
        self.columns: Optional[str] = None
        self.filters: List[tuple] = []
        self.orders: List[tuple] = []
        self.limit_n: Optional[int] = None

    def select(self, columns: str = "*"):
        self.columns = columns
        return self

    def eq(self, field: str, value: Any):
        self.filters.append((field, value))
        return self

    def order(self, field: str, desc: bool = False):
        self.orders.append((field, desc))
        return self

    def limit(self, n: int):
        self.limit_n = n
        return self

    async def execute(self):
        self.fake.executed.append(self)
        outcome = self.fake.tables.get(self.table, [])
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            outcome = outcome(self)
            if isinstance(outcome, BaseException):
                raise outcome
        rows = [
            row
            for row in outcome
            if all(row.get(field) == value for field, value in self.filters)
        ]
        for field, desc in reversed(self.orders):
            rows.sort(key=lambda r: (r.get(field) is None, r.get(field)), reverse=desc)
        if self.limit_n is not None:
            rows = rows[: self.limit_n]
        return FakeResponse(rows)


class FakeBucket:
    def __init__(self, fake: "FakeSupabase", bucket: str):
        self.fake = fake
        self.bucket = bucket

    async def list(self, path: str, options: Optional[Dict[str, Any]] = None):
        self.fake.listed.append((self.bucket, path, options))
        outcome = self.fake.folders.get(path, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return [{"name": name} for name in outcome]


class FakeStorage:
    def __init__(self, fake: "FakeSupabase"):
        self.fake = fake

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self.fake, bucket)


class FakeSupabase:
    """Stands in for ``supabase.AsyncClient`` (tables + storage)."""

    def __init__(self, tables=None, folders=None):
        self.tables: Dict[str, Any] = tables or {}
        self.folders: Dict[str, Any] = folders or {}
        self.executed: List[FakeQuery] = []
        self.listed: List[tuple] = []
        self.storage = FakeStorage(self)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def resolver(fake_supabase):
    from care_site.storage.assets import AssetResolver, FolderListingCache

    return AssetResolver(
        fake_supabase, SUPABASE_URL, "images", cache=FolderListingCache(300)
    )


@pytest.fixture
def page_ctx(fake_supabase, resolver):
    from care_site.pages.base import PageContext

    return PageContext(
        supabase_client=fake_supabase, resolver=resolver, featured_branch="Pittsburgh"
    )
