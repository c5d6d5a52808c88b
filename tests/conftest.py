"""Shared fixtures: an in-memory stand-in for the Supabase query builder."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from menustudio.core.dependencies import OrganizationContext


class FakeQuery:
    """Records every builder call; `execute()` pops the next canned result for its table."""

    def __init__(self, supabase, table):
        self.supabase = supabase
        self.table = table
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        if name == "not_":
            self.calls.append(("not_", (), {}))
            return self

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def called(self, name):
        return [args for (n, args, _) in self.calls if n == name]

    def execute(self):
        return self.supabase.next_result(self.table)


class FakeSupabase:
    """
    results: table name (or "rpc:<fn>") -> list of results returned in order.
    The last result repeats. A result may be a list/dict (becomes `.data`),
    a SimpleNamespace (returned as-is) or an exception (raised).
    """

    def __init__(self, results=None):
        self.results = {name: list(items) for name, items in (results or {}).items()}
        self.queries = []
        self.auth = MagicMock()
        self.storage = MagicMock()

    def table(self, name):
        query = FakeQuery(self, name)
        self.queries.append(query)
        return query

    def rpc(self, fn, params=None):
        query = FakeQuery(self, f"rpc:{fn}")
        query.calls.append(("rpc", (fn, params), {}))
        self.queries.append(query)
        return query

    def queries_for(self, table):
        return [q for q in self.queries if q.table == table]

    def next_result(self, table):
        queue = self.results.get(table)
        if not queue:
            return SimpleNamespace(data=[], count=0)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, SimpleNamespace):
            return item
        return SimpleNamespace(data=item, count=len(item) if isinstance(item, list) else None)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def org_ctx():
    return OrganizationContext(user_id="user-1", organization_id="org-1", organization_name="Stax Burger Co.")


@pytest.fixture
def solo_ctx():
    return OrganizationContext(user_id="user-1")
