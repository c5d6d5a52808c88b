from supabase import Client
from typing import Dict, Iterable, Optional


def fetch_column_map(supabase: Client, table: str, ids: Iterable[Optional[str]], column: str) -> Dict[str, str]:
    """Return map id -> column for the given ids. Skips the query when there is nothing to look up."""
    unique_ids = list({i for i in ids if i})
    if not unique_ids:
        return {}
    result = supabase.table(table).select(f"id, {column}").in_("id", unique_ids).execute()
    return {row["id"]: row.get(column) for row in result.data or []}


def fetch_emails(supabase: Client, user_ids: Iterable[Optional[str]]) -> Dict[str, str]:
    return fetch_column_map(supabase, "profiles", user_ids, "email")


def fetch_organization_names(supabase: Client, organization_ids: Iterable[Optional[str]]) -> Dict[str, str]:
    return fetch_column_map(supabase, "organizations", organization_ids, "name")
