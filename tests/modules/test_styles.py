import pytest
from fastapi import HTTPException

from menustudio.modules.styles.impact import (
    detect_settings_change_impact,
    detect_settings_changes,
    detect_style_change_impact,
)
from menustudio.modules.styles.schemas import StyleCreate, StyleImpactRequest, StyleUpdate
from menustudio.modules.styles.service import StyleService
from tests.conftest import FakeSupabase

GLOBAL_STYLE = {"id": "s1", "name": "Studio", "prompt_modifier": "clean", "organization_id": None, "is_default": False}
ORG_STYLE = {**GLOBAL_STYLE, "id": "s2", "organization_id": "org-1"}


def style_row(**overrides):
    row = {**GLOBAL_STYLE, "status": "active", "category": "Studio", "created_at": "2026-03-01T12:00:00Z"}
    row.update(overrides)
    return row


class TestStyleImpact:
    def test_create_global(self):
        info = detect_style_change_impact({"organization_id": "global"}, "create")
        assert info.is_global_change and info.change_type == "create_global_style"
        assert info.severity == "warning"

    def test_create_for_organization(self):
        assert not detect_style_change_impact({"organization_id": "org-1"}, "create").is_global_change

    def test_delete_global_is_critical(self):
        info = detect_style_change_impact({}, "delete", GLOBAL_STYLE)
        assert info.change_type == "delete_global_style"
        assert info.severity == "critical"

    def test_delete_org_style(self):
        assert not detect_style_change_impact({}, "delete", ORG_STYLE).is_global_change

    def test_make_default(self):
        info = detect_style_change_impact({"is_default": True}, "update", GLOBAL_STYLE)
        assert info.change_type == "change_default_style"
        assert "become the default" in info.warning_message

    def test_remove_default(self):
        original = {**GLOBAL_STYLE, "is_default": True}
        info = detect_style_change_impact({"is_default": False}, "update", original)
        assert info.warning_message == "Removing default status will affect all client applications."

    def test_edit_global_fields(self):
        info = detect_style_change_impact({"prompt_modifier": "moody"}, "update", GLOBAL_STYLE)
        assert info.change_type == "edit_global_style"

    def test_unchanged_global_edit(self):
        assert not detect_style_change_impact({"name": "Studio"}, "update", GLOBAL_STYLE).is_global_change

    def test_edit_org_style(self):
        assert not detect_style_change_impact({"name": "New"}, "update", ORG_STYLE).is_global_change

    def test_update_without_original(self):
        assert not detect_style_change_impact({"name": "x"}, "update").is_global_change


class TestSettingsImpact:
    def test_master_prompt_is_critical(self):
        info = detect_settings_change_impact("master_prompt", "new", "old")
        assert info.change_type == "edit_master_prompt"
        assert info.severity == "critical"

    def test_defaults_are_warnings(self):
        info = detect_settings_change_impact("default_ratio", "16:9", "1:1")
        assert info.change_type == "edit_default_settings"

    def test_no_change(self):
        assert not detect_settings_change_impact("default_ratio", "1:1", "1:1").is_global_change

    def test_changes_across_fields(self):
        original = {"master_prompt": "a", "default_resolution": "1K", "default_ratio": "1:1"}
        changes = detect_settings_changes({"master_prompt": "b", "default_ratio": "1:1", "default_resolution": "2K"}, original)
        assert [c.change_type for c in changes] == ["edit_master_prompt", "edit_default_settings"]

    def test_no_stored_row(self):
        assert detect_settings_changes({"master_prompt": "b"}, None) == []


class TestStyleService:
    def test_active_styles_include_global_and_own(self):
        supabase = FakeSupabase({"styles": [[
            {**style_row(id="s1"), "is_default": True},
            style_row(id="s2", organization_id="org-1", name="Mine"),
            style_row(id="s3", organization_id="org-2", name="Theirs"),
        ]]})

        styles = StyleService(supabase).list_active_styles("org-1")

        assert [s.id for s in styles] == ["s1", "s2"]
        assert ("status", "active") in supabase.queries_for("styles")[0].called("eq")

    def test_list_filter_global(self):
        supabase = FakeSupabase({"styles": [[style_row()]]})
        styles = StyleService(supabase).list_styles("global")
        assert styles[0].organization_name is None
        assert ("organization_id", "null") in supabase.queries_for("styles")[0].called("is_")

    def test_list_with_organization_names(self):
        supabase = FakeSupabase({
            "styles": [[style_row(organization_id="org-1")]],
            "organizations": [[{"id": "org-1", "name": "Stax Burger Co."}]],
        })
        assert StyleService(supabase).list_styles()[0].organization_name == "Stax Burger Co."

    def test_create_normalizes_global(self):
        supabase = FakeSupabase({"styles": [[style_row()]]})
        StyleService(supabase).create_style(StyleCreate(name="Studio", prompt_modifier="clean", organization_id="global"))
        inserted = supabase.queries_for("styles")[0].called("insert")[0][0]
        assert inserted["organization_id"] is None

    def test_update_without_fields(self):
        with pytest.raises(HTTPException) as exc_info:
            StyleService(FakeSupabase()).update_style("s1", StyleUpdate())
        assert exc_info.value.status_code == 400

    def test_delete_missing(self):
        supabase = FakeSupabase({"styles": [[]]})
        with pytest.raises(HTTPException) as exc_info:
            StyleService(supabase).delete_style("nope")
        assert exc_info.value.status_code == 404

    def test_preview_update_loads_original(self):
        supabase = FakeSupabase({"styles": [{**GLOBAL_STYLE}]})
        info = StyleService(supabase).preview_impact(StyleImpactRequest(
            operation="update", style_id="s1", style=StyleUpdate(is_default=True)
        ))
        assert info.change_type == "change_default_style"

    def test_preview_requires_style_id(self):
        with pytest.raises(HTTPException) as exc_info:
            StyleService(FakeSupabase()).preview_impact(StyleImpactRequest(operation="delete"))
        assert exc_info.value.status_code == 400
