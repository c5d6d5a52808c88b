"""Detection of admin changes that affect every client application, shown as confirmation warnings."""

from typing import Any, Dict, List, Optional

from menustudio.modules.styles.schemas import GlobalChangeInfo

SETTINGS_FIELDS = ("master_prompt", "default_resolution", "default_ratio")


def _is_global_org(organization_id: Optional[str]) -> bool:
    return not organization_id or organization_id == "global"


def _changed(style: Dict[str, Any], original: Dict[str, Any], field: str) -> bool:
    return style.get(field) is not None and style.get(field) != original.get(field)


def detect_style_change_impact(
    style: Optional[Dict[str, Any]],
    operation: str,
    original: Optional[Dict[str, Any]] = None,
) -> GlobalChangeInfo:
    style = style or {}

    if operation == "create":
        if _is_global_org(style.get("organization_id")):
            return GlobalChangeInfo(
                is_global_change=True,
                change_type="create_global_style",
                affected_scope="all_clients",
                warning_message="This style will be available to all client applications.",
                severity="warning",
            )
        return GlobalChangeInfo()

    if original is None:
        return GlobalChangeInfo()

    was_global = not original.get("organization_id")

    if operation == "delete":
        if was_global:
            return GlobalChangeInfo(
                is_global_change=True,
                change_type="delete_global_style",
                affected_scope="all_clients",
                warning_message="Deleting this global style will remove it from all client applications immediately.",
                severity="critical",
            )
        return GlobalChangeInfo()

    if operation == "update":
        will_be_global = _is_global_org(style.get("organization_id", original.get("organization_id")))
        if _changed(style, original, "is_default") and (was_global or will_be_global):
            message = (
                "This style will become the default for all new generations across all clients."
                if style.get("is_default")
                else "Removing default status will affect all client applications."
            )
            return GlobalChangeInfo(
                is_global_change=True,
                change_type="change_default_style",
                affected_scope="all_clients",
                warning_message=message,
                severity="warning",
            )
        if was_global and any(_changed(style, original, f) for f in ("name", "prompt_modifier", "status")):
            return GlobalChangeInfo(
                is_global_change=True,
                change_type="edit_global_style",
                affected_scope="all_clients",
                warning_message="Changes to this global style will apply to all client applications immediately.",
                severity="warning",
            )

    return GlobalChangeInfo()


def detect_settings_change_impact(field: str, new_value: str, original_value: str) -> GlobalChangeInfo:
    if new_value == original_value:
        return GlobalChangeInfo()
    if field == "master_prompt":
        return GlobalChangeInfo(
            is_global_change=True,
            change_type="edit_master_prompt",
            affected_scope="all_clients",
            warning_message="Changing the master prompt will affect all future image generations across all clients.",
            severity="critical",
        )
    return GlobalChangeInfo(
        is_global_change=True,
        change_type="edit_default_settings",
        affected_scope="all_clients",
        warning_message="Changing default settings will apply to all new client sessions.",
        severity="warning",
    )


def detect_settings_changes(current: Dict[str, Any], original: Optional[Dict[str, Any]]) -> List[GlobalChangeInfo]:
    """Global-impact warnings for every settings field that differs from the stored row."""
    if not original:
        return []
    changes = []
    for field in SETTINGS_FIELDS:
        if current.get(field) is None:
            continue
        info = detect_settings_change_impact(field, current[field], original.get(field))
        if info.is_global_change:
            changes.append(info)
    return changes
