from typing import Dict, FrozenSet


ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    "admin": frozenset({
        "create_task",
        "edit_task",
        "delete_task",
        "move_task",
        "create_sprint",
        "edit_sprint",
        "delete_sprint",
        "create_user",
        "edit_user",
        "delete_user",
        "view_timeline",
        "view_reports",
    }),
    "developer": frozenset({"create_task", "edit_task", "move_task", "view_timeline"}),
    "tester": frozenset({"edit_task", "move_task", "view_timeline"}),
}


def has_permission(role: str, action: str) -> bool:
    """Return True if `action` is in the static allow-list for `role`.

    Unknown roles have no permissions.
    """
    return action in ROLE_PERMISSIONS.get(role, frozenset())
