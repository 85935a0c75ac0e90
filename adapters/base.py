from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

SYSTEM_CONTEXT_ID = "system"
CUSTOM_FIELD_PREFIX = "profile_field_"


def expand_custom_fields(user: Dict[str, Any]) -> Dict[str, Any]:
    """Expose each custom profile field both as ``profile.<name>`` and ``profile_field_<name>``."""
    expanded = dict(user)
    custom = expanded.get("profile") or {}
    if not isinstance(custom, dict):
        return expanded
    for name, value in custom.items():
        expanded.setdefault(f"{CUSTOM_FIELD_PREFIX}{name}", value)
    return expanded


class CohortStore(Protocol):
    """User, cohort and configuration storage provided by the host platform."""

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    def list_users(self) -> List[Dict[str, Any]]:
        ...

    def list_groups(self, context_id: str, component: Optional[str] = None) -> List[Dict[str, Any]]:
        ...

    def create_group(
        self,
        name: str,
        description: str,
        context_id: str,
        component: Optional[str] = None,
    ) -> str:
        ...

    def is_member(self, group_id: str, user_id: str) -> bool:
        ...

    def add_member(self, group_id: str, user_id: str) -> None:
        ...

    def remove_member(self, group_id: str, user_id: str) -> None:
        ...

    def list_user_groups(self, user_id: str, component: str) -> List[str]:
        ...

    def get_config(self, component: str) -> Dict[str, Any]:
        ...

    def set_config(self, component: str, key: str, value: Any) -> None:
        ...
