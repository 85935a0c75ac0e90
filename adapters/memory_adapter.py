from __future__ import annotations

import uuid
from copy import deepcopy
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .base import SYSTEM_CONTEXT_ID, CohortStore, expand_custom_fields


class MemoryAdapter(CohortStore):
    """In-process store for embedding the hook and for tests."""

    def __init__(
        self,
        users: Optional[Iterable[Dict[str, Any]]] = None,
        groups: Optional[Iterable[Dict[str, Any]]] = None,
        memberships: Optional[Iterable[Tuple[str, str]]] = None,
        config: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self._users: Dict[str, Dict[str, Any]] = {}
        self._groups: Dict[str, Dict[str, Any]] = {}
        self._memberships: Set[Tuple[str, str]] = set()
        self._config: Dict[str, Dict[str, Any]] = deepcopy(config) if config else {}

        for user in users or []:
            self.upsert_user(user)
        for group in groups or []:
            group_doc = dict(group)
            group_doc.setdefault("id", f"c_{uuid.uuid4().hex}")
            group_doc.setdefault("description", "")
            group_doc.setdefault("contextId", SYSTEM_CONTEXT_ID)
            group_doc.setdefault("component", None)
            self._groups[str(group_doc["id"])] = group_doc
        for group_id, user_id in memberships or []:
            self.add_member(group_id, user_id)

    def upsert_user(self, user: Dict[str, Any]) -> None:
        self._users[str(user["id"])] = deepcopy(user)

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        user = self._users.get(str(user_id))
        if user is None:
            return None
        return expand_custom_fields(deepcopy(user))

    def list_users(self) -> List[Dict[str, Any]]:
        return [expand_custom_fields(deepcopy(user)) for user in self._users.values()]

    def list_groups(self, context_id: str, component: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            dict(group)
            for group in self._groups.values()
            if group.get("contextId") == context_id
            and (component is None or group.get("component") == component)
        ]

    def create_group(
        self,
        name: str,
        description: str,
        context_id: str,
        component: Optional[str] = None,
    ) -> str:
        group_id = f"c_{uuid.uuid4().hex}"
        self._groups[group_id] = {
            "id": group_id,
            "name": name,
            "description": description,
            "contextId": context_id,
            "component": component,
        }
        return group_id

    def get_group(self, group_id: str) -> Optional[Dict[str, Any]]:
        group = self._groups.get(group_id)
        return dict(group) if group else None

    def is_member(self, group_id: str, user_id: str) -> bool:
        return (group_id, str(user_id)) in self._memberships

    def add_member(self, group_id: str, user_id: str) -> None:
        self._memberships.add((group_id, str(user_id)))

    def remove_member(self, group_id: str, user_id: str) -> None:
        self._memberships.discard((group_id, str(user_id)))

    def list_user_groups(self, user_id: str, component: str) -> List[str]:
        return [
            group_id
            for group_id, member_id in sorted(self._memberships)
            if member_id == str(user_id) and self._groups.get(group_id, {}).get("component") == component
        ]

    def group_members(self, group_id: str) -> List[str]:
        return sorted(member_id for gid, member_id in self._memberships if gid == group_id)

    def get_config(self, component: str) -> Dict[str, Any]:
        return dict(self._config.get(component, {}))

    def set_config(self, component: str, key: str, value: Any) -> None:
        self._config.setdefault(component, {})[key] = value

    def close(self) -> None:
        pass
