from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from adapters.base import SYSTEM_CONTEXT_ID, CohortStore

from .config import COMPONENT_NAME, RuleConfiguration

logger = logging.getLogger(__name__)

GUEST_USERNAME = "guest"


def is_guest_user(user: Mapping[str, Any]) -> bool:
    """Guests and anonymous sessions have no cohort memberships to manage."""
    if not user.get("id"):
        return True
    return user.get("username") == GUEST_USERNAME or bool(user.get("isGuest"))


def should_skip_user(user: Mapping[str, Any], config: RuleConfiguration) -> bool:
    if user.get("username") in config.ignored_usernames:
        logger.debug("User %s is on the ignore list", user.get("username"))
        return True
    if is_guest_user(user):
        logger.debug("Skipping guest user %s", user.get("id"))
        return True
    return False


class GroupReconciler:
    """Joins or creates the cohorts a user's rendered names point to, and prunes managed ones."""

    def __init__(self, store: CohortStore, config: RuleConfiguration) -> None:
        self._store = store
        self._config = config

    def candidate_groups(self) -> Dict[str, str]:
        component = COMPONENT_NAME if self._config.enableunenrol else None
        groups = self._store.list_groups(SYSTEM_CONTEXT_ID, component=component)
        return {str(group["id"]): group.get("name") or "" for group in groups}

    @staticmethod
    def _find_group(candidates: Dict[str, str], name: str) -> Optional[str]:
        for group_id, group_name in candidates.items():
            if group_name == name:
                return group_id
        return None

    def _create_group(self, name: str, now: dt.datetime) -> str:
        component = COMPONENT_NAME if self._config.enableunenrol else None
        group_id = self._store.create_group(
            name=name,
            description=f"created {now.strftime('%d-%m-%Y')}",
            context_id=SYSTEM_CONTEXT_ID,
            component=component,
        )
        logger.info("Created cohort %r (%s)", name, group_id)
        return group_id

    def assign(
        self,
        user_id: str,
        names: Iterable[str],
        candidates: Optional[Dict[str, str]] = None,
        now: Optional[dt.datetime] = None,
    ) -> List[str]:
        """Make ``user_id`` a member of every named cohort; returns the processed cohort ids in order."""
        candidates = self.candidate_groups() if candidates is None else candidates
        now = now or dt.datetime.now()
        processed: List[str] = []

        for name in names:
            if name == "":
                continue

            group_id = self._find_group(candidates, name)
            if group_id is None:
                group_id = self._create_group(name, now)
                candidates[group_id] = name
                self._store.add_member(group_id, user_id)
                logger.info("Added user %s to new cohort %r", user_id, name)
            elif not self._store.is_member(group_id, user_id):
                self._store.add_member(group_id, user_id)
                logger.info("Added user %s to cohort %r", user_id, name)

            processed.append(group_id)

        return processed

    def prune(self, user_id: str, processed: Iterable[str]) -> List[str]:
        """Drop the user from managed cohorts outside ``processed``; no-op unless unenrol is enabled."""
        if not self._config.enableunenrol:
            return []

        keep = set(processed)
        removed: List[str] = []
        for group_id in self._store.list_user_groups(user_id, COMPONENT_NAME):
            if group_id in keep:
                continue
            self._store.remove_member(group_id, user_id)
            removed.append(group_id)
            logger.info("Removed user %s from cohort %s", user_id, group_id)
        return removed

    def reconcile(
        self,
        user: Mapping[str, Any],
        names: Iterable[str],
        now: Optional[dt.datetime] = None,
    ) -> Set[str]:
        if should_skip_user(user, self._config):
            return set()
        user_id = str(user["id"])
        processed = self.assign(user_id, names, now=now)
        self.prune(user_id, processed)
        return set(processed)
