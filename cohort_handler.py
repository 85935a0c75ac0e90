"""
Cohort auto-assignment hook.

Runs on user profile changes: renders the configured cohort name templates
against the user's profile, joins or creates the matching cohorts and, when
unenrolment is enabled, drops the user from managed cohorts they no longer match.

Invocations for the same user are not serialized; two concurrent runs for one
user can interleave their membership changes and the last write wins.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from dotenv import load_dotenv

from adapters.base import CohortStore
from adapters.memory_adapter import MemoryAdapter
from rules.config import COMPONENT_NAME, RuleConfiguration
from rules.parser import parse_replacements, parse_rules, resolve_delimiter
from rules.reconciler import GroupReconciler, should_skip_user
from rules.renderer import decompose_email, render
from rules.sanitizer import describe_fields, prepare_profile_data

logger = logging.getLogger(__name__)

USER_EVENTS = {"user_created", "user_updated"}

MODE_MEMORY = "memory"
MODE_MONGO = "mongo"

DOTENV_PATH = os.path.join(os.path.dirname(__file__), ".env")


@dataclass(frozen=True)
class Settings:
    """Process settings read from the environment."""

    mode: str = MODE_MEMORY
    mongo_uri: Optional[str] = None
    mongo_db: str = "cohortauto"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            mode=os.getenv("COHORTAUTO_MODE", MODE_MEMORY).lower(),
            mongo_uri=os.getenv("COHORTAUTO_MONGO_URI") or None,
            mongo_db=os.getenv("COHORTAUTO_MONGO_DB", "cohortauto"),
            log_level=os.getenv("COHORTAUTO_LOG_LEVEL", "INFO").upper(),
        )


def load_settings() -> Settings:
    if os.path.exists(DOTENV_PATH):
        load_dotenv(DOTENV_PATH)
    return Settings.from_env()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_store(settings: Optional[Settings] = None) -> CohortStore:
    settings = settings or load_settings()
    if settings.mode == MODE_MONGO:
        if not settings.mongo_uri:
            logger.warning("COHORTAUTO_MODE is 'mongo' but COHORTAUTO_MONGO_URI is missing; using memory store.")
            return MemoryAdapter()
        from adapters.mongo_adapter import MongoAdapter

        return MongoAdapter(mongo_uri=settings.mongo_uri, db_name=settings.mongo_db)
    return MemoryAdapter()


def as_user_record(user: Any) -> Mapping[str, Any]:
    if isinstance(user, Mapping):
        return user
    if hasattr(user, "__dict__"):
        return vars(user)
    raise TypeError(f"Unsupported user record: {user!r}")


class CohortAutoHandler:
    def __init__(self, store: CohortStore, config: Optional[RuleConfiguration] = None) -> None:
        self._store = store
        self.config = config or RuleConfiguration.from_settings(store.get_config(COMPONENT_NAME))

    def process_config(self, settings: Mapping[str, Any]) -> RuleConfiguration:
        """Store the rule settings, filling defaults for anything missing."""
        config = RuleConfiguration.from_settings(settings)
        for key, value in config.as_settings().items():
            self._store.set_config(COMPONENT_NAME, key, value)
        self.config = config
        return config

    def build_profile(self, user: Mapping[str, Any]) -> Dict[str, Any]:
        """Sanitized template data for ``user``, with the email split into its parts."""
        profile = prepare_profile_data(user, self.config.secondrule_fld)
        if not isinstance(profile, dict):
            return {}
        return decompose_email(profile)

    def profile_fields(self, user: Mapping[str, Any]) -> List[Tuple[str, str]]:
        return describe_fields(self.build_profile(user))

    def cohort_names(self, user: Mapping[str, Any]) -> List[str]:
        """Render every configured template for ``user``; empty names are kept."""
        delimiter = resolve_delimiter(self.config.delim)
        replacements = parse_replacements(self.config.replace_arr, delimiter)
        parsed = parse_rules(self.config.mainrule_fld, delimiter, self.build_profile(user))

        names: List[str] = []
        for template in parsed.templates:
            name = render(template, parsed.profile, replacements)
            logger.debug("Template %r rendered to %r", template, name)
            names.append(name)
        return names

    def _load_user(self, user: Mapping[str, Any]) -> Dict[str, Any]:
        full = self._store.get_user(str(user["id"])) if user.get("id") else None
        return full or dict(user)

    def user_profile_hook(self, user: Any) -> Set[str]:
        """
        Sync cohort memberships for one user after a profile change.

        ``user`` is a mapping or a host user object with attributes. Returns the
        ids of the cohorts the user was matched to. Never raises; bad records
        and storage failures are logged and yield an empty result.
        """
        try:
            record = as_user_record(user)
            if should_skip_user(record, self.config):
                return set()
            if not self.config.mainrule_fld:
                return set()

            full_user = self._load_user(record)
            names = self.cohort_names(full_user)
            return GroupReconciler(self._store, self.config).reconcile(full_user, names)
        except Exception:
            user_ref = user.get("id") if isinstance(user, Mapping) else getattr(user, "id", user)
            logger.exception("Cohort sync failed for user %s", user_ref)
            return set()

    def handle_user_event(self, event_name: str, user_id: str) -> Set[str]:
        if event_name not in USER_EVENTS:
            return set()
        try:
            user = self._store.get_user(user_id)
        except Exception:
            logger.exception("Could not load user %s for %s", user_id, event_name)
            return set()
        if user is None:
            logger.warning("Ignoring %s for unknown user %s", event_name, user_id)
            return set()
        return self.user_profile_hook(user)

    def sync_all_users(self) -> Dict[str, Set[str]]:
        return {str(user["id"]): self.user_profile_hook(user) for user in self._store.list_users()}
