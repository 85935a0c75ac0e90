from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import OperationFailure

from .base import CohortStore, expand_custom_fields


class MongoAdapter(CohortStore):
    """MongoDB-backed user, cohort and configuration store."""

    def __init__(
        self,
        mongo_uri: Optional[str] = None,
        db_name: str = "cohortauto",
        client: Optional[MongoClient] = None,
    ) -> None:
        if client is None:
            if not mongo_uri:
                raise ValueError("mongo_uri is required for MongoAdapter.")
            client = MongoClient(mongo_uri, appname="CohortAuto")

        self._client = client
        self._db = self._client[db_name]

        self._users: Collection = self._db["users"]
        self._cohorts: Collection = self._db["cohorts"]
        self._members: Collection = self._db["cohort_members"]
        self._config: Collection = self._db["config"]

        self._ensure_indexes()

    def _ensure_indexes(self) -> None:
        index_specs = [
            (self._users, [("username", ASCENDING)], {"name": "idx_users_username"}),
            (self._cohorts, [("contextId", ASCENDING), ("component", ASCENDING)], {"name": "idx_cohorts_context_component"}),
            (self._cohorts, [("name", ASCENDING)], {"name": "idx_cohorts_name"}),
            (self._members, [("cohortId", ASCENDING), ("userId", ASCENDING)], {"unique": True, "name": "idx_members_cohort_user"}),
            (self._members, [("userId", ASCENDING)], {"name": "idx_members_user"}),
            (self._config, [("component", ASCENDING), ("name", ASCENDING)], {"unique": True, "name": "idx_config_component_name"}),
        ]

        for collection, keys, options in index_specs:
            try:
                collection.create_index(keys, **options)
            except OperationFailure as exc:
                if exc.code == 85:  # IndexOptionsConflict
                    continue
                raise

    @staticmethod
    def _normalize_user(doc: Dict[str, Any]) -> Dict[str, Any]:
        user = dict(doc)
        user["id"] = str(user.pop("_id"))
        return expand_custom_fields(user)

    @staticmethod
    def _normalize_cohort(doc: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(doc.get("_id")),
            "name": doc.get("name"),
            "description": doc.get("description"),
            "contextId": doc.get("contextId"),
            "component": doc.get("component"),
        }

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        doc = self._users.find_one({"_id": user_id})
        if not doc:
            return None
        return self._normalize_user(doc)

    def list_users(self) -> List[Dict[str, Any]]:
        cursor = self._users.find().sort("_id", ASCENDING)
        return [self._normalize_user(doc) for doc in cursor]

    def list_groups(self, context_id: str, component: Optional[str] = None) -> List[Dict[str, Any]]:
        criteria: Dict[str, Any] = {"contextId": context_id}
        if component is not None:
            criteria["component"] = component
        cursor = self._cohorts.find(criteria).sort("createdAt", ASCENDING)
        return [self._normalize_cohort(doc) for doc in cursor]

    def create_group(
        self,
        name: str,
        description: str,
        context_id: str,
        component: Optional[str] = None,
    ) -> str:
        cohort_doc = {
            "_id": f"c_{uuid.uuid4().hex}",
            "name": name,
            "idnumber": "",
            "description": description,
            "contextId": context_id,
            "component": component,
            "createdAt": dt.datetime.utcnow(),
        }
        self._cohorts.insert_one(cohort_doc)
        return cohort_doc["_id"]

    def is_member(self, group_id: str, user_id: str) -> bool:
        return self._members.find_one({"cohortId": group_id, "userId": user_id}) is not None

    def add_member(self, group_id: str, user_id: str) -> None:
        self._members.update_one(
            {"cohortId": group_id, "userId": user_id},
            {"$setOnInsert": {"addedAt": dt.datetime.utcnow()}},
            upsert=True,
        )

    def remove_member(self, group_id: str, user_id: str) -> None:
        self._members.delete_one({"cohortId": group_id, "userId": user_id})

    def list_user_groups(self, user_id: str, component: str) -> List[str]:
        cohort_ids = self._members.distinct("cohortId", {"userId": user_id})
        if not cohort_ids:
            return []
        cursor = self._cohorts.find({"_id": {"$in": cohort_ids}, "component": component}, {"_id": 1})
        return sorted(str(doc["_id"]) for doc in cursor)

    def group_members(self, group_id: str) -> List[str]:
        return sorted(self._members.distinct("userId", {"cohortId": group_id}))

    def get_config(self, component: str) -> Dict[str, Any]:
        cursor = self._config.find({"component": component})
        return {doc["name"]: doc.get("value") for doc in cursor}

    def set_config(self, component: str, key: str, value: Any) -> None:
        self._config.update_one(
            {"component": component, "name": key},
            {"$set": {"value": value, "updatedAt": dt.datetime.utcnow()}},
            upsert=True,
        )

    def upsert_user(self, user: Dict[str, Any]) -> None:
        doc = dict(user)
        user_id = str(doc.pop("id"))
        self._users.update_one({"_id": user_id}, {"$set": doc}, upsert=True)

    def close(self) -> None:
        self._client.close()
