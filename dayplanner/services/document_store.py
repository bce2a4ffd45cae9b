"""
Document store service for the day planner.

This service wraps all read/write operations for:
- Saved points (the "bookmarks" collection)
- Saved itinerary documents (the "plans" collection)

Assumptions:
- Every document carries the owning user's uid; all reads filter on it.
- Plans are written whole on save; there are no partial updates.
- Point ids and plan ids are generated here and used as the document _id.
"""

import uuid
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from dayplanner.models.itinerary import ItineraryDocument, Point


class DocumentStoreService:
    def __init__(self, db: Database):
        self.db = db
        self.bookmarks = db["bookmarks"]
        self.plans = db["plans"]

    # -------------------------
    # Utility
    # -------------------------
    def _new_id(self, prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4().hex[:10]}"

    def _now(self):
        return datetime.now(timezone.utc)

    def ensure_indexes(self):
        self.bookmarks.create_index([("uid", ASCENDING), ("name", ASCENDING)])
        self.plans.create_index([("uid", ASCENDING), ("createdAt", DESCENDING)])

    # -------------------------
    # Points (bookmarks)
    # -------------------------
    @staticmethod
    def _to_point(doc: Dict[str, Any]) -> Point:
        return Point(id=doc["_id"], name=doc["name"], lat=doc["lat"], lng=doc["lng"])

    def list_points(self, uid: str) -> List[Point]:
        cursor = self.bookmarks.find({"uid": uid}).sort("name", ASCENDING)
        return [self._to_point(d) for d in cursor]

    def get_point(self, uid: str, point_id: str) -> Optional[Point]:
        doc = self.bookmarks.find_one({"_id": point_id, "uid": uid})
        return self._to_point(doc) if doc else None

    def add_point(self, uid: str, name: str, lat: float, lng: float) -> Point:
        point_id = self._new_id("pt")
        self.bookmarks.insert_one({"_id": point_id, "uid": uid, "name": name, "lat": lat, "lng": lng})
        return Point(id=point_id, name=name, lat=lat, lng=lng)

    def delete_point(self, uid: str, point_id: str) -> bool:
        result = self.bookmarks.delete_one({"_id": point_id, "uid": uid})
        return result.deleted_count > 0

    # -------------------------
    # Plan Helpers
    # -------------------------
    def save_plan_for_user(self, uid: str, document: ItineraryDocument) -> str:
        plan_id = self._new_id("plan")

        plan_to_save = document.model_dump(exclude={"createdAt"})
        plan_to_save["_id"] = plan_id
        plan_to_save["uid"] = uid
        plan_to_save["planId"] = plan_id
        plan_to_save["createdAt"] = self._now()

        self.plans.insert_one(plan_to_save)
        return plan_id

    def get_plan_for_user(self, uid: str, plan_id: str) -> Optional[Dict[str, Any]]:
        return self.plans.find_one({"_id": plan_id, "uid": uid}, {"_id": 0, "uid": 0})

    def list_plans_for_user(self, uid: str, limit: int = 20) -> List[Dict[str, Any]]:
        cursor = (
            self.plans.find({"uid": uid}, {"_id": 0, "uid": 0})
            .sort("createdAt", DESCENDING)
            .limit(limit)
        )
        return list(cursor)
