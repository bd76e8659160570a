"""
Event storage backed by the MongoDB 'events' collection.
"""
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional
from pymongo import ReturnDocument
from pymongo.database import Database

from api.errors import InvalidPayloadError
from api.media import MediaStorage
from api.user_service import parse_object_id
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100
# Keeps skip() within BSON's int64 range
MAX_PAGE = 1_000_000
EVENT_FIELDS = ("location", "eventName", "date")


def as_utc(value):
    """Stored dates are naive UTC; mark them so clients do not read local time"""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def serialize_event(event: dict) -> dict:
    """Convert MongoDB event doc into JSON-serializable dict for clients."""
    user_id = event.get("userId")
    event_date = event.get("date")
    return {
        "id": str(event["_id"]),
        "userId": str(user_id) if user_id is not None else None,
        "location": event.get("location"),
        "eventName": event.get("eventName"),
        "date": as_utc(event_date),
        "photos": list(event.get("photos") or []),
        "videos": list(event.get("videos") or []),
    }


class EventService:
    def __init__(self, db: Database, media: MediaStorage, update_policy: str = "append"):
        self.db = db
        self.media = media
        self.update_policy = update_policy

    async def list_events(self, page: int = 1, limit: int = 10) -> dict:
        """Get one page of events along with pagination details"""
        page = min(MAX_PAGE, max(1, page))
        limit = min(MAX_PAGE_SIZE, max(1, limit))

        total = self.db.events.count_documents({})
        cursor = self.db.events.find().sort("_id", 1).skip((page - 1) * limit).limit(limit)
        return {
            "events": [serialize_event(e) for e in cursor],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit) if total else 0,
            },
        }

    async def get_event(self, event_id: str) -> Optional[dict]:
        """Get a specific event; unknown and malformed ids both yield None"""
        oid = parse_object_id(event_id)
        if oid is None:
            return None
        event = self.db.events.find_one({"_id": oid})
        return serialize_event(event) if event else None

    async def list_events_by_user(self, user_id: str) -> Optional[List[dict]]:
        """All events owned by a user, or None when there are none"""
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        events = [serialize_event(e) for e in self.db.events.find({"userId": oid}).sort("_id", 1)]
        return events or None

    async def create_event(self, fields: dict, media: Dict[str, List[str]]) -> dict:
        """Store a new event with already ingested media paths"""
        user_id = fields.get("userId")
        owner = parse_object_id(user_id) if user_id else None
        if user_id and owner is None:
            raise InvalidPayloadError(f"Invalid userId: {user_id}")

        event_doc = {
            "userId": owner,
            "location": fields.get("location"),
            "eventName": fields.get("eventName"),
            "date": fields.get("date"),
            "photos": list(media.get("photos") or []),
            "videos": list(media.get("videos") or []),
        }
        result = self.db.events.insert_one(event_doc)
        event_doc["_id"] = result.inserted_id
        logger.info(
            f"Event stored with ID: {result.inserted_id} "
            f"({len(event_doc['photos'])} photos, {len(event_doc['videos'])} videos)"
        )
        return serialize_event(event_doc)

    async def update_event(self, event_id: str, fields: dict, media: Dict[str, List[str]]) -> Optional[dict]:
        """Update an event using the configured media policy; None if it does not exist"""
        oid = parse_object_id(event_id)
        if oid is None:
            return None
        existing = self.db.events.find_one({"_id": oid})
        if existing is None:
            return None

        if self.update_policy == "replace":
            updated = self._replace(oid, existing, fields, media)
        else:
            updated = self._append(oid, fields, media)

        if updated is None:
            return None
        logger.info(f"Event {event_id} updated ({self.update_policy} policy)")
        return serialize_event(updated)

    def _append(self, oid, fields: dict, media: Dict[str, List[str]]) -> Optional[dict]:
        # Provided fields overwrite, new media goes after the existing entries
        update = {}
        changes = {k: fields[k] for k in EVENT_FIELDS if fields.get(k) is not None}
        if changes:
            update["$set"] = changes
        pushes = {k: {"$each": media[k]} for k in ("photos", "videos") if media.get(k)}
        if pushes:
            update["$push"] = pushes

        if not update:
            return self.db.events.find_one({"_id": oid})
        return self.db.events.find_one_and_update(
            {"_id": oid}, update, return_document=ReturnDocument.AFTER
        )

    def _replace(self, oid, existing: dict, fields: dict, media: Dict[str, List[str]]) -> Optional[dict]:
        # Falsy values leave a field untouched; media lists are swapped wholesale
        changes = {k: fields[k] for k in EVENT_FIELDS if fields.get(k)}
        changes["photos"] = list(media.get("photos") or [])
        changes["videos"] = list(media.get("videos") or [])

        updated = self.db.events.find_one_and_update(
            {"_id": oid}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        if updated is None:
            return None

        kept = set(changes["photos"]) | set(changes["videos"])
        previous = [p for p in (existing.get("photos") or []) + (existing.get("videos") or []) if p not in kept]
        if previous:
            removed = self.media.delete(previous)
            logger.info(f"Removed {removed} previous media file(s) for event {oid}")
        return updated


def get_event_service(db: Database, media: MediaStorage, update_policy: str = "append") -> EventService:
    """Build an event service bound to the request's database"""
    return EventService(db, media, update_policy)
