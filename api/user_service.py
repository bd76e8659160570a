"""
User storage backed by the MongoDB 'users' collection.
"""
from typing import Dict, List, Optional
from pymongo import ReturnDocument
from pymongo.database import Database
from bson import ObjectId

from api.models import UserCreate
from api.security import hash_password
from utils.logger import get_logger

logger = get_logger(__name__)

# Fields exposed to API clients; the password hash never leaves the store
PUBLIC_PROJECTION = {"name": 1, "email": 1, "role": 1}
MUTABLE_FIELDS = ("name", "email", "password", "role")


def parse_object_id(value) -> Optional[ObjectId]:
    """Return an ObjectId for value, or None if it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize_user(user: dict) -> dict:
    """Convert MongoDB user doc into JSON-serializable dict for clients."""
    return {
        "id": str(user["_id"]),
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role") or "user",
    }


class UserService:
    def __init__(self, db: Database):
        self.db = db

    async def list_users(self) -> List[dict]:
        """Get all users without their password hashes"""
        return [serialize_user(u) for u in self.db.users.find({}, PUBLIC_PROJECTION)]

    async def get_user(self, user_id: str) -> Optional[dict]:
        """Get a user by id; unknown and malformed ids both yield None"""
        oid = parse_object_id(user_id)
        if oid is None:
            return None
        user = self.db.users.find_one({"_id": oid}, PUBLIC_PROJECTION)
        return serialize_user(user) if user else None

    async def get_user_by_email(self, email: str) -> Optional[Dict]:
        """Raw user document, password hash included, for credential checks"""
        return self.db.users.find_one({"email": email})

    async def create_user(self, user_data: UserCreate) -> dict:
        """Store a new user with a hashed password"""
        user_doc = {
            "name": user_data.name,
            "email": user_data.email,
            "password": hash_password(user_data.password),
            "role": user_data.role or "user",
        }
        result = self.db.users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        logger.info(f"User created with ID: {result.inserted_id}")
        return serialize_user(user_doc)

    async def update_user(self, user_id: str, updates: dict) -> Optional[dict]:
        """Replace the given fields of a user; None if the id does not resolve"""
        oid = parse_object_id(user_id)
        if oid is None:
            return None

        changes = {k: v for k, v in updates.items() if k in MUTABLE_FIELDS and v is not None}
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])

        if not changes:
            return await self.get_user(user_id)

        user = self.db.users.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            projection=PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if user is None:
            return None
        logger.info(f"User {user_id} updated: {', '.join(sorted(changes))}")
        return serialize_user(user)


def get_user_service(db: Database) -> UserService:
    """Build a user service bound to the request's database"""
    return UserService(db)
