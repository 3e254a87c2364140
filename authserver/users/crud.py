from typing import Optional, Dict, Any
from datetime import datetime, timezone


async def get_by_email(db, email: str) -> Optional[Dict[str, Any]]:
    return await db.users.find_one({"email": email})


async def get_by_id(db, user_id: str) -> Optional[Dict[str, Any]]:
    # _id is a uuid4 string, not an ObjectId
    return await db.users.find_one({"_id": user_id}, {"password_hash": 0})


async def insert_user(
    db,
    user_id: str,
    email: str,
    password_hash: str,
    full_name: Optional[str] = None,
) -> Dict[str, Any]:
    now = datetime.now(timezone.utc).isoformat()
    doc: Dict[str, Any] = {
        "_id": user_id,
        "email": email,
        "password_hash": password_hash,
        "full_name": full_name,
        "created_at": now,
        "updated_at": now,
    }
    await db.users.insert_one(doc)
    return doc


def public_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    """The slice of a user document that is safe to send to clients."""
    return {
        "user_id": user["_id"],
        "email": user["email"],
        "full_name": user.get("full_name"),
        "created_at": user.get("created_at"),
    }
