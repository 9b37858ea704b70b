# bootcamp_api/models/user.py
from datetime import datetime, timezone

from pymongo import ReturnDocument

from bootcamp_api.database import Database
from bootcamp_api.utils.documents import parse_datetime, to_object_id

USER_FIELD_TYPES = {
    "_id": to_object_id,
    "createdAt": parse_datetime,
}


async def find_user_by_id(db: Database, user_id):
    return await db.users.find_one({"_id": to_object_id(user_id)})


async def find_user_by_email(db: Database, email: str):
    return await db.users.find_one({"email": email})


async def find_user_by_reset_token(db: Database, hashed_token: str):
    return await db.users.find_one({
        "resetPasswordToken": hashed_token,
        "resetPasswordExpire": {"$gt": datetime.now(timezone.utc)},
    })


async def create_user(db: Database, data: dict) -> dict:
    """Insert a user; ``data["password"]`` must already be hashed."""
    doc = {**data, "createdAt": datetime.now(timezone.utc)}
    result = await db.users.insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


async def update_user(db: Database, user_id, fields: dict, unset: tuple[str, ...] = ()):
    update = {}
    if fields:
        update["$set"] = fields
    if unset:
        update["$unset"] = {name: "" for name in unset}
    if not update:
        return await find_user_by_id(db, user_id)
    return await db.users.find_one_and_update(
        {"_id": to_object_id(user_id)},
        update,
        return_document=ReturnDocument.AFTER,
    )


async def delete_user(db: Database, user_id) -> int:
    result = await db.users.delete_one({"_id": to_object_id(user_id)})
    return result.deleted_count
