# bootcamp_api/models/bootcamp.py
from datetime import datetime, timezone

from pymongo import ReturnDocument

from bootcamp_api.database import Database
from bootcamp_api.utils.documents import parse_bool, parse_datetime, to_object_id

DEFAULT_PHOTO = "no-photo.jpg"

# query-string casts for list filters; fields not listed are matched as strings
BOOTCAMP_FIELD_TYPES = {
    "_id": to_object_id,
    "user": to_object_id,
    "averageCost": float,
    "averageRating": float,
    "housing": parse_bool,
    "jobAssistance": parse_bool,
    "jobGuarantee": parse_bool,
    "acceptGi": parse_bool,
    "createdAt": parse_datetime,
}


async def find_bootcamp_by_id(db: Database, bootcamp_id):
    return await db.bootcamps.find_one({"_id": to_object_id(bootcamp_id)})


async def find_bootcamp_by_owner(db: Database, user_id):
    return await db.bootcamps.find_one({"user": to_object_id(user_id)})


async def insert_bootcamp(db: Database, data: dict) -> dict:
    doc = {
        "photo": DEFAULT_PHOTO,
        **data,
        "createdAt": datetime.now(timezone.utc),
    }
    result = await db.bootcamps.insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


async def update_bootcamp_fields(db: Database, bootcamp_id, fields: dict, unset: tuple[str, ...] = ()):
    update = {}
    if fields:
        update["$set"] = fields
    if unset:
        update["$unset"] = {name: "" for name in unset}
    if not update:
        return await find_bootcamp_by_id(db, bootcamp_id)
    return await db.bootcamps.find_one_and_update(
        {"_id": to_object_id(bootcamp_id)},
        update,
        return_document=ReturnDocument.AFTER,
    )


async def delete_bootcamp(db: Database, bootcamp_id, session=None) -> int:
    result = await db.bootcamps.delete_one({"_id": to_object_id(bootcamp_id)}, session=session)
    return result.deleted_count


async def find_bootcamps_within(db: Database, longitude: float, latitude: float, radius: float) -> list[dict]:
    """Bootcamps whose location lies within ``radius`` radians of the point."""
    query = {
        "location": {
            "$geoWithin": {"$centerSphere": [[longitude, latitude], radius]}
        }
    }
    return await db.bootcamps.find(query).to_list(length=None)
