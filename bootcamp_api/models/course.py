# bootcamp_api/models/course.py
from datetime import datetime, timezone

from pymongo import ReturnDocument

from bootcamp_api.database import Database
from bootcamp_api.utils.documents import parse_bool, parse_datetime, to_object_id

COURSE_FIELD_TYPES = {
    "_id": to_object_id,
    "bootcamp": to_object_id,
    "user": to_object_id,
    "tuition": float,
    "scholarshipAvailable": parse_bool,
    "createdAt": parse_datetime,
}


async def find_course_by_id(db: Database, course_id):
    return await db.courses.find_one({"_id": to_object_id(course_id)})


async def find_courses_by_bootcamp(db: Database, bootcamp_id) -> list[dict]:
    return await db.courses.find({"bootcamp": to_object_id(bootcamp_id)}).to_list(length=None)


async def insert_course(db: Database, data: dict) -> dict:
    doc = {**data, "createdAt": datetime.now(timezone.utc)}
    result = await db.courses.insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


async def update_course_fields(db: Database, course_id, fields: dict):
    if not fields:
        return await find_course_by_id(db, course_id)
    return await db.courses.find_one_and_update(
        {"_id": to_object_id(course_id)},
        {"$set": fields},
        return_document=ReturnDocument.AFTER,
    )


async def delete_course(db: Database, course_id) -> int:
    result = await db.courses.delete_one({"_id": to_object_id(course_id)})
    return result.deleted_count


async def delete_courses_by_bootcamp(db: Database, bootcamp_id, session=None) -> int:
    result = await db.courses.delete_many({"bootcamp": to_object_id(bootcamp_id)}, session=session)
    return result.deleted_count


async def average_tuition(db: Database, bootcamp_id) -> float | None:
    pipeline = [
        {"$match": {"bootcamp": to_object_id(bootcamp_id)}},
        {"$group": {"_id": "$bootcamp", "averageCost": {"$avg": "$tuition"}}},
    ]
    result = await db.courses.aggregate(pipeline).to_list(length=1)
    return result[0]["averageCost"] if result else None
