# bootcamp_api/models/review.py
from datetime import datetime, timezone

from pymongo import ReturnDocument

from bootcamp_api.database import Database
from bootcamp_api.utils.documents import parse_datetime, to_object_id

REVIEW_FIELD_TYPES = {
    "_id": to_object_id,
    "bootcamp": to_object_id,
    "user": to_object_id,
    "rating": float,
    "createdAt": parse_datetime,
}


async def find_review_by_id(db: Database, review_id):
    return await db.reviews.find_one({"_id": to_object_id(review_id)})


async def find_reviews_by_bootcamp(db: Database, bootcamp_id) -> list[dict]:
    return await db.reviews.find({"bootcamp": to_object_id(bootcamp_id)}).to_list(length=None)


async def insert_review(db: Database, data: dict) -> dict:
    doc = {**data, "createdAt": datetime.now(timezone.utc)}
    result = await db.reviews.insert_one(doc)
    doc["_id"] = result.inserted_id
    return doc


async def update_review_fields(db: Database, review_id, fields: dict):
    if not fields:
        return await find_review_by_id(db, review_id)
    return await db.reviews.find_one_and_update(
        {"_id": to_object_id(review_id)},
        {"$set": fields},
        return_document=ReturnDocument.AFTER,
    )


async def delete_review(db: Database, review_id) -> int:
    result = await db.reviews.delete_one({"_id": to_object_id(review_id)})
    return result.deleted_count


async def delete_reviews_by_bootcamp(db: Database, bootcamp_id, session=None) -> int:
    result = await db.reviews.delete_many({"bootcamp": to_object_id(bootcamp_id)}, session=session)
    return result.deleted_count


async def average_rating(db: Database, bootcamp_id) -> float | None:
    pipeline = [
        {"$match": {"bootcamp": to_object_id(bootcamp_id)}},
        {"$group": {"_id": "$bootcamp", "averageRating": {"$avg": "$rating"}}},
    ]
    result = await db.reviews.aggregate(pipeline).to_list(length=1)
    return result[0]["averageRating"] if result else None
