# bootcamp_api/services/review_service.py
import logging

from bootcamp_api.database import Database
from bootcamp_api.models.bootcamp import update_bootcamp_fields
from bootcamp_api.models.review import (
    average_rating,
    delete_review,
    insert_review,
    update_review_fields,
)
from bootcamp_api.schemas.review import ReviewCreate, ReviewUpdate

logger = logging.getLogger(__name__)


async def update_average_rating(db: Database, bootcamp_id) -> None:
    """Recompute a bootcamp's averageRating from its reviews. Never raises."""
    try:
        average = await average_rating(db, bootcamp_id)
        if average is None:
            await update_bootcamp_fields(db, bootcamp_id, {}, unset=("averageRating",))
        else:
            await update_bootcamp_fields(db, bootcamp_id, {"averageRating": round(average, 1)})
    except Exception as e:
        logger.error("Failed to update average rating for bootcamp %s: %s", bootcamp_id, e)


async def create_review(db: Database, bootcamp: dict, payload: ReviewCreate, user: dict) -> dict:
    """A second review of the same bootcamp by the same user hits the unique index."""
    data = payload.to_document()
    data["bootcamp"] = bootcamp["_id"]
    data["user"] = user["_id"]
    review = await insert_review(db, data)
    await update_average_rating(db, bootcamp["_id"])
    return review


async def update_review(db: Database, review: dict, payload: ReviewUpdate) -> dict:
    updated = await update_review_fields(db, review["_id"], payload.to_document(partial=True))
    await update_average_rating(db, review["bootcamp"])
    return updated


async def remove_review(db: Database, review: dict) -> None:
    await delete_review(db, review["_id"])
    await update_average_rating(db, review["bootcamp"])
