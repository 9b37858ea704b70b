# bootcamp_api/services/course_service.py
import logging
import math

from bootcamp_api.database import Database
from bootcamp_api.models.bootcamp import update_bootcamp_fields
from bootcamp_api.models.course import (
    average_tuition,
    delete_course,
    insert_course,
    update_course_fields,
)
from bootcamp_api.schemas.course import CourseCreate, CourseUpdate

logger = logging.getLogger(__name__)


def round_up_cost(average: float) -> int:
    """Round an average tuition up to the next multiple of 10."""
    return int(math.ceil(average / 10) * 10)


async def update_average_cost(db: Database, bootcamp_id) -> None:
    """Recompute a bootcamp's averageCost from its courses. Never raises."""
    try:
        average = await average_tuition(db, bootcamp_id)
        if average is None:
            await update_bootcamp_fields(db, bootcamp_id, {}, unset=("averageCost",))
        else:
            await update_bootcamp_fields(db, bootcamp_id, {"averageCost": round_up_cost(average)})
    except Exception as e:
        logger.error("Failed to update average cost for bootcamp %s: %s", bootcamp_id, e)


async def create_course(db: Database, bootcamp: dict, payload: CourseCreate, user: dict) -> dict:
    data = payload.to_document()
    data["bootcamp"] = bootcamp["_id"]
    data["user"] = user["_id"]
    course = await insert_course(db, data)
    await update_average_cost(db, bootcamp["_id"])
    return course


async def update_course(db: Database, course: dict, payload: CourseUpdate) -> dict:
    updated = await update_course_fields(db, course["_id"], payload.to_document(partial=True))
    await update_average_cost(db, course["bootcamp"])
    return updated


async def remove_course(db: Database, course: dict) -> None:
    await delete_course(db, course["_id"])
    await update_average_cost(db, course["bootcamp"])
