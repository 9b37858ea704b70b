# bootcamp_api/services/bootcamp_service.py
# Bootcamp business logic: derived fields (slug, geocoded location), the one
# bootcamp per publisher rule, cascading delete, radius search and photos.

import logging
import os
from pathlib import Path

from fastapi import UploadFile
from pymongo.errors import DuplicateKeyError
from starlette.concurrency import run_in_threadpool

from bootcamp_api.core.config import Settings
from bootcamp_api.core.exceptions import BadRequestError, ErrorResponse, OwnerLimitError
from bootcamp_api.database import Database
from bootcamp_api.middleware.rbac import is_admin
from bootcamp_api.models.bootcamp import (
    delete_bootcamp,
    find_bootcamp_by_owner,
    find_bootcamps_within,
    insert_bootcamp,
    update_bootcamp_fields,
)
from bootcamp_api.models.course import delete_courses_by_bootcamp
from bootcamp_api.models.review import delete_reviews_by_bootcamp
from bootcamp_api.schemas.bootcamp import BootcampCreate, BootcampUpdate
from bootcamp_api.utils.geocoder import Geocoder
from bootcamp_api.utils.slug import slugify

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6378


def derive_slug(name: str) -> str:
    return slugify(name)


async def geocode_address(geocoder: Geocoder, address: str) -> dict:
    result = await geocoder.geocode(address)
    return result.to_location()


async def create_bootcamp(db: Database, geocoder: Geocoder, payload: BootcampCreate, user: dict) -> dict:
    """
    Publish a bootcamp owned by ``user``.

    Non-admins may own a single bootcamp. The pre-check gives the usual error
    message; the partial unique index on ``user`` settles concurrent creates.
    """
    admin = is_admin(user)
    if not admin and await find_bootcamp_by_owner(db, user["_id"]):
        raise OwnerLimitError(str(user["_id"]))

    data = payload.to_document()
    address = data.pop("address")
    data["slug"] = derive_slug(data["name"])
    data["location"] = await geocode_address(geocoder, address)
    data["user"] = user["_id"]
    data["singleOwner"] = not admin

    try:
        bootcamp = await insert_bootcamp(db, data)
    except DuplicateKeyError as e:
        if (e.details or {}).get("keyPattern") == {"user": 1}:
            raise OwnerLimitError(str(user["_id"])) from e
        raise

    logger.info("Bootcamp %s (%s) created by %s", bootcamp["_id"], bootcamp["slug"], user["_id"])
    return bootcamp


async def update_bootcamp(db: Database, geocoder: Geocoder, bootcamp: dict, payload: BootcampUpdate) -> dict:
    fields = payload.to_document(partial=True)
    address = fields.pop("address", None)
    if "name" in fields:
        fields["slug"] = derive_slug(fields["name"])
    if address:
        fields["location"] = await geocode_address(geocoder, address)
    return await update_bootcamp_fields(db, bootcamp["_id"], fields)


async def delete_bootcamp_cascade(db: Database, bootcamp: dict) -> None:
    """Remove a bootcamp together with its courses and reviews."""
    bootcamp_id = bootcamp["_id"]

    if db.use_transactions:
        async with await db.client.start_session() as session:
            async with session.start_transaction():
                await delete_courses_by_bootcamp(db, bootcamp_id, session=session)
                await delete_reviews_by_bootcamp(db, bootcamp_id, session=session)
                await delete_bootcamp(db, bootcamp_id, session=session)
        logger.info("Deleted bootcamp %s and its children in one transaction", bootcamp_id)
        return

    # Children go first so an interrupted delete never leaves orphans;
    # repeating the call finishes the job.
    courses = await delete_courses_by_bootcamp(db, bootcamp_id)
    reviews = await delete_reviews_by_bootcamp(db, bootcamp_id)
    await delete_bootcamp(db, bootcamp_id)
    logger.info("Deleted bootcamp %s with %s courses and %s reviews", bootcamp_id, courses, reviews)


async def find_in_radius(db: Database, geocoder: Geocoder, zipcode: str, distance: float) -> list[dict]:
    """Bootcamps within ``distance`` km of the zipcode's center."""
    center = await geocoder.geocode(zipcode)
    radius = distance / EARTH_RADIUS_KM
    return await find_bootcamps_within(db, center.longitude, center.latitude, radius)


def _write_file(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)


async def upload_photo(db: Database, bootcamp: dict, file: UploadFile | None, settings: Settings) -> str:
    if file is None or not file.filename:
        raise BadRequestError("Please upload a file")

    if not (file.content_type or "").startswith("image"):
        raise BadRequestError("Please upload an image file")

    content = await file.read(settings.MAX_FILE_UPLOAD + 1)
    if len(content) > settings.MAX_FILE_UPLOAD:
        raise BadRequestError(f"Please upload an image less than {settings.MAX_FILE_UPLOAD} bytes")

    ext = os.path.splitext(file.filename)[1]
    filename = f"photo_{bootcamp['_id']}{ext}"
    target = Path(settings.FILE_UPLOAD_PATH) / filename

    try:
        await run_in_threadpool(_write_file, target, content)
    except OSError as e:
        logger.error("Writing %s failed: %s", target, e)
        raise ErrorResponse("Problem with file upload", 500) from e

    await update_bootcamp_fields(db, bootcamp["_id"], {"photo": filename})
    logger.info("Stored photo %s for bootcamp %s", filename, bootcamp["_id"])
    return filename
