# bootcamp_api/seeder.py
#
# Usage:
#   python -m bootcamp_api.seeder -i     import the JSON fixtures in _data/
#   python -m bootcamp_api.seeder -d     delete every user, bootcamp, course and review

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from bootcamp_api.core.config import Settings, settings as default_settings
from bootcamp_api.database import Database, create_client
from bootcamp_api.services.bootcamp_service import derive_slug, geocode_address
from bootcamp_api.services.course_service import update_average_cost
from bootcamp_api.services.review_service import update_average_rating
from bootcamp_api.utils.documents import to_object_id
from bootcamp_api.utils.geocoder import Geocoder
from bootcamp_api.utils.hash_utils import hash_password

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "_data"
REFERENCE_FIELDS = ("_id", "user", "bootcamp")


def load_fixture(data_dir: Path, name: str) -> list[dict]:
    with open(data_dir / f"{name}.json", encoding="utf-8") as fh:
        docs = json.load(fh)
    now = datetime.now(timezone.utc)
    for doc in docs:
        for field in REFERENCE_FIELDS:
            if field in doc:
                doc[field] = to_object_id(doc[field])
        doc.setdefault("createdAt", now)
    return docs


async def prepare_bootcamps(bootcamps: list[dict], users: list[dict], geocoder: Geocoder) -> list[dict]:
    roles = {u["_id"]: u.get("role") for u in users}
    for bootcamp in bootcamps:
        bootcamp["slug"] = derive_slug(bootcamp["name"])
        bootcamp.setdefault("photo", "no-photo.jpg")
        address = bootcamp.pop("address", None)
        if "location" not in bootcamp and address:
            bootcamp["location"] = await geocode_address(geocoder, address)
        bootcamp["singleOwner"] = roles.get(bootcamp["user"]) != "admin"
    return bootcamps


async def import_data(db: Database, geocoder: Geocoder, data_dir: Path = DATA_DIR) -> None:
    users = load_fixture(data_dir, "users")
    for user in users:
        user["password"] = hash_password(user["password"])
    bootcamps = await prepare_bootcamps(load_fixture(data_dir, "bootcamps"), users, geocoder)
    courses = load_fixture(data_dir, "courses")
    reviews = load_fixture(data_dir, "reviews")

    await db.users.insert_many(users)
    await db.bootcamps.insert_many(bootcamps)
    if courses:
        await db.courses.insert_many(courses)
    if reviews:
        await db.reviews.insert_many(reviews)

    for bootcamp in bootcamps:
        await update_average_cost(db, bootcamp["_id"])
        await update_average_rating(db, bootcamp["_id"])

    logger.info(
        "Data imported: %d users, %d bootcamps, %d courses, %d reviews",
        len(users), len(bootcamps), len(courses), len(reviews),
    )


async def delete_data(db: Database) -> None:
    for collection in (db.courses, db.reviews, db.bootcamps, db.users):
        await collection.delete_many({})
    logger.info("Data destroyed")


async def run(args: argparse.Namespace, settings: Settings = default_settings) -> None:
    db = Database(create_client(settings), settings.MONGO_DB_NAME)
    geocoder = Geocoder.from_settings(settings)
    try:
        if args.import_data:
            await db.ensure_indexes()
            await import_data(db, geocoder, Path(args.data_dir))
        else:
            await delete_data(db)
    finally:
        await geocoder.aclose()
        db.close()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed or wipe the DevCamper database")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument("-i", "--import", dest="import_data", action="store_true", help="import fixtures")
    action.add_argument("-d", "--delete", dest="delete_data", action="store_true", help="delete all data")
    parser.add_argument("--data-dir", default=str(DATA_DIR), help="directory holding the JSON fixtures")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
