# bootcamp_api/database.py
import logging

import certifi
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, GEOSPHERE

from bootcamp_api.core.config import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> AsyncIOMotorClient:
    if settings.MONGO_TLS:
        return AsyncIOMotorClient(settings.MONGO_URL, tlsCAFile=certifi.where(), tz_aware=True)
    return AsyncIOMotorClient(settings.MONGO_URL, tz_aware=True)


class Database:
    """
    The collections the API works with, bound to one explicitly constructed
    client. An instance lives on ``app.state.db`` and reaches handlers
    through the ``get_db`` dependency.
    """

    def __init__(self, client: AsyncIOMotorClient, name: str, use_transactions: bool = False):
        self.client = client
        self.db: AsyncIOMotorDatabase = client[name]
        self.use_transactions = use_transactions

    @property
    def users(self):
        return self.db["users"]

    @property
    def bootcamps(self):
        return self.db["bootcamps"]

    @property
    def courses(self):
        return self.db["courses"]

    @property
    def reviews(self):
        return self.db["reviews"]

    async def ping(self) -> dict:
        return await self.client.admin.command("ping")

    async def ensure_indexes(self) -> None:
        await self.users.create_index("email", unique=True)
        await self.bootcamps.create_index("name", unique=True)
        await self.bootcamps.create_index([("location", GEOSPHERE)])
        # one bootcamp per non-admin owner; admins' bootcamps carry singleOwner=False
        await self.bootcamps.create_index(
            "user",
            unique=True,
            partialFilterExpression={"singleOwner": True},
            name="single_owner_per_user",
        )
        await self.courses.create_index("bootcamp")
        await self.reviews.create_index(
            [("bootcamp", ASCENDING), ("user", ASCENDING)],
            unique=True,
        )
        logger.info("MongoDB indexes ensured")

    def close(self) -> None:
        self.client.close()
