# bootcamp_api/main.py
#
# Usage:
#   uvicorn bootcamp_api.main:app --reload
#   python -m bootcamp_api.main

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from bootcamp_api.core.config import Settings, settings as default_settings
from bootcamp_api.core.exceptions import register_exception_handlers
from bootcamp_api.database import Database, create_client
from bootcamp_api.middleware.logger import add_security_headers, log_requests
from bootcamp_api.routes.auth import auth_router
from bootcamp_api.routes.bootcamps import bootcamp_router
from bootcamp_api.routes.courses import course_router
from bootcamp_api.routes.reviews import review_router
from bootcamp_api.routes.users import user_router
from bootcamp_api.utils.geocoder import Geocoder

logging.basicConfig(
    level=logging.DEBUG if default_settings.is_development else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    created_db = created_geocoder = False

    if app.state.db is None:
        app.state.db = Database(
            create_client(settings),
            settings.MONGO_DB_NAME,
            use_transactions=settings.MONGO_TRANSACTIONS,
        )
        created_db = True
        try:
            await app.state.db.ping()
            await app.state.db.ensure_indexes()
            logger.info("✅ MongoDB connected successfully.")
        except Exception as e:
            logger.error("❌ MongoDB connection failed: %s", e)

    if app.state.geocoder is None:
        app.state.geocoder = Geocoder.from_settings(settings)
        created_geocoder = True

    logger.info("Server running in %s mode on port %s", settings.ENVIRONMENT, settings.API_PORT)

    yield

    if created_geocoder:
        await app.state.geocoder.aclose()
    if created_db:
        app.state.db.close()
    logger.info("Shut down")


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    geocoder: Geocoder | None = None,
) -> FastAPI:
    """
    Build the API.

    ``database`` and ``geocoder`` are created in the lifespan unless passed
    in, which is how tests run the app without MongoDB or network access.
    """
    settings = settings or default_settings

    app = FastAPI(title="DevCamper API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database
    app.state.geocoder = geocoder

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT],
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    app.state.limiter = limiter

    # Middleware runs in reverse order of registration
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(add_security_headers)
    if settings.is_development:
        app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(bootcamp_router, prefix=API_PREFIX)
    app.include_router(course_router, prefix=API_PREFIX)
    app.include_router(review_router, prefix=API_PREFIX)
    app.include_router(user_router, prefix=API_PREFIX)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.FILE_UPLOAD_PATH, check_dir=False),
        name="uploads",
    )

    @app.get("/")
    async def root():
        return {"message": "Welcome to the DevCamper API"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bootcamp_api.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
        reload=default_settings.is_development,
    )
