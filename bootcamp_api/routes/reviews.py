# bootcamp_api/routes/reviews.py
from fastapi import APIRouter, Depends, Request

from bootcamp_api.core.exceptions import NotFoundError
from bootcamp_api.dependencies import DbDep
from bootcamp_api.middleware.rbac import authorize, ensure_owner
from bootcamp_api.models.bootcamp import find_bootcamp_by_id
from bootcamp_api.models.review import REVIEW_FIELD_TYPES, find_review_by_id, find_reviews_by_bootcamp
from bootcamp_api.schemas.review import ReviewCreate, ReviewUpdate
from bootcamp_api.services import review_service
from bootcamp_api.utils.advanced_results import Populate, advanced_results, populate_documents
from bootcamp_api.utils.documents import serialize

review_router = APIRouter(tags=["Reviews"])

REVIEW_BOOTCAMP = Populate(field="bootcamp", collection="bootcamps", select=("name", "description"))

user_or_admin = authorize("user", "admin")


async def load_review(db, review_id: str) -> dict:
    review = await find_review_by_id(db, review_id)
    if not review:
        raise NotFoundError(f"No review found with the id of {review_id}")
    return review


@review_router.get("/reviews")
async def get_reviews(request: Request, db: DbDep):
    return await advanced_results(
        db, "reviews", request.query_params, populate=REVIEW_BOOTCAMP, field_types=REVIEW_FIELD_TYPES
    )


@review_router.get("/bootcamps/{bootcamp_id}/reviews")
async def get_bootcamp_reviews(bootcamp_id: str, db: DbDep):
    reviews = await find_reviews_by_bootcamp(db, bootcamp_id)
    return {"success": True, "count": len(reviews), "data": serialize(reviews)}


@review_router.get("/reviews/{review_id}")
async def get_review(review_id: str, db: DbDep):
    review = await load_review(db, review_id)
    [review] = await populate_documents(db, [review], REVIEW_BOOTCAMP)
    return {"success": True, "data": serialize(review)}


@review_router.post("/bootcamps/{bootcamp_id}/reviews", status_code=201)
async def add_review(
    bootcamp_id: str,
    payload: ReviewCreate,
    db: DbDep,
    user: dict = Depends(user_or_admin),
):
    bootcamp = await find_bootcamp_by_id(db, bootcamp_id)
    if not bootcamp:
        raise NotFoundError(f"No bootcamp found with the id of {bootcamp_id}")

    review = await review_service.create_review(db, bootcamp, payload, user)
    return {"success": True, "data": serialize(review)}


@review_router.put("/reviews/{review_id}")
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    db: DbDep,
    user: dict = Depends(user_or_admin),
):
    review = await load_review(db, review_id)
    ensure_owner(review, user, "update this review")
    review = await review_service.update_review(db, review, payload)
    return {"success": True, "data": serialize(review)}


@review_router.delete("/reviews/{review_id}")
async def delete_review(review_id: str, db: DbDep, user: dict = Depends(user_or_admin)):
    review = await load_review(db, review_id)
    ensure_owner(review, user, "delete this review")
    await review_service.remove_review(db, review)
    return {"success": True, "data": {}}
