# bootcamp_api/routes/courses.py
from fastapi import APIRouter, Depends, Request

from bootcamp_api.core.exceptions import NotFoundError
from bootcamp_api.dependencies import DbDep
from bootcamp_api.middleware.rbac import authorize, ensure_owner
from bootcamp_api.models.bootcamp import find_bootcamp_by_id
from bootcamp_api.models.course import COURSE_FIELD_TYPES, find_course_by_id, find_courses_by_bootcamp
from bootcamp_api.schemas.course import CourseCreate, CourseUpdate
from bootcamp_api.services import course_service
from bootcamp_api.utils.advanced_results import Populate, advanced_results, populate_documents
from bootcamp_api.utils.documents import serialize

course_router = APIRouter(tags=["Courses"])

COURSE_BOOTCAMP = Populate(field="bootcamp", collection="bootcamps", select=("name", "description"))

publisher_or_admin = authorize("publisher", "admin")


async def load_course(db, course_id: str) -> dict:
    course = await find_course_by_id(db, course_id)
    if not course:
        raise NotFoundError(f"No course with the id of {course_id}")
    return course


@course_router.get("/courses")
async def get_courses(request: Request, db: DbDep):
    return await advanced_results(
        db, "courses", request.query_params, populate=COURSE_BOOTCAMP, field_types=COURSE_FIELD_TYPES
    )


@course_router.get("/bootcamps/{bootcamp_id}/courses")
async def get_bootcamp_courses(bootcamp_id: str, db: DbDep):
    courses = await find_courses_by_bootcamp(db, bootcamp_id)
    return {"success": True, "count": len(courses), "data": serialize(courses)}


@course_router.get("/courses/{course_id}")
async def get_course(course_id: str, db: DbDep):
    course = await load_course(db, course_id)
    [course] = await populate_documents(db, [course], COURSE_BOOTCAMP)
    return {"success": True, "data": serialize(course)}


@course_router.post("/bootcamps/{bootcamp_id}/courses", status_code=201)
async def add_course(
    bootcamp_id: str,
    payload: CourseCreate,
    db: DbDep,
    user: dict = Depends(publisher_or_admin),
):
    bootcamp = await find_bootcamp_by_id(db, bootcamp_id)
    if not bootcamp:
        raise NotFoundError(f"No bootcamp with the id of {bootcamp_id}")
    ensure_owner(bootcamp, user, f"add a course to bootcamp {bootcamp['_id']}")

    course = await course_service.create_course(db, bootcamp, payload, user)
    return {"success": True, "data": serialize(course)}


@course_router.put("/courses/{course_id}")
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    db: DbDep,
    user: dict = Depends(publisher_or_admin),
):
    course = await load_course(db, course_id)
    ensure_owner(course, user, f"update course {course['_id']}")
    course = await course_service.update_course(db, course, payload)
    return {"success": True, "data": serialize(course)}


@course_router.delete("/courses/{course_id}")
async def delete_course(course_id: str, db: DbDep, user: dict = Depends(publisher_or_admin)):
    course = await load_course(db, course_id)
    ensure_owner(course, user, f"delete course {course['_id']}")
    await course_service.remove_course(db, course)
    return {"success": True, "data": {}}
