# bootcamp_api/routes/bootcamps.py
from fastapi import APIRouter, Depends, File, Path, Request, UploadFile

from bootcamp_api.core.exceptions import NotFoundError
from bootcamp_api.dependencies import DbDep, GeocoderDep, SettingsDep
from bootcamp_api.middleware.rbac import authorize, ensure_owner
from bootcamp_api.models.bootcamp import BOOTCAMP_FIELD_TYPES, find_bootcamp_by_id
from bootcamp_api.schemas.bootcamp import BootcampCreate, BootcampUpdate
from bootcamp_api.services import bootcamp_service
from bootcamp_api.utils.advanced_results import Populate, advanced_results
from bootcamp_api.utils.documents import serialize

bootcamp_router = APIRouter(prefix="/bootcamps", tags=["Bootcamps"])

BOOTCAMP_COURSES = Populate(field="courses", collection="courses", reverse=True, foreign_field="bootcamp")

publisher_or_admin = authorize("publisher", "admin")


async def load_bootcamp(db, bootcamp_id: str) -> dict:
    bootcamp = await find_bootcamp_by_id(db, bootcamp_id)
    if not bootcamp:
        raise NotFoundError(f"Bootcamp not found with id of {bootcamp_id}")
    return bootcamp


# Public: list bootcamps (filter, select, sort, paginate; courses populated)
@bootcamp_router.get("")
async def get_bootcamps(request: Request, db: DbDep):
    return await advanced_results(
        db, "bootcamps", request.query_params, populate=BOOTCAMP_COURSES, field_types=BOOTCAMP_FIELD_TYPES
    )


# Public: bootcamps within `distance` km of a zipcode
@bootcamp_router.get("/radius/{zipcode}/{distance}")
async def get_bootcamps_in_radius(
    zipcode: str,
    db: DbDep,
    geocoder: GeocoderDep,
    distance: float = Path(..., gt=0, description="Radius in kilometres"),
):
    bootcamps = await bootcamp_service.find_in_radius(db, geocoder, zipcode, distance)
    return {"success": True, "count": len(bootcamps), "data": serialize(bootcamps)}


@bootcamp_router.get("/{bootcamp_id}")
async def get_bootcamp(bootcamp_id: str, db: DbDep):
    bootcamp = await load_bootcamp(db, bootcamp_id)
    return {"success": True, "data": serialize(bootcamp)}


@bootcamp_router.post("", status_code=201)
async def create_bootcamp(
    payload: BootcampCreate,
    db: DbDep,
    geocoder: GeocoderDep,
    user: dict = Depends(publisher_or_admin),
):
    bootcamp = await bootcamp_service.create_bootcamp(db, geocoder, payload, user)
    return {"success": True, "data": serialize(bootcamp)}


@bootcamp_router.put("/{bootcamp_id}")
async def update_bootcamp(
    bootcamp_id: str,
    payload: BootcampUpdate,
    db: DbDep,
    geocoder: GeocoderDep,
    user: dict = Depends(publisher_or_admin),
):
    bootcamp = await load_bootcamp(db, bootcamp_id)
    ensure_owner(bootcamp, user, "update this bootcamp")
    bootcamp = await bootcamp_service.update_bootcamp(db, geocoder, bootcamp, payload)
    return {"success": True, "data": serialize(bootcamp)}


@bootcamp_router.delete("/{bootcamp_id}")
async def delete_bootcamp(bootcamp_id: str, db: DbDep, user: dict = Depends(publisher_or_admin)):
    bootcamp = await load_bootcamp(db, bootcamp_id)
    ensure_owner(bootcamp, user, "delete this bootcamp")
    await bootcamp_service.delete_bootcamp_cascade(db, bootcamp)
    return {"success": True, "data": {}}


@bootcamp_router.put("/{bootcamp_id}/photo")
async def bootcamp_photo_upload(
    bootcamp_id: str,
    db: DbDep,
    settings: SettingsDep,
    file: UploadFile | None = File(None),
    user: dict = Depends(publisher_or_admin),
):
    bootcamp = await load_bootcamp(db, bootcamp_id)
    ensure_owner(bootcamp, user, "update this bootcamp")
    filename = await bootcamp_service.upload_photo(db, bootcamp, file, settings)
    return {"success": True, "data": filename}
