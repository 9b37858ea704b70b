# bootcamp_api/routes/users.py
# Admin-only user management.

from fastapi import APIRouter, Depends, Request

from bootcamp_api.core.exceptions import NotFoundError
from bootcamp_api.dependencies import DbDep
from bootcamp_api.middleware.rbac import authorize
from bootcamp_api.models.user import USER_FIELD_TYPES, create_user, delete_user, find_user_by_id, update_user
from bootcamp_api.schemas.user import UserCreate, UserUpdate
from bootcamp_api.utils.advanced_results import advanced_results
from bootcamp_api.utils.documents import serialize
from bootcamp_api.utils.hash_utils import hash_password

user_router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(authorize("admin"))])


@user_router.get("")
async def get_users(request: Request, db: DbDep):
    return await advanced_results(db, "users", request.query_params, field_types=USER_FIELD_TYPES)


@user_router.get("/{user_id}")
async def get_user(user_id: str, db: DbDep):
    user = await find_user_by_id(db, user_id)
    if not user:
        raise NotFoundError(f"No user with the id of {user_id}")
    return {"success": True, "data": serialize(user)}


@user_router.post("", status_code=201)
async def add_user(data: UserCreate, db: DbDep):
    user_data = data.to_document()
    user_data["password"] = hash_password(data.password)
    user = await create_user(db, user_data)
    return {"success": True, "data": serialize(user)}


@user_router.put("/{user_id}")
async def edit_user(user_id: str, data: UserUpdate, db: DbDep):
    user = await update_user(db, user_id, data.to_document(partial=True))
    if not user:
        raise NotFoundError(f"No user with the id of {user_id}")
    return {"success": True, "data": serialize(user)}


@user_router.delete("/{user_id}")
async def remove_user(user_id: str, db: DbDep):
    if not await delete_user(db, user_id):
        raise NotFoundError(f"No user with the id of {user_id}")
    return {"success": True, "data": {}}
