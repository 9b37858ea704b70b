# bootcamp_api/routes/auth.py
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from bootcamp_api.core.config import Settings
from bootcamp_api.core.exceptions import BadRequestError, ErrorResponse, NotFoundError, UnauthorizedError
from bootcamp_api.dependencies import DbDep, SettingsDep
from bootcamp_api.middleware.rbac import TOKEN_COOKIE, protect
from bootcamp_api.models.user import (
    create_user,
    find_user_by_email,
    find_user_by_reset_token,
    update_user,
)
from bootcamp_api.schemas.user import (
    ForgotPasswordSchema,
    LoginSchema,
    RegisterSchema,
    ResetPasswordSchema,
    UpdateDetailsSchema,
    UpdatePasswordSchema,
)
from bootcamp_api.utils.auth_utils import create_access_token, generate_reset_token, hash_reset_token
from bootcamp_api.utils.documents import serialize
from bootcamp_api.utils.email_utils import reset_password_body, send_email
from bootcamp_api.utils.hash_utils import hash_password, verify_password

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])

RESET_FIELDS = ("resetPasswordToken", "resetPasswordExpire")


def send_token_response(user: dict, settings: Settings, status_code: int = 200) -> JSONResponse:
    """Sign a token for ``user`` and return it in the body and as an HTTP-only cookie."""
    token = create_access_token(str(user["_id"]), settings)
    response = JSONResponse(status_code=status_code, content={"success": True, "token": token})
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.JWT_COOKIE_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
    )
    return response


@auth_router.post("/register")
async def register(data: RegisterSchema, db: DbDep, settings: SettingsDep):
    user_data = data.to_document()
    user_data["password"] = hash_password(data.password)
    # duplicate emails surface as DuplicateKeyError from the unique index
    user = await create_user(db, user_data)
    logger.info("Registered %s as %s", user["email"], user["role"])
    return send_token_response(user, settings)


@auth_router.post("/login")
async def login(data: LoginSchema, db: DbDep, settings: SettingsDep):
    if not data.email or not data.password:
        raise BadRequestError("Please provide an email and password")

    user = await find_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.get("password", "")):
        raise UnauthorizedError("Invalid credentials")

    return send_token_response(user, settings)


@auth_router.get("/logout")
async def logout(settings: SettingsDep):
    response = JSONResponse(content={"success": True, "data": {}})
    response.set_cookie(TOKEN_COOKIE, "none", max_age=10, httponly=True, secure=settings.is_production)
    return response


@auth_router.get("/me")
async def get_me(user: dict = Depends(protect)):
    return {"success": True, "data": serialize(user)}


@auth_router.put("/updatedetails")
async def update_details(data: UpdateDetailsSchema, db: DbDep, user: dict = Depends(protect)):
    updated = await update_user(db, user["_id"], data.to_document(partial=True))
    return {"success": True, "data": serialize(updated)}


@auth_router.put("/updatepassword")
async def update_password(
    data: UpdatePasswordSchema,
    db: DbDep,
    settings: SettingsDep,
    user: dict = Depends(protect),
):
    if not verify_password(data.current_password, user.get("password", "")):
        raise UnauthorizedError("Password is incorrect")

    updated = await update_user(db, user["_id"], {"password": hash_password(data.new_password)})
    return send_token_response(updated, settings)


@auth_router.post("/forgotpassword")
async def forgot_password(data: ForgotPasswordSchema, request: Request, db: DbDep, settings: SettingsDep):
    user = await find_user_by_email(db, data.email)
    if not user:
        raise NotFoundError("There is no user with that email")

    token, hashed, expires_at = generate_reset_token()
    await update_user(db, user["_id"], {"resetPasswordToken": hashed, "resetPasswordExpire": expires_at})

    reset_url = f"{str(request.base_url).rstrip('/')}/api/v1/auth/resetpassword/{token}"
    body = reset_password_body(reset_url)

    try:
        await run_in_threadpool(send_email, user["email"], "Password reset token", body, settings)
    except Exception as e:
        logger.error("Sending reset email to %s failed: %s", user["email"], e)
        await update_user(db, user["_id"], {}, unset=RESET_FIELDS)
        raise ErrorResponse("Email could not be sent", 500) from e

    return {"success": True, "data": "Email sent"}


@auth_router.put("/resetpassword/{reset_token}")
async def reset_password(reset_token: str, data: ResetPasswordSchema, db: DbDep, settings: SettingsDep):
    user = await find_user_by_reset_token(db, hash_reset_token(reset_token))
    if not user:
        raise BadRequestError("Invalid token")

    updated = await update_user(
        db,
        user["_id"],
        {"password": hash_password(data.password)},
        unset=RESET_FIELDS,
    )
    return send_token_response(updated, settings)
