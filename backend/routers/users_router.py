# backend/routers/users_router.py
from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from routers.deps import get_user_store, respond, require_session, require_admin
from schemas.common import StoreResult
from schemas.users import PasswordUpdate, UserDetailsUpdate, VerificationUpdate
from services.errors import StoreError
from services.image_storage import get_image_storage
from services.user_store import UserStore

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/by-username/{username}")
def get_by_username(username: str, store: UserStore = Depends(get_user_store)):
    return respond(store.get_user_by_username(username))


@router.get("/by-email/{email}")
def get_by_email(email: str, store: UserStore = Depends(get_user_store)):
    return respond(store.get_user_by_email(email))


@router.put("/me/password")
def change_password(
    body: PasswordUpdate,
    user_id: int = Depends(require_session),
    store: UserStore = Depends(get_user_store),
):
    return respond(store.update_password(user_id, body.current_password, body.new_password))


@router.put("/me/details")
def change_details(
    body: UserDetailsUpdate,
    user_id: int = Depends(require_session),
    store: UserStore = Depends(get_user_store),
):
    return respond(store.update_user_details(user_id, body))


@router.put("/me/profile-picture")
async def change_profile_picture(
    picture: UploadFile = File(...),
    user_id: int = Depends(require_session),
    store: UserStore = Depends(get_user_store),
    images=Depends(get_image_storage),
):
    try:
        saved = await images.save(await picture.read(), picture.filename, "profile", user_id)
    except StoreError as e:
        return respond(StoreResult.fail(e.kind, e.message))

    try:
        result = await run_in_threadpool(store.update_profile_picture, user_id, saved["url"])
    except Exception:
        await images.delete(saved["public_id"])
        raise
    if not result.success:
        await images.delete(saved["public_id"])
    return respond(result)


@router.put("/{user_id}/verification")
def set_verification(
    user_id: int,
    body: VerificationUpdate,
    _admin_id: int = Depends(require_admin),
    store: UserStore = Depends(get_user_store),
):
    return respond(store.update_verification_status(user_id, body.is_verified))


@router.get("/{user_id}")
def get_by_id(user_id: int, store: UserStore = Depends(get_user_store)):
    return respond(store.get_user_by_id(user_id))
