# backend/routers/auth_router.py
from fastapi import APIRouter, Depends, Request

from routers.deps import get_user_store, respond, require_session
from schemas.common import StoreResult
from schemas.users import RegisterPayload, LoginPayload
from services.user_store import UserStore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
def register(body: RegisterPayload, store: UserStore = Depends(get_user_store)):
    return respond(store.create_user(body), success_status=201)


@router.post("/login")
def login(body: LoginPayload, request: Request, store: UserStore = Depends(get_user_store)):
    # identifier may be a username or an email
    result = store.authenticate_user(body.identifier, body.password)
    if result.success:
        request.session["user_id"] = result.data.id
        request.session["role"] = result.data.role
    return respond(result)


@router.post("/logout")
def logout(request: Request):
    if not request.session:
        return respond(StoreResult.ok("No active session."))
    request.session.clear()
    return respond(StoreResult.ok("Logout successful."))


@router.get("/me")
def me(user_id: int = Depends(require_session), store: UserStore = Depends(get_user_store)):
    return respond(store.get_user_profile(user_id))
