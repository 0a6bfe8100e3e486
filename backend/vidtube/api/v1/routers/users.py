# vidtube/api/v1/routers/users.py
from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from vidtube.api.v1.deps import ACCESS_COOKIE, REFRESH_COOKIE, get_current_user
from vidtube.config import settings
from vidtube.core.errors import NotFoundError, ValidationError, require_fields
from vidtube.models.user import User
from vidtube.schemas.user import (
    ChangePasswordIn,
    LoginIn,
    LoginOut,
    PublicUser,
    RefreshIn,
    TokenPair,
    UpdateUserIn,
    WatchHistoryOut,
)
from vidtube.services import (
    MediaStorage,
    credential_store,
    get_media_storage,
    profile_aggregator,
    session_manager,
    subscription_graph,
)

router = APIRouter(prefix="/users", tags=["users"])


def _ok(data, message: str = "OK", status_code: int = status.HTTP_200_OK) -> dict:
    return {"success": True, "statusCode": status_code, "message": message, "data": data}


def _set_token_cookies(response: Response, pair: TokenPair) -> None:
    """Deliver both tokens as httpOnly cookies (secure/samesite from settings)."""
    for name, value in ((ACCESS_COOKIE, pair.accessToken), (REFRESH_COOKIE, pair.refreshToken)):
        response.set_cookie(
            name,
            value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


def _clear_token_cookies(response: Response) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


async def _get_channel(username: str) -> User:
    channel = await User.get_or_none(username=User.normalize_username(username))
    if not channel:
        raise NotFoundError("Channel does not exist")
    return channel


async def _read_upload(file: UploadFile | None) -> tuple[str, bytes] | None:
    """Return (filename, content) or None for a missing/empty upload."""
    if file is None:
        return None
    data = await file.read()
    if not data:
        return None
    return file.filename or "", data


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    username: str | None = Form(default=None),
    email: str | None = Form(default=None),
    password: str | None = Form(default=None),
    fullName: str | None = Form(default=None),
    avatar: UploadFile | None = File(default=None),
    coverImage: UploadFile | None = File(default=None),
    storage: MediaStorage = Depends(get_media_storage),
):
    """
    Register a new user account (multipart form).

    Text fields and username/email availability are checked before
    anything is uploaded, so a rejected request stores no files.

    Returns:
        201 with the public user

    Error kinds:
        - ValidationError (400): empty field or missing avatar
        - ConflictError (409): username or email already registered
    """
    require_fields(username=username, email=email, fullName=fullName, password=password)
    avatar_file = await _read_upload(avatar)
    if avatar_file is None:
        raise ValidationError("Avatar file is required", errors=[{"field": "avatar", "message": "required"}])
    await credential_store.ensure_available(username, email)

    avatar_url = await storage.upload(*avatar_file)
    cover_file = await _read_upload(coverImage)
    cover_url = await storage.upload(*cover_file) if cover_file else None

    user = await credential_store.register(
        username=username,
        email=email,
        full_name=fullName,
        password=password,
        avatar_url=avatar_url,
        cover_image_url=cover_url,
    )
    return _ok(user.model_dump(), "User registered successfully", status.HTTP_201_CREATED)


@router.post("/login")
async def login(payload: LoginIn, response: Response):
    """
    Authenticate with username or email plus password.

    Both tokens are returned in the body and set as httpOnly cookies.
    """
    pair, user = await session_manager.login(payload.username, payload.email, payload.password)
    _set_token_cookies(response, pair)
    out = LoginOut(user=user, accessToken=pair.accessToken, refreshToken=pair.refreshToken)
    return _ok(out.model_dump(), "User logged in successfully")


@router.post("/logout")
async def logout(response: Response, user: User = Depends(get_current_user)):
    """Revoke the stored refresh token and clear both cookies."""
    await session_manager.revoke(user.id)
    _clear_token_cookies(response)
    return _ok({}, "User logged out")


@router.post("/refresh-token")
async def refresh_token(request: Request, response: Response, body: RefreshIn | None = None):
    """
    Rotate the token pair.

    The refresh token is read from the refreshToken cookie, or from the
    JSON body when no cookie is present.
    """
    presented = request.cookies.get(REFRESH_COOKIE) or (body.refreshToken if body else None)
    pair = await session_manager.rotate(presented)
    _set_token_cookies(response, pair)
    return _ok(pair.model_dump(), "Access token refreshed")


@router.post("/change-password")
async def change_password(body: ChangePasswordIn, user: User = Depends(get_current_user)):
    await credential_store.update_password(user.id, body.oldPassword, body.newPassword)
    return _ok({}, "Password changed successfully")


@router.get("/get-user")
async def get_user(user: User = Depends(get_current_user)):
    return _ok(PublicUser.from_model(user).model_dump(), "Current user fetched successfully")


@router.patch("/update-user")
async def update_user(body: UpdateUserIn, user: User = Depends(get_current_user)):
    updated = await credential_store.update_profile(user.id, body.fullName, body.email)
    return _ok(updated.model_dump(), "Account details updated successfully")


@router.patch("/update-avatar")
async def update_avatar(
    avatar: UploadFile | None = File(default=None),
    user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_media_storage),
):
    upload = await _read_upload(avatar)
    if upload is None:
        raise ValidationError("Avatar file is missing")
    updated = await credential_store.update_avatar(user.id, await storage.upload(*upload))
    return _ok(updated.model_dump(), "Avatar updated successfully")


@router.patch("/update-coverImage")
async def update_cover_image(
    coverImage: UploadFile | None = File(default=None),
    user: User = Depends(get_current_user),
    storage: MediaStorage = Depends(get_media_storage),
):
    upload = await _read_upload(coverImage)
    if upload is None:
        raise ValidationError("Cover image file is missing")
    updated = await credential_store.update_cover_image(user.id, await storage.upload(*upload))
    return _ok(updated.model_dump(), "Cover image updated successfully")


@router.get("/c/{username}")
async def channel_profile(username: str, user: User = Depends(get_current_user)):
    """Channel profile of `username` as seen by the current user."""
    profile = await profile_aggregator.channel_profile(username, viewer_id=user.id)
    return _ok(profile.model_dump(), "User channel fetched successfully")


@router.post("/c/{username}/subscribe")
async def subscribe(username: str, user: User = Depends(get_current_user)):
    channel = await _get_channel(username)
    created = await subscription_graph.subscribe(user.id, channel.id)
    return _ok({"subscribed": True, "created": created}, "Subscribed")


@router.delete("/c/{username}/subscribe")
async def unsubscribe(username: str, user: User = Depends(get_current_user)):
    channel = await _get_channel(username)
    removed = await subscription_graph.unsubscribe(user.id, channel.id)
    return _ok({"subscribed": False, "removed": removed}, "Unsubscribed")


@router.get("/history")
async def watch_history(user: User = Depends(get_current_user)):
    items = await profile_aggregator.watch_history(user.id)
    return _ok(WatchHistoryOut(items=items).model_dump(), "Watch history fetched successfully")
