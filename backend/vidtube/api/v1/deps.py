import uuid

import jwt  # PyJWT
from fastapi import Header, Request
from vidtube.core.errors import AuthError
from vidtube.core.security import decode_access_token
from vidtube.models.user import User

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    This dependency extracts and validates the access token from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    Raises:
        AuthError (401): If no token is provided
        AuthError (401): If token is invalid or expired
        AuthError (401): If the token's user no longer exists

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": str(user.id)}
    """
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get(ACCESS_COOKIE)

    if not token:
        raise AuthError("Unauthorized request")

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload.get("id")))
    except (jwt.InvalidTokenError, ValueError):
        raise AuthError("Invalid access token") from None

    user = await User.get_or_none(id=user_id)
    if not user:
        raise AuthError("Invalid access token")
    return user
