# vidtube/services/sessions.py
"""
Session token manager.

Per user the session moves through:

    NoSession --issue/login--> Active(a_i, r_i) --rotate--> Active(a_i+1, r_i+1)
    Active --revoke--> NoSession

Only the refresh token is persisted (one per user). A refresh token is
accepted for rotation only while it equals the stored copy, so any token
superseded by a later rotation or by logout is dead.
"""
import logging
from typing import Optional

import jwt  # PyJWT

from vidtube.core.errors import AuthError, InternalError, NotFoundError, ValidationError
from vidtube.core.security import (
    UserClaims,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)
from vidtube.models.user import User
from vidtube.schemas.user import PublicUser, TokenPair
from vidtube.services.credentials import CredentialStore, credential_store

logger = logging.getLogger("uvicorn.error")


class SessionTokenManager:
    """Issues, rotates and revokes the access/refresh token pair."""

    def __init__(self, credentials: CredentialStore):
        self.credentials = credentials

    def _mint(self, user: User) -> TokenPair:
        try:
            return TokenPair(
                accessToken=create_access_token(UserClaims.from_user(user)),
                refreshToken=create_refresh_token(str(user.id)),
            )
        except Exception:
            logger.exception("[sessions] token generation failed for user id=%s", user.id)
            raise InternalError("Something went wrong while generating tokens")

    async def issue(self, user_id) -> TokenPair:
        """
        Mint a fresh pair and store its refresh token as the user's only one.

        Raises:
            NotFoundError: user id does not resolve
        """
        user = await self.credentials.get_user(user_id)
        pair = self._mint(user)
        await self.credentials.store_refresh_token(user.id, pair.refreshToken)
        logger.info("[sessions] issued tokens for user id=%s", user.id)
        return pair

    async def login(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> tuple[TokenPair, PublicUser]:
        """
        Verify credentials and open a session.

        Raises:
            ValidationError: no identifier or no password
            NotFoundError: no matching user
            AuthError: wrong password
        """
        if not (password or ""):
            raise ValidationError("password is required")
        user = await self.credentials.find_by_identifier(username=username, email=email)
        if not user:
            raise NotFoundError("User does not exist")
        if not await self.credentials.verify_password(user, password):
            logger.info("[sessions] failed login for user id=%s", user.id)
            raise AuthError("Invalid user credentials")

        pair = await self.issue(user.id)
        return pair, PublicUser.from_model(user)

    async def rotate(self, presented: Optional[str]) -> TokenPair:
        """
        Exchange the current refresh token for a new pair.

        Raises:
            AuthError: token missing, bad signature/expired, or not the stored one
            NotFoundError: token's user no longer exists
        """
        if not presented:
            raise AuthError("Unauthorized request")
        try:
            claims = decode_refresh_token(presented)
        except jwt.InvalidTokenError:
            raise AuthError("Invalid refresh token") from None

        user = await self.credentials.get_user(claims.get("id"))
        if user.refresh_token != presented:
            raise AuthError("Refresh token is expired or used")

        pair = self._mint(user)
        # Compare-and-set: of two concurrent rotations only one matches
        if not await self.credentials.swap_refresh_token(user.id, presented, pair.refreshToken):
            logger.info("[sessions] lost rotation race for user id=%s", user.id)
            raise AuthError("Refresh token is expired or used")

        logger.info("[sessions] rotated tokens for user id=%s", user.id)
        return pair

    async def revoke(self, user_id) -> None:
        await self.credentials.clear_refresh_token(user_id)
        logger.info("[sessions] revoked session for user id=%s", user_id)


# Create singleton instance
session_manager = SessionTokenManager(credential_store)
