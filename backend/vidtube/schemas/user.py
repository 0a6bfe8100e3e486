# vidtube/schemas/user.py
"""
Pydantic schemas for user, session and channel endpoints.
Response models are projections: password digest and refresh token are
never fields here, so they cannot leak into a response.
"""
from typing import Optional, List
from pydantic import BaseModel


# ========== Requests ==========
class LoginIn(BaseModel):
    """
    Login credentials.
    One of username/email plus the password. Missing values are reported
    as ValidationError by the service rather than as a schema error.
    """
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshIn(BaseModel):
    refreshToken: Optional[str] = None  # Falls back to the refreshToken cookie


class ChangePasswordIn(BaseModel):
    oldPassword: Optional[str] = None
    newPassword: Optional[str] = None


class UpdateUserIn(BaseModel):
    fullName: Optional[str] = None
    email: Optional[str] = None


# ========== Responses ==========
class PublicUser(BaseModel):
    """
    Public view of a user.
    Excludes password digest and refresh token by construction.
    """
    id: str
    username: str
    email: str
    fullName: str
    avatarUrl: str
    coverImageUrl: Optional[str] = None
    createdAt: Optional[str] = None  # ISO format
    updatedAt: Optional[str] = None  # ISO format

    @classmethod
    def from_model(cls, u) -> "PublicUser":
        return cls(
            id=str(u.id),
            username=u.username,
            email=u.email,
            fullName=u.full_name,
            avatarUrl=u.avatar_url,
            coverImageUrl=u.cover_image_url,
            createdAt=u.created_at.isoformat() if u.created_at else None,
            updatedAt=u.updated_at.isoformat() if u.updated_at else None,
        )


class TokenPair(BaseModel):
    accessToken: str  # Short-lived, never persisted
    refreshToken: str  # Long-lived, canonical copy stored on the user


class LoginOut(BaseModel):
    user: PublicUser
    accessToken: str
    refreshToken: str


class ChannelProfile(BaseModel):
    """
    Channel page view of a user, relative to the viewer.
    """
    fullName: str
    username: str
    email: str
    subscribersCount: int  # Edges where channel == this user
    channelsSubscribedToCount: int  # Edges where subscriber == this user
    isSubscribed: bool  # Viewer -> channel edge exists
    avatarUrl: str
    coverImageUrl: Optional[str] = None


class VideoOwner(BaseModel):
    """Owner projection embedded in each watch history entry."""
    fullName: str
    username: str
    email: str
    avatarUrl: str


class WatchHistoryEntry(BaseModel):
    id: str  # Video id
    title: str
    description: str
    videoUrl: str
    thumbnailUrl: str
    durationSec: float
    views: int
    watchedAt: Optional[str] = None  # ISO format
    owner: VideoOwner


class WatchHistoryOut(BaseModel):
    items: List[WatchHistoryEntry]  # Oldest first, in watch order
