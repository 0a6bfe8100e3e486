# vidtube/models/user.py
"""
Database model for users.
A user is both an account (credentials, session) and a channel others can
subscribe to.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Videos (one-to-many, via related_name="videos")
    - Has many WatchHistory entries (ordered, via related_name="watch_history")
    - Subscriptions as subscriber ("subscriptions") and as channel ("subscribers")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username and email are unique; both stored lowercase and trimmed
    - At most one live refresh token per user (`refresh_token`)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    username = fields.CharField(
        max_length=64,
        unique=True,
        index=True
    )  # Login/channel name (unique, indexed for channel lookups)
    email = fields.CharField(max_length=256, unique=True)  # Email address (unique)
    password_hash = fields.CharField(max_length=255)  # Argon2 digest, never plain text
    full_name = fields.CharField(max_length=128, index=True)
    avatar_url = fields.CharField(max_length=1024)  # Required
    cover_image_url = fields.CharField(max_length=1024, null=True)  # Optional
    refresh_token = fields.TextField(null=True)  # Canonical copy of the current refresh token
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    @staticmethod
    def normalize_username(raw: str | None) -> str:
        return (raw or "").strip().lower()

    @staticmethod
    def normalize_email(raw: str | None) -> str:
        return (raw or "").strip().lower()
