# vidtube/models/video.py
"""
Database model for videos.
Videos are managed by the media side of the platform; the identity service
only reads them to join watch history back to their owners.
"""
import uuid
from tortoise import fields, models


class Video(models.Model):
    """
    Video database model.

    Relationships:
    - Belongs to a User (many-to-one, owner)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner = fields.ForeignKeyField(
        "models.User",
        related_name="videos",
        on_delete=fields.CASCADE
    )  # Channel that uploaded the video
    title = fields.CharField(max_length=256)
    description = fields.TextField(default="")
    video_url = fields.CharField(max_length=1024)
    thumbnail_url = fields.CharField(max_length=1024)
    duration_sec = fields.FloatField(default=0)
    views = fields.IntField(default=0)
    is_published = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "videos"
