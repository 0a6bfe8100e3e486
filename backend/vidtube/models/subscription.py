# vidtube/models/subscription.py
"""
Database model for subscriptions.
A subscription is a directed edge: `subscriber` follows `channel`.
Both ends are users.
"""
import uuid
from tortoise import fields, models


class Subscription(models.Model):
    """
    Subscription edge.

    - subscriber: the user who is subscribing
    - channel: the user being subscribed to
    - (subscriber, channel) is unique, so an edge exists at most once
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    subscriber = fields.ForeignKeyField(
        "models.User", related_name="subscriptions", on_delete=fields.CASCADE
    )
    channel = fields.ForeignKeyField(
        "models.User", related_name="subscribers", on_delete=fields.CASCADE
    )
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "subscriptions"
        unique_together = (("subscriber", "channel"),)
