# vidtube/services/subscriptions.py
"""
Subscription graph: directed subscriber -> channel edges between users.
"""
import logging

from tortoise.exceptions import IntegrityError

from vidtube.core.errors import ValidationError
from vidtube.models.subscription import Subscription

logger = logging.getLogger("uvicorn.error")


class SubscriptionGraph:
    """Edge existence and count queries over subscriptions."""

    async def edge_exists(self, subscriber_id, channel_id) -> bool:
        if subscriber_id is None or channel_id is None:
            return False
        return await Subscription.filter(subscriber_id=subscriber_id, channel_id=channel_id).exists()

    async def subscriber_count(self, channel_id) -> int:
        return await Subscription.filter(channel_id=channel_id).count()

    async def subscribed_to_count(self, user_id) -> int:
        return await Subscription.filter(subscriber_id=user_id).count()

    async def subscribe(self, subscriber_id, channel_id) -> bool:
        """
        Add the subscriber -> channel edge.

        Idempotent: returns False if the edge already existed.

        Raises:
            ValidationError: subscribing to yourself
        """
        if str(subscriber_id) == str(channel_id):
            raise ValidationError("You cannot subscribe to your own channel")
        if await self.edge_exists(subscriber_id, channel_id):
            return False
        try:
            await Subscription.create(subscriber_id=subscriber_id, channel_id=channel_id)
        except IntegrityError:
            # Concurrent subscribe already created the edge
            return False
        logger.info("[subscriptions] %s subscribed to %s", subscriber_id, channel_id)
        return True

    async def unsubscribe(self, subscriber_id, channel_id) -> bool:
        """Remove the edge; returns False if there was none."""
        deleted = await Subscription.filter(subscriber_id=subscriber_id, channel_id=channel_id).delete()
        if deleted:
            logger.info("[subscriptions] %s unsubscribed from %s", subscriber_id, channel_id)
        return bool(deleted)


# Create singleton instance
subscription_graph = SubscriptionGraph()
