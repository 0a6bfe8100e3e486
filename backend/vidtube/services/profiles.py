# vidtube/services/profiles.py
"""
Profile aggregator.

Builds read-time views that combine users with the subscription graph
and with watch history:
- channel profile: counts both directions of the graph plus a
  viewer-relative `isSubscribed` flag
- watch history: each watched video with its owner's public fields joined in

Both are explicit multi-step reads followed by an in-memory projection.
"""
import logging
from typing import Optional

from tortoise.exceptions import IntegrityError

from vidtube.core.errors import InternalError, NotFoundError, ValidationError
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.models.watch_history import WatchHistory
from vidtube.schemas.user import ChannelProfile, VideoOwner, WatchHistoryEntry
from vidtube.services.credentials import CredentialStore, credential_store, parse_id
from vidtube.services.subscriptions import SubscriptionGraph, subscription_graph

logger = logging.getLogger("uvicorn.error")

RECORD_WATCH_ATTEMPTS = 10


def _owner_projection(u: User) -> VideoOwner:
    return VideoOwner(
        fullName=u.full_name,
        username=u.username,
        email=u.email,
        avatarUrl=u.avatar_url,
    )


class ProfileAggregator:
    def __init__(self, credentials: CredentialStore, graph: SubscriptionGraph):
        self.credentials = credentials
        self.graph = graph

    async def channel_profile(self, channel_username: Optional[str], viewer_id=None) -> ChannelProfile:
        """
        Channel page for `channel_username` as seen by `viewer_id`.

        Raises:
            ValidationError: empty username
            NotFoundError: no such channel
        """
        username = User.normalize_username(channel_username)
        if not username:
            raise ValidationError("username is missing")

        channel = await User.get_or_none(username=username)
        if not channel:
            raise NotFoundError("Channel does not exist")

        subscribers = await self.graph.subscriber_count(channel.id)
        subscribed_to = await self.graph.subscribed_to_count(channel.id)
        is_subscribed = False
        if viewer_id is not None:
            is_subscribed = await self.graph.edge_exists(viewer_id, channel.id)

        return ChannelProfile(
            fullName=channel.full_name,
            username=channel.username,
            email=channel.email,
            subscribersCount=subscribers,
            channelsSubscribedToCount=subscribed_to,
            isSubscribed=is_subscribed,
            avatarUrl=channel.avatar_url,
            coverImageUrl=channel.cover_image_url,
        )

    async def watch_history(self, user_id) -> list[WatchHistoryEntry]:
        """
        Watched videos in watch order, each with its owner embedded.

        Raises:
            NotFoundError: user id does not resolve
        """
        user = await self.credentials.get_user(user_id)
        rows = await WatchHistory.filter(user_id=user.id).order_by("position", "id")
        if not rows:
            return []

        videos = await Video.filter(id__in=list({r.video_id for r in rows}))
        videos_by_id = {v.id: v for v in videos}

        owners_by_id: dict = {}
        for owner in await User.filter(id__in=list({v.owner_id for v in videos})):
            owners_by_id.setdefault(owner.id, owner)  # first match wins

        entries = []
        for r in rows:
            video = videos_by_id.get(r.video_id)
            owner = owners_by_id.get(video.owner_id) if video else None
            if video is None or owner is None:
                continue
            entries.append(WatchHistoryEntry(
                id=str(video.id),
                title=video.title,
                description=video.description,
                videoUrl=video.video_url,
                thumbnailUrl=video.thumbnail_url,
                durationSec=video.duration_sec,
                views=video.views,
                watchedAt=r.watched_at.isoformat() if r.watched_at else None,
                owner=_owner_projection(owner),
            ))
        return entries

    async def record_watch(self, user_id, video_id) -> None:
        """Append a video to the end of a user's watch history."""
        user = await self.credentials.get_user(user_id)
        video = await Video.get_or_none(id=parse_id(video_id, "Video"))
        if not video:
            raise NotFoundError("Video not found")

        # (user, position) is unique; a concurrent append that took the same
        # slot makes the insert fail, so re-read the tail and try again
        for _ in range(RECORD_WATCH_ATTEMPTS):
            last = await WatchHistory.filter(user_id=user.id).order_by("-position").first()
            position = (last.position + 1) if last else 0
            try:
                await WatchHistory.create(user_id=user.id, video_id=video.id, position=position)
                return
            except IntegrityError:
                logger.info("[profiles] history position %s taken for user id=%s, retrying", position, user.id)
        raise InternalError("Could not record watch history")


# Create singleton instance
profile_aggregator = ProfileAggregator(credential_store, subscription_graph)
