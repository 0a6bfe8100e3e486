"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: Account, credentials and channel identity
- Video: Uploaded video (owned by a User)
- WatchHistory: Ordered watch history entry (User -> Video)
- Subscription: Directed subscriber -> channel edge
"""
from .user import User
from .video import Video
from .watch_history import WatchHistory
from .subscription import Subscription
