"""
Services Module

Core identity services and external collaborators:
- CredentialStore: registration, lookup, password and profile updates
- SessionTokenManager: access/refresh token issue, rotation, revocation
- SubscriptionGraph: subscriber -> channel edges
- ProfileAggregator: channel profile and watch history views
- MediaStorage: avatar / cover image upload
"""

from .credentials import CredentialStore, credential_store
from .sessions import SessionTokenManager, session_manager
from .subscriptions import SubscriptionGraph, subscription_graph
from .profiles import ProfileAggregator, profile_aggregator

from .storage_base import MediaStorage
from .storage_factory import get_media_storage

__all__ = [
    # Identity
    "CredentialStore",
    "credential_store",
    "SessionTokenManager",
    "session_manager",
    # Graph / views
    "SubscriptionGraph",
    "subscription_graph",
    "ProfileAggregator",
    "profile_aggregator",
    # Storage
    "MediaStorage",
    "get_media_storage",
]
