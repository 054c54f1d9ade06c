"""Player identity for launching."""

from .offline import OfflineAuthenticator, offline_uuid

__all__ = ["OfflineAuthenticator", "offline_uuid"]
