"""Offline player identity for Minecraft."""

import hashlib
import uuid
from typing import Dict, Any

from ..errors import AuthenticationError


def offline_uuid(username: str) -> str:
    """UUID the game itself derives for an offline player name."""
    digest = hashlib.md5(f"OfflinePlayer:{username}".encode('utf-8')).digest()
    return uuid.UUID(bytes=digest, version=3).hex


class OfflineAuthenticator:
    """Offline mode authenticator with username only."""

    @staticmethod
    async def authenticate(username: str) -> Dict[str, Any]:
        """Build an offline profile for the given username."""
        if not username or len(username) > 16:
            raise AuthenticationError(f"Invalid username for offline mode: {username!r} (1 to 16 characters)")
        
        return {
            "id": offline_uuid(username),
            "name": username,
            "type": "offline",
            "access_token": "0"  # No token needed
        }
