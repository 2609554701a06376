"""JWT token revocation using a Redis blacklist.

Tokens are revoked on logout, and every token of a user is revoked when an
admin deactivates that user. Entries live until the token's natural expiry.
Lookups fail closed: if Redis is unreachable the token counts as revoked.
"""

import logging
import time

from app.utils.redis_client import get_redis

logger = logging.getLogger(__name__)


class TokenRevocation:
    """Manage JWT token revocation with Redis."""

    @staticmethod
    async def revoke_token(token: str, expires_at: float) -> bool:
        """Blacklist `token` until `expires_at` (unix timestamp)."""
        ttl = int(expires_at - time.time())
        if ttl <= 0:
            # already expired
            return True

        redis_client = await get_redis()
        try:
            await redis_client.setex(f"revoked:{token}", ttl, str(int(time.time())))
            return True
        except Exception as e:
            logger.error(f"Failed to revoke token: {e}")
            return False

    @staticmethod
    async def is_revoked(token: str) -> bool:
        redis_client = await get_redis()
        try:
            return await redis_client.exists(f"revoked:{token}") > 0
        except Exception as e:
            logger.error(f"Failed to check token revocation: {e}")
            return True

    @staticmethod
    async def revoke_all_user_tokens(user_id: str, duration: int | None = None) -> bool:
        """Revoke every outstanding token of a user.

        `duration` defaults to the refresh-token lifetime so no token issued
        before the call can outlive the flag.
        """
        from app.config import settings

        ttl = duration or settings.refresh_token_expire_days * 86400
        redis_client = await get_redis()
        try:
            await redis_client.setex(f"revoked:user:{user_id}", ttl, str(int(time.time())))
            return True
        except Exception as e:
            logger.error(f"Failed to revoke user tokens: {e}")
            return False

    @staticmethod
    async def is_user_revoked(user_id: str) -> bool:
        redis_client = await get_redis()
        try:
            return await redis_client.exists(f"revoked:user:{user_id}") > 0
        except Exception as e:
            logger.error(f"Failed to check user revocation: {e}")
            return True
