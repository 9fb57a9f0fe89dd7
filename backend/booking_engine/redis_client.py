from typing import Optional

from redis import Redis


def create_redis_client(redis_url: Optional[str]) -> Optional[Redis]:
    """Redis client for events and reservation locks; None when not configured."""
    if not redis_url:
        return None
    return Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
