import json

import redis

from piguard.config import REDIS_URL
from piguard.logger import logger

CHANNEL_NAME = "telemetry_updates"

redis_client = redis.Redis.from_url(REDIS_URL) if REDIS_URL else None

def publish_telemetry_event(resource: str, metadata: dict) -> bool:
    if redis_client is None:
        return False

    message = {
        "resource": resource,
        "metadata": metadata
    }
    try:
        redis_client.publish(CHANNEL_NAME, json.dumps(message))
    except redis.RedisError as e:
        logger.warning(f"Could not publish {resource} update: {str(e)}")
        return False
    return True

def subscribe():
    """Pub/sub handle on the telemetry channel, or None when Redis is unavailable."""
    if redis_client is None:
        return None
    try:
        pubsub = redis_client.pubsub()
        pubsub.subscribe(CHANNEL_NAME)
    except redis.RedisError as e:
        logger.warning(f"Redis not available: {str(e)}")
        return None
    return pubsub
