"""배치 메타데이터 저장용 Redis 클라이언트 (프로세스당 1개, 지연 생성)"""

import logging

import redis

from headshot.config import get_settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.Redis.from_url(get_settings().redis_url, decode_responses=True)
    return _client


def set_redis(client: redis.Redis | None) -> None:
    """클라이언트 교체 (테스트에서 fakeredis 주입용)"""
    global _client
    _client = client


def close_redis() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def is_redis_available() -> bool:
    """/health 용 연결 확인. 실패 사유는 로그로만 남김"""
    try:
        return bool(get_redis().ping())
    except redis.RedisError as e:
        logger.warning(f"Redis 연결 확인 실패: {e}")
        return False
