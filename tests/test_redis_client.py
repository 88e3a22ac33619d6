"""Tests for the Redis cache and rate limiting helpers."""

from unittest.mock import MagicMock

import redis

from clinic_booking.core.redis_client import CacheManager, RateLimiter


def test_cache_manager_get_json():
    """Test CacheManager get_json method."""
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    mock_redis.get.return_value = None
    assert cache_manager.get_json("session:abc") is None
    mock_redis.get.assert_called_once_with("session:abc")

    mock_redis.reset_mock()
    mock_redis.get.return_value = '{"kind": "patient", "patient_id": 1}'
    assert cache_manager.get_json("session:abc") == {"kind": "patient", "patient_id": 1}


def test_cache_manager_set_json_with_and_without_ttl():
    mock_redis = MagicMock()
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.set_json("catalog:branches", [{"id": 1}]) is True
    mock_redis.set.assert_called_once_with("catalog:branches", '[{"id": 1}]')

    assert cache_manager.set_json("session:abc", {"patient_id": 1}, ttl=300) is True
    mock_redis.setex.assert_called_once_with("session:abc", 300, '{"patient_id": 1}')


def test_cache_manager_touch_and_delete():
    mock_redis = MagicMock()
    mock_redis.expire.return_value = True
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.touch("session:abc", 60) is True
    mock_redis.expire.assert_called_once_with("session:abc", 60)

    assert cache_manager.delete("session:abc") is True
    mock_redis.delete.assert_called_once_with("session:abc")


def test_cache_manager_reports_redis_outage():
    """Connection errors surface as a failed write, not an exception."""
    mock_redis = MagicMock()
    mock_redis.setex.side_effect = redis.ConnectionError("down")
    mock_redis.get.side_effect = redis.ConnectionError("down")
    cache_manager = CacheManager(redis_client=mock_redis)

    assert cache_manager.set_json("session:abc", {}, ttl=60) is False
    assert cache_manager.get_json("session:abc") is None


def test_rate_limiter_counts_within_window():
    mock_redis = MagicMock()
    limiter = RateLimiter(mock_redis)

    mock_redis.incr.return_value = 1
    assert limiter.check_rate_limit("rate_limit:login:1.2.3.4", limit=3) is True
    mock_redis.expire.assert_called_once_with("rate_limit:login:1.2.3.4", 60)

    mock_redis.reset_mock()
    mock_redis.incr.return_value = 3
    assert limiter.check_rate_limit("rate_limit:login:1.2.3.4", limit=3) is True
    mock_redis.expire.assert_not_called()

    mock_redis.incr.return_value = 4
    assert limiter.check_rate_limit("rate_limit:login:1.2.3.4", limit=3) is False


def test_rate_limiter_fails_open():
    mock_redis = MagicMock()
    mock_redis.incr.side_effect = redis.ConnectionError("down")

    assert RateLimiter(mock_redis).check_rate_limit("rate_limit:login:x", limit=1) is True


def test_cache_manager_ignores_corrupt_value():
    mock_redis = MagicMock()
    mock_redis.get.return_value = "{not json"

    assert CacheManager(mock_redis).get_json("catalog:branches") is None
