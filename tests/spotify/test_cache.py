"""Tests for the response cache backends."""

import json
import pytest
from unittest.mock import Mock
import redis

from spotinote.schemas.descriptors import AlbumDescriptor, TrackDescriptor, build_descriptor
from spotinote.spotify.cache import DEFAULT_TTL, InMemoryResponseCache, RedisResponseCache


@pytest.fixture
def descriptor():
    return TrackDescriptor(id="4iV5W9uYEdYUVa79Axb7Rh")


class TestInMemoryResponseCache:
    """Tests for the process-local cache."""

    def test_default_ttl_is_five_minutes(self):
        assert InMemoryResponseCache().ttl == DEFAULT_TTL == 300

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            InMemoryResponseCache(ttl=0)

    def test_miss_returns_none(self, descriptor):
        assert InMemoryResponseCache().get(descriptor) is None

    def test_put_then_get(self, descriptor, clock):
        cache = InMemoryResponseCache(clock=clock)
        cache.put(descriptor, {"name": "Song"})

        assert cache.get(descriptor) == {"name": "Song"}

    def test_entry_valid_just_before_ttl(self, descriptor, clock):
        cache = InMemoryResponseCache(ttl=300, clock=clock)
        cache.put(descriptor, {"name": "Song"})

        clock.advance(299)

        assert cache.get(descriptor) == {"name": "Song"}

    def test_entry_expires_at_ttl(self, descriptor, clock):
        cache = InMemoryResponseCache(ttl=300, clock=clock)
        cache.put(descriptor, {"name": "Song"})

        clock.advance(300)

        assert cache.get(descriptor) is None

    def test_put_supersedes_expired_entry(self, descriptor, clock):
        cache = InMemoryResponseCache(ttl=300, clock=clock)
        cache.put(descriptor, {"v": 1})
        clock.advance(400)
        cache.put(descriptor, {"v": 2})

        assert cache.get(descriptor) == {"v": 2}
        assert len(cache) == 1

    def test_equivalent_descriptors_share_entry(self):
        cache = InMemoryResponseCache()
        first = build_descriptor({"content_type": "album", "id": "abc", "layout": "list"})
        second = build_descriptor({"layout": "list", "id": "abc", "content_type": "album"})
        cache.put(first, {"name": "Album"})

        assert cache.get(second) == {"name": "Album"}

    def test_different_descriptors_do_not_collide(self, descriptor):
        cache = InMemoryResponseCache()
        cache.put(descriptor, {"kind": "track"})

        assert cache.get(AlbumDescriptor(id=descriptor.id)) is None

    def test_mutating_result_does_not_change_cache(self, descriptor):
        cache = InMemoryResponseCache()
        payload = {"artists": [{"name": "A"}]}
        cache.put(descriptor, payload)

        payload["artists"].append({"name": "B"})
        result = cache.get(descriptor)
        result["artists"].clear()

        assert cache.get(descriptor) == {"artists": [{"name": "A"}]}

    def test_clear_empties_cache(self, descriptor):
        cache = InMemoryResponseCache()
        cache.put(descriptor, {"name": "Song"})

        cache.clear()

        assert len(cache) == 0
        assert cache.get(descriptor) is None

    def test_stats_count_hits_and_misses(self, descriptor):
        cache = InMemoryResponseCache()
        cache.get(descriptor)
        cache.put(descriptor, {})
        cache.get(descriptor)

        assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1}


class TestRedisResponseCache:
    """Tests for the Redis-backed cache."""

    def test_make_key_uses_prefix_and_cache_key(self, descriptor):
        cache = RedisResponseCache(Mock(spec=redis.Redis), key_prefix="custom:")

        assert cache._make_key(descriptor) == f"custom:{descriptor.cache_key()}"

    def test_put_uses_setex_with_ttl(self, descriptor):
        mock_redis = Mock(spec=redis.Redis)
        cache = RedisResponseCache(mock_redis, ttl=120)

        cache.put(descriptor, {"name": "Song"})

        mock_redis.setex.assert_called_once_with(
            cache._make_key(descriptor), 120, json.dumps({"name": "Song"}).encode("utf-8")
        )

    def test_get_hit_deserializes(self, descriptor):
        mock_redis = Mock(spec=redis.Redis)
        mock_redis.get.return_value = b'{"name": "Song"}'
        cache = RedisResponseCache(mock_redis)

        assert cache.get(descriptor) == {"name": "Song"}

    def test_get_miss_returns_none(self, descriptor):
        mock_redis = Mock(spec=redis.Redis)
        mock_redis.get.return_value = None

        assert RedisResponseCache(mock_redis).get(descriptor) is None

    def test_get_redis_error_is_a_miss(self, descriptor):
        mock_redis = Mock(spec=redis.Redis)
        mock_redis.get.side_effect = redis.ConnectionError("down")

        assert RedisResponseCache(mock_redis).get(descriptor) is None

    def test_put_redis_error_is_swallowed(self, descriptor):
        mock_redis = Mock(spec=redis.Redis)
        mock_redis.setex.side_effect = redis.ConnectionError("down")

        RedisResponseCache(mock_redis).put(descriptor, {"name": "Song"})

    def test_redis_errors_log_lazily(self, descriptor, caplog):
        mock_redis = Mock(spec=redis.Redis)
        mock_redis.get.side_effect = redis.ConnectionError("down")

        with caplog.at_level("WARNING", logger="spotinote.spotify.cache"):
            RedisResponseCache(mock_redis).get(descriptor)

        record = caplog.records[-1]
        assert record.msg == "Redis error getting cache entry: %s"
        assert str(record.args[0]) == "down"

    def test_clear_deletes_prefixed_keys(self):
        mock_redis = Mock(spec=redis.Redis)
        mock_redis.scan.side_effect = [(5, [b"k1", b"k2"]), (0, [b"k3"])]
        cache = RedisResponseCache(mock_redis, key_prefix="p:")

        cache.clear()

        assert mock_redis.scan.call_args_list[0][1]["match"] == "p:*"
        assert mock_redis.delete.call_count == 2

    def test_is_connected(self):
        mock_redis = Mock(spec=redis.Redis)
        assert RedisResponseCache(mock_redis).is_connected() is True

        mock_redis.ping.side_effect = redis.ConnectionError("down")
        assert RedisResponseCache(mock_redis).is_connected() is False
