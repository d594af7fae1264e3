import unittest
from unittest.mock import Mock

import fakeredis
import redis

from app.session.guest_throttle import GUEST_KEY_PREFIX, GuestThrottle


class TestGuestThrottle(unittest.TestCase):

    def setUp(self):
        self.redis = fakeredis.FakeRedis(decode_responses=True)
        self.throttle = GuestThrottle(limit=2, window_seconds=86400, client_factory=lambda: self.redis)

    def test_third_request_is_refused(self):
        first = self.throttle.hit("guest-1")
        second = self.throttle.hit("guest-1")
        third = self.throttle.hit("guest-1")
        self.assertTrue(first.allowed)
        self.assertEqual(first.remaining, 1)
        self.assertTrue(second.allowed)
        self.assertEqual(second.remaining, 0)
        self.assertFalse(third.allowed)
        self.assertEqual(self.throttle.used("guest-1"), 3)

    def test_sessions_counted_separately(self):
        self.throttle.hit("guest-1")
        self.throttle.hit("guest-1")
        self.assertTrue(self.throttle.hit("guest-2").allowed)
        self.assertEqual(self.throttle.used("guest-3"), 0)

    def test_window_set_on_first_hit_only(self):
        self.throttle.hit("guest-1")
        key = f"{GUEST_KEY_PREFIX}guest-1"
        ttl = self.redis.ttl(key)
        self.assertTrue(0 < ttl <= 86400)
        self.redis.expire(key, 100)
        self.throttle.hit("guest-1")
        self.assertLessEqual(self.redis.ttl(key), 100)

    def test_window_expiry_resets_count(self):
        self.throttle.hit("guest-1")
        self.throttle.hit("guest-1")
        self.redis.delete(f"{GUEST_KEY_PREFIX}guest-1")
        self.assertTrue(self.throttle.hit("guest-1").allowed)

    def test_fails_open_when_redis_down(self):
        broken = Mock()
        broken.incr.side_effect = redis.ConnectionError("down")
        broken.get.side_effect = redis.ConnectionError("down")
        throttle = GuestThrottle(limit=2, window_seconds=60, client_factory=lambda: broken)
        self.assertTrue(throttle.hit("guest-1").allowed)
        self.assertEqual(throttle.used("guest-1"), 0)


if __name__ == "__main__":
    unittest.main()
