import unittest

from app.chat import events
from app.chat.events import Target
from app.chat.presence import PresenceTracker


def _names(emits):
    return [(e.event, e.room) for e in emits]


class TestPresenceTracker(unittest.TestCase):

    def setUp(self):
        self.tracker = PresenceTracker()

    def _join(self, conn_id, room, user_id="u1", name="Alice"):
        return self.tracker.join(conn_id, user_id=user_id, user_name=name, user_avatar=None, room=room)

    def test_join_emits_joined_and_count(self):
        emits = self._join("c1", "patna")
        self.assertEqual(_names(emits), [(events.USER_JOINED, "patna"), (events.ONLINE_COUNT, "patna")])
        self.assertEqual(emits[0].payload, {"userId": "u1", "userName": "Alice"})
        self.assertEqual(emits[1].payload, {"count": 1})
        self.assertEqual(self.tracker.online_count("patna"), 1)

    def test_counts_connections_not_people(self):
        self._join("c1", "patna")
        emits = self._join("c2", "patna")
        self.assertEqual(emits[-1].payload, {"count": 2})

    def test_room_switch_leaves_old_room_first(self):
        self._join("c1", "patna")
        self._join("c2", "patna", user_id="u2", name="Bob")
        emits = self._join("c1", "delhi")
        self.assertEqual(
            _names(emits),
            [
                (events.USER_LEFT, "patna"),
                (events.ONLINE_COUNT, "patna"),
                (events.USER_JOINED, "delhi"),
                (events.ONLINE_COUNT, "delhi"),
            ],
        )
        self.assertEqual(emits[1].payload, {"count": 1})
        self.assertEqual(self.tracker.get("c1").room, "delhi")
        self.assertEqual(self.tracker.online_count("patna"), 1)

    def test_rejoin_same_room_does_not_double_count(self):
        self._join("c1", "patna")
        emits = self._join("c1", "patna")
        self.assertNotIn(events.USER_LEFT, [e.event for e in emits])
        self.assertEqual(self.tracker.online_count("patna"), 1)

    def test_leave_defers_count(self):
        self._join("c1", "patna")
        entry, emits = self.tracker.leave("c1")
        self.assertEqual(entry.room, "patna")
        self.assertEqual(_names(emits), [(events.USER_LEFT, "patna")])
        self.assertEqual(self.tracker.online_count("patna"), 0)
        self.assertIsNone(self.tracker.get("c1"))

    def test_leave_unknown_connection(self):
        entry, emits = self.tracker.leave("nobody")
        self.assertIsNone(entry)
        self.assertEqual(emits, [])

    def test_leave_while_typing_clears_indicator(self):
        self._join("c1", "patna")
        self.tracker.set_typing("c1", True)
        _, emits = self.tracker.leave("c1")
        self.assertEqual(_names(emits), [(events.USER_STOP_TYPING, "patna"), (events.USER_LEFT, "patna")])
        self.assertEqual(emits[0].payload, {"userId": "u1"})
        self.assertTrue(all(e.target is Target.ROOM for e in emits))

    def test_count_event(self):
        emit = self.tracker.count_event("general")
        self.assertEqual(emit.event, events.ONLINE_COUNT)
        self.assertEqual(emit.payload, {"count": 0})


if __name__ == "__main__":
    unittest.main()
