import asyncio
import unittest

from app.chat.broker import ChatBroker
from app.chat.connection_manager import ConnectionManager
from app.chat.presence import PresenceTracker


class TestPendingRecounts(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.broker = ChatBroker(ConnectionManager(), PresenceTracker(), settle_delay=60)

    async def test_shutdown_cancels_pending_recounts(self):
        self.broker._schedule_recount("patna")
        (task,) = self.broker._pending
        await self.broker.shutdown()
        self.assertTrue(task.cancelled())
        self.assertEqual(self.broker._pending, set())

    async def test_reset_cancels_pending_recounts(self):
        self.broker._schedule_recount("patna")
        (task,) = self.broker._pending
        self.broker.reset()
        self.assertEqual(self.broker._pending, set())
        with self.assertRaises(asyncio.CancelledError):
            await task

    async def test_shutdown_without_pending_work(self):
        await self.broker.shutdown()
        self.assertEqual(self.broker._pending, set())


if __name__ == "__main__":
    unittest.main()
