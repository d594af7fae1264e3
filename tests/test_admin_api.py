import uuid
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.crud import chat_message_crud
from app.model import ChatMessage, User
from tests.support import ApiTestCase, join, receive_until, send_event

ADMIN = "/api/v1/admin"


class AdminTestCase(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.admin = self.make_user("Admin", role="admin")
        self.alice = self.make_user("Alice")
        self.admin_headers = self.auth_header(self.login_as(self.admin))


class TestAdminAccess(AdminTestCase):

    def test_regular_user_refused(self):
        headers = self.auth_header(self.login_as(self.alice))
        response = self.client.get(f"{ADMIN}/chat/banned-users", headers=headers)
        self.assertEqual(response.status_code, 403)
        response = self.client.patch(f"{ADMIN}/chat/ban/{self.admin.id}", headers=headers)
        self.assertEqual(response.status_code, 403)

    def test_anonymous_refused(self):
        self.assertEqual(self.client.get(f"{ADMIN}/chat/banned-users").status_code, 401)


class TestChatBan(AdminTestCase):

    def test_ban_notifies_open_sockets(self):
        with self.client.websocket_connect("/api/v1/community/ws") as ws:
            join(ws, "patna", self.login_as(self.alice))
            response = self.client.patch(
                f"{ADMIN}/chat/ban/{self.alice.id}", json={"reason": "Posting spam"}, headers=self.admin_headers
            )
            self.assertEqual(response.status_code, 200)
            self.assertEqual(
                receive_until(ws, "chat-banned"),
                {"userId": str(self.alice.id), "reason": "Posting spam"},
            )
        stored = self.reload(User, self.alice.id)
        self.assertTrue(stored.is_chat_banned)
        self.assertEqual(stored.chat_ban_reason, "Posting spam")

    def test_default_reason(self):
        self.client.patch(f"{ADMIN}/chat/ban/{self.alice.id}", headers=self.admin_headers)
        self.assertEqual(self.reload(User, self.alice.id).chat_ban_reason, "Banned from chat by admin")

    def test_cannot_ban_self(self):
        response = self.client.patch(f"{ADMIN}/chat/ban/{self.admin.id}", headers=self.admin_headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["code"], "SELF_BAN")

    def test_unknown_user(self):
        response = self.client.patch(f"{ADMIN}/chat/ban/{uuid.uuid4()}", headers=self.admin_headers)
        self.assertEqual(response.status_code, 404)

    def test_banned_list_and_unban(self):
        bob = self.make_user("Bob", is_chat_banned=True, chat_ban_reason="rude")
        self.make_user("Carol", is_chat_banned=True)
        users = self.client.get(f"{ADMIN}/chat/banned-users", headers=self.admin_headers).json()["users"]
        self.assertEqual([u["name"] for u in users], ["Bob", "Carol"])
        self.assertEqual(users[0]["reason"], "rude")
        self.assertEqual(users[0]["email"], "bob@example.com")

        response = self.client.patch(f"{ADMIN}/chat/unban/{bob.id}", headers=self.admin_headers)
        self.assertEqual(response.status_code, 200)
        stored = self.reload(User, bob.id)
        self.assertFalse(stored.is_chat_banned)
        self.assertIsNone(stored.chat_ban_reason)


class TestClearRoom(AdminTestCase):

    def test_clear_room(self):
        first = self.add_message(self.alice, "one")
        self.add_message(self.alice, "two")
        self.add_message(self.alice, "elsewhere", room="delhi")

        with self.client.websocket_connect("/api/v1/community/ws") as ws:
            join(ws, "patna", self.login_as(self.alice))
            response = self.client.delete(f"{ADMIN}/chat/room/patna/clear", headers=self.admin_headers)
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["cleared"], 2)
            self.assertEqual(receive_until(ws, "room-cleared"), {"room": "patna"})

        stored = self.reload(ChatMessage, first.id)
        self.assertTrue(stored.is_deleted)
        self.assertEqual(stored.text, "[Cleared by admin]")

    def test_database_failure_returns_503_without_broadcast(self):
        kept = self.add_message(self.alice, "one")
        token = self.login_as(self.alice)
        failure = OperationalError("UPDATE chat_messages", {}, Exception("database unavailable"))

        with self.client.websocket_connect("/api/v1/community/ws") as ws:
            join(ws, "patna", token)
            with patch.object(chat_message_crud, "clear_room", side_effect=failure):
                response = self.client.delete(f"{ADMIN}/chat/room/patna/clear", headers=self.admin_headers)
            send_event(ws, "send-message", room="patna", text="sync", token=token)
            skipped = []
            receive_until(ws, "new-message", skipped)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"]["code"], "SERVICE_ERROR")
        self.assertNotIn("room-cleared", [f["event"] for f in skipped])
        self.assertFalse(self.reload(ChatMessage, kept.id).is_deleted)

    def test_invalid_room(self):
        response = self.client.delete(f"{ADMIN}/chat/room/atlantis/clear", headers=self.admin_headers)
        self.assertEqual(response.status_code, 400)


class TestAccountBan(AdminTestCase):

    def test_ban_blocks_rest_access(self):
        token = self.login_as(self.alice)
        response = self.client.patch(
            f"{ADMIN}/users/{self.alice.id}/ban", json={"reason": "fraud"}, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/api/v1/auth/me", headers=self.auth_header(token))
        self.assertEqual(response.status_code, 403)
        self.assertIn("fraud", response.json()["detail"]["message"])

        self.client.patch(f"{ADMIN}/users/{self.alice.id}/unban", headers=self.admin_headers)
        self.assertEqual(self.client.get("/api/v1/auth/me", headers=self.auth_header(token)).status_code, 200)

    def test_cannot_ban_self(self):
        response = self.client.patch(f"{ADMIN}/users/{self.admin.id}/ban", headers=self.admin_headers)
        self.assertEqual(response.status_code, 400)
