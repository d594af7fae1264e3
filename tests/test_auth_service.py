from unittest.mock import Mock

from botocore.exceptions import ClientError

from app.core.exceptions import EmailAlreadyExists, Forbidden, InvalidCredentials
from app.crud import user_crud
from app.schema.auth import UserLogin, UserRegister
from app.service.auth_service import AuthService
from app.session import get_session
from tests.support import DatabaseTestCase


def _client_error(code: str, message: str = "failed") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "Operation")


class TestAuthService(DatabaseTestCase):

    def setUp(self):
        super().setUp()
        self.cognito = Mock()
        self.service = AuthService(self.db, cognito=self.cognito)

    def test_register_creates_local_user(self):
        self.cognito.sign_up.return_value = {"user_sub": "sub", "username": "cog-1", "user_confirmed": False}
        user = self.service.register_user(
            UserRegister(name=" Alice ", email="Alice@Example.com", password="secret123")
        )
        self.assertEqual(user.email, "alice@example.com")
        self.assertEqual(user.name, "Alice")
        self.assertEqual(user.cognito_username, "cog-1")
        self.assertEqual(user.role, "user")
        self.assertFalse(user.is_chat_banned)

    def test_register_duplicate_email(self):
        self.make_user("Alice")
        with self.assertRaises(EmailAlreadyExists):
            self.service.register_user(
                UserRegister(name="Alice", email="alice@example.com", password="secret123")
            )
        self.cognito.sign_up.assert_not_called()

    def test_register_existing_in_cognito(self):
        self.cognito.sign_up.side_effect = _client_error("UsernameExistsException")
        with self.assertRaises(EmailAlreadyExists):
            self.service.register_user(
                UserRegister(name="Bob", email="bob@example.com", password="secret123")
            )

    def test_login_creates_session(self):
        user = self.make_user("Alice")
        self.cognito.initiate_auth.return_value = {
            "id_token": "id-token",
            "access_token": "access-token",
            "refresh_token": None,
            "expires_in": 3600,
        }
        response = self.service.login(UserLogin(email="alice@example.com", password="secret123"))
        self.assertEqual(response.access_token, "id-token")
        self.assertEqual(response.user.id, str(user.id))
        session = get_session("id-token")
        self.assertEqual(session["user_id"], str(user.id))
        self.assertEqual(session["access_token"], "access-token")

    def test_login_wrong_password(self):
        self.cognito.initiate_auth.side_effect = _client_error("NotAuthorizedException")
        with self.assertRaises(InvalidCredentials):
            self.service.login(UserLogin(email="alice@example.com", password="nope"))

    def test_banned_user_cannot_login(self):
        self.make_user("Mallory", is_banned=True, ban_reason="spam")
        self.cognito.initiate_auth.return_value = {
            "id_token": "t", "access_token": "a", "refresh_token": None, "expires_in": 1,
        }
        with self.assertRaises(Forbidden):
            self.service.login(UserLogin(email="mallory@example.com", password="secret123"))
        self.assertIsNone(get_session("t"))

    def test_logout_removes_session_even_if_cognito_fails(self):
        user = self.make_user("Alice")
        token = self.login_as(user)
        self.cognito.global_sign_out.side_effect = _client_error("NotAuthorizedException")
        self.assertTrue(self.service.logout(token, {"access_token": "a"}))
        self.assertIsNone(get_session(token))

    def test_verify_email(self):
        user = self.make_user("Alice")
        user_crud.update(self.db, db_obj=user, obj_in={"cognito_username": "cog-9"})
        self.service.verify_email("alice@example.com", "123456")
        self.cognito.confirm_sign_up.assert_called_once_with("cog-9", "123456")

        with self.assertRaises(InvalidCredentials):
            self.service.verify_email("nobody@example.com", "123456")
