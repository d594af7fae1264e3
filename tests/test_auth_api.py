from unittest.mock import patch

from tests.support import ApiTestCase

AUTH = "/api/v1/auth"


class TestAuthApi(ApiTestCase):

    def test_me(self):
        alice = self.make_user("Alice", role="admin")
        response = self.client.get(f"{AUTH}/me", headers=self.auth_header(self.login_as(alice)))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["id"], str(alice.id))
        self.assertEqual(body["role"], "admin")
        self.assertFalse(body["is_chat_banned"])

    def test_me_requires_session(self):
        self.assertEqual(self.client.get(f"{AUTH}/me").status_code, 401)

    def test_me_for_deleted_user(self):
        alice = self.make_user("Alice")
        token = self.login_as(alice)
        self.remove_user(alice)
        response = self.client.get(f"{AUTH}/me", headers=self.auth_header(token))
        self.assertEqual(response.status_code, 401)

    @patch("app.service.auth_service.get_aws_client")
    @patch("app.service.auth_service.CognitoIdentityProviderWrapper")
    def test_login_then_logout(self, wrapper, _client):
        alice = self.make_user("Alice")
        wrapper.return_value.initiate_auth.return_value = {
            "id_token": "id-token",
            "access_token": "access-token",
            "refresh_token": None,
            "expires_in": 3600,
        }
        response = self.client.post(f"{AUTH}/login", json={"email": "alice@example.com", "password": "secret123"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["access_token"], "id-token")
        self.assertEqual(response.json()["user"]["id"], str(alice.id))

        headers = self.auth_header("id-token")
        self.assertEqual(self.client.get(f"{AUTH}/me", headers=headers).status_code, 200)
        self.assertEqual(self.client.post(f"{AUTH}/logout", headers=headers).status_code, 200)
        wrapper.return_value.global_sign_out.assert_called_once_with("access-token")
        self.assertEqual(self.client.get(f"{AUTH}/me", headers=headers).status_code, 401)

    @patch("app.service.auth_service.get_aws_client")
    @patch("app.service.auth_service.CognitoIdentityProviderWrapper")
    def test_signup(self, wrapper, _client):
        wrapper.return_value.sign_up.return_value = {"user_sub": "s", "username": "cog-1", "user_confirmed": False}
        response = self.client.post(
            f"{AUTH}/signup", json={"name": "Bob", "email": "bob@example.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.post(
            f"{AUTH}/signup", json={"name": "Bob", "email": "bob@example.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 409)
