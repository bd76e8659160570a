"""Tests for password hashing, token issuing and the bearer-token checks on routes."""

import unittest
from datetime import timedelta

import jwt

from api.security import create_access_token, decode_access_token, hash_password, verify_password
from tests.support import TEST_SECRET, ApiTestCase
from utils.config import Config


class TestPasswordHashing(unittest.TestCase):
    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("hunter2-hunter2")
        self.assertNotEqual(hashed, "hunter2-hunter2")
        self.assertTrue(verify_password("hunter2-hunter2", hashed))
        self.assertFalse(verify_password("Hunter2-hunter2", hashed))

    def test_same_password_gets_distinct_salts(self) -> None:
        self.assertNotEqual(hash_password("same"), hash_password("same"))

    def test_plaintext_stored_value_never_matches(self) -> None:
        self.assertFalse(verify_password("secret", "secret"))
        self.assertFalse(verify_password("secret", None))


class TestAccessTokens(unittest.TestCase):
    def setUp(self) -> None:
        self.config = Config(JWT_SECRET_KEY=TEST_SECRET, JWT_ACCESS_TOKEN_EXPIRE_MINUTES=60)

    def test_round_trip_claims(self) -> None:
        token = create_access_token({"sub": "abc", "role": "admin"}, self.config)
        claims = decode_access_token(token, self.config)
        self.assertEqual(claims["sub"], "abc")
        self.assertEqual(claims["role"], "admin")
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_expired_token_is_rejected(self) -> None:
        token = create_access_token({"sub": "abc"}, self.config, expires_delta=timedelta(seconds=-5))
        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token, self.config)

    def test_wrong_secret_is_rejected(self) -> None:
        token = create_access_token({"sub": "abc"}, Config(JWT_SECRET_KEY="other-secret"))
        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(token, self.config)


class TestLogin(ApiTestCase):
    def test_login_returns_token_with_user_id_and_role(self) -> None:
        user = self.signup()
        response = self.client.post(
            "/api/login", json={"email": "ada@example.com", "password": "s3cret-pass"}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["role"], "user")
        self.assertEqual(body["message"], "Login successful")

        claims = jwt.decode(body["token"], TEST_SECRET, algorithms=["HS256"])
        self.assertEqual(claims["sub"], user["id"])
        self.assertEqual(claims["role"], "user")

    def test_wrong_password_is_unauthorized(self) -> None:
        self.signup()
        response = self.client.post(
            "/api/login", json={"email": "ada@example.com", "password": "nope"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Invalid email or password"})

    def test_unknown_email_is_unauthorized(self) -> None:
        response = self.client.post(
            "/api/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        self.assertEqual(response.status_code, 401)

    def test_password_is_stored_hashed(self) -> None:
        user = self.signup()
        stored = self.db.users.find_one({"email": "ada@example.com"})
        self.assertEqual(str(stored["_id"]), user["id"])
        self.assertNotEqual(stored["password"], "s3cret-pass")
        self.assertNotIn("password", user)

    def test_admin_login_reports_admin_role(self) -> None:
        admin_id = self.insert_admin()
        response = self.client.post(
            "/api/login", json={"email": "admin@example.com", "password": "admin-pass"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "admin")
        claims = jwt.decode(response.json()["token"], TEST_SECRET, algorithms=["HS256"])
        self.assertEqual(claims["sub"], admin_id)


class TestBearerTokenChecks(ApiTestCase):
    def test_missing_token_is_unauthorized(self) -> None:
        response = self.client.get("/api/events")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Access denied. No token provided."})

    def test_non_bearer_scheme_counts_as_missing(self) -> None:
        response = self.client.get("/api/users", headers={"Authorization": "Basic abc"})
        self.assertEqual(response.status_code, 401)

    def test_garbage_token_is_bad_request(self) -> None:
        response = self.client.get("/api/users", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Invalid token"})

    def test_expired_token_is_bad_request(self) -> None:
        token = create_access_token(
            {"sub": "abc", "role": "user"}, self.config, expires_delta=timedelta(seconds=-5)
        )
        response = self.client.get("/api/users", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Token has expired"})

    def test_valid_token_is_accepted(self) -> None:
        self.signup()
        response = self.client.get("/api/users", headers=self.auth_headers())
        self.assertEqual(response.status_code, 200)


if __name__ == "__main__":
    unittest.main()
