"""Shared fixtures: an app wired to an in-memory MongoDB and a temp upload dir."""

import os
import shutil
import tempfile
import unittest

import mongomock
from fastapi.testclient import TestClient

from api.security import hash_password
from api.server import create_app
from utils.config import Config

TEST_SECRET = "test-secret-key"


class ApiTestCase(unittest.TestCase):
    """Base class giving each test a fresh app, database and upload directory."""

    config_overrides: dict = {}

    def setUp(self) -> None:
        self.upload_dir = tempfile.mkdtemp(prefix="uploads-")
        self.addCleanup(shutil.rmtree, self.upload_dir, True)

        options = {
            "JWT_SECRET_KEY": TEST_SECRET,
            "MONGODB_DB": "event_media_test",
            "UPLOAD_DIR": self.upload_dir,
        }
        options.update(self.config_overrides)
        self.config = Config(**options)

        self.mongo = mongomock.MongoClient()
        self.db = self.mongo[self.config.MONGODB_DB]
        self.app = create_app(self.config, mongo_client=self.mongo)
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    # helpers

    def signup(self, name="Ada", email="ada@example.com", password="s3cret-pass") -> dict:
        response = self.client.post(
            "/api/users", json={"name": name, "email": email, "password": password}
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["user"]

    def insert_admin(self, email="admin@example.com", password="admin-pass") -> str:
        result = self.db.users.insert_one(
            {"name": "Admin", "email": email, "password": hash_password(password), "role": "admin"}
        )
        return str(result.inserted_id)

    def login(self, email, password) -> str:
        response = self.client.post("/api/login", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]

    def auth_headers(self, email="ada@example.com", password="s3cret-pass") -> dict:
        return {"Authorization": f"Bearer {self.login(email, password)}"}

    def stored_files(self) -> list:
        return sorted(os.listdir(self.upload_dir))
