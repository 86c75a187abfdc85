# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from datetime import timedelta
from pathlib import Path
from unittest import mock


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestAuth(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="workout-auth-test-"))
        os.environ["WORKOUT_DATA_ROOT"] = str(cls._tmp)
        os.environ["WORKOUT_DB_PATH"] = str(cls._tmp / "auth.db")
        os.environ["WORKOUT_JWT_SECRET"] = "auth-test-secret"

        for name in list(sys.modules.keys()):
            if name.startswith("workout_backend"):
                sys.modules.pop(name, None)

        from workout_backend import errors  # noqa: WPS433 (import inside test for env control)
        from workout_backend.app_db import init_app_db  # noqa: WPS433
        from workout_backend.auth import models, security, storage  # noqa: WPS433
        from workout_backend.cache import TTLCache  # noqa: WPS433
        from workout_backend.config import settings  # noqa: WPS433

        init_app_db(settings.db_path)
        cls.errors = errors
        cls.models = models
        cls.security = security
        cls.storage = storage
        cls.TTLCache = TTLCache

    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _user(self, email: str = "lifter@example.com"):
        existing = self.storage.get_user_by_email(email)
        if existing is not None:
            return existing
        return self.storage.create_user(email=email, password_hash=self.security.hash_password("password123"))

    # ---------- passwords ----------

    def test_password_hashing(self) -> None:
        hashed = self.security.hash_password("correct horse")
        self.assertTrue(hashed.startswith("pbkdf2_sha256$"))
        self.assertNotEqual(hashed, self.security.hash_password("correct horse"))
        self.assertTrue(self.security.verify_password("correct horse", hashed))
        self.assertFalse(self.security.verify_password("wrong horse", hashed))
        for garbage in ("", "plain", "md5$1$abc$def", "pbkdf2_sha256$many$abc$def"):
            with self.subTest(garbage=garbage):
                self.assertFalse(self.security.verify_password("correct horse", garbage))

    # ---------- tokens ----------

    def test_token_round_trip(self) -> None:
        user = self._user()
        token, expires_at = self.security.create_access_token(user)
        claims = self.security.decode_token(token)
        self.assertEqual(claims["sub"], user.id)
        self.assertEqual(claims["exp"], expires_at)
        self.assertEqual(
            self.security.verify_token(token),
            {"id": user.id, "email": user.email, "createdAt": user.created_at},
        )

    def test_tampered_token_is_invalid(self) -> None:
        token, _ = self.security.create_access_token(self._user())
        head, payload, signature = token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        for bad in (f"{head}.{payload}.{flipped}", f"{head}.{payload}", "garbage", ""):
            with self.subTest(token=bad):
                with self.assertRaises(self.errors.AuthError) as ctx:
                    self.security.decode_token(bad)
                self.assertEqual(ctx.exception.code, "INVALID_TOKEN")

    def test_expired_token_is_rejected(self) -> None:
        token, _ = self.security.create_access_token(self._user())
        later = self.security._utc_now() + timedelta(days=8)
        with mock.patch.object(self.security, "_utc_now", return_value=later):
            with self.assertRaises(self.errors.AuthError) as ctx:
                self.security.verify_token(token)
        self.assertEqual(ctx.exception.code, "TOKEN_EXPIRED")

    def test_cached_token_still_expires(self) -> None:
        cache = self.TTLCache(name="tokens", maxsize=8, ttl=3600 * 24 * 30)
        token, _ = self.security.create_access_token(self._user())
        self.security.verify_token(token, cache)
        self.assertIn(token, cache)

        later = self.security._utc_now() + timedelta(days=8)
        with mock.patch.object(self.security, "_utc_now", return_value=later):
            with self.assertRaises(self.errors.AuthError) as ctx:
                self.security.verify_token(token, cache)
        self.assertEqual(ctx.exception.code, "TOKEN_EXPIRED")
        self.assertEqual(len(cache), 0)

    def test_cache_entry_does_not_outlive_token(self) -> None:
        clock = FakeClock()
        cache = self.TTLCache(name="tokens", maxsize=8, ttl=300, timer=clock)
        # Issued long enough ago that only 10 seconds remain.
        issued = self.security._utc_now() - timedelta(days=7) + timedelta(seconds=10)
        with mock.patch.object(self.security, "_utc_now", return_value=issued):
            token, _ = self.security.create_access_token(self._user())
        self.security.verify_token(token, cache)
        self.assertIn(token, cache)
        clock.now += 11
        self.assertNotIn(token, cache)

    def test_deleted_user_token(self) -> None:
        user = self.storage.create_user(email="gone@example.com", password_hash="x")
        token, _ = self.security.create_access_token(user)
        from workout_backend.app_db import db_conn  # noqa: WPS433
        from workout_backend.config import settings  # noqa: WPS433

        with db_conn(settings.db_path) as conn:
            conn.execute("DELETE FROM users WHERE id = ?", (user.id,))
        with self.assertRaises(self.errors.AuthError) as ctx:
            self.security.verify_token(token)
        self.assertEqual(ctx.exception.code, "USER_NOT_FOUND")

    # ---------- accounts ----------

    def test_email_is_normalized(self) -> None:
        request = self.models.RegisterRequest(email="  Foo@Example.COM ", password="password123")
        self.assertEqual(request.email, "foo@example.com")
        self.assertEqual(self.models.LoginRequest(email="FOO@example.com", password="x").email, "foo@example.com")

    def test_bad_registration_input(self) -> None:
        from pydantic import ValidationError  # noqa: WPS433

        for data in (
            {"email": "not-an-email", "password": "password123"},
            {"email": "a b@example.com", "password": "password123"},
            {"email": "short@example.com", "password": "short"},
        ):
            with self.subTest(data=data):
                with self.assertRaises(ValidationError):
                    self.models.RegisterRequest(**data)

    def test_duplicate_email_conflicts(self) -> None:
        created = self.storage.create_user(email="twice@example.com", password_hash="x")
        self.assertEqual(self.storage.get_user_by_email("twice@example.com"), created)
        self.assertEqual(created.public().createdAt, created.created_at)
        with self.assertRaises(self.errors.ConflictError) as ctx:
            self.storage.create_user(email="twice@example.com", password_hash="y")
        self.assertEqual(ctx.exception.code, "USER_EXISTS")


if __name__ == "__main__":
    unittest.main()
