# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from workout_backend.app_db import init_app_db
from workout_backend.cache import TTLCache
from workout_backend.errors import NotFoundError
from workout_backend.workouts.fingerprint import build_fingerprint
from workout_backend.workouts.storage import (
    FEEDBACK_MAX_CHARS,
    PlanStore,
    SessionStore,
    clean_feedback,
)

PRE = {
    "userId": "user-1",
    "workout_type": "upper_body",
    "experience": "intermediate",
    "goals": ["strength"],
    "time_available_min": 45,
    "equipment_override": ["dumbbells"],
    "new_injuries": None,
}


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _cache(**kwargs) -> TTLCache:
    return TTLCache(name="plans", maxsize=kwargs.pop("maxsize", 16), ttl=kwargs.pop("ttl", 60), **kwargs)


def _document(**overrides):
    data = {
        "userId": "user-1",
        "model": "test-model",
        "promptVersion": "v1",
        "preWorkout": dict(PRE),
        "plan": {"title": "Upper Body Blitz", "blocks": []},
        "summary": {"title": "Upper Body Blitz"},
    }
    data.update(overrides)
    return data


class TestTTLCache(unittest.TestCase):
    def test_expiry(self) -> None:
        clock = FakeClock()
        cache = _cache(ttl=10, timer=clock)
        cache.set("a", 1)
        self.assertEqual(cache.get("a"), 1)
        clock.now += 10
        self.assertIsNone(cache.get("a"))
        self.assertEqual(len(cache), 0)

    def test_per_entry_ttl(self) -> None:
        clock = FakeClock()
        cache = _cache(ttl=10, timer=clock)
        cache.set("short", 1, ttl=1)
        cache.set("long", 2)
        clock.now += 5
        self.assertNotIn("short", cache)
        self.assertIn("long", cache)

    def test_eviction_drops_oldest(self) -> None:
        cache = _cache(maxsize=2, timer=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        self.assertIsNone(cache.get("a"))
        self.assertEqual(cache.get("b"), 2)
        self.assertEqual(cache.get("c"), 3)

    def test_hit_and_miss_counters(self) -> None:
        cache = _cache(timer=FakeClock())
        cache.set("a", 1)
        cache.get("a")
        cache.get("missing")
        self.assertEqual((cache.hits, cache.misses), (1, 1))
        self.assertTrue(cache.delete("a"))
        self.assertFalse(cache.delete("a"))

    def test_rejects_bad_bounds(self) -> None:
        with self.assertRaises(ValueError):
            TTLCache(name="x", maxsize=0, ttl=1)
        with self.assertRaises(ValueError):
            TTLCache(name="x", maxsize=1, ttl=0)


class _DbTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="workout-test-"))
        self.db_path = self._tmp / "workouts.db"
        init_app_db(self.db_path)
        self.addCleanup(shutil.rmtree, self._tmp, True)


class TestPlanStore(_DbTestCase):
    def test_create_fills_identity_and_fingerprint(self) -> None:
        store = PlanStore(self.db_path, _cache())
        stored = store.create(_document())
        self.assertTrue(stored["id"])
        self.assertTrue(stored["createdAt"].endswith("Z"))
        self.assertEqual(stored["fingerprint"], build_fingerprint(PRE))

        loaded = store.find_by_id(stored["id"])
        self.assertEqual(loaded["plan"], {"title": "Upper Body Blitz", "blocks": []})
        self.assertEqual(loaded["preWorkout"]["goals"], ["strength"])
        self.assertEqual(loaded["summary"], {"title": "Upper Body Blitz"})
        self.assertIsNone(store.find_by_id("missing"))

    def test_recent_write_short_circuits_duplicate_create(self) -> None:
        store = PlanStore(self.db_path, _cache())
        first = store.create(_document())
        second = store.create(_document())
        self.assertEqual(first["id"], second["id"])
        self.assertEqual(len(store.find(user_id="user-1")), 1)

    def test_find_by_fingerprint_reads_through_to_db(self) -> None:
        stored = PlanStore(self.db_path, _cache()).create(_document())
        cold = PlanStore(self.db_path, _cache())
        found = cold.find_by_fingerprint("user-1", "v1", stored["fingerprint"])
        self.assertEqual(found["id"], stored["id"])
        self.assertIsNone(cold.find_by_fingerprint("user-2", "v1", stored["fingerprint"]))
        self.assertIsNone(cold.find_by_fingerprint("user-1", "v2", stored["fingerprint"]))

    def test_prompt_versions_are_separate_keys(self) -> None:
        store = PlanStore(self.db_path, _cache())
        v1 = store.create(_document(promptVersion="v1"))
        v2 = store.create(_document(promptVersion="v2"))
        self.assertNotEqual(v1["id"], v2["id"])
        self.assertEqual(len(store.find(user_id="user-1", prompt_version="v2")), 1)

    def test_concurrent_duplicates_resolve_to_oldest(self) -> None:
        # Two processes with separate caches can both insert the same key.
        a = PlanStore(self.db_path, _cache())
        b = PlanStore(self.db_path, _cache())
        first = a.create(_document(createdAt="2026-01-01T00:00:00Z"))
        second = b.create(_document(createdAt="2026-01-01T00:00:01Z"))
        self.assertNotEqual(first["id"], second["id"])
        self.assertEqual(len(a.find(fingerprint=first["fingerprint"])), 2)

        fresh = PlanStore(self.db_path, _cache())
        found = fresh.find_by_fingerprint("user-1", "v1", first["fingerprint"])
        self.assertEqual(found["id"], first["id"])

    def test_find_ordering_and_limit(self) -> None:
        store = PlanStore(self.db_path, _cache())
        for i, stamp in enumerate(("2026-01-02T00:00:00Z", "2026-01-03T00:00:00Z", "2026-01-01T00:00:00Z")):
            pre = dict(PRE, time_available_min=30 + i)
            store.create(_document(preWorkout=pre, createdAt=stamp))
        newest = store.find(user_id="user-1")
        self.assertEqual(
            [d["createdAt"] for d in newest],
            ["2026-01-03T00:00:00Z", "2026-01-02T00:00:00Z", "2026-01-01T00:00:00Z"],
        )
        oldest = store.find(user_id="user-1", descending=False, limit=1)
        self.assertEqual([d["createdAt"] for d in oldest], ["2026-01-01T00:00:00Z"])
        with self.assertRaises(ValueError):
            store.find(sort="title")


class TestSessionStore(_DbTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.plan = PlanStore(self.db_path, _cache()).create(_document())
        self.sessions = SessionStore(self.db_path)

    def test_start_then_complete(self) -> None:
        session = self.sessions.start(plan_id=self.plan["id"], user_id="user-1")
        self.assertTrue(session["startedAt"])
        self.assertIsNone(session["completedAt"])

        done = self.sessions.complete(session["id"], feedback={"rating": 4})
        self.assertTrue(done["completedAt"])
        self.assertEqual(done["startedAt"], session["startedAt"])
        self.assertEqual(done["feedback"], {"rating": 4})

        again = self.sessions.complete(session["id"], feedback={"comment": "tough"})
        self.assertEqual(again["feedback"], {"rating": 4, "comment": "tough"})
        self.assertEqual(again["completedAt"], done["completedAt"])
        self.assertEqual(self.sessions.find_by_id(session["id"])["feedback"], again["feedback"])

    def test_complete_unknown_session(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.sessions.complete("missing")
        self.assertEqual(ctx.exception.code, "SESSION_NOT_FOUND")

    def test_find_orders_by_completion(self) -> None:
        plan_id = self.plan["id"]
        open_session = self.sessions.start(plan_id=plan_id, user_id="user-1")
        self.sessions.create(plan_id=plan_id, user_id="user-1", completed_at="2026-01-01T00:00:00Z")
        self.sessions.create(plan_id=plan_id, user_id="user-1", completed_at="2026-02-01T00:00:00Z")
        self.sessions.create(plan_id=plan_id, user_id="user-2", completed_at="2026-03-01T00:00:00Z")

        sessions = self.sessions.find(user_id="user-1")
        self.assertEqual(
            [s["completedAt"] for s in sessions],
            ["2026-02-01T00:00:00Z", "2026-01-01T00:00:00Z", None],
        )
        self.assertEqual(sessions[-1]["id"], open_session["id"])
        self.assertEqual(len(self.sessions.find(user_id="user-1", completed_only=True)), 2)
        self.assertEqual(len(self.sessions.find(plan_id=plan_id, limit=1)), 1)


class TestCleanFeedback(unittest.TestCase):
    def test_truncates_comment(self) -> None:
        feedback = clean_feedback("x" * (FEEDBACK_MAX_CHARS + 50), 5)
        self.assertEqual(len(feedback["comment"]), FEEDBACK_MAX_CHARS)
        self.assertEqual(feedback["rating"], 5)

    def test_empty(self) -> None:
        self.assertEqual(clean_feedback(), {})
        self.assertEqual(clean_feedback("", None), {})

    def test_rating_bounds(self) -> None:
        for rating in (0, 6):
            with self.subTest(rating=rating):
                with self.assertRaises(ValueError):
                    clean_feedback("ok", rating)


if __name__ == "__main__":
    unittest.main()
