# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest

from plan_samples import sample_draft
from workout_backend.workouts.models import GeneratedPlanDraft, PreWorkoutRequest
from workout_backend.workouts.normalizer import normalize_plan
from workout_backend.workouts.transformer import (
    draft_to_display,
    format_rest,
    plan_to_display,
    stored_to_display,
)


def _draft() -> GeneratedPlanDraft:
    return GeneratedPlanDraft.model_validate(sample_draft())


class TestFormatRest(unittest.TestCase):
    def test_formats(self) -> None:
        self.assertEqual(format_rest(0), "0s")
        self.assertEqual(format_rest(45), "45s")
        self.assertEqual(format_rest(60), "1m")
        self.assertEqual(format_rest(90), "1m 30s")
        self.assertEqual(format_rest(510), "8m 30s")
        self.assertEqual(format_rest(None), "0s")

    def test_non_finite_is_zero(self) -> None:
        for value in (float("nan"), float("inf"), float("-inf"), "NaN"):
            with self.subTest(value=value):
                self.assertEqual(format_rest(value), "0s")


class TestDraftDisplay(unittest.TestCase):
    def setUp(self) -> None:
        self.display = draft_to_display(_draft())

    def test_counts(self) -> None:
        self.assertEqual(len(self.display.warmup), 1)
        # Three block exercises plus one finisher entry.
        self.assertEqual(len(self.display.exercises), 4)
        self.assertEqual(len(self.display.cooldown), 1)
        self.assertEqual(self.display.notes, "Stay hydrated.")
        self.assertEqual(self.display.estimatedDuration, 45)

    def test_block_tags(self) -> None:
        tags = [(e.name, e.blockName, e.blockIndex, e.exerciseIndex) for e in self.display.exercises]
        self.assertEqual(
            tags,
            [
                ("Dumbbell Bench Press", "Strength", 0, 0),
                ("Dumbbell Row", "Strength", 0, 1),
                ("Plank", "Core", 1, 0),
                ("Burpee Ladder", "Finisher", 3, 0),
            ],
        )

    def test_rep_based_entry(self) -> None:
        bench = self.display.exercises[0]
        self.assertEqual(bench.sets, 2)
        self.assertEqual(bench.reps, "10")
        self.assertIsNone(bench.duration)
        self.assertEqual(bench.rest, "1m 30s")
        self.assertEqual(bench.notes, "Control the descent")
        self.assertEqual(bench.equipment, "dumbbells, bench")
        self.assertEqual(bench.primaryMuscles, "chest, triceps")
        self.assertEqual(bench.restType, "passive")
        self.assertEqual(bench.rpe, 7)

    def test_time_based_entry(self) -> None:
        plank = self.display.exercises[2]
        self.assertEqual(plank.reps, "Time-based")
        self.assertEqual(plank.duration, "45s")
        self.assertEqual(plank.rest, "30s")

    def test_finisher_entry(self) -> None:
        finisher = self.display.exercises[3]
        self.assertEqual(finisher.sets, 3)
        self.assertEqual(finisher.duration, "40s work")
        self.assertEqual(finisher.rest, "20s")
        self.assertEqual(finisher.notes, "High intensity finisher")

    def test_edge_entries(self) -> None:
        warmup = self.display.warmup[0]
        self.assertEqual(warmup.name, "Arm Circles")
        self.assertEqual(warmup.sets, 1)
        self.assertEqual(warmup.reps, "Time-based")
        self.assertEqual(warmup.duration, "60s")
        self.assertEqual(warmup.rest, "10s")
        self.assertEqual(warmup.notes, "Small to big circles")
        self.assertEqual(self.display.cooldown[0].duration, "90s")


class TestStoredDisplay(unittest.TestCase):
    def test_normalized_plan(self) -> None:
        pre = PreWorkoutRequest(
            userId="user-1",
            workout_type="upper_body",
            experience="intermediate",
            goals=["strength"],
            time_available_min=45,
        )
        display = plan_to_display(normalize_plan(_draft(), pre))
        self.assertEqual(len(display.warmup), 1)
        self.assertEqual(len(display.exercises), 4)
        self.assertEqual(len(display.cooldown), 1)
        self.assertEqual({e.blockName for e in display.exercises}, {"Main Workout", "Finisher"})
        self.assertEqual(display.exercises[-1].blockIndex, 2)
        # The single-set row is shown with its reprogrammed sets.
        self.assertEqual(display.exercises[1].sets, 3)
        self.assertEqual(display.exercises[1].rest, "1m")
        self.assertEqual(display.warmup[0].rest, "30s")

    def test_legacy_defaults(self) -> None:
        display = stored_to_display({"plan": {"exercises": [{}]}})
        self.assertEqual(len(display.exercises), 1)
        entry = display.exercises[0]
        self.assertEqual(entry.name, "Unknown Exercise")
        self.assertEqual(entry.sets, 1)
        self.assertEqual(entry.reps, "10")
        self.assertEqual(entry.rest, "60s")
        self.assertEqual(entry.restType, "active")

    def test_legacy_set_count(self) -> None:
        display = stored_to_display(
            {"plan": {"exercises": [{"name": "Squat", "sets": 4, "reps": "8-12", "rest": "90s"}]}}
        )
        entry = display.exercises[0]
        self.assertEqual((entry.name, entry.sets, entry.reps, entry.rest), ("Squat", 4, "8-12", "90s"))

    def test_non_finite_values_render(self) -> None:
        plan = {
            "blocks": [
                {
                    "name": "Main Workout",
                    "exercises": [{"name": "Row", "sets": [{"reps": 8, "rest_sec": float("nan")}]}],
                }
            ],
            "finisher": [{"name": "Sprint", "rounds": float("inf"), "rest_sec": float("nan")}],
        }
        display = plan_to_display(plan)
        self.assertEqual([e.rest for e in display.exercises], ["60s", "0s"])
        self.assertEqual(display.exercises[1].sets, 1)

    def test_malformed_sections(self) -> None:
        document = {
            "plan": {
                "blocks": [
                    {"name": "A", "exercises": 5},
                    "junk",
                    {"name": "B", "exercises": [{"name": "Squat", "sets": {"reps": 5}, "equipment": "barbell"}]},
                ],
                "finisher": 3,
            }
        }
        display = stored_to_display(document)
        self.assertEqual(len(display.exercises), 1)
        entry = display.exercises[0]
        self.assertEqual((entry.name, entry.sets, entry.equipment), ("Squat", 1, "barbell"))
        self.assertEqual(entry.blockName, "B")

    def test_empty_documents(self) -> None:
        for document in ({}, {"plan": None}, {"plan": {"blocks": None, "meta": "x"}}):
            with self.subTest(document=document):
                display = stored_to_display(document)
                self.assertEqual(display.exercises, [])
                self.assertEqual(display.warmup, [])
                self.assertEqual(display.cooldown, [])


if __name__ == "__main__":
    unittest.main()
