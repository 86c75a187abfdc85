# -*- coding: utf-8 -*-
"""Workouts — prompt composition for the generation model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import PreWorkoutRequest

SYSTEM_PERSONA = (
    "You are an exercise physiologist and strength coach with decades of experience "
    "programming for athletes and general-population clients.\n"
    "\n"
    "PROGRAMMING PRINCIPLES:\n"
    "- Apply the SAID principle: choose work that produces the adaptation the client asked for.\n"
    "- Respect supercompensation: dose volume and intensity so the session is recoverable.\n"
    "- Use block or daily undulating periodization ideas for intermediate and advanced clients.\n"
    "- Autoregulate with RPE; beginners should finish every set with reps in reserve.\n"
    "\n"
    "BIOMECHANICS:\n"
    "- Movement quality before load; cue the kinetic chain and common compensations.\n"
    "- Include unilateral work where it addresses left/right imbalances.\n"
    "- Prepare movement with activation, mobilization, then integration.\n"
    "- Use tempo to target strength, hypertrophy or power.\n"
    "\n"
    "EXERCISE SELECTION:\n"
    "- Order exercises from most to least demanding (compound before isolation).\n"
    "- Match force vectors and movement patterns to the requested session type.\n"
    "- Never prescribe equipment the client does not have.\n"
    "\n"
    "Return only JSON that matches the provided schema."
)

_REST_GUIDELINES: Dict[str, Dict[str, str]] = {
    "beginner": {
        "strength": "90-120 seconds",
        "hypertrophy": "60-90 seconds",
        "endurance": "30-60 seconds",
        "power": "120-180 seconds",
        "cardio": "15-30 seconds",
        "mobility": "10-15 seconds",
    },
    "intermediate": {
        "strength": "120-180 seconds",
        "hypertrophy": "60-90 seconds",
        "endurance": "30-45 seconds",
        "power": "180-240 seconds",
        "cardio": "15-30 seconds",
        "mobility": "10-15 seconds",
    },
    "advanced": {
        "strength": "180-300 seconds",
        "hypertrophy": "60-120 seconds",
        "endurance": "30-60 seconds",
        "power": "240-360 seconds",
        "cardio": "15-45 seconds",
        "mobility": "15-30 seconds",
    },
}

_TARGET_MUSCLES = [
    ("chest", "Pectorals, anterior deltoids, triceps"),
    ("back", "Latissimus dorsi, rhomboids, middle traps, rear deltoids, biceps"),
    ("legs", "Quadriceps, hamstrings, glutes, calves"),
    ("shoulders", "Deltoids (anterior, medial, posterior), trapezius"),
    ("core", "Rectus abdominis, obliques, transverse abdominis, erector spinae"),
    ("push", "Chest, shoulders, triceps"),
    ("pull", "Back, biceps, rear deltoids"),
    ("upper body", "Chest, back, shoulders, arms"),
    ("lower body", "Legs, glutes, calves"),
    ("full body", "All major muscle groups with emphasis on compound movements"),
    ("hiit", "Full body with cardiovascular emphasis"),
    ("cardio", "Cardiovascular system with supporting musculature"),
]

_STRENGTH_TYPES = ("chest", "back", "legs", "shoulders", "push", "pull")
_CARDIO_TYPES = ("cardio", "hiit", "conditioning")


@dataclass(frozen=True)
class ComposedPrompt:
    prompt: str
    # Reserved for prompt A/B variants; unused for now.
    variant: Optional[str] = None


def split_duration(total_min: int) -> tuple[int, int, int]:
    """(warmup, main, cooldown) minutes; warmup and cooldown are 15% clamped to 5..10."""
    edge = max(5, min(10, int(total_min * 0.15)))
    return edge, total_min - 2 * edge, edge


def rest_midpoint(rest_range: str) -> int:
    try:
        low, high = rest_range.split(" ")[0].split("-")
        return (int(low) + int(high)) // 2
    except ValueError:
        return 60


def target_muscles(workout_type: str) -> str:
    wt = workout_type.lower()
    for key, muscles in _TARGET_MUSCLES:
        if key in wt:
            return muscles
    return "Primary muscle groups based on exercise selection"


def energy_system_focus(workout_type: str) -> str:
    wt = workout_type.lower()
    if "hiit" in wt or "cardio" in wt:
        return "Anaerobic and aerobic energy systems"
    if "strength" in wt or "power" in wt:
        return "Phosphocreatine system (high intensity, short duration)"
    return "Mixed energy systems with emphasis on strength and hypertrophy adaptations"


def intensity_guidance(experience: str, workout_type: str) -> str:
    wt = workout_type.lower()
    if any(t in wt for t in _STRENGTH_TYPES):
        return {
            "beginner": "Focus on form and control. Use 2-1-2-1 tempo (2s eccentric, 1s pause, 2s concentric, 1s pause).",
            "intermediate": "Moderate to high intensity. Use 3-1-2-1 tempo for strength, 2-0-2-0 for hypertrophy.",
            "advanced": "High intensity with varied tempos. Use 4-2-1-1 for strength, 3-1-1-1 for power.",
        }.get(experience, "")
    if any(t in wt for t in _CARDIO_TYPES):
        return {
            "beginner": "Moderate intensity (60-70% max effort). Focus on maintaining good form throughout.",
            "intermediate": "Moderate to high intensity (70-85% max effort). Include brief recovery periods.",
            "advanced": "High intensity intervals (85-95% max effort) with strategic rest periods.",
        }.get(experience, "")
    return "Adjust intensity based on your current fitness level and energy."


def compose_prompt(pre: PreWorkoutRequest) -> ComposedPrompt:
    workout_type = pre.workout_type.replace("_", " ").replace("/", " and ")
    goals = ", ".join(pre.goals) if pre.goals else "general_fitness"
    equipment = ", ".join(pre.equipment_override) if pre.equipment_override else "bodyweight only"
    constraints = (pre.new_injuries or "").strip() or "none"
    experience = pre.experience

    total = pre.time_available_min
    warmup_min, main_min, cooldown_min = split_duration(total)
    rest = _REST_GUIDELINES.get(experience, _REST_GUIDELINES["beginner"])

    def rest_line(label: str, key: str) -> str:
        return f"- {label}: {rest[key]} ({rest_midpoint(rest[key])} seconds)"

    lines: List[str] = [
        f"Create an evidence-based {workout_type} workout that maximizes training adaptations while keeping the client safe.",
        "",
        "CLIENT PROFILE:",
        f"- Experience: {experience} (adjust complexity and intensity accordingly)",
        f"- Primary goals: {goals}",
        f"- Available equipment: {equipment}",
        f"- Constraints/injuries: {constraints}",
        "",
        "WORKOUT SPECIFICATIONS:",
        f"- Type: {workout_type} (MUST target these muscle groups/movement patterns)",
        f"- Total duration: {total} minutes ({warmup_min}min warmup + {main_min}min main + {cooldown_min}min cooldown)",
        f"- Target muscle groups: {target_muscles(workout_type)}",
        "",
        "EXERCISE PROGRAMMING PRINCIPLES:",
        "- Progressive overload: structure exercises from foundational to challenging",
        "- Movement quality: prioritize proper form and full range of motion",
        "- Muscle balance: include opposing muscle groups when appropriate",
        f"- Energy system targeting: {energy_system_focus(workout_type)}",
        f"- {intensity_guidance(experience, workout_type)}",
        "",
        "REST TIME GUIDELINES (use the rest_sec field):",
        rest_line("Strength/Power exercises", "strength"),
        rest_line("Hypertrophy exercises", "hypertrophy"),
        rest_line("Endurance exercises", "endurance"),
        rest_line("Cardio/HIIT exercises", "cardio"),
        rest_line("Mobility/stretching", "mobility"),
        "",
        "CRITICAL REQUIREMENTS:",
        f"1. WORKOUT TYPE ADHERENCE: this MUST be a {workout_type} workout",
        f"2. EQUIPMENT COMPLIANCE: use ONLY the listed equipment: {equipment}",
        f"3. SAFETY FIRST: avoid exercises contraindicated by: {constraints}",
        f"4. TIME MANAGEMENT: the whole session must fit within {total} minutes including transitions",
        "5. REST PERIODS: always specify rest_sec based on exercise type and intensity",
        f"6. EXERCISE SELECTION: match exercises to a {experience} trainee",
        "7. PROGRESSION: order exercises from most to least demanding (compound -> isolation)",
        "",
        "TECHNICAL SPECIFICATIONS:",
        "- For each set use either reps>0 (time_sec=0) OR time_sec>0 (reps=0), never both",
        "- Every set requires: tempo (eccentric-pause-concentric-pause, e.g. \"3-1-2-1\"), intensity (low/moderate/high),",
        "  weight_guidance, rpe (1-10), rest_type (\"active\" or \"passive\") and notes (cues, modifications, safety tips)",
        "- workout_name: a short motivating name; meta.instructions: exactly 4 bullet points",
        "  (form focus, intensity/pacing, safety or modification, mindset cue)",
        "- Each exercise, warmup and cooldown movement: exactly 3 instruction bullet points",
        "",
        "OUTPUT FORMAT: respond with valid JSON matching the provided schema exactly. ALL fields are required.",
    ]
    return ComposedPrompt(prompt="\n".join(lines))
