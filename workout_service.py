from __future__ import annotations
import datetime
from typing import Iterable, Optional

from algorithms import MathTools
from errors import MissingDate, MissingDuration, NoValidExercises
from models import (
    STRENGTH,
    CardioDetails,
    ExerciseDraft,
    ExerciseEntry,
    SetDraft,
    SetEntry,
    WorkoutDraft,
    WorkoutEntry,
)

WORKOUT_TEMPLATES: dict[str, list[tuple[str, int]]] = {
    "workoutA": [
        ("Barbell Back Squat", 5),
        ("Barbell Bench Press", 5),
        ("Barbell Row", 5),
    ],
    "workoutB": [
        ("Barbell Deadlift", 5),
        ("Overhead Press", 5),
        ("Pull-ups/Lat Pulldown", 8),
    ],
}
TEMPLATE_SETS = 3
RECOVERY_MIN = 1
RECOVERY_MAX = 10


def draft_from_template(
    name: str, date: Optional[datetime.date] = None
) -> WorkoutDraft:
    """Return a strength draft prefilled from template ``name``.

    Template sets carry reps only; weights must be filled in before saving.
    """
    template = WORKOUT_TEMPLATES.get(name)
    if template is None:
        raise ValueError(f"unknown template {name}")
    exercises = [
        ExerciseDraft(
            name=ex_name,
            sets=[SetDraft(reps=reps) for _ in range(TEMPLATE_SETS)],
        )
        for ex_name, reps in template
    ]
    return WorkoutDraft(type=STRENGTH, date=date, exercises=exercises)


def next_workout_id(
    existing: Iterable[WorkoutEntry], now: datetime.datetime
) -> int:
    """Creation-time id in epoch milliseconds, kept ahead of ``existing``."""
    candidate = int(now.timestamp() * 1000)
    latest = max((w.id for w in existing), default=None)
    if latest is not None and candidate <= latest:
        candidate = latest + 1
    return candidate


def _complete_sets(sets: Iterable[SetDraft]) -> list[SetEntry]:
    # incomplete sets are dropped, not reported; a weight of 0 is a bodyweight set
    return [
        SetEntry(reps=s.reps, weight=s.weight)
        for s in sets
        if s.reps is not None and s.reps > 0 and s.weight is not None and s.weight >= 0
    ]


def _recovery_score(value: Optional[int]) -> Optional[int]:
    # 0 is indistinguishable from "not scored" in stored data
    if not value or value < 0:
        return None
    return int(MathTools.clamp(value, RECOVERY_MIN, RECOVERY_MAX))


def _strength_exercises(drafts: Iterable[ExerciseDraft]) -> list[ExerciseEntry]:
    exercises: list[ExerciseEntry] = []
    for draft in drafts:
        name = draft.name.strip()
        if not name:
            continue
        sets = _complete_sets(draft.sets)
        if sets:
            exercises.append(ExerciseEntry(name=name, sets=sets))
    return exercises


def validate_workout_draft(
    draft: WorkoutDraft,
    now: datetime.datetime | None = None,
    existing: Iterable[WorkoutEntry] = (),
) -> WorkoutEntry:
    """Turn ``draft`` into a saved entry or raise a validation error."""
    if draft.date is None:
        raise MissingDate()
    now = now or datetime.datetime.now(datetime.timezone.utc)
    fields = {
        "id": next_workout_id(existing, now),
        "type": draft.type,
        "date": draft.date,
        "notes": draft.notes,
        "recovery": _recovery_score(draft.recovery),
        "timestamp": now,
    }
    if draft.type == STRENGTH:
        exercises = _strength_exercises(draft.exercises)
        if not exercises:
            raise NoValidExercises()
        return WorkoutEntry(exercises=exercises, **fields)

    cardio = draft.cardio
    if cardio is None or not cardio.duration or cardio.duration < 0:
        raise MissingDuration()
    details = CardioDetails(
        activity=cardio.activity,
        duration=cardio.duration,
        distance=cardio.distance or None,
        avg_hr=cardio.avg_hr if cardio.avg_hr and cardio.avg_hr > 0 else None,
    )
    return WorkoutEntry(cardio=details, **fields)
