"""Domain model for logged workouts and body-weight entries.

Entries are stored as JSON documents, so every model dumps to the same field
names the web client has always written (``avgHR``, ``type`` ...).
"""
from __future__ import annotations
import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

STRENGTH = "strength"
CARDIO = "cardio"
NA = "N/A"


class SetEntry(BaseModel):
    # stored sets may carry 0 reps; new sets are checked in workout_service
    reps: int = Field(ge=0)
    weight: float = Field(ge=0)


class ExerciseEntry(BaseModel):
    name: str = Field(min_length=1)
    sets: list[SetEntry] = Field(min_length=1)


class CardioDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity: str = ""
    duration: int = Field(ge=0)
    distance: Optional[str] = None
    avg_hr: Optional[int] = Field(default=None, gt=0, alias="avgHR")

    @field_validator("avg_hr", mode="before")
    @classmethod
    def unset_heart_rate(cls, value):
        # older documents hold avgHR: 0 for "not measured"
        if isinstance(value, (int, float)) and value <= 0:
            return None
        return value


class WorkoutEntry(BaseModel):
    """A saved workout. The ``type`` tag decides which payload is set."""

    model_config = ConfigDict(frozen=True)

    id: int
    type: Literal["strength", "cardio"]
    date: datetime.date
    notes: str = ""
    recovery: Optional[int] = None
    timestamp: datetime.datetime
    exercises: Optional[list[ExerciseEntry]] = None
    cardio: Optional[CardioDetails] = None

    @model_validator(mode="after")
    def _check_payload(self) -> "WorkoutEntry":
        if self.type == STRENGTH:
            if not self.exercises or self.cardio is not None:
                raise ValueError("strength workouts carry exercises only")
        elif self.cardio is None or self.exercises is not None:
            raise ValueError("cardio workouts carry cardio details only")
        return self

    @property
    def total_sets(self) -> int:
        return sum(len(ex.sets) for ex in self.exercises or [])

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class WeightEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: float = Field(ge=0)
    date: datetime.date
    timestamp: datetime.datetime

    def to_document(self) -> dict:
        return self.model_dump(mode="json")


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SetDraft(BaseModel):
    reps: Optional[int] = None
    weight: Optional[float] = None

    @field_validator("reps", "weight", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class ExerciseDraft(BaseModel):
    name: str = ""
    sets: list[SetDraft] = Field(default_factory=list)


class CardioDraft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    activity: str = ""
    duration: Optional[int] = None
    distance: Optional[str] = None
    avg_hr: Optional[int] = Field(default=None, alias="avgHR")

    @field_validator("duration", "distance", "avg_hr", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)


class WorkoutDraft(BaseModel):
    """Unvalidated form input for a workout."""

    type: Literal["strength", "cardio"] = STRENGTH
    date: Optional[datetime.date] = None
    notes: str = ""
    recovery: Optional[int] = None
    exercises: list[ExerciseDraft] = Field(default_factory=list)
    cardio: Optional[CardioDraft] = None

    @field_validator("date", "recovery", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)
