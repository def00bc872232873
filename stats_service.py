from __future__ import annotations
import datetime
from typing import Dict, List, Optional, Sequence

from algorithms import MathTools
from models import CARDIO, NA, STRENGTH, WeightEntry, WorkoutEntry

WINDOW_DAYS = 7


class StatisticsService:
    """Compute workout statistics for analysis.

    All methods are pure: they read the collections passed in (ordered
    most-recent-first) and never touch storage.
    """

    def __init__(
        self,
        weekly_goal: int = 3,
        pr_display_limit: Optional[int] = 6,
        recent_weights_limit: int = 10,
        weight_unit: str = "lbs",
    ) -> None:
        self.weekly_goal = weekly_goal
        self.pr_display_limit = pr_display_limit
        self.recent_weights_limit = recent_weights_limit
        self.weight_unit = weight_unit

    @classmethod
    def from_settings(cls, settings) -> "StatisticsService":
        return cls(
            weekly_goal=settings.weekly_goal,
            pr_display_limit=settings.pr_display_limit,
            recent_weights_limit=settings.recent_weights_limit,
            weight_unit=settings.weight_unit,
        )

    @staticmethod
    def _today(today: Optional[datetime.date]) -> datetime.date:
        return today or datetime.date.today()

    def last_7_days(
        self,
        workouts: Sequence[WorkoutEntry],
        today: Optional[datetime.date] = None,
    ) -> List[WorkoutEntry]:
        """Return workouts dated within [today - 7 days, today]."""
        end = self._today(today)
        start = end - datetime.timedelta(days=WINDOW_DAYS)
        return [w for w in workouts if start <= w.date <= end]

    @staticmethod
    def recovery_scores(workouts: Sequence[WorkoutEntry]) -> List[int]:
        # a stored 0 means "not scored"
        return [w.recovery for w in workouts if w.recovery]

    def summary_stats(
        self,
        workouts: Sequence[WorkoutEntry],
        weights: Sequence[WeightEntry],
        today: Optional[datetime.date] = None,
    ) -> Dict[str, int | float | str]:
        """Return aggregated workout statistics."""
        avg_recovery = MathTools.mean(self.recovery_scores(workouts), digits=1)
        return {
            "total_workouts": len(workouts),
            "strength_count": sum(1 for w in workouts if w.type == STRENGTH),
            "cardio_count": sum(1 for w in workouts if w.type == CARDIO),
            "last_7_days_count": len(self.last_7_days(workouts, today)),
            "avg_recovery": avg_recovery if avg_recovery is not None else NA,
            "current_weight": weights[0].weight if weights else NA,
        }

    def weekly_breakdown(
        self,
        workouts: Sequence[WorkoutEntry],
        today: Optional[datetime.date] = None,
    ) -> Dict[str, int | bool]:
        """Return strength and cardio counts for the trailing week."""
        recent = self.last_7_days(workouts, today)
        strength = sum(1 for w in recent if w.type == STRENGTH)
        cardio = sum(1 for w in recent if w.type == CARDIO)
        return {
            "strength": strength,
            "cardio": cardio,
            "total": len(recent),
            "goal": self.weekly_goal,
            "goal_met": strength >= self.weekly_goal,
        }

    def personal_records(
        self,
        workouts: Sequence[WorkoutEntry],
        limit: Optional[int] = None,
    ) -> List[Dict[str, float | int | str]]:
        """Return the heaviest set per exercise in first-seen order.

        Ties keep the earliest set in iteration order, i.e. the most recent
        workout. ``limit`` defaults to ``pr_display_limit``; ``0`` returns every
        exercise.
        """
        if limit is None:
            limit = self.pr_display_limit
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        records: Dict[str, Dict[str, float | int | str]] = {}
        for workout in workouts:
            if workout.type != STRENGTH:
                continue
            for exercise in workout.exercises:
                for s in exercise.sets:
                    current = records.get(exercise.name)
                    if current is None or s.weight > current["weight"]:
                        records[exercise.name] = {
                            "exercise": exercise.name,
                            "weight": s.weight,
                            "reps": s.reps,
                            "date": workout.date.isoformat(),
                            "est_1rm": round(MathTools.epley_1rm(s.weight, s.reps), 2),
                        }
        result = list(records.values())
        if limit:
            result = result[:limit]
        return result

    @staticmethod
    def workout_summary(workout: WorkoutEntry) -> str:
        if workout.type == STRENGTH:
            return f"{len(workout.exercises)} exercises • {workout.total_sets} total sets"
        cardio = workout.cardio
        text = f"{cardio.activity} • {cardio.duration} min"
        if cardio.distance:
            text += f" • {cardio.distance}"
        return text

    def history_list(self, workouts: Sequence[WorkoutEntry]) -> List[Dict]:
        """Return one display row per workout, most recent first."""
        rows = []
        for w in workouts:
            row = {
                "id": w.id,
                "type": w.type,
                "date": w.date.isoformat(),
                "summary": self.workout_summary(w),
                "recovery": w.recovery or None,
                "notes": w.notes,
            }
            if w.type == STRENGTH:
                row["volume"] = round(
                    MathTools.volume(
                        [(s.reps, s.weight) for ex in w.exercises for s in ex.sets]
                    ),
                    2,
                )
            rows.append(row)
        return rows

    @staticmethod
    def workout_detail(
        workouts: Sequence[WorkoutEntry], workout_id: int
    ) -> Optional[Dict]:
        for w in workouts:
            if w.id == workout_id:
                return w.to_document()
        return None

    def weight_trend(
        self, weights: Sequence[WeightEntry], limit: Optional[int] = None
    ) -> Dict:
        """Return recent weigh-ins plus overall change and weekly rate.

        ``limit`` defaults to ``recent_weights_limit``; ``0`` lists every entry.
        """
        limit = self.recent_weights_limit if limit is None else limit
        if limit < 0:
            raise ValueError("limit must be non-negative")
        entries = [
            {"date": w.date.isoformat(), "weight": w.weight}
            for w in (weights[:limit] if limit else weights)
        ]
        if not weights:
            return {
                "entries": [],
                "current": NA,
                "change": None,
                "weekly_rate": None,
                "unit": self.weight_unit,
            }
        return {
            "entries": entries,
            "current": weights[0].weight,
            "change": round(weights[0].weight - weights[-1].weight, 2),
            "weekly_rate": MathTools.weekly_slope((w.date, w.weight) for w in weights),
            "unit": self.weight_unit,
        }
