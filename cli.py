import argparse
import asyncio
import datetime
import json
import shutil

from algorithms import WeightConverter
from auth_service import Identity, IdentityProvider
from config import configure_logging, load_settings
from db import UserDataRepository
from models import ExerciseDraft, SetDraft, WorkoutDraft, CardioDraft
from session import TrackerSession
from stats_service import StatisticsService
from storage_service import StorageService


class FixedIdentityProvider(IdentityProvider):
    """Identity source for offline tools acting on a known user id."""

    def __init__(self, uid: str) -> None:
        super().__init__()
        self.uid = uid

    async def sign_in_anonymous(self) -> Identity:
        identity = Identity(uid=self.uid, label=self.uid)
        await self._set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        await self._set_identity(None)


async def open_session(db_path: str, user_id: str, settings) -> TrackerSession:
    storage = StorageService.from_settings(UserDataRepository(db_path), settings)
    session = TrackerSession(
        storage,
        FixedIdentityProvider(user_id),
        StatisticsService.from_settings(settings),
    )
    await session.sign_in()
    return session


async def export_user(db_path: str, user_id: str, out_path: str) -> None:
    repo = UserDataRepository(db_path)
    data = {}
    for key in await repo.list(user_id):
        data[key] = {
            "value": await repo.get(user_id, key),
            "updatedAt": await repo.updated_at(user_id, key),
        }
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


async def demo_data(db_path: str, user_id: str, settings) -> None:
    """Populate the user's documents with demo workouts if empty."""
    session = await open_session(db_path, user_id, settings)
    if session.workouts:
        print("User already has workouts")
        return
    today = datetime.date.today()
    await session.submit_workout(
        WorkoutDraft(
            type="cardio",
            date=today - datetime.timedelta(days=1),
            recovery=7,
            cardio=CardioDraft(activity="Run", duration=30, distance="5 km"),
        )
    )
    await session.submit_workout(
        WorkoutDraft(
            date=today,
            notes="Demo session",
            recovery=8,
            exercises=[
                ExerciseDraft(
                    name="Barbell Bench Press",
                    sets=[SetDraft(reps=5, weight=135.0), SetDraft(reps=5, weight=145.0)],
                )
            ],
        )
    )
    await session.submit_weight(180.0)
    print("Demo data inserted")


async def print_summary(db_path: str, user_id: str, settings) -> None:
    session = await open_session(db_path, user_id, settings)
    print(json.dumps(
        {
            "summary": session.summary_stats(),
            "weekly": session.weekly_breakdown(),
            "personal_records": session.personal_records(),
        },
        indent=2,
    ))


def main() -> None:
    parser = argparse.ArgumentParser(description="Utility commands")
    parser.add_argument("--settings", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default=None)
    exp.add_argument("--user", required=True)
    exp.add_argument("--out", default="export.json")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default=None)
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default=None)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default=None)
    demo.add_argument("--user", required=True)

    summ = sub.add_parser("summary")
    summ.add_argument("--db", default=None)
    summ.add_argument("--user", required=True)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    args = parser.parse_args()
    settings = load_settings(args.settings)
    configure_logging(settings.log_level)
    db_path = getattr(args, "db", None) or settings.db_path

    if args.cmd == "export":
        asyncio.run(export_user(db_path, args.user, args.out))
    elif args.cmd == "backup":
        backup_db(db_path, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, db_path)
    elif args.cmd == "demo":
        asyncio.run(demo_data(db_path, args.user, settings))
    elif args.cmd == "summary":
        asyncio.run(print_summary(db_path, args.user, settings))
    elif args.cmd == "convert":
        target = "lb" if args.unit == "kg" else "kg"
        converted = WeightConverter.convert(args.weight, args.unit, target)
        print(f"{args.weight} {args.unit} = {converted} {target}")


if __name__ == "__main__":
    main()
