import os
import sys
import json
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import backup_db, demo_data, export_user, open_session, print_summary, restore_db
from db import UserDataRepository
from settings_schema import SettingsSchema


@pytest.mark.asyncio
async def test_demo_export_and_summary(tmp_path, capsys):
    db_path = str(tmp_path / "tracker.db")
    settings = SettingsSchema(db_path=db_path, storage_backoff=0)
    await demo_data(db_path, "alice", settings)
    await demo_data(db_path, "alice", settings)
    out = capsys.readouterr().out
    assert "Demo data inserted" in out
    assert "User already has workouts" in out

    session = await open_session(db_path, "alice", settings)
    assert [w.type for w in session.workouts] == ["strength", "cardio"]
    assert session.personal_records()[0]["weight"] == 145.0
    assert session.summary_stats()["current_weight"] == 180.0

    export_path = str(tmp_path / "export.json")
    await export_user(db_path, "alice", export_path)
    with open(export_path, encoding="utf-8") as f:
        exported = json.load(f)
    assert sorted(exported) == ["weights", "workouts"]
    assert len(exported["workouts"]["value"]) == 2
    assert exported["workouts"]["updatedAt"]

    await print_summary(db_path, "alice", settings)
    printed = json.loads(capsys.readouterr().out)
    assert printed["summary"]["total_workouts"] == 2
    assert printed["weekly"]["strength"] == 1


@pytest.mark.asyncio
async def test_backup_restore(tmp_path):
    db_path = str(tmp_path / "tracker.db")
    backup_path = str(tmp_path / "backup.db")
    repo = UserDataRepository(db_path)
    await repo.set("alice", "workouts", [{"id": 1}])
    backup_db(db_path, backup_path)
    await repo.set("alice", "workouts", [])
    restore_db(backup_path, db_path)
    assert await UserDataRepository(db_path).get("alice", "workouts") == [{"id": 1}]
