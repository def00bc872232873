import datetime
from typing import Optional
from fastapi import FastAPI, HTTPException, Body, APIRouter, Query

from auth_service import LocalIdentityProvider
from config import YamlConfig, load_settings, configure_logging
from db import UserDataRepository
from errors import AuthError, StorageError, WorkoutValidationError
from models import WorkoutDraft
from session import TrackerSession
from stats_service import StatisticsService
from storage_service import StorageService
from workout_service import WORKOUT_TEMPLATES, draft_from_template


class TrackerAPI:
    """Provides REST endpoints for workout logging."""

    def __init__(
        self,
        db_path: str | None = None,
        yaml_path: str = "settings.yaml",
    ) -> None:
        self.settings = load_settings(yaml_path)
        self.db_path = db_path or self.settings.db_path
        self.repository = UserDataRepository(self.db_path)
        self.storage = StorageService.from_settings(self.repository, self.settings)
        self.identity = LocalIdentityProvider(YamlConfig(yaml_path))
        self.statistics = StatisticsService.from_settings(self.settings)
        self.session = TrackerSession(self.storage, self.identity, self.statistics)
        self.app = FastAPI(
            title="Training Tracker API",
            description="REST API for workout logging and progress tracking",
        )
        self._setup_routes()

    def _require_session(self) -> TrackerSession:
        if self.session.identity is None:
            raise HTTPException(status_code=401, detail="sign in required")
        return self.session

    def _setup_routes(self) -> None:
        auth_router = APIRouter(prefix="/auth", tags=["Auth"])
        stats_router = APIRouter(prefix="/stats", tags=["Statistics"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and storage connectivity.",
        )
        async def health():
            """Return API and storage connection status."""
            try:
                users = await self.repository.fetch_users()
                return {"status": "ok", "users": len(users)}
            except StorageError as e:  # pragma: no cover - connectivity failure
                raise HTTPException(status_code=500, detail=str(e))

        @auth_router.post("/anonymous")
        async def sign_in_anonymous():
            identity = await self.session.sign_in()
            if identity is None:
                raise HTTPException(
                    status_code=401, detail=" ".join(self.session.pop_notices())
                )
            return identity.model_dump()

        @auth_router.post("/signout")
        async def sign_out():
            if not await self.session.sign_out():
                raise HTTPException(
                    status_code=401, detail=" ".join(self.session.pop_notices())
                )
            return {"status": "signed_out"}

        @auth_router.get("/me")
        def current_identity():
            identity = self.session.identity
            return identity.model_dump() if identity else None

        @self.app.get("/workouts")
        def list_workouts():
            return self._require_session().history()

        @self.app.post("/workouts")
        async def create_workout(draft: WorkoutDraft = Body(...)):
            session = self._require_session()
            try:
                entry = await session.submit_workout(draft)
            except WorkoutValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except AuthError as e:
                raise HTTPException(status_code=401, detail=str(e))
            return {"id": entry.id}

        @self.app.get("/workouts/{workout_id}")
        def get_workout(workout_id: int):
            detail = self._require_session().workout_detail(workout_id)
            if detail is None:
                raise HTTPException(status_code=404, detail="workout not found")
            return detail

        @self.app.delete("/workouts/{workout_id}")
        async def delete_workout(workout_id: int):
            if not await self._require_session().delete_workout(workout_id):
                raise HTTPException(status_code=404, detail="workout not found")
            return {"status": "deleted"}

        @self.app.get("/templates")
        def list_templates():
            return sorted(WORKOUT_TEMPLATES)

        @self.app.get("/templates/{name}")
        def get_template(name: str, date: Optional[datetime.date] = None):
            try:
                draft = draft_from_template(name, date or datetime.date.today())
            except ValueError as e:
                raise HTTPException(status_code=404, detail=str(e))
            return draft.model_dump(mode="json", by_alias=True)

        @self.app.post("/weights")
        async def log_weight(
            weight: Optional[float] = Body(None, embed=True),
            date: Optional[datetime.date] = Body(None, embed=True),
        ):
            session = self._require_session()
            try:
                entry = await session.submit_weight(weight, date)
            except WorkoutValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))
            return entry.to_document()

        @self.app.get("/progress/weights")
        def weight_trend(limit: Optional[int] = Query(None, ge=0)):
            return self._require_session().weight_trend(limit)

        @stats_router.get("/summary")
        def summary_stats():
            return self._require_session().summary_stats()

        @stats_router.get("/weekly")
        def weekly_breakdown():
            return self._require_session().weekly_breakdown()

        @stats_router.get("/personal_records")
        def personal_records(limit: Optional[int] = Query(None, ge=0)):
            return self._require_session().personal_records(limit)

        @self.app.get("/notices")
        def notices():
            return self.session.pop_notices()

        self.app.include_router(auth_router)
        self.app.include_router(stats_router)


if __name__ == "__main__":
    import uvicorn

    api = TrackerAPI()
    configure_logging(api.settings.log_level)
    uvicorn.run(api.app)
