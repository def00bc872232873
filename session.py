from __future__ import annotations
import asyncio
import datetime
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from auth_service import Identity, IdentityProvider
from errors import AuthError, MissingWeight
from models import WeightEntry, WorkoutDraft, WorkoutEntry
from stats_service import StatisticsService
from storage_service import StorageService
from workout_service import validate_workout_draft

logger = logging.getLogger(__name__)

WORKOUTS_KEY = "workouts"
WEIGHTS_KEY = "weights"

ViewListener = Callable[[Dict[str, Any]], None]


class TrackerSession:
    """Command handlers and view-models for the signed-in user.

    The session owns the in-memory ``workouts`` and ``weights`` collections
    (most recent first) for the current identity. Every mutation rewrites the
    whole affected collection through the storage service. Identity changes
    cancel pending writes, clear both collections and reload.
    """

    def __init__(
        self,
        storage: StorageService,
        identity_provider: IdentityProvider,
        statistics: Optional[StatisticsService] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ) -> None:
        self.storage = storage
        self.auth = identity_provider
        self.statistics = statistics or StatisticsService()
        self._clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc).astimezone())
        self.identity: Optional[Identity] = None
        self.workouts: List[WorkoutEntry] = []
        self.weights: List[WeightEntry] = []
        self.notices: List[str] = []
        self._listeners: List[ViewListener] = []
        self._pending: set[asyncio.Task] = set()
        self._generation = 0
        # stored items the models cannot read, written back untouched on save
        self._unreadable: Dict[str, List[Any]] = {}
        self.auth.on_identity_change(self._on_identity_change)

    def _notify(self, message: str) -> None:
        self.notices.append(message)

    def pop_notices(self) -> List[str]:
        notices, self.notices = self.notices, []
        return notices

    def _today(self) -> datetime.date:
        return self._clock().date()

    async def sign_in(self) -> Optional[Identity]:
        try:
            identity = await self.auth.sign_in_anonymous()
        except AuthError as e:
            logger.error("Auth error: %s", e)
            self._notify(f"Authentication error: {e}")
            return None
        self._notify("Signed in anonymously. Your data will be saved to this session.")
        return identity

    async def sign_out(self) -> bool:
        try:
            await self.auth.sign_out()
        except AuthError as e:
            logger.error("Auth error: %s", e)
            self._notify(f"Authentication error: {e}")
            return False
        self._notify("Signed out successfully")
        return True

    async def _on_identity_change(self, identity: Optional[Identity]) -> None:
        self._generation += 1
        self._cancel_pending()
        self.identity = identity
        self.workouts = []
        self.weights = []
        self._unreadable = {}
        if identity is not None:
            await self.load()
        self._emit()

    def _cancel_pending(self) -> None:
        for task in list(self._pending):
            if not task.done():
                logger.info("Cancelling pending write for previous identity")
                task.cancel()
        self._pending.clear()

    def _require_identity(self) -> Identity:
        if self.identity is None:
            raise AuthError("sign in required")
        return self.identity

    async def load(self) -> None:
        """Load both collections for the current identity."""
        identity = self._require_identity()
        generation = self._generation
        workouts_doc = await self.storage.get(identity.uid, WORKOUTS_KEY)
        weights_doc = await self.storage.get(identity.uid, WEIGHTS_KEY)
        if generation != self._generation:
            logger.info("Discarding data loaded for %s", identity.uid)
            return
        self._unreadable = {}
        self.workouts = self._parse(WORKOUTS_KEY, workouts_doc, WorkoutEntry)
        self.weights = self._parse(WEIGHTS_KEY, weights_doc, WeightEntry)
        logger.info(
            "Loaded %d workouts and %d weights for %s",
            len(self.workouts),
            len(self.weights),
            identity.uid,
        )
        unreadable = sum(len(items) for items in self._unreadable.values())
        if unreadable:
            self._notify(f"{unreadable} saved entries could not be read; they are kept unchanged")

    def _parse(self, key: str, document: Any, model) -> list:
        if document is None:
            return []
        if not isinstance(document, list):
            logger.warning("Stored %s is not a list; ignoring it", key)
            return []
        entries = []
        skipped = []
        for item in document:
            try:
                entries.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning("Keeping unreadable %s as stored: %s", model.__name__, e)
                skipped.append(item)
        if skipped:
            self._unreadable[key] = skipped
        return entries

    async def _persist(self, key: str, entries: List[Any]) -> bool:
        identity = self._require_identity()
        payload = [e.to_document() for e in entries] + self._unreadable.get(key, [])
        task = asyncio.ensure_future(self.storage.set(identity.uid, key, payload))
        self._pending.add(task)
        try:
            await asyncio.wait({task})
        finally:
            self._pending.discard(task)
        if task.cancelled():
            logger.warning("Write of %s for %s was discarded", key, identity.uid)
            self._notify(f"Could not save {key}; the signed-in user changed before saving")
            return False
        ok = task.result()
        if not ok:
            self._notify(f"Could not save {key}; changes are kept for this session only")
        return ok

    async def submit_workout(self, draft: WorkoutDraft) -> WorkoutEntry:
        """Validate ``draft``, prepend it and save the workout collection."""
        self._require_identity()
        entry = validate_workout_draft(draft, self._clock(), self.workouts)
        self.workouts.insert(0, entry)
        if await self._persist(WORKOUTS_KEY, self.workouts):
            self._notify("Workout saved successfully!")
        self._emit()
        return entry

    async def delete_workout(self, workout_id: int) -> bool:
        self._require_identity()
        remaining = [w for w in self.workouts if w.id != workout_id]
        if len(remaining) == len(self.workouts):
            return False
        self.workouts = remaining
        if await self._persist(WORKOUTS_KEY, self.workouts):
            self._notify("Workout deleted")
        self._emit()
        return True

    async def submit_weight(
        self, weight: Optional[float], date: Optional[datetime.date] = None
    ) -> WeightEntry:
        self._require_identity()
        if not weight or weight <= 0:
            raise MissingWeight()
        now = self._clock()
        # weigh-ins default to the UTC calendar date, as the web client wrote them
        logged_on = date or now.astimezone(datetime.timezone.utc).date()
        entry = WeightEntry(weight=weight, date=logged_on, timestamp=now)
        self.weights.insert(0, entry)
        if await self._persist(WEIGHTS_KEY, self.weights):
            self._notify("Weight logged!")
        self._emit()
        return entry

    def subscribe(self, listener: ViewListener) -> None:
        self._listeners.append(listener)

    def _emit(self) -> None:
        if not self._listeners:
            return
        views = self.views()
        for listener in list(self._listeners):
            listener(views)

    def summary_stats(self) -> Dict:
        return self.statistics.summary_stats(self.workouts, self.weights, self._today())

    def weekly_breakdown(self) -> Dict:
        return self.statistics.weekly_breakdown(self.workouts, self._today())

    def personal_records(self, limit: Optional[int] = None) -> List[Dict]:
        return self.statistics.personal_records(self.workouts, limit)

    def history(self) -> List[Dict]:
        return self.statistics.history_list(self.workouts)

    def workout_detail(self, workout_id: int) -> Optional[Dict]:
        return self.statistics.workout_detail(self.workouts, workout_id)

    def weight_trend(self, limit: Optional[int] = None) -> Dict:
        return self.statistics.weight_trend(self.weights, limit)

    def views(self) -> Dict[str, Any]:
        return {
            "identity": self.identity.model_dump() if self.identity else None,
            "summary": self.summary_stats(),
            "weekly": self.weekly_breakdown(),
            "personal_records": self.personal_records(),
            "history": self.history(),
            "weight_trend": self.weight_trend(),
        }
