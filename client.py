import requests
from typing import Optional

class TrackerClient:
    """Simple REST client for the tracker API."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = requests.Session()

    def _get(self, path: str, **params):
        resp = self.http.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _post(self, path: str, json: Optional[dict] = None):
        resp = self.http.post(f"{self.base_url}{path}", json=json, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def sign_in_anonymous(self) -> dict:
        return self._post("/auth/anonymous")

    def sign_out(self) -> None:
        self._post("/auth/signout")

    def create_workout(self, draft: dict) -> int:
        return self._post("/workouts", json=draft)["id"]

    def list_workouts(self) -> list:
        return self._get("/workouts")

    def get_workout(self, workout_id: int) -> dict:
        return self._get(f"/workouts/{workout_id}")

    def delete_workout(self, workout_id: int) -> None:
        resp = self.http.delete(f"{self.base_url}/workouts/{workout_id}", timeout=self.timeout)
        resp.raise_for_status()

    def template(self, name: str) -> dict:
        return self._get(f"/templates/{name}")

    def log_weight(self, weight: float, date: Optional[str] = None) -> dict:
        return self._post("/weights", json={"weight": weight, "date": date})

    def summary(self) -> dict:
        return self._get("/stats/summary")

    def weekly(self) -> dict:
        return self._get("/stats/weekly")

    def personal_records(self, limit: Optional[int] = None) -> list:
        params = {"limit": limit} if limit is not None else {}
        return self._get("/stats/personal_records", **params)

    def weight_trend(self, limit: Optional[int] = None) -> dict:
        params = {"limit": limit} if limit is not None else {}
        return self._get("/progress/weights", **params)
