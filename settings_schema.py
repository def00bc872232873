from pydantic import BaseModel, Field, ValidationError

class SettingsSchema(BaseModel):
    db_path: str = "tracker.db"
    weekly_goal: int = 3
    pr_display_limit: int = Field(6, ge=0)
    recent_weights_limit: int = Field(10, ge=0)
    weight_unit: str = "lbs"
    storage_timeout: float = 10.0
    storage_retries: int = 2
    storage_backoff: float = 0.1
    log_level: str = "INFO"
    anonymous_uid: str | None = None

def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
