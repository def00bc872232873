import os
import logging
import yaml
import keyring

from settings_schema import SettingsSchema, validate_settings

APP_VERSION = "1.0.0"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


class YamlConfig:
    """Tracker settings stored as YAML.

    With ``ENCRYPT_SETTINGS=1`` the values named in ``SENSITIVE_KEYS`` live in
    the system keyring and the file only records that they are set.
    """

    SENSITIVE_KEYS = {"anonymous_uid"}

    def __init__(self, path: str = "settings.yaml", service: str = "training-tracker") -> None:
        self.path = path
        self.service = service
        self.encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"

    def _resolve_secrets(self, data: dict) -> dict:
        for key in self.SENSITIVE_KEYS & set(data):
            secret = keyring.get_password(self.service, key)
            if secret is None:
                logger.warning("No keyring entry for %s; ignoring it", key)
                del data[key]
            else:
                data[key] = secret
        return data

    def _store_secrets(self, data: dict) -> dict:
        stored = dict(data)
        for key in self.SENSITIVE_KEYS & set(stored):
            keyring.set_password(self.service, key, str(stored[key]))
            stored[key] = True
        return stored

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return self._resolve_secrets(data) if self.encrypt else data

    def save(self, data: dict) -> None:
        out = self._store_secrets(data) if self.encrypt else dict(data)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f)

    def update(self, **values) -> dict:
        """Merge ``values`` into the stored settings and save them."""
        data = self.load()
        data.update(values)
        self.save(data)
        return data


def load_settings(path: str = "settings.yaml") -> SettingsSchema:
    """Return validated settings from ``path`` with environment overrides."""
    data = YamlConfig(path).load()
    db_override = os.environ.get("TRACKER_DB")
    if db_override:
        data["db_path"] = db_override
    return validate_settings(data)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
