from __future__ import annotations
import inspect
import logging
import uuid
from typing import Awaitable, Callable, List, Optional, Union

import yaml
from keyring.errors import KeyringError
from pydantic import BaseModel, ConfigDict

from config import YamlConfig
from errors import AuthError

logger = logging.getLogger(__name__)

IdentityCallback = Callable[[Optional["Identity"]], Union[None, Awaitable[None]]]


class Identity(BaseModel):
    """Principal that user data is scoped under."""

    model_config = ConfigDict(frozen=True)

    uid: str
    label: str = "anonymous"
    is_anonymous: bool = True


class IdentityProvider:
    """Base identity source; subclasses implement sign-in and sign-out."""

    def __init__(self) -> None:
        self._current: Optional[Identity] = None
        self._callbacks: List[IdentityCallback] = []

    def current_identity(self) -> Optional[Identity]:
        return self._current

    def on_identity_change(self, callback: IdentityCallback) -> None:
        self._callbacks.append(callback)

    async def _set_identity(self, identity: Optional[Identity]) -> None:
        self._current = identity
        for callback in list(self._callbacks):
            result = callback(identity)
            if inspect.isawaitable(result):
                await result

    async def sign_in_anonymous(self) -> Identity:
        raise NotImplementedError()

    async def sign_out(self) -> None:
        raise NotImplementedError()


class LocalIdentityProvider(IdentityProvider):
    """Anonymous identities that persist per device.

    The anonymous uid is remembered in the YAML settings (keyring-backed when
    ``ENCRYPT_SETTINGS=1``) so signing in again restores the same data.
    """

    UID_KEY = "anonymous_uid"

    def __init__(self, config: Optional[YamlConfig] = None) -> None:
        super().__init__()
        self.config = config

    def _remembered_uid(self) -> Optional[str]:
        if self.config is None:
            return None
        uid = self.config.load().get(self.UID_KEY)
        return str(uid) if uid else None

    def _remember_uid(self, uid: str) -> None:
        if self.config is not None:
            self.config.update(**{self.UID_KEY: uid})

    async def sign_in_anonymous(self) -> Identity:
        if self._current is not None:
            return self._current
        try:
            uid = self._remembered_uid()
            if uid is None:
                uid = uuid.uuid4().hex
                self._remember_uid(uid)
        except (OSError, ValueError, yaml.YAMLError, KeyringError) as e:
            raise AuthError(f"anonymous sign-in failed: {e}") from e
        identity = Identity(uid=uid)
        logger.info("Signed in anonymously as %s", uid)
        await self._set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        if self._current is None:
            raise AuthError("not signed in")
        logger.info("Signed out %s", self._current.uid)
        await self._set_identity(None)
