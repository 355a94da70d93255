"""
Session Gate

A plain credential check against a static list of operators. On
success the operator is serialized into a client-local mapping
(streamlit's session_state in the app, a dict in tests) under the
configured key; protected screens check for it.

DESIGN DECISION: This is a gate, not authentication. Hardening
(hashing, lockout, expiry) is out of scope.
"""

from collections.abc import MutableMapping
from typing import Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError

from church_office.activity import ActivityLogger
from church_office.config import OperatorCredential, get_settings
from church_office.errors import (
    INVALID_CREDENTIALS_MESSAGE,
    MISSING_CREDENTIALS_MESSAGE,
    InvalidCredentialsError,
)


class SessionUser(BaseModel):
    """What is kept client-side for a logged-in operator."""

    cedula: str
    name: str


class SessionGate:
    """Checks credentials and keeps the logged-in operator in a store."""

    def __init__(
        self,
        store: MutableMapping,
        credentials: Optional[list[OperatorCredential]] = None,
        storage_key: Optional[str] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        if credentials is None or storage_key is None:
            session_settings = get_settings().session
            credentials = credentials if credentials is not None else session_settings.credentials
            storage_key = storage_key or session_settings.storage_key
        self._store = store
        self._credentials = credentials
        self._key = storage_key
        self._activity = activity or ActivityLogger()

    def login(self, cedula: str, password: str) -> SessionUser:
        """
        Check credentials and remember the operator.

        Raises:
            InvalidCredentialsError: If a field is empty or nothing matches
        """
        cedula = (cedula or "").strip()
        if not cedula or not password:
            raise InvalidCredentialsError(MISSING_CREDENTIALS_MESSAGE)

        for credential in self._credentials:
            if credential.cedula == cedula and credential.password == password:
                user = SessionUser(cedula=credential.cedula, name=credential.name)
                self._store[self._key] = user.model_dump_json()
                self._activity.log_login(cedula, user.name, succeeded=True)
                return user

        self._activity.log_login(cedula, None, succeeded=False)
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    def current_user(self) -> Optional[SessionUser]:
        """The logged-in operator, or None. A corrupt entry is discarded."""
        raw = self._store.get(self._key)
        if not raw:
            return None
        try:
            return SessionUser.model_validate_json(raw)
        except PydanticValidationError:
            del self._store[self._key]
            return None

    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def logout(self) -> None:
        user = self.current_user()
        self._store.pop(self._key, None)
        self._activity.log_logout(user.cedula if user else None)
