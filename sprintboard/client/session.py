"""Durable cache for the logged-in user.

The only client state that survives a restart. Stored as a small JSON
document under a fixed key; anything unreadable is discarded and the user
is treated as logged out.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from sprintboard.config import SESSION_FILE
from sprintboard.schemas import UserResponse

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "currentUser"


class SessionCache:
    def __init__(self, path: Path = SESSION_FILE):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("session file is not an object")
        return data

    def load_user(self) -> Optional[UserResponse]:
        try:
            raw = self._read().get(CURRENT_USER_KEY)
            if raw is None:
                return None
            return UserResponse.model_validate(raw)
        except (OSError, ValueError, ValidationError) as e:
            # ValueError covers json.JSONDecodeError
            logger.error(f"[Session] Failed to parse cached user, discarding: {e}")
            self.clear_user()
            return None

    def _write(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w') as f:
                json.dump(data, f, indent=4)
        except OSError as e:
            # the in-memory user stays; only persistence is lost
            logger.error(f"[Session] Failed to write {self.path}: {e}")

    def save_user(self, user: UserResponse) -> None:
        try:
            data = self._read()
        except (OSError, ValueError):
            data = {}
        data[CURRENT_USER_KEY] = user.model_dump(mode="json", by_alias=True)
        self._write(data)

    def clear_user(self) -> None:
        if not self.path.exists():
            return
        try:
            data = self._read()
        except (OSError, ValueError):
            data = {}
        data.pop(CURRENT_USER_KEY, None)
        self._write(data)
