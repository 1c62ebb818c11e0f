"""HTTP client for the sprint board store.

One coroutine per resource and verb. Every call is a single fresh request:
no retries and no caching. Non-2xx answers, transport failures and payloads
that do not parse all surface as `StoreError`.
"""
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from sprintboard.config import API_URL, REQUEST_TIMEOUT
from sprintboard.schemas import (
    ColumnCreate, ColumnUpdate, ColumnResponse, ColumnWithTasks,
    SprintCreate, SprintResponse, SprintUpdate,
    TaskCreate, TaskMove, TaskResponse, TaskUpdate,
    UserCreate, UserResponse, UserUpdate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreError(Exception):
    """A store round trip did not succeed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _body(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


class StoreClient:
    def __init__(
        self,
        base_url: str = API_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "StoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, fallback: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[Store] {method} {path} failed: {e!r}")
            raise StoreError(fallback) from e

        if response.is_error:
            message = fallback
            try:
                message = response.json().get("error") or fallback
            except (ValueError, AttributeError):
                pass
            logger.error(f"[Store] {method} {path} -> {response.status_code}: {message}")
            raise StoreError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise StoreError(fallback, status_code=response.status_code) from e

    async def _call(self, adapter: Type[T], method: str, path: str, fallback: str, **kwargs) -> T:
        data = await self._request(method, path, fallback, **kwargs)
        try:
            return TypeAdapter(adapter).validate_python(data)
        except ValidationError as e:
            logger.error(f"[Store] Unexpected payload from {method} {path}: {e}")
            raise StoreError(fallback) from e

    # --- columns ---
    async def fetch_columns(self) -> List[ColumnWithTasks]:
        return await self._call(List[ColumnWithTasks], "GET", "/columns", "Failed to fetch columns")

    async def create_column(self, title: str, order: int) -> ColumnResponse:
        payload = ColumnCreate(title=title, order=order)
        return await self._call(ColumnResponse, "POST", "/columns", "Failed to create column", json=_body(payload))

    async def update_column(self, column_id: int, title: str) -> ColumnResponse:
        payload = ColumnUpdate(id=column_id, title=title)
        return await self._call(ColumnResponse, "PUT", "/columns", "Failed to update column", json=_body(payload))

    async def delete_column(self, column_id: int) -> None:
        await self._request("DELETE", "/columns", "Failed to delete column", params={"id": column_id})

    # --- tasks ---
    async def fetch_tasks(self) -> List[TaskResponse]:
        return await self._call(List[TaskResponse], "GET", "/tasks", "Failed to fetch tasks")

    async def create_task(self, payload: TaskCreate) -> TaskResponse:
        return await self._call(TaskResponse, "POST", "/tasks", "Failed to create task", json=_body(payload))

    async def update_task(self, payload: TaskUpdate) -> TaskResponse:
        return await self._call(TaskResponse, "PUT", "/tasks", "Failed to update task", json=_body(payload))

    async def patch_task(self, payload: TaskMove) -> TaskResponse:
        return await self._call(TaskResponse, "PATCH", "/tasks", "Failed to move task", json=_body(payload))

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", "/tasks", "Failed to delete task", params={"id": task_id})

    # --- sprints ---
    async def fetch_sprints(self) -> List[SprintResponse]:
        return await self._call(List[SprintResponse], "GET", "/sprints", "Failed to fetch sprints")

    async def create_sprint(self, payload: SprintCreate) -> SprintResponse:
        return await self._call(SprintResponse, "POST", "/sprints", "Failed to create sprint", json=_body(payload))

    async def update_sprint(self, payload: SprintUpdate) -> SprintResponse:
        return await self._call(SprintResponse, "PUT", "/sprints", "Failed to update sprint", json=_body(payload))

    async def delete_sprint(self, sprint_id: int) -> None:
        await self._request("DELETE", "/sprints", "Failed to delete sprint", params={"id": sprint_id})

    # --- users ---
    async def fetch_users(self) -> List[UserResponse]:
        return await self._call(List[UserResponse], "GET", "/users", "Failed to fetch users")

    async def create_user(self, payload: UserCreate) -> UserResponse:
        return await self._call(UserResponse, "POST", "/users", "Failed to create user", json=_body(payload))

    async def update_user(self, payload: UserUpdate) -> UserResponse:
        return await self._call(UserResponse, "PUT", "/users", "Failed to update user", json=_body(payload))

    async def delete_user(self, user_id: int) -> None:
        await self._request("DELETE", "/users", "Failed to delete user", params={"id": user_id})

    async def login(self, email: str, password: str) -> UserResponse:
        # built by hand: the email is checked by the store, not here
        payload = {"email": email, "password": password}
        return await self._call(UserResponse, "POST", "/auth", "Login failed", json=payload)
