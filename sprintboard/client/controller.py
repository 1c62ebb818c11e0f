"""Board state controller.

Owns the in-memory snapshot of columns, sprints and users plus the logged-in
user, and is the only writer of that snapshot. Every mutation follows the
same path: permission check, one round trip to the store, then a refetch of
the affected slice which replaces the snapshot wholesale.

Operations never raise store failures to the caller. A failure is logged and
reported through `error`, which always holds the most recent message only.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from pydantic import ValidationError

from sprintboard.client.ordering import MoveError, OrderUpdate, apply_updates, plan_move
from sprintboard.client.projection import (
    Card, CardFields, Column, Sprint, project_column, project_sprint
)
from sprintboard.client.session import SessionCache
from sprintboard.client.store import StoreClient, StoreError
from sprintboard.config import OPERATION_TIMEOUT
from sprintboard.permissions import has_permission
from sprintboard.schemas import (
    SprintCreate, SprintUpdate, TaskCreate, TaskMove, TaskUpdate, UserCreate, UserResponse, UserUpdate
)

logger = logging.getLogger(__name__)

Listener = Callable[["BoardController"], None]

# failures that end an operation without reaching the caller
OPERATION_ERRORS = (StoreError, ValidationError, MoveError, asyncio.TimeoutError)

# column changes are not in the role table, any logged-in user may make them
LOGGED_IN = "logged_in"

DENIED_MESSAGES = {
    LOGGED_IN: "You need to log in to manage columns",
    "create_task": "You don't have permission to create tasks",
    "edit_task": "You don't have permission to edit tasks",
    "delete_task": "You don't have permission to delete tasks",
    "move_task": "You don't have permission to move tasks",
    "create_sprint": "You don't have permission to create sprints",
    "edit_sprint": "You don't have permission to edit sprints",
    "delete_sprint": "You don't have permission to delete sprints",
    "create_user": "You don't have permission to create users",
    "edit_user": "You don't have permission to edit users",
    "delete_user": "You don't have permission to delete users",
}


def _task_fields(fields: CardFields) -> dict:
    return {
        "title": fields.title,
        "description": fields.description,
        "priority": fields.priority,
        "story_points": fields.story_points,
        "progress": fields.progress,
        "time_estimate": fields.time_estimate,
        "module": fields.module,
        "target": fields.target,
        "image_url": fields.image_url,
        "start_date": fields.start_date,
        "due_date": fields.due_date,
        "sprint_id": fields.sprint_id,
        "assignee_id": fields.assignee_id,
    }


class BoardController:
    def __init__(
        self,
        store: StoreClient,
        session: Optional[SessionCache] = None,
        operation_timeout: float = OPERATION_TIMEOUT,
    ):
        self.store = store
        self.session = session
        self.operation_timeout = operation_timeout

        self.columns: List[Column] = []
        self.sprints: List[Sprint] = []
        self.current_sprint: Optional[Sprint] = None
        self.users: List[UserResponse] = []
        self.current_user: Optional[UserResponse] = None
        self.loading: bool = False
        self.error: Optional[str] = None

        self._listeners: List[Listener] = []

    # -------------------- lifecycle / listeners --------------------
    async def start(self) -> None:
        """Restore the cached user and load every slice."""
        if self.session is not None:
            self.current_user = self.session.load_user()
        # columns first: a successful board load clears error
        await self.refresh_data()
        await asyncio.gather(self.refresh_sprints(), self.refresh_users())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every snapshot replacement. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("[Board] Listener failed")

    # -------------------- helpers --------------------
    async def _bounded(self, awaitable: Awaitable):
        return await asyncio.wait_for(awaitable, self.operation_timeout)

    def _fail(self, message: str, exc: BaseException) -> None:
        logger.error(f"[Board] {message}: {exc!r}")
        self.error = message
        self._publish()

    def _allowed(self, action: str) -> bool:
        if action == LOGGED_IN:
            allowed = self.current_user is not None
        else:
            allowed = self.has_permission(action)
        if not allowed:
            role = self.current_user.role if self.current_user else "anonymous"
            logger.warning(f"[Board] Denied {action} for {role}")
            self.error = DENIED_MESSAGES.get(action, "You don't have permission to do that")
            self._publish()
        return allowed

    async def _mutate(
        self,
        action: str,
        failure: str,
        call: Callable[[], Awaitable],
        refresh: Callable[[], Awaitable[None]],
    ) -> bool:
        if not self._allowed(action):
            return False
        try:
            await self._bounded(call())
        except OPERATION_ERRORS as e:
            self._fail(failure, e)
            return False
        await refresh()
        return True

    # -------------------- permissions / session --------------------
    def has_permission(self, action: str) -> bool:
        if self.current_user is None:
            return False
        return has_permission(self.current_user.role, action)

    def set_current_user(self, user: Optional[UserResponse]) -> None:
        self.current_user = user
        if self.session is not None:
            if user is None:
                self.session.clear_user()
            else:
                self.session.save_user(user)
        self._publish()

    async def login(self, email: str, password: str) -> Optional[UserResponse]:
        try:
            user = await self._bounded(self.store.login(email, password))
        except StoreError as e:
            # the store's own message when it answered, generic otherwise
            self._fail(e.message if e.status_code else "Login failed. Please try again.", e)
            return None
        except asyncio.TimeoutError as e:
            self._fail("Login failed. Please try again.", e)
            return None

        logger.info(f"[Board] Logged in as user {user.id}")
        self.set_current_user(user)
        return user

    def logout(self) -> None:
        self.set_current_user(None)

    # -------------------- refresh --------------------
    async def refresh_data(self) -> None:
        self.loading = True
        self._publish()
        try:
            data = await self._bounded(self.store.fetch_columns())
            self.columns = [project_column(c) for c in data]
            self.error = None
        except OPERATION_ERRORS as e:
            # keep the previous snapshot
            logger.error(f"[Board] Error loading data: {e!r}")
            self.error = "Failed to load data from database"
        finally:
            self.loading = False
        self._publish()

    async def refresh_sprints(self) -> None:
        try:
            data = await self._bounded(self.store.fetch_sprints())
        except OPERATION_ERRORS as e:
            self._fail("Failed to load sprints from database", e)
            return

        self.sprints = [project_sprint(s) for s in data]
        if self.current_sprint is not None:
            self.current_sprint = next((s for s in self.sprints if s.id == self.current_sprint.id), None)
        self._publish()

    async def refresh_users(self) -> None:
        try:
            self.users = await self._bounded(self.store.fetch_users())
        except OPERATION_ERRORS as e:
            self._fail("Failed to load users from database", e)
            return
        self._publish()

    # -------------------- columns --------------------
    async def add_column(self, title: str) -> None:
        order = max((c.order for c in self.columns), default=0) + 1
        await self._mutate(
            LOGGED_IN, "Failed to add column",
            lambda: self.store.create_column(title, order),
            self.refresh_data,
        )

    async def update_column(self, column_id: int, title: str) -> None:
        await self._mutate(
            LOGGED_IN, "Failed to update column",
            lambda: self.store.update_column(column_id, title),
            self.refresh_data,
        )

    async def delete_column(self, column_id: int) -> None:
        await self._mutate(
            LOGGED_IN, "Failed to delete column",
            lambda: self.store.delete_column(column_id),
            self.refresh_data,
        )

    # -------------------- cards --------------------
    async def add_card(self, column_id: int, card: CardFields) -> None:
        def call():
            fields = {k: v for k, v in _task_fields(card).items() if v is not None}
            return self.store.create_task(TaskCreate(column_id=column_id, **fields))

        await self._mutate("create_task", "Failed to add task", call, self.refresh_data)

    async def update_card(self, column_id: int, card: Card) -> None:
        # the full mutable field set goes out; column changes go through move_card
        await self._mutate(
            "edit_task", "Failed to update task",
            lambda: self.store.update_task(TaskUpdate(id=card.id, **_task_fields(card))),
            self.refresh_data,
        )

    async def delete_card(self, column_id: int, card_id: int) -> None:
        await self._mutate(
            "delete_task", "Failed to delete task",
            lambda: self.store.delete_task(card_id),
            self.refresh_data,
        )

    async def move_card(
        self,
        card_id: int,
        from_column_id: int,
        to_column_id: int,
        new_position: Optional[int] = None,
    ) -> None:
        if not self._allowed("move_task"):
            return

        try:
            updates = plan_move(self.columns, card_id, from_column_id, to_column_id, new_position)
        except MoveError as e:
            self._fail("Failed to move task", e)
            return
        if not updates:
            return

        # optimistic redraw, overwritten by the refresh below
        self.columns = apply_updates(self.columns, updates)
        self._publish()

        failure = None
        try:
            await self._bounded(self._dispatch(updates))
        except OPERATION_ERRORS as e:
            failure = e
        await self.refresh_data()
        if failure is not None:
            self._fail("Failed to move task", failure)

    async def _dispatch(self, updates: Sequence[OrderUpdate]) -> None:
        """Send every update concurrently and wait for all of them.

        Updates that already landed are not rolled back when another fails.
        """
        payloads = []
        for u in updates:
            if u.column_id is not None:
                payloads.append(TaskMove(id=u.card_id, column_id=u.column_id, order=u.order))
            else:
                payloads.append(TaskMove(id=u.card_id, order=u.order))

        results = await asyncio.gather(*(self.store.patch_task(p) for p in payloads), return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.error(f"[Board] {len(errors)} of {len(payloads)} order updates failed")
            raise errors[0]

    # -------------------- sprints --------------------
    def set_current_sprint(self, sprint: Optional[Sprint]) -> None:
        self.current_sprint = sprint
        self._publish()

    async def add_sprint(self, name: str, **fields) -> None:
        await self._mutate(
            "create_sprint", "Failed to add sprint",
            lambda: self.store.create_sprint(SprintCreate(name=name, **fields)),
            self.refresh_sprints,
        )

    async def update_sprint(self, sprint_id: int, **fields) -> None:
        await self._mutate(
            "edit_sprint", "Failed to update sprint",
            lambda: self.store.update_sprint(SprintUpdate(id=sprint_id, **fields)),
            self.refresh_sprints,
        )

    async def delete_sprint(self, sprint_id: int) -> None:
        deleted = await self._mutate(
            "delete_sprint", "Failed to delete sprint",
            lambda: self.store.delete_sprint(sprint_id),
            self.refresh_sprints,
        )
        if deleted and self.current_sprint is not None and self.current_sprint.id == sprint_id:
            self.set_current_sprint(None)

    # -------------------- users --------------------
    async def create_user(self, name: str, email: str, password: str, role: str = "developer") -> None:
        await self._mutate(
            "create_user", "Failed to create user",
            lambda: self.store.create_user(UserCreate(name=name, email=email, password=password, role=role)),
            self.refresh_users,
        )

    async def update_user(self, user_id: int, **fields) -> None:
        await self._mutate(
            "edit_user", "Failed to update user",
            lambda: self.store.update_user(UserUpdate(id=user_id, **fields)),
            self.refresh_users,
        )

    async def delete_user(self, user_id: int) -> None:
        await self._mutate(
            "delete_user", "Failed to delete user",
            lambda: self.store.delete_user(user_id),
            self.refresh_users,
        )
