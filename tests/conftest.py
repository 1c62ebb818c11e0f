"""Shared fixtures: a throwaway SQLite store served through httpx's ASGI transport."""

import asyncio

import httpx
import pytest
from sqlmodel import SQLModel, Session, create_engine

from sprintboard.client.controller import BoardController
from sprintboard.client.session import SessionCache
from sprintboard.client.store import StoreClient
from sprintboard.database import get_db
from sprintboard.main import app
from sprintboard.models.board import BoardColumn, Task
from sprintboard.models.sprint import Sprint
from sprintboard.models.user import User
from sprintboard.routers import auth as auth_router

from factories import ADMIN, DEVELOPER, TESTER

BASE_URL = "http://testserver/api"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(auth_router, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def engine(tmp_path):
    # file backed so concurrent requests each get their own connection
    engine = create_engine(f"sqlite:///{tmp_path / 'store.db'}", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def api(engine):
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def board(db):
    """Three users, a "To Do" column with A, B, C and an empty "Done" column."""
    users = {}
    for (email, password), name, role in (
        (ADMIN, "Admin User", "admin"),
        (DEVELOPER, "Developer User", "developer"),
        (TESTER, "Tester User", "tester"),
    ):
        user = User(name=name, email=email, password_hash=auth_router.hash_password(password), role=role)
        db.add(user)
        users[role] = user

    todo = BoardColumn(title="To Do", order=1)
    done = BoardColumn(title="Done", order=2)
    db.add(todo)
    db.add(done)
    db.commit()

    cards = {}
    for order, title in enumerate(("A", "B", "C")):
        task = Task(task_key=f"PROJ-{order + 1}", title=title, order=order, column_id=todo.id,
                    assignee_id=users["developer"].id)
        db.add(task)
        cards[title] = task
    db.commit()

    return {
        "todo": todo.id,
        "done": done.id,
        "cards": {title: task.id for title, task in cards.items()},
        "users": {role: user.id for role, user in users.items()},
    }


@pytest.fixture
def add_sprint(db):
    def _add(name="Sprint 1", status="active"):
        sprint = Sprint(name=name, status=status)
        db.add(sprint)
        db.commit()
        db.refresh(sprint)
        return sprint.id
    return _add


@pytest.fixture
def make_store(api):
    def _make():
        return StoreClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=api))
    return _make


@pytest.fixture
def run_board(make_store, tmp_path):
    """Run `scenario(controller)` against the store, optionally logged in first."""

    def runner(scenario, login=None):
        async def main():
            async with make_store() as store:
                controller = BoardController(store, SessionCache(tmp_path / "session.json"))
                if login is not None:
                    assert await controller.login(*login) is not None
                await controller.start()
                return await scenario(controller)

        return asyncio.run(main())

    return runner
