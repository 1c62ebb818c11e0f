from typing import Optional, List
from datetime import date, datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from sprintboard.database import utcnow
from sprintboard.models.user import User
from sprintboard.models.sprint import Sprint


# 1. Board column (To Do, In Progress, Done ...)
class BoardColumn(SQLModel, table=True):
    __tablename__ = "board_columns"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    order: int = Field(default=0)  # left-to-right position on the board
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    tasks: List["Task"] = Relationship(
        back_populates="column",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


# 2. Task (shown as a card inside its column)
class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_key: str = Field(index=True)  # human readable id, e.g. PROJ-42
    title: str
    description: Optional[str] = None
    priority: str = Field(default="medium")
    story_points: Optional[int] = None
    progress: int = Field(default=0)
    time_estimate: Optional[str] = None
    module: Optional[str] = None
    target: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = Field(default=None)  # position inside the column

    start_date: Optional[date] = Field(default=None)
    due_date: Optional[date] = Field(default=None)

    column_id: int = Field(foreign_key="board_columns.id", index=True)
    sprint_id: Optional[int] = Field(default=None, foreign_key="sprints.id", index=True)
    assignee_id: Optional[int] = Field(default=None, foreign_key="users.id")

    column: Optional[BoardColumn] = Relationship(back_populates="tasks")
    sprint: Optional[Sprint] = Relationship(back_populates="tasks")
    assignee: Optional[User] = Relationship()

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
