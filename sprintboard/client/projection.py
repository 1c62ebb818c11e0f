"""Client-side snapshot types and the store -> snapshot projection."""
from datetime import date, datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from sprintboard.schemas import (
    ColumnWithTasks, Priority, SprintResponse, SprintStatus, TaskResponse
)


class CardFields(BaseModel):
    """Mutable fields of a card, as entered in the task editor."""

    title: str
    description: str = ""
    priority: Priority = "medium"
    story_points: Optional[int] = None
    assignee_id: Optional[int] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    time_estimate: Optional[str] = None
    module: Optional[str] = None
    target: Optional[str] = None
    image_url: Optional[str] = None
    sprint_id: Optional[int] = None
    start_date: Optional[str] = None  # YYYY-MM-DD
    due_date: Optional[str] = None


class Card(CardFields):
    id: int
    task_id: Optional[str] = None
    # display name of the assignee, resolved from assignee_id at projection time
    assignee: Optional[str] = None
    column_id: Optional[int] = None
    order: Optional[int] = None


class Column(BaseModel):
    id: int
    title: str
    order: int
    cards: List[Card] = []


class Sprint(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: SprintStatus = "planned"
    tasks: List[Card] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def normalize_date(value: Union[date, datetime, str, None]) -> Optional[str]:
    """Render a date-ish value as YYYY-MM-DD, or None when empty."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()


def project_task(task: TaskResponse) -> Card:
    return Card(
        id=task.id,
        task_id=task.task_id,
        title=task.title,
        description=task.description or "",
        priority=task.priority,
        story_points=task.story_points,
        assignee_id=task.assignee_id,
        assignee=task.assignee.name if task.assignee else None,
        progress=task.progress,
        time_estimate=task.time_estimate or None,
        module=task.module or None,
        target=task.target or None,
        image_url=task.image_url or None,
        sprint_id=task.sprint_id,
        column_id=task.column_id,
        order=task.order,
        start_date=normalize_date(task.start_date),
        due_date=normalize_date(task.due_date),
    )


def project_column(column: ColumnWithTasks) -> Column:
    return Column(
        id=column.id,
        title=column.title,
        order=column.order,
        cards=[project_task(t) for t in column.tasks],
    )


def project_sprint(sprint: SprintResponse) -> Sprint:
    return Sprint(
        id=sprint.id,
        name=sprint.name,
        description=sprint.description,
        start_date=normalize_date(sprint.start_date),
        end_date=normalize_date(sprint.end_date),
        status=sprint.status,
        tasks=[project_task(t) for t in sprint.tasks],
        created_at=sprint.created_at,
        updated_at=sprint.updated_at,
    )
