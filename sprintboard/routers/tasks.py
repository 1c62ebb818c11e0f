import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from sprintboard.database import get_db, utcnow
from sprintboard.models.board import BoardColumn, Task
from sprintboard.models.sprint import Sprint
from sprintboard.models.user import User
from sprintboard.schemas import (
    TaskCreate, TaskUpdate, TaskMove, TaskResponse, UserResponse, SprintBrief, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])


def task_out(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        task_id=task.task_key,
        title=task.title,
        description=task.description,
        priority=task.priority,
        story_points=task.story_points,
        progress=task.progress,
        time_estimate=task.time_estimate,
        module=task.module,
        target=task.target,
        image_url=task.image_url,
        order=task.order,
        start_date=task.start_date,
        due_date=task.due_date,
        column_id=task.column_id,
        sprint_id=task.sprint_id,
        assignee_id=task.assignee_id,
        assignee=UserResponse.model_validate(task.assignee) if task.assignee else None,
        sprint=SprintBrief.model_validate(task.sprint) if task.sprint else None,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _check_references(db: Session, column_id=None, sprint_id=None, assignee_id=None):
    if column_id is not None and not db.get(BoardColumn, column_id):
        raise HTTPException(status_code=400, detail="Column does not exist")
    if sprint_id is not None and not db.get(Sprint, sprint_id):
        raise HTTPException(status_code=400, detail="Sprint does not exist")
    if assignee_id is not None and not db.get(User, assignee_id):
        raise HTTPException(status_code=400, detail="Assignee does not exist")


def _apply_changes(task: Task, changes: dict, db: Session) -> Task:
    _check_references(
        db,
        column_id=changes.get("column_id"),
        sprint_id=changes.get("sprint_id"),
        assignee_id=changes.get("assignee_id"),
    )
    # column_id cannot be cleared, a task always lives in a column
    if "column_id" in changes and changes["column_id"] is None:
        changes.pop("column_id")

    for key, value in changes.items():
        setattr(task, key, value)

    task.updated_at = utcnow()
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.get("/tasks", response_model=List[TaskResponse])
def list_tasks(db: Session = Depends(get_db)):
    tasks = db.exec(select(Task).order_by(Task.created_at)).all()
    return [task_out(t) for t in tasks]


@router.post("/tasks", response_model=TaskResponse)
def create_task(task_data: TaskCreate, db: Session = Depends(get_db)):
    _check_references(
        db,
        column_id=task_data.column_id,
        sprint_id=task_data.sprint_id,
        assignee_id=task_data.assignee_id,
    )

    data = task_data.model_dump(exclude={"task_id"})

    # no order given: append to the end of the column
    if data["order"] is None:
        data["order"] = db.exec(
            select(func.count()).select_from(Task).where(Task.column_id == task_data.column_id)
        ).one()

    new_task = Task(**data, task_key=task_data.task_id or "")
    db.add(new_task)
    db.commit()
    db.refresh(new_task)

    # human readable id derived from the primary key
    if not new_task.task_key:
        new_task.task_key = f"PROJ-{new_task.id}"
        db.add(new_task)
        db.commit()
        db.refresh(new_task)

    logger.info(f"[Tasks] Created task {new_task.task_key} in column {new_task.column_id}")
    return task_out(new_task)


@router.put("/tasks", response_model=TaskResponse)
def update_task(task_data: TaskUpdate, db: Session = Depends(get_db)):
    task = db.get(Task, task_data.id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    changes = task_data.model_dump(exclude_unset=True, exclude={"id"})
    # title, priority and progress are required columns
    for key in ("title", "priority", "progress"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    return task_out(_apply_changes(task, changes, db))


@router.patch("/tasks", response_model=TaskResponse)
def move_task(move_data: TaskMove, db: Session = Depends(get_db)):
    task = db.get(Task, move_data.id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    changes = move_data.model_dump(exclude_unset=True, exclude={"id"})
    task = _apply_changes(task, changes, db)

    logger.debug(f"[Tasks] Moved task {task.id} to column {task.column_id} at {task.order}")
    return task_out(task)


@router.delete("/tasks", response_model=MessageResponse)
def delete_task(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise HTTPException(status_code=400, detail="Task ID is required")

    task = db.get(Task, id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    db.delete(task)
    db.commit()

    logger.info(f"[Tasks] Deleted task {id}")
    return {"message": "Task deleted successfully"}
