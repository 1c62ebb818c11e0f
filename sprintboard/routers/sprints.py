import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from sprintboard.database import get_db, utcnow
from sprintboard.models.board import Task
from sprintboard.models.sprint import Sprint
from sprintboard.routers.columns import task_sort_key
from sprintboard.routers.tasks import task_out
from sprintboard.schemas import SprintCreate, SprintUpdate, SprintResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sprints"])


def sprint_out(sprint: Sprint) -> SprintResponse:
    return SprintResponse(
        id=sprint.id,
        name=sprint.name,
        description=sprint.description,
        start_date=sprint.start_date,
        end_date=sprint.end_date,
        status=sprint.status,
        tasks=[task_out(t) for t in sorted(sprint.tasks, key=task_sort_key)],
        created_at=sprint.created_at,
        updated_at=sprint.updated_at,
    )


# newest first
@router.get("/sprints", response_model=List[SprintResponse])
def list_sprints(db: Session = Depends(get_db)):
    sprints = db.exec(select(Sprint).order_by(Sprint.created_at.desc(), Sprint.id.desc())).all()
    return [sprint_out(s) for s in sprints]


@router.post("/sprints", response_model=SprintResponse)
def create_sprint(sprint_data: SprintCreate, db: Session = Depends(get_db)):
    new_sprint = Sprint(**sprint_data.model_dump())
    db.add(new_sprint)
    db.commit()
    db.refresh(new_sprint)

    logger.info(f"[Sprints] Created sprint {new_sprint.id} '{new_sprint.name}'")
    return sprint_out(new_sprint)


@router.put("/sprints", response_model=SprintResponse)
def update_sprint(sprint_data: SprintUpdate, db: Session = Depends(get_db)):
    sprint = db.get(Sprint, sprint_data.id)
    if not sprint:
        raise HTTPException(status_code=404, detail="Sprint not found")

    changes = sprint_data.model_dump(exclude_unset=True, exclude={"id"})
    for key in ("name", "status"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    for key, value in changes.items():
        setattr(sprint, key, value)

    sprint.updated_at = utcnow()
    db.add(sprint)
    db.commit()
    db.refresh(sprint)
    return sprint_out(sprint)


@router.delete("/sprints", response_model=MessageResponse)
def delete_sprint(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise HTTPException(status_code=400, detail="Sprint ID is required")

    sprint = db.get(Sprint, id)
    if not sprint:
        raise HTTPException(status_code=404, detail="Sprint not found")

    # tasks outlive their sprint
    for task in db.exec(select(Task).where(Task.sprint_id == id)).all():
        task.sprint_id = None
        db.add(task)

    db.delete(sprint)
    db.commit()

    logger.info(f"[Sprints] Deleted sprint {id}")
    return {"message": "Sprint deleted successfully"}
