import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from sprintboard.database import get_db
from sprintboard.models.board import BoardColumn
from sprintboard.routers.tasks import task_out
from sprintboard.schemas import ColumnCreate, ColumnUpdate, ColumnResponse, ColumnWithTasks, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Board Columns"])


def task_sort_key(task):
    # missing order sorts as 0, ties keep creation order
    return (task.order if task.order is not None else 0, task.id)


# 1. every column with its tasks, left to right
@router.get("/columns", response_model=List[ColumnWithTasks])
def get_board(db: Session = Depends(get_db)):
    columns = db.exec(select(BoardColumn).order_by(BoardColumn.order, BoardColumn.id)).all()
    result = []
    for col in columns:
        result.append(ColumnWithTasks(
            id=col.id,
            title=col.title,
            order=col.order,
            tasks=[task_out(t) for t in sorted(col.tasks, key=task_sort_key)],
        ))
    return result


# 2. create column
@router.post("/columns", response_model=ColumnResponse)
def create_column(col_data: ColumnCreate, db: Session = Depends(get_db)):
    order = col_data.order
    if order is None:
        current_max = db.exec(select(func.max(BoardColumn.order))).one()
        order = (current_max or 0) + 1

    new_col = BoardColumn(title=col_data.title, order=order)
    db.add(new_col)
    db.commit()
    db.refresh(new_col)

    logger.info(f"[Columns] Created column {new_col.id} '{new_col.title}'")
    return new_col


# 3. rename / reorder column
@router.put("/columns", response_model=ColumnResponse)
def update_column(col_data: ColumnUpdate, db: Session = Depends(get_db)):
    column = db.get(BoardColumn, col_data.id)
    if not column:
        raise HTTPException(status_code=404, detail="Column not found")

    for key, value in col_data.model_dump(exclude_unset=True, exclude={"id"}).items():
        if value is not None:
            setattr(column, key, value)

    db.add(column)
    db.commit()
    db.refresh(column)
    return column


# 4. delete column (its tasks go with it)
@router.delete("/columns", response_model=MessageResponse)
def delete_column(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise HTTPException(status_code=400, detail="Column ID is required")

    column = db.get(BoardColumn, id)
    if not column:
        raise HTTPException(status_code=404, detail="Column not found")

    db.delete(column)
    db.commit()

    logger.info(f"[Columns] Deleted column {id}")
    return {"message": "Column deleted successfully"}
