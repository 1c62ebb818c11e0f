from typing import Optional, List, TYPE_CHECKING
from datetime import date, datetime
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from sprintboard.database import utcnow

if TYPE_CHECKING:
    from sprintboard.models.board import Task


class Sprint(SQLModel, table=True):
    __tablename__ = "sprints"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = Field(default=None)
    end_date: Optional[date] = Field(default=None)
    status: str = Field(default="planned")  # planned / active / completed

    # a sprint does not own its tasks; they reference it by sprint_id
    tasks: List["Task"] = Relationship(back_populates="sprint")

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
