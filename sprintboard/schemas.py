from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from datetime import date, datetime
from typing import Optional, List, Literal


Priority = Literal["critical", "high", "medium", "low"]
SprintStatus = Literal["planned", "active", "completed"]


# JSON on the wire is camelCase (storyPoints, columnId ...), python side stays snake_case
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# data for register
class UserCreate(CamelModel):
    name: str
    email: EmailStr
    password: str
    role: str = "developer"


class UserUpdate(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    password: Optional[str] = None


# data for login
class LoginRequest(CamelModel):
    email: EmailStr
    password: str


# data for response (password never leaves the store)
class UserResponse(CamelModel):
    id: int
    name: str
    email: EmailStr
    role: str
    created_at: datetime
    updated_at: datetime


class ColumnCreate(CamelModel):
    title: str
    order: Optional[int] = None


class ColumnUpdate(CamelModel):
    id: int
    title: Optional[str] = None
    order: Optional[int] = None


class ColumnResponse(CamelModel):
    id: int
    title: str
    order: int


class SprintBrief(CamelModel):
    id: int
    name: str
    status: SprintStatus


class TaskCreate(CamelModel):
    title: str
    description: Optional[str] = None
    priority: Priority = "medium"
    story_points: Optional[int] = None
    progress: int = Field(default=0, ge=0, le=100)
    time_estimate: Optional[str] = None
    module: Optional[str] = None
    target: Optional[str] = None
    image_url: Optional[str] = None
    task_id: Optional[str] = None
    order: Optional[int] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    column_id: int
    sprint_id: Optional[int] = None
    assignee_id: Optional[int] = None


class TaskUpdate(CamelModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    story_points: Optional[int] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    time_estimate: Optional[str] = None
    module: Optional[str] = None
    target: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    column_id: Optional[int] = None
    sprint_id: Optional[int] = None
    assignee_id: Optional[int] = None


# partial update used by drag and drop
class TaskMove(CamelModel):
    id: int
    column_id: Optional[int] = None
    order: Optional[int] = None


class TaskResponse(CamelModel):
    id: int
    task_id: str
    title: str
    description: Optional[str] = None
    priority: Priority
    story_points: Optional[int] = None
    progress: int = 0
    time_estimate: Optional[str] = None
    module: Optional[str] = None
    target: Optional[str] = None
    image_url: Optional[str] = None
    order: Optional[int] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    column_id: int
    sprint_id: Optional[int] = None
    assignee_id: Optional[int] = None
    assignee: Optional[UserResponse] = None
    sprint: Optional[SprintBrief] = None

    created_at: datetime
    updated_at: datetime


class ColumnWithTasks(ColumnResponse):
    tasks: List[TaskResponse] = []


class SprintCreate(CamelModel):
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: SprintStatus = "planned"


class SprintUpdate(CamelModel):
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[SprintStatus] = None


class SprintResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: SprintStatus
    tasks: List[TaskResponse] = []
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str
