import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from sprintboard.database import get_db, utcnow
from sprintboard.models.board import Task
from sprintboard.models.user import User
from sprintboard.routers.auth import hash_password
from sprintboard.schemas import UserCreate, UserUpdate, UserResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["User"])


def _ensure_email_free(db: Session, email: str, user_id: Optional[int] = None):
    existing = db.exec(select(User).where(User.email == email)).first()
    if existing and existing.id != user_id:
        raise HTTPException(status_code=400, detail="Email is already registered")


@router.get("/users", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return db.exec(select(User).order_by(User.created_at)).all()


@router.post("/users", response_model=UserResponse)
def create_user(user_data: UserCreate, db: Session = Depends(get_db)):
    _ensure_email_free(db, user_data.email)

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        role=user_data.role,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    logger.info(f"[Users] Created user {new_user.id} ({new_user.role})")
    return new_user


@router.put("/users", response_model=UserResponse)
def update_user(user_data: UserUpdate, db: Session = Depends(get_db)):
    user = db.get(User, user_data.id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    changes = user_data.model_dump(exclude_unset=True, exclude={"id"})

    # password is stored hashed
    if "password" in changes:
        password = changes.pop("password")
        if password:
            user.password_hash = hash_password(password)

    if changes.get("email"):
        _ensure_email_free(db, changes["email"], user.id)

    for key, value in changes.items():
        if value is not None:
            setattr(user, key, value)

    user.updated_at = utcnow()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.delete("/users", response_model=MessageResponse)
def delete_user(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise HTTPException(status_code=400, detail="User ID is required")

    user = db.get(User, id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    # unassign their tasks
    for task in db.exec(select(Task).where(Task.assignee_id == id)).all():
        task.assignee_id = None
        db.add(task)

    db.delete(user)
    db.commit()

    logger.info(f"[Users] Deleted user {id}")
    return {"message": "User deleted successfully"}
