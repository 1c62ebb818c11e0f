import logging
import bcrypt
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from sprintboard.config import BCRYPT_ROUNDS
from sprintboard.database import get_db
from sprintboard.models.user import User
from sprintboard.schemas import LoginRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


# --- helpers ---
def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


# --- login: returns the user without its password ---
@router.post("/auth", response_model=UserResponse)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.exec(select(User).where(User.email == login_data.email)).first()

    if not user or not verify_password(login_data.password, user.password_hash):
        logger.warning(f"[Auth] Failed login for {login_data.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    logger.info(f"[Auth] User {user.id} logged in")
    return user
