import os
from pathlib import Path


DATABASE_URL = os.getenv("SPRINTBOARD_DATABASE_URL", "sqlite:///./sprintboard.db")

# client side
API_URL = os.getenv("SPRINTBOARD_API_URL", "http://localhost:8000/api")
REQUEST_TIMEOUT = float(os.getenv("SPRINTBOARD_REQUEST_TIMEOUT", "10"))
OPERATION_TIMEOUT = float(os.getenv("SPRINTBOARD_OPERATION_TIMEOUT", "30"))
SESSION_FILE = Path(os.getenv("SPRINTBOARD_SESSION_FILE", str(Path.home() / ".sprintboard" / "session.json")))

BCRYPT_ROUNDS = int(os.getenv("SPRINTBOARD_BCRYPT_ROUNDS", "12"))
