from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException
import logging

from sprintboard.database import create_db_and_tables

#routers
from sprintboard.routers import auth, columns, sprints, tasks, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    print("\n========== 🚀 Server Startup Process ==========", flush=True)

    print("🛠️  [Database] Checking & Creating Tables...", flush=True)
    create_db_and_tables()
    print("✅ [Database] Ready.", flush=True)

    print("===============================================\n", flush=True)
    yield
    print("\n👋 Server Shutting Down...", flush=True)


app = FastAPI(
    title="Sprint Board Store",
    description="Columns, tasks, sprints and users for the sprint board",
    version="1.0.0",
    lifespan=lifespan
)


# every failure leaves as {"error": "..."}
@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"[API] Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"[API] Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Database error"})


#routers
app.include_router(auth.router, prefix="/api")
app.include_router(columns.router, prefix="/api")
app.include_router(tasks.router, prefix="/api")
app.include_router(sprints.router, prefix="/api")
app.include_router(users.router, prefix="/api")


@app.get("/")
def read_root():
    return {
        "message": "Sprint Board API Server is Running!",
        "system": "FastAPI + SQLModel",
        "status": "Healthy"
    }
