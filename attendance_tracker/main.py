"""Class Attendance Tracker - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ServerSelectionTimeoutError

from attendance_tracker.api import attendance, auth, timetable
from attendance_tracker.api.deps import get_lifecycle
from attendance_tracker.config import settings
from attendance_tracker.db import db_shutdown, db_startup
from attendance_tracker.seed import seed_admin
from attendance_tracker.services.scheduler import AttendanceScheduler

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
        await seed_admin()
    except ServerSelectionTimeoutError as e:
        logger.error(
            "MongoDB is not running. Start it with: docker compose up -d (from project root)"
        )
        raise RuntimeError(
            "MongoDB connection failed. Start MongoDB (e.g. docker compose up -d)."
        ) from e

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = AttendanceScheduler(get_lifecycle(), mode=settings.attendance_schedule_mode)
        scheduler.start()
    app.state.attendance_scheduler = scheduler
    yield
    if scheduler:
        scheduler.shutdown()
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Class timetables, holidays and daily attendance tracking",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(errors)},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(timetable.router, prefix="/api/timetable", tags=["Timetable & Holidays"])
app.include_router(attendance.router, prefix="/api/attendance", tags=["Attendance"])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
