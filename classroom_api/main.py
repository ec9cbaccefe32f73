import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from classroom_api.core import config
from classroom_api.core.logging_middleware import LoggingMiddleware
from classroom_api.db.init_db import init_db

from classroom_api.routers.assignments import router as assignments_router
from classroom_api.routers.auth import router as auth_router
from classroom_api.routers.classrooms import router as classrooms_router
from classroom_api.routers.submissions import router as submissions_router

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(
    title="Assignment Management System API",
    description="API for managing assignments, classrooms, and submissions",
    version="1.0.0",
)

# Middleware
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(classrooms_router, prefix="/classrooms", tags=["classrooms"])
app.include_router(assignments_router, tags=["assignments"])
app.include_router(submissions_router, tags=["submissions"])

# Files from the local storage backend
if config.STORAGE_BACKEND == "local":
    config.LOCAL_STORAGE_DIR.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=config.LOCAL_STORAGE_DIR), name="uploads")
