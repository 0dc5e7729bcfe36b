"""
main.py

FastAPI application entry point.

Loaded first when the server starts; wires configuration, routers and the
scheduled billing jobs together.

Main responsibilities:
- create the FastAPI app and its lifespan (scheduler start / stop, engine
  dispose)
- CORS middleware
- translate domain errors (app.core.errors) into JSON error responses
- register the routers (auth, users, payments, exams) and /uploads
- health and DB connectivity endpoints

Design principles:
- no business logic here, only assembly
- features live in the routers / services layers
- health / db-ping stay safe to call in production

Related files:
- app.core.config        : settings
- app.core.deps          : DB session dependency
- app.services.scheduler : billing job triggers
- app.routers.*          : feature routers

"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.core.app_logger import setup_logging
from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import DojoError
from app.db.session import engine, SessionLocal
from app.routers import auth, users, payments, exams
from app.services.notifications import build_notifier
from app.services.scheduler import build_scheduler

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = build_scheduler(SessionLocal, build_notifier())
        scheduler.start()
        logger.info("Billing scheduler started: %s", [job.id for job in scheduler.get_jobs()])

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("Billing scheduler stopped")
    engine.dispose()


app = FastAPI(title="Dojo Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DojoError)
async def dojo_error_handler(request: Request, exc: DojoError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


# malformed request bodies are validation errors (400), like every other input problem
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message, "errors": jsonable_errors(errors)})


def jsonable_errors(errors) -> list[dict]:
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in errors
    ]


app.include_router(auth.router)
app.include_router(users.router)
app.include_router(payments.router)
app.include_router(exams.router)

app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

"""
Health check endpoint

- the process is up and serving
- used by load balancers / deployment checks

"""
@app.get("/health")
def health():
    return {"status": "ok"}

"""
Database connectivity check

- runs SELECT 1
- tells "server up, database down" apart from a dead server

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
