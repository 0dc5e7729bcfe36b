"""
session.py

Database engine and Session factory.

Creates the SQLAlchemy Engine and SessionLocal shared by the application.
Request handlers get one session per request through the get_db dependency;
scheduled billing jobs open their own session per run.

Design principles:
- connection settings defined in one place
- session open / close responsibility kept with the caller
- pool_pre_ping=True guards against stale idle connections
- the engine is disposed at application shutdown (app.main lifespan)

Related files:
- app.core.config        : DATABASE_URL
- app.core.deps          : get_db dependency
- app.services.scheduler : per-job sessions

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


# SQLite (local development) needs cross-thread access for the scheduler thread
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# pool_pre_ping=True:
#   detects and replaces connections dropped while idle
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# session factory, one session per request / job run
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
