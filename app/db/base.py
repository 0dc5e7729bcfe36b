"""
base.py

SQLAlchemy ORM Base definition.

Every model (User, Payment, Exam, ExamRegistration, ExamResult) inherits this
Base, and Alembic reads its metadata.

Design principles:
- the Base lives in a single file
- avoids circular imports between models
- keeps Alembic autogenerate stable

Related files:
- app.models.*            : ORM models
- alembic/env.py          : migration metadata

"""

from sqlalchemy.orm import declarative_base

# Base class for every ORM model
Base = declarative_base()
