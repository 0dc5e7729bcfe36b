"""

Initial instructor account script.

- run once when setting up a new school: students can only register
  against an existing instructor
- reads INSTRUCTOR_* values from .env
- exits without changes when the email is already an instructor

Usage
- activate the virtualenv
- (.venv) ~/backend$ python -m scripts.create_instructor

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
from app.db.session import SessionLocal
from app.models.user import User, Role, Gender
from app.core.security import get_password_hash


def main():
    email = os.environ["INSTRUCTOR_EMAIL"]
    password = os.environ["INSTRUCTOR_PASSWORD"]
    full_name = os.environ.get("INSTRUCTOR_NAME", "Head Instructor")
    age = int(os.environ.get("INSTRUCTOR_AGE", "40"))
    gender = Gender(os.environ.get("INSTRUCTOR_GENDER", "other"))

    db = SessionLocal()
    try:
        existing = db.scalar(select(User).where(User.email == email))
        if existing and existing.role == Role.INSTRUCTOR:
            print(f"Instructor {email} already exists. Skip creation.")
            return
        if existing:
            raise RuntimeError("Email already exists but is not an instructor")

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            full_name=full_name,
            age=age,
            gender=gender,
            role=Role.INSTRUCTOR,
        )

        db.add(user)
        db.commit()

        print(f"Instructor created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
