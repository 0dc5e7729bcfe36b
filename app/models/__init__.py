# Import every model so Base.metadata knows all tables (tests, Alembic)
from app.models.user import User, Role, BeltLevel, MembershipPlan, Gender  # noqa: F401
from app.models.payment import Payment, PaymentStatus  # noqa: F401
from app.models.exam import Exam, ExamStatus, ExamRegistration, ExamResult  # noqa: F401
