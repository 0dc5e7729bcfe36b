"""

Run one billing job by hand.

- monthly   : create this month's pending payments
- overdue   : block students with payments pending for two months or more
- reminders : email payments due within the next seven days

The scheduler in the API process runs these on their own; this script is
for catching up after downtime or for cron on hosts that run the API with
SCHEDULER_ENABLED=false. Note that "monthly" does not check for an existing
payment of the same period.

Usage
- (.venv) ~/backend$ python -m scripts.run_billing_job monthly

"""

import argparse
import sys

from dotenv import load_dotenv
load_dotenv()

from app.core.app_logger import setup_logging
from app.core.clock import utcnow
from app.db.session import SessionLocal
from app.services.billing import JOBS
from app.services.notifications import build_notifier


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run a billing job once")
    parser.add_argument("job", choices=sorted(JOBS))
    args = parser.parse_args(argv)

    setup_logging()
    db = SessionLocal()
    try:
        summary = JOBS[args.job](db, build_notifier(), utcnow())
    finally:
        db.close()

    print(summary.as_dict())
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
