from datetime import datetime, timezone


# Every timestamp is stored as naive UTC so PostgreSQL and SQLite compare the same way
def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
