from datetime import datetime
from typing import Callable
import pytz
from app.config import settings

Clock = Callable[[], datetime]

def now() -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(pytz.timezone(settings.timezone))

def to_utc(value: datetime) -> datetime:
    """Convert a datetime to aware UTC. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)

def get_clock() -> Clock:
    """FastAPI dependency returning the clock used by the services."""
    return now
