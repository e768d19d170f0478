from datetime import datetime, timezone as dt_timezone


def at(hour, minute=0, day=1):
    """Aware timestamp on a fixed test date."""
    return datetime(2024, 3, day, hour, minute, tzinfo=dt_timezone.utc)
