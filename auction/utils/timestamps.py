from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current time, used for row creation timestamps."""
    return datetime.now(timezone.utc)
