from datetime import datetime, timezone
from typing import Optional, Union

MISSING = "-"


def _parse(value: Union[str, datetime]) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            # fromisoformat rejects a trailing Z before 3.11
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_time_remaining(end: Union[str, datetime], now: Optional[datetime] = None) -> str:
    """Format time until `end` as 'Xd Yh Zm', 'Expired' or 'Less than a minute'."""
    end_at = _parse(end)
    if end_at is None:
        return MISSING

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    total_seconds = int((end_at - now).total_seconds())
    if total_seconds <= 0:
        return "Expired"

    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    return " ".join(parts) or "Less than a minute"


def format_timestamp(value: Optional[Union[str, datetime]]) -> str:
    """Render an optional upstream timestamp as 'YYYY-MM-DD HH:MM', or '-' when absent."""
    if not value:
        return MISSING
    parsed = _parse(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M")
