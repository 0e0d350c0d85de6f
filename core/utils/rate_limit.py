"""Human-readable messages for backend rate limit results."""

import math
from datetime import datetime, timezone
from typing import Optional


def format_rate_limit_error(reset_at: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    diff_minutes = math.ceil((reset_at - now).total_seconds() / 60)

    if diff_minutes <= 1:
        return "Too many attempts. Please try again in a minute."
    if diff_minutes < 60:
        return f"Too many attempts. Please try again in {diff_minutes} minutes."
    hours = math.ceil(diff_minutes / 60)
    return f"Too many attempts. Please try again in {hours} hour{'s' if hours > 1 else ''}."
