from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from finwise.models import Reminder, utc_now

DUE_WINDOW = timedelta(hours=1)


def due_reminders(
    reminders: Sequence[Reminder],
    now: Optional[datetime] = None,
    window: timedelta = DUE_WINDOW
) -> List[Reminder]:
    """Incomplete reminders falling within ``(now, now + window]``."""
    now = now or utc_now()
    due = []
    for reminder in reminders:
        if reminder.completed:
            continue
        when = reminder.time
        if when.tzinfo is None:
            when = when.replace(tzinfo=now.tzinfo)
        if now < when <= now + window:
            due.append((when, reminder))
    return [reminder for _, reminder in sorted(due, key=lambda pair: pair[0])]
