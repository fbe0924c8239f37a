from datetime import datetime, timezone
from enum import Enum


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


# UTC hours, lower bound inclusive, upper bound exclusive.
# Roughly 9h-23h on a CET business day; 22h-8h UTC belongs to no slot.
TIME_SLOT_HOURS: dict[TimeSlot, tuple[int, int]] = {
    TimeSlot.MORNING: (8, 13),
    TimeSlot.AFTERNOON: (13, 17),
    TimeSlot.EVENING: (17, 22),
}


def utc_hour(instant: datetime) -> int:
    if instant.tzinfo is None:
        return instant.hour
    return instant.astimezone(timezone.utc).hour


def matches_time_slot(instant: datetime, slot: TimeSlot | None) -> bool:
    """Return True when the UTC hour of ``instant`` falls in ``slot``.

    No requested slot means no filtering, so every instant matches.
    """
    if slot is None:
        return True
    lower, upper = TIME_SLOT_HOURS[TimeSlot(slot)]
    return lower <= utc_hour(instant) < upper
