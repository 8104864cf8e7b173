"""
Time and slot helpers for the booking window.

Slots are fixed one-hour intervals inside the daily opening window, the same
for every day. All "now" comparisons use local wall-clock time as naive
datetimes; set LOCAL_TIMEZONE to pin the wall clock to a specific zone instead of
the host's.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from gym_booking.config import get_config
from gym_booking.models import Booking, Slot
from gym_booking.translations import THAI_MONTHS, THAI_WEEKDAYS

logger = logging.getLogger(__name__)

SLOT_START = 6  # 06:00
SLOT_END = 22  # 22:00

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
SLOT_ID_RE = re.compile(r"^(\d{2}):\d{2}-")

EPOCH = datetime(1970, 1, 1)
BUDDHIST_ERA_OFFSET = 543


# ── Wall clock ────────────────────────────────────────────────────────────────

def _local_zone() -> Optional[ZoneInfo]:
    tz_name = get_config().local_timezone
    return ZoneInfo(tz_name) if tz_name else None


def local_now() -> datetime:
    """Current local wall-clock time (naive)"""
    zone = _local_zone()
    if zone is None:
        return datetime.now()
    return datetime.now(zone).replace(tzinfo=None)


def _to_local(dt: datetime) -> datetime:
    """Aware datetimes are converted to local wall-clock time, naive ones kept as-is"""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(_local_zone()).replace(tzinfo=None)


# ── Slots and days ────────────────────────────────────────────────────────────

def generate_slots(start_hour: int = SLOT_START, end_hour: int = SLOT_END) -> List[Slot]:
    """
    Build the ordered one-hour slots between two hours.

    Args:
        start_hour: First slot start (e.g. 6)
        end_hour: Last slot end (e.g. 22)

    Returns:
        Slots with ids like "06:00-07:00"
    """
    slots = []
    for hour in range(start_hour, end_hour):
        slot_id = f"{hour:02d}:00-{hour + 1:02d}:00"
        slots.append(Slot(id=slot_id, label=slot_id))
    return slots


def next_days(n: int = 7, today: Optional[date] = None) -> List[date]:
    """Next n calendar days, today included"""
    start = today or local_now().date()
    return [start + timedelta(days=i) for i in range(n)]


def date_key(d: date) -> str:
    """YYYY-MM-DD for a date or datetime"""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


# ── Date normalization ────────────────────────────────────────────────────────

def _epoch_ms_to_key(value: float) -> Optional[str]:
    try:
        return date_key(datetime.fromtimestamp(value / 1000, tz=_local_zone()))
    except (OverflowError, OSError, ValueError):
        return None


def _string_to_key(value: str) -> Optional[str]:
    if ISO_DATE_RE.match(value):
        return value
    try:
        parsed = date_parser.isoparse(value)
    except ValueError:
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError):
            return None
    try:
        return date_key(_to_local(parsed))
    except (OverflowError, ValueError):
        return None


def normalize_date(value) -> str:
    """
    Turn a date coming from the sheet into YYYY-MM-DD.

    The sheet backend is not schema-enforced, so dates arrive as plain
    YYYY-MM-DD strings, ISO timestamps (usually UTC midnight of the local
    day), other human formats, epoch milliseconds or date objects. Each
    variant is converted in local calendar terms. Anything that cannot be
    read is returned as str(value) so the row is still shown.
    """
    if value is None or value == "" or value is False:
        return ""
    if value is True:
        return str(value)

    key = None
    if isinstance(value, datetime):
        try:
            key = date_key(_to_local(value))
        except (OverflowError, ValueError):
            key = None
    elif isinstance(value, date):
        key = date_key(value)
    elif isinstance(value, (int, float)):
        if value == 0:
            return ""
        key = _epoch_ms_to_key(value)
    elif isinstance(value, str):
        key = _string_to_key(value)

    if key is None:
        logger.debug(f"Could not normalize date value {value!r}, keeping as-is")
        return str(value)
    return key


# ── Slot instants ─────────────────────────────────────────────────────────────

def slot_start_hour(slot_id: Optional[str]) -> int:
    """Leading hour of a slot id ("09:00-10:00" -> 9); 0 when malformed"""
    match = SLOT_ID_RE.match(str(slot_id or ""))
    return int(match.group(1)) if match else 0


def slot_start(date_str: str, slot_id: Optional[str]) -> datetime:
    """
    Local start instant of a slot on a given day.

    Raises:
        ValueError: If date_str is not a YYYY-MM-DD date
    """
    day = datetime.strptime(str(date_str), "%Y-%m-%d")
    return day.replace(hour=slot_start_hour(slot_id))


def booking_start(booking: Optional[Booking]) -> datetime:
    """Local start instant of a booking, the epoch when it has no usable date"""
    if not booking or not booking.date:
        return EPOCH
    date_str = str(booking.date)
    try:
        if "T" in date_str:
            return _to_local(date_parser.isoparse(date_str))
        return slot_start(date_str, booking.slot_id)
    except (OverflowError, ValueError):
        return EPOCH


def sort_bookings(bookings: Iterable[Booking]) -> List[Booking]:
    """Bookings ordered by start instant, earliest first"""
    return sorted(bookings, key=booking_start)


def is_future_booking(booking: Optional[Booking], now: Optional[datetime] = None) -> bool:
    """True if the booking starts now or later"""
    return booking_start(booking) >= (now or local_now())


def is_past_slot(date_str: str, slot_id: Optional[str], now: Optional[datetime] = None) -> bool:
    """True if the slot on that date has already started; unreadable dates are not past"""
    try:
        start = slot_start(date_str, slot_id)
    except (TypeError, ValueError):
        return False
    return start < (now or local_now())


# ── Display ───────────────────────────────────────────────────────────────────

def _display_year(year: int, buddhist_era: Optional[bool]) -> int:
    if buddhist_era is None:
        buddhist_era = get_config().buddhist_era
    return year + BUDDHIST_ERA_OFFSET if buddhist_era else year


def thai_long_date(d: date, buddhist_era: Optional[bool] = None) -> str:
    """'1 มกราคม 2099'"""
    return f"{d.day} {THAI_MONTHS[d.month - 1]} {_display_year(d.year, buddhist_era)}"


def format_thai_date_range(
    date_str: str, slot_id: Optional[str], buddhist_era: Optional[bool] = None
) -> str:
    """
    Human readable date and hour range of a slot.

    Example:
        format_thai_date_range("2025-09-09", "13:00-14:00")
        -> "9 กันยายน 2025 13.00 น. - 14.00 น."
    """
    start_hour = slot_start_hour(slot_id)
    try:
        day = datetime.strptime(str(date_str), "%Y-%m-%d").date()
        date_part = thai_long_date(day, buddhist_era)
    except ValueError:
        date_part = str(date_str)
    return f"{date_part} {start_hour:02d}.00 น. - {start_hour + 1:02d}.00 น."


def format_booking_line(booking: Booking) -> str:
    """'A B • underwater-treadmill • 1 มกราคม 2099 09.00 น. - 10.00 น.'"""
    return (
        f"{booking.first_name} {booking.last_name} • {booking.machine_id} • "
        f"{format_thai_date_range(booking.date, booking.slot_id)}"
    )


def pretty_date(d: date, language: Optional[str] = None) -> str:
    """Full date label for the date picker"""
    config = get_config()
    language = language or config.bot_language
    if language == "en":
        return d.strftime("%A, %B %d, %Y")
    if config.buddhist_era:
        era = f"พ.ศ. {d.year + BUDDHIST_ERA_OFFSET}"
    else:
        era = f"ค.ศ. {d.year}"
    return f"วัน{THAI_WEEKDAYS[d.weekday()]}ที่ {d.day} {THAI_MONTHS[d.month - 1]} {era}"
