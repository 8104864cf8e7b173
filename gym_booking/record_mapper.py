"""
Mapping between sheet rows and Booking records.

Row (wire)      Booking (memory)
-----------     ----------------
booking_id  <-> id
date        <-> date        (normalized to YYYY-MM-DD on the way in)
slot        <-> slot_id
machine_id  <-> machine_id
first_name  <-> first_name
last_name   <-> last_name
member_id   <-> member_id
age         <-> age         (int, 0 when absent or not a number)
created_at  <-> created_at  (stamped with now on the way out when missing)
"""

from datetime import datetime, timezone
from typing import Any, Dict

from gym_booking.models import Booking
from gym_booking.slots import normalize_date


def utc_now_iso() -> str:
    """Current instant as '2024-01-01T00:00:00.000Z'"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _coerce_age(value: Any) -> int:
    if value is None or value == "" or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def row_to_booking(row: Dict[str, Any]) -> Booking:
    """Build a Booking from a sheet row; malformed rows give a best-effort record"""
    return Booking(
        id=_text(row.get("booking_id")),
        date=normalize_date(row.get("date")),
        slot_id=_text(row.get("slot")),
        machine_id=_text(row.get("machine_id")),
        first_name=_text(row.get("first_name")),
        last_name=_text(row.get("last_name")),
        member_id=_text(row.get("member_id")),
        age=_coerce_age(row.get("age")),
        created_at=row.get("created_at") or None,
    )


def booking_to_row(booking: Booking) -> Dict[str, Any]:
    """Build the sheet row for a Booking"""
    return {
        "booking_id": booking.id,
        "date": booking.date,
        "slot": booking.slot_id,
        "machine_id": booking.machine_id,
        "first_name": booking.first_name,
        "last_name": booking.last_name,
        "member_id": booking.member_id,
        "age": booking.age,
        "created_at": booking.created_at or utc_now_iso(),
    }
