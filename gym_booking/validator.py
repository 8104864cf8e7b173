"""
Booking validation - pure business rules, no I/O.

Checks run in order and stop at the first failure:
  1. required fields (names, member id, a non-negative whole-number age)
  2. conflict with an existing booking of the same machine, date and slot
  3. slot already started
"""

from datetime import datetime
from typing import Iterable, Optional

from gym_booking.exceptions import MissingFieldsError, PastSlotError, SlotConflictError
from gym_booking.models import Booking, BookingForm
from gym_booking.slots import is_past_slot

REQUIRED_FIELDS = ("first_name", "last_name", "member_id", "age")


def parse_age(value) -> Optional[int]:
    """Age typed by the user as an int, None if it is not a non-negative whole number"""
    text = str(value).strip() if value is not None else ""
    if not text.isdigit():
        return None
    return int(text)


def missing_fields(form: BookingForm) -> list:
    """Names of required fields that are empty (or, for age, not a number)"""
    missing = [
        name for name in REQUIRED_FIELDS
        if not str(getattr(form, name) or "").strip()
    ]
    if "age" not in missing and parse_age(form.age) is None:
        missing.append("age")
    return missing


def has_conflict(
    bookings: Iterable[Booking], machine_id: str, date: str, slot_id: str
) -> bool:
    """True if the machine is already booked for that date and slot"""
    return any(
        b.machine_id == machine_id and b.date == date and b.slot_id == slot_id
        for b in bookings
    )


def validate(
    form: BookingForm, existing: Iterable[Booking], now: Optional[datetime] = None
) -> None:
    """
    Validate a booking candidate against the current list.

    Raises:
        MissingFieldsError: A required field is empty or age is not a number
        SlotConflictError: The slot is already booked for that machine
        PastSlotError: The slot has already started
    """
    missing = missing_fields(form)
    if missing:
        raise MissingFieldsError(missing)

    if has_conflict(existing, form.machine_id, form.date, form.slot_id):
        raise SlotConflictError(
            f"{form.machine_id} is already booked on {form.date} {form.slot_id}"
        )

    if is_past_slot(form.date, form.slot_id, now=now):
        raise PastSlotError(f"{form.date} {form.slot_id} has already started")
