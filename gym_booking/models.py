"""
Type-safe data models for the booking client
Uses dataclasses for better type safety and IDE support
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Machine:
    """A bookable gym machine"""
    id: str
    label: str


DEFAULT_MACHINES = [
    Machine(id="underwater-treadmill", label="ลู่วิ่งในน้ำ"),
]


@dataclass(frozen=True)
class Slot:
    """One-hour reservable interval, e.g. id '06:00-07:00'"""
    id: str
    label: str


@dataclass
class Booking:
    """A booking as held in memory (see record_mapper for the wire shape)"""
    id: str
    date: str  # YYYY-MM-DD
    slot_id: str  # HH:00-HH:00
    machine_id: str
    first_name: str
    last_name: str
    member_id: str
    age: int = 0
    created_at: Optional[str] = None  # ISO instant


@dataclass
class BookingForm:
    """Raw booking candidate as typed by the user, before validation"""
    first_name: str = ""
    last_name: str = ""
    member_id: str = ""
    age: str = ""
    machine_id: str = DEFAULT_MACHINES[0].id
    date: str = ""
    slot_id: str = ""
