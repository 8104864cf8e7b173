"""
Booking session controller - keeps the local booking list in step with the sheet.

The sheet is the single source of truth. The local list is a projection that
is replaced on every load (future bookings only, earliest first). A submit
inserts the new booking locally before the create request goes out, then
reloads once the request settles, whatever the outcome. A rejected booking
therefore disappears with the reload instead of being rolled back by hand.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from gym_booking.exceptions import GatewayError
from gym_booking.models import Booking, BookingForm
from gym_booking.record_mapper import booking_to_row, row_to_booking, utc_now_iso
from gym_booking.sheets_api_client import (
    SheetsAPIClient,
    get_api_client,
    is_likely_apps_script_url,
)
from gym_booking.slots import is_future_booking, local_now, sort_bookings
from gym_booking.translations import get_text
from gym_booking.validator import parse_age, validate

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_ERROR = "load_error"


class SaveState(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVE_OK = "save_ok"
    SAVE_ERROR = "save_error"


@dataclass
class SessionStatus:
    """What the UI shows next to the booking list"""
    load_state: LoadState = LoadState.IDLE
    save_state: SaveState = SaveState.IDLE
    load_error: str = ""
    save_error: str = ""
    notice: str = ""
    last_fetched_at: Optional[datetime] = None

    @property
    def api_error(self) -> str:
        return "\n".join(msg for msg in (self.save_error, self.load_error) if msg)


class BookingSessionController:
    """Booking list plus the load/submit operations that keep it current"""

    def __init__(self, api_url: str, client: Optional[SheetsAPIClient] = None):
        self.api_url = api_url
        self.client = client or get_api_client()
        self.bookings: List[Booking] = []
        self.status = SessionStatus()
        # One submission at a time; the next one validates against the reloaded list
        self._submit_lock = asyncio.Lock()

    @property
    def loading(self) -> bool:
        return self.status.load_state == LoadState.LOADING

    @property
    def saving(self) -> bool:
        return self.status.save_state == SaveState.SAVING

    def has_valid_url(self) -> bool:
        return is_likely_apps_script_url(self.api_url)

    def set_api_url(self, url: str) -> None:
        self.api_url = (url or "").strip()

    def visible_bookings(self, now: Optional[datetime] = None) -> List[Booking]:
        """Bookings that have not started yet, at render time"""
        now = now or local_now()
        return [b for b in self.bookings if is_future_booking(b, now)]

    async def load(self) -> bool:
        """
        Replace the local list with the sheet's future bookings.

        Skipped when the endpoint URL does not look like an Apps Script URL.
        On failure the previous list is kept and the error is put in status.

        Returns:
            True if the list was refreshed
        """
        if not self.has_valid_url():
            logger.warning(f"Skipping load, endpoint URL is not an Apps Script URL: {self.api_url!r}")
            return False

        self.status.load_state = LoadState.LOADING
        self.status.load_error = ""
        self.status.notice = ""
        try:
            rows = await self.client.list_rows(self.api_url)
        except GatewayError as e:
            logger.error(f"Loading bookings failed: {e}")
            self.status.load_error = get_text("load_failed", error=str(e))
            self.status.load_state = LoadState.LOAD_ERROR
            return False

        mapped = []
        for row in rows:
            if isinstance(row, dict):
                mapped.append(row_to_booking(row))
            else:
                logger.warning(f"Ignoring malformed booking row: {row!r}")

        now = local_now()
        self.bookings = sort_bookings(b for b in mapped if is_future_booking(b, now))
        if mapped and not self.bookings:
            self.status.notice = get_text("no_future_bookings")

        self.status.last_fetched_at = now
        self.status.load_state = LoadState.LOADED
        logger.info(f"Loaded {len(mapped)} bookings, {len(self.bookings)} upcoming")
        return True

    async def submit(self, form: BookingForm) -> Optional[Booking]:
        """
        Validate, show optimistically, create on the sheet, then reload.

        Args:
            form: Booking candidate as entered by the user

        Returns:
            The created booking once the sheet confirmed it, None if saving failed

        Raises:
            BookingValidationError: The candidate was rejected before any request
        """
        async with self._submit_lock:
            validate(form, self.bookings)

            self.status.save_error = ""
            if not self.has_valid_url():
                logger.warning(f"Not saving, endpoint URL is not an Apps Script URL: {self.api_url!r}")
                self.status.save_error = get_text(
                    "save_failed", error=get_text("connection_invalid")
                )
                self.status.save_state = SaveState.SAVE_ERROR
                return None

            booking = Booking(
                id=str(uuid.uuid4()),
                date=form.date,
                slot_id=form.slot_id,
                machine_id=form.machine_id,
                first_name=form.first_name.strip(),
                last_name=form.last_name.strip(),
                member_id=form.member_id.strip(),
                age=parse_age(form.age),
                created_at=utc_now_iso(),
            )

            self.status.save_state = SaveState.SAVING
            self.bookings = sort_bookings([*self.bookings, booking])

            saved = True
            try:
                await self.client.create_row(self.api_url, booking_to_row(booking))
                logger.info(f"Booking {booking.id} confirmed by the sheet")
            except GatewayError as e:
                saved = False
                logger.error(f"Saving booking {booking.id} failed: {e}")
                self.status.save_error = get_text("save_failed", error=str(e))

            # Reconcile with the sheet either way; drops the optimistic row if it was not stored
            await self.load()

            self.status.save_state = SaveState.SAVE_OK if saved else SaveState.SAVE_ERROR
            return booking if saved else None
