"""
/bookings and /reload commands - show the upcoming booking list
"""

import html
import logging
from typing import List
from telegram import Update
from telegram.ext import ContextTypes

from gym_booking.booking_session import BookingSessionController
from gym_booking.slots import format_booking_line
from gym_booking.translations import get_text

logger = logging.getLogger(__name__)

# bot_data key holding the shared BookingSessionController
CONTROLLER_KEY = "controller"

# Telegram rejects longer message texts
MAX_MESSAGE_LENGTH = 4096


def get_controller(context: ContextTypes.DEFAULT_TYPE) -> BookingSessionController:
    """Shared controller created at startup"""
    return context.bot_data[CONTROLLER_KEY]


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split text into Telegram-sized chunks.

    Breaks fall on line boundaries so HTML tags, which never span lines here,
    stay balanced. A single line longer than the limit is cut hard.
    """
    chunks = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            candidate = line
        current = candidate
    if current:
        chunks.append(current)
    return chunks


async def reply_html(message, text: str) -> None:
    """Send text as one or more HTML replies to message"""
    for chunk in split_message(text):
        await message.reply_text(chunk, parse_mode="HTML")


def render_bookings(controller: BookingSessionController) -> str:
    """HTML message with status lines and the future bookings, earliest first"""
    status = controller.status
    lines = [get_text("bookings_header")]

    if controller.loading:
        lines.append(get_text("loading"))
    if controller.saving:
        lines.append(get_text("saving"))
    if status.api_error:
        lines.append(f"⚠️ {html.escape(status.api_error)}")
    if status.notice:
        lines.append(f"ℹ️ {html.escape(status.notice)}")

    visible = controller.visible_bookings()
    if visible:
        lines.extend(f"• {html.escape(format_booking_line(b))}" for b in visible)
    else:
        lines.append(get_text("no_bookings"))

    if status.last_fetched_at:
        fetched = status.last_fetched_at.strftime("%Y-%m-%d %H:%M:%S")
        lines.append(f"\n🕐 {get_text('last_fetched', time=fetched)}")

    return "\n".join(lines)


async def bookings_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show the booking list as currently known"""
    controller = get_controller(context)
    await reply_html(update.message, render_bookings(controller))


async def reload_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Fetch the list from the sheet, then show it"""
    controller = get_controller(context)
    if not controller.has_valid_url():
        await update.message.reply_text(get_text("connection_invalid"))
        return

    await controller.load()
    logger.info(f"User {update.effective_user.id} reloaded bookings")
    await reply_html(update.message, render_bookings(controller))
