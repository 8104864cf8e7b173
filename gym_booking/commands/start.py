"""
/start command - show welcome message and connection status
"""

import logging
from telegram import Update
from telegram.ext import ContextTypes

from gym_booking.commands.bookings import get_controller
from gym_booking.translations import get_text

logger = logging.getLogger(__name__)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the /start command"""
    controller = get_controller(context)
    status_key = "connection_ready" if controller.has_valid_url() else "connection_invalid"

    lines = [get_text("welcome"), "", get_text(status_key)]
    if controller.status.last_fetched_at:
        fetched = controller.status.last_fetched_at.strftime("%Y-%m-%d %H:%M:%S")
        lines.append(get_text("last_fetched", time=fetched))

    await update.message.reply_text("\n".join(lines), parse_mode="HTML")
