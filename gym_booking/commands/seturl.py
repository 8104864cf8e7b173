"""
/seturl command - change and persist the Apps Script endpoint URL
"""

import logging
from telegram import Update
from telegram.ext import ContextTypes

from gym_booking.commands.bookings import get_controller, render_bookings, reply_html
from gym_booking.database import get_session
from gym_booking.repositories import SettingsRepository
from gym_booking.sheets_api_client import is_likely_apps_script_url
from gym_booking.translations import get_text

logger = logging.getLogger(__name__)


async def seturl_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /seturl <url>"""
    if not context.args:
        await update.message.reply_text(get_text("seturl_usage"))
        return

    url = context.args[0].strip()
    if not is_likely_apps_script_url(url):
        await update.message.reply_text(
            f"{get_text('connection_invalid')}\n{get_text('seturl_usage')}"
        )
        return

    with get_session() as session:
        SettingsRepository(session).set_api_url(url)

    controller = get_controller(context)
    controller.set_api_url(url)
    logger.info(f"User {update.effective_user.id} changed the endpoint URL")

    await controller.load()
    await reply_html(update.message, f"{get_text('seturl_saved')}\n\n{render_bookings(controller)}")
