"""
Gym Booking Bot - Main Entry Point
Minimal bot setup that wires together the controller, commands and handlers.
"""
import logging
from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from gym_booking.booking_session import BookingSessionController
from gym_booking.config import get_config
from gym_booking.database import close_database, get_session, init_database
from gym_booking.repositories import SettingsRepository

# Import commands
from gym_booking.commands.start import start_command
from gym_booking.commands.bookings import CONTROLLER_KEY, bookings_command, reload_command
from gym_booking.commands.seturl import seturl_command
from gym_booking.commands.booking import booking_conversation

logger = logging.getLogger(__name__)


async def post_init(application: Application) -> None:
    """Post-initialization callback - set bot commands and load bookings"""
    commands = [
        BotCommand("start", "Show status and commands"),
        BotCommand("book", "Book the machine"),
        BotCommand("bookings", "Show upcoming bookings"),
        BotCommand("reload", "Reload bookings from the sheet"),
        BotCommand("seturl", "Set the Apps Script URL"),
        BotCommand("cancel", "Cancel the current booking"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands set")

    controller: BookingSessionController = application.bot_data[CONTROLLER_KEY]
    await controller.load()


async def post_shutdown(application: Application) -> None:
    """Close the HTTP client and database on shutdown"""
    controller: BookingSessionController = application.bot_data[CONTROLLER_KEY]
    await controller.client.close()
    close_database()


def build_application() -> Application:
    """Create the bot application with its handlers and shared controller"""
    config = get_config()
    if not config.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN must be set to run the bot")

    logger.info("Initializing database...")
    init_database()
    with get_session() as session:
        api_url = SettingsRepository(session).get_api_url()

    application = (
        Application.builder()
        .token(config.telegram_bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    application.bot_data[CONTROLLER_KEY] = BookingSessionController(api_url)

    # Booking conversation first so /cancel reaches its fallback
    application.add_handler(booking_conversation)
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("bookings", bookings_command))
    application.add_handler(CommandHandler("reload", reload_command))
    application.add_handler(CommandHandler("seturl", seturl_command))
    return application


def main() -> None:
    """Start the bot"""
    config = get_config()
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=config.log_level.upper(),
    )

    application = build_application()

    logger.info("Starting bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == '__main__':
    main()
