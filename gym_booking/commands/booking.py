"""
Booking conversation handler for Telegram bot
Collects the booking form step by step, then submits it through the controller
"""

import html
import logging
from datetime import datetime
from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import (
    ContextTypes,
    ConversationHandler,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from gym_booking.commands.bookings import get_controller, render_bookings, reply_html
from gym_booking.config import get_config
from gym_booking.exceptions import BookingValidationError
from gym_booking.models import DEFAULT_MACHINES, BookingForm
from gym_booking.slots import (
    date_key,
    format_booking_line,
    generate_slots,
    is_past_slot,
    next_days,
    pretty_date,
    thai_long_date,
)
from gym_booking.translations import get_text
from gym_booking.validator import has_conflict, parse_age

logger = logging.getLogger(__name__)

# user_data key holding the BookingForm being filled in
FORM_KEY = "booking_form"

# Conversation states
(
    ASKING_FIRST_NAME,
    ASKING_LAST_NAME,
    ASKING_MEMBER_ID,
    ASKING_AGE,
    SELECTING_MACHINE,
    SELECTING_DATE,
    SELECTING_SLOT,
) = range(7)


def _cancel_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(get_text("cancel_button"), callback_data="cancel_booking")]]
    )


def machine_keyboard() -> InlineKeyboardMarkup:
    """One button per machine"""
    keyboard = [
        [InlineKeyboardButton(m.label, callback_data=f"machine_{m.id}")]
        for m in DEFAULT_MACHINES
    ]
    keyboard.append(
        [InlineKeyboardButton(get_text("cancel_button"), callback_data="cancel_booking")]
    )
    return InlineKeyboardMarkup(keyboard)


def date_keyboard() -> InlineKeyboardMarkup:
    """The selectable days, today first"""
    days = next_days(get_config().booking_days_ahead)
    keyboard = [
        [InlineKeyboardButton(pretty_date(d), callback_data=f"date_{date_key(d)}")]
        for d in days
    ]
    keyboard.append(
        [InlineKeyboardButton(get_text("cancel_button"), callback_data="cancel_booking")]
    )
    return InlineKeyboardMarkup(keyboard)


def slot_keyboard(form: BookingForm, bookings) -> InlineKeyboardMarkup:
    """
    Hourly slots for the chosen day, two per row.

    Telegram buttons cannot be disabled, so slots that are taken or already
    started are labelled instead; picking one is rejected by validation.
    """
    config = get_config()
    buttons = []
    for slot in generate_slots(config.slot_start_hour, config.slot_end_hour):
        label = slot.label
        if is_past_slot(form.date, slot.id):
            label += get_text("slot_past_suffix")
        elif has_conflict(bookings, form.machine_id, form.date, slot.id):
            label += get_text("slot_booked_suffix")
        buttons.append(InlineKeyboardButton(label, callback_data=f"slot_{slot.id}"))

    keyboard = [buttons[i:i + 2] for i in range(0, len(buttons), 2)]
    keyboard.append(
        [InlineKeyboardButton(get_text("cancel_button"), callback_data="cancel_booking")]
    )
    return InlineKeyboardMarkup(keyboard)


def _slot_prompt(form: BookingForm) -> str:
    try:
        day = datetime.strptime(form.date, "%Y-%m-%d").date()
        label = thai_long_date(day)
    except ValueError:
        label = form.date
    return get_text("ask_slot", date=label)


def _get_form(context: ContextTypes.DEFAULT_TYPE) -> BookingForm:
    form = context.user_data.get(FORM_KEY)
    if form is None:
        form = BookingForm()
        context.user_data[FORM_KEY] = form
    return form


async def start_booking(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """/book - start a new booking form"""
    context.user_data[FORM_KEY] = BookingForm()
    logger.info(f"User {update.effective_user.id} started a booking")

    await update.message.reply_text(
        get_text("ask_first_name"), reply_markup=_cancel_keyboard()
    )
    return ASKING_FIRST_NAME


async def first_name_received(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    name = update.message.text.strip()
    if not name:
        await update.message.reply_text(get_text("ask_first_name"))
        return ASKING_FIRST_NAME

    _get_form(context).first_name = name
    await update.message.reply_text(
        get_text("ask_last_name"), reply_markup=_cancel_keyboard()
    )
    return ASKING_LAST_NAME


async def last_name_received(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    name = update.message.text.strip()
    if not name:
        await update.message.reply_text(get_text("ask_last_name"))
        return ASKING_LAST_NAME

    _get_form(context).last_name = name
    await update.message.reply_text(
        get_text("ask_member_id"), reply_markup=_cancel_keyboard()
    )
    return ASKING_MEMBER_ID


async def member_id_received(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    member_id = update.message.text.strip()
    if not member_id:
        await update.message.reply_text(get_text("ask_member_id"))
        return ASKING_MEMBER_ID

    _get_form(context).member_id = member_id
    await update.message.reply_text(get_text("ask_age"), reply_markup=_cancel_keyboard())
    return ASKING_AGE


async def age_received(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Received age - pick the machine, or go straight to dates when there is only one"""
    age = update.message.text.strip()
    if parse_age(age) is None:
        await update.message.reply_text(get_text("invalid_age"))
        return ASKING_AGE

    form = _get_form(context)
    form.age = age

    if len(DEFAULT_MACHINES) > 1:
        await update.message.reply_text(
            get_text("ask_machine"), reply_markup=machine_keyboard()
        )
        return SELECTING_MACHINE

    form.machine_id = DEFAULT_MACHINES[0].id
    await update.message.reply_text(get_text("ask_date"), reply_markup=date_keyboard())
    return SELECTING_DATE


async def machine_selected(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    _get_form(context).machine_id = query.data[len("machine_"):]
    await query.edit_message_text(get_text("ask_date"), reply_markup=date_keyboard())
    return SELECTING_DATE


async def date_selected(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    query = update.callback_query
    await query.answer()

    form = _get_form(context)
    form.date = query.data[len("date_"):]
    controller = get_controller(context)

    await query.edit_message_text(
        _slot_prompt(form), reply_markup=slot_keyboard(form, controller.bookings)
    )
    return SELECTING_SLOT


async def slot_selected(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """
    User picked a slot - submit the booking.

    Validation failures keep the user on the slot picker with the reason.
    """
    query = update.callback_query
    await query.answer()

    user_id = update.effective_user.id
    form = _get_form(context)
    form.slot_id = query.data[len("slot_"):]
    controller = get_controller(context)

    await query.edit_message_text(get_text("saving"))
    try:
        booking = await controller.submit(form)
    except BookingValidationError as e:
        logger.info(f"User {user_id} booking rejected: {e}")
        await query.edit_message_text(
            f"❌ {get_text(e.message_key)}\n\n{_slot_prompt(form)}",
            reply_markup=slot_keyboard(form, controller.bookings),
        )
        return SELECTING_SLOT

    if booking:
        logger.info(f"User {user_id} booked {booking.date} {booking.slot_id}")
        message = get_text("booking_saved", line=html.escape(format_booking_line(booking)))
    else:
        message = f"⚠️ {html.escape(controller.status.save_error)}"

    await query.edit_message_text(message, parse_mode="HTML")
    await reply_html(query.message, render_bookings(controller))
    context.user_data.pop(FORM_KEY, None)
    return ConversationHandler.END


async def cancel_booking_button(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle cancel booking button press during any state"""
    query = update.callback_query
    await query.answer()

    context.user_data.pop(FORM_KEY, None)
    await query.edit_message_text(get_text("booking_cancelled"))
    return ConversationHandler.END


async def cancel_booking_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Cancel the booking conversation"""
    context.user_data.pop(FORM_KEY, None)
    await update.message.reply_text(get_text("booking_cancelled"))
    return ConversationHandler.END


_cancel_handler = CallbackQueryHandler(cancel_booking_button, pattern=r"^cancel_booking$")
_text_input = filters.TEXT & ~filters.COMMAND

# Create the conversation handler
booking_conversation = ConversationHandler(
    entry_points=[CommandHandler("book", start_booking)],
    states={
        ASKING_FIRST_NAME: [_cancel_handler, MessageHandler(_text_input, first_name_received)],
        ASKING_LAST_NAME: [_cancel_handler, MessageHandler(_text_input, last_name_received)],
        ASKING_MEMBER_ID: [_cancel_handler, MessageHandler(_text_input, member_id_received)],
        ASKING_AGE: [_cancel_handler, MessageHandler(_text_input, age_received)],
        SELECTING_MACHINE: [
            _cancel_handler,
            CallbackQueryHandler(machine_selected, pattern=r"^machine_.+$"),
        ],
        SELECTING_DATE: [
            _cancel_handler,
            CallbackQueryHandler(date_selected, pattern=r"^date_\d{4}-\d{2}-\d{2}$"),
        ],
        SELECTING_SLOT: [
            _cancel_handler,
            CallbackQueryHandler(slot_selected, pattern=r"^slot_\d{2}:00-\d{2}:00$"),
        ],
    },
    fallbacks=[CommandHandler("cancel", cancel_booking_conversation)],
)
