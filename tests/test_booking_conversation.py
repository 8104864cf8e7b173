"""
Tests for the Telegram booking conversation and list commands
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock, patch
from telegram.ext import ConversationHandler

from conftest import VALID_URL, make_booking, make_form
from gym_booking.booking_session import BookingSessionController
from gym_booking.commands.booking import (
    ASKING_AGE,
    FORM_KEY,
    SELECTING_DATE,
    SELECTING_SLOT,
    age_received,
    cancel_booking_button,
    slot_keyboard,
    slot_selected,
    start_booking,
)
from gym_booking.commands.bookings import (
    CONTROLLER_KEY,
    MAX_MESSAGE_LENGTH,
    bookings_command,
    reload_command,
    render_bookings,
    split_message,
)
from gym_booking.commands.seturl import seturl_command
from gym_booking.models import BookingForm


def make_context(controller, form=None, args=None):
    context = Mock()
    context.bot_data = {CONTROLLER_KEY: controller}
    context.user_data = {} if form is None else {FORM_KEY: form}
    context.args = args or []
    return context


def make_message_update(text=""):
    update = Mock()
    update.message = AsyncMock()
    update.message.text = text
    update.effective_user = Mock(id=12345)
    return update


def make_callback_update(data):
    update = Mock()
    query = AsyncMock()
    query.data = data
    update.callback_query = query
    update.effective_user = Mock(id=12345)
    return update


@pytest.fixture
def controller(mock_client):
    return BookingSessionController(VALID_URL, client=mock_client)


class TestFormSteps:
    """Tests for the text input steps"""

    @pytest.mark.asyncio
    async def test_start_booking_creates_empty_form(self, controller):
        update = make_message_update("/book")
        context = make_context(controller)

        result = await start_booking(update, context)

        from gym_booking.commands.booking import ASKING_FIRST_NAME

        assert result == ASKING_FIRST_NAME
        assert isinstance(context.user_data[FORM_KEY], BookingForm)
        update.message.reply_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_non_numeric_age_is_asked_again(self, controller):
        update = make_message_update("thirty")
        context = make_context(controller, form=BookingForm())

        result = await age_received(update, context)

        assert result == ASKING_AGE
        assert context.user_data[FORM_KEY].age == ""

    @pytest.mark.asyncio
    async def test_single_machine_skips_to_dates(self, controller):
        update = make_message_update("35")
        context = make_context(controller, form=BookingForm())

        result = await age_received(update, context)

        assert result == SELECTING_DATE
        form = context.user_data[FORM_KEY]
        assert form.age == "35"
        assert form.machine_id == "underwater-treadmill"


class TestSlotKeyboard:
    """Tests for the slot picker"""

    def test_booked_slot_is_labelled(self):
        form = make_form(date="2099-01-01")
        booked = [make_booking(date="2099-01-01", slot_id="21:00-22:00")]

        markup = slot_keyboard(form, booked)
        labels = [b.text for row in markup.inline_keyboard for b in row]

        assert labels[0] == "06:00-07:00"
        assert labels[15] == "21:00-22:00 (ถูกจองแล้ว)"

    def test_past_slots_are_labelled(self):
        markup = slot_keyboard(make_form(date="2000-01-01"), [])
        labels = [b.text for row in markup.inline_keyboard for b in row][:16]

        assert all(label.endswith("(ผ่านไปแล้ว)") for label in labels)

    def test_booking_for_other_machine_does_not_block(self):
        form = make_form(date="2099-01-01")
        booked = [make_booking(date="2099-01-01", slot_id="06:00-07:00", machine_id="rower")]

        markup = slot_keyboard(form, booked)

        assert markup.inline_keyboard[0][0].text == "06:00-07:00"

    def test_two_slots_per_row(self):
        markup = slot_keyboard(make_form(date="2099-01-01"), [])
        rows = markup.inline_keyboard
        assert all(len(row) == 2 for row in rows[:-1])
        assert rows[0][0].callback_data == "slot_06:00-07:00"


class TestSlotSelected:
    """Tests for the final submit step"""

    @pytest.mark.asyncio
    async def test_successful_booking_ends_conversation(self, controller, mock_client):
        update = make_callback_update("slot_10:00-11:00")
        context = make_context(controller, form=make_form(slot_id=""))

        result = await slot_selected(update, context)

        assert result == ConversationHandler.END
        assert FORM_KEY not in context.user_data
        mock_client.create_row.assert_awaited_once()
        sent = update.callback_query.edit_message_text.await_args_list[-1].args[0]
        assert "1 มกราคม 2099 10.00 น. - 11.00 น." in sent

    @pytest.mark.asyncio
    async def test_conflict_stays_on_slot_picker(self, controller, mock_client):
        controller.bookings = [make_booking(date="2099-01-01", slot_id="10:00-11:00")]
        update = make_callback_update("slot_10:00-11:00")
        context = make_context(controller, form=make_form())

        result = await slot_selected(update, context)

        assert result == SELECTING_SLOT
        assert FORM_KEY in context.user_data
        mock_client.create_row.assert_not_awaited()
        sent = update.callback_query.edit_message_text.await_args_list[-1].args[0]
        assert "ช่วงเวลานี้ถูกจองแล้ว" in sent

    @pytest.mark.asyncio
    async def test_failed_save_shows_error(self, controller, mock_client):
        from gym_booking.exceptions import HttpStatusError

        mock_client.create_row.side_effect = HttpStatusError(500)
        update = make_callback_update("slot_10:00-11:00")
        context = make_context(controller, form=make_form())

        result = await slot_selected(update, context)

        assert result == ConversationHandler.END
        sent = update.callback_query.edit_message_text.await_args_list[-1].args[0]
        assert "บันทึกข้อมูลล้มเหลว: HTTP 500" in sent

    @pytest.mark.asyncio
    async def test_cancel_button_drops_form(self, controller):
        update = make_callback_update("cancel_booking")
        context = make_context(controller, form=make_form())

        result = await cancel_booking_button(update, context)

        assert result == ConversationHandler.END
        assert FORM_KEY not in context.user_data


class TestBookingList:
    """Tests for /bookings and /reload"""

    def test_render_lists_future_bookings_only(self, controller):
        controller.bookings = [
            make_booking(id="past", date="2000-01-01"),
            make_booking(id="future", first_name="<Ann>", date="2099-01-01"),
        ]

        text = render_bookings(controller)

        assert "&lt;Ann&gt; B • underwater-treadmill • 1 มกราคม 2099" in text
        assert "2000" not in text

    def test_render_empty_list(self, controller):
        assert "ยังไม่มีการจอง" in render_bookings(controller)

    def test_render_shows_error(self, controller):
        controller.status.load_error = "โหลดข้อมูลล้มเหลว: HTTP 500"
        assert "โหลดข้อมูลล้มเหลว: HTTP 500" in render_bookings(controller)

    @pytest.mark.asyncio
    async def test_reload_with_invalid_url(self, mock_client):
        controller = BookingSessionController("https://example.com", client=mock_client)
        update = make_message_update("/reload")

        await reload_command(update, make_context(controller))

        mock_client.list_rows.assert_not_awaited()
        update.message.reply_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reload_fetches_list(self, controller, mock_client):
        update = make_message_update("/reload")

        await reload_command(update, make_context(controller))

        mock_client.list_rows.assert_awaited_once_with(VALID_URL)


class TestLongLists:
    """Booking lists longer than one Telegram message"""

    def test_split_keeps_short_text_whole(self):
        assert split_message("a\nb") == ["a\nb"]

    def test_split_on_line_boundaries(self):
        lines = [f"line {i:03d} " + "x" * 40 for i in range(300)]
        chunks = split_message("\n".join(lines), limit=1000)

        assert all(len(chunk) <= 1000 for chunk in chunks)
        assert "\n".join(chunks).split("\n") == lines

    def test_overlong_line_is_cut(self):
        chunks = split_message("y" * 2500, limit=1000)
        assert [len(chunk) for chunk in chunks] == [1000, 1000, 500]

    @pytest.mark.asyncio
    async def test_full_week_is_sent_in_several_messages(self, controller):
        controller.bookings = [
            make_booking(
                id=f"{day}-{hour}",
                date=f"2099-01-{day:02d}",
                slot_id=f"{hour:02d}:00-{hour + 1:02d}:00",
            )
            for day in range(1, 8)
            for hour in range(6, 22)
        ]
        assert len(render_bookings(controller)) > MAX_MESSAGE_LENGTH

        update = make_message_update("/bookings")
        await bookings_command(update, make_context(controller))

        sent = [c.args[0] for c in update.message.reply_text.await_args_list]
        assert len(sent) > 1
        assert all(len(text) <= MAX_MESSAGE_LENGTH for text in sent)
        assert sum(text.count("underwater-treadmill") for text in sent) == 112
        assert sent[0].startswith("<b>")


class TestSetUrl:
    """Tests for /seturl"""

    @pytest.mark.asyncio
    async def test_usage_without_argument(self, controller):
        update = make_message_update("/seturl")

        await seturl_command(update, make_context(controller))

        update.message.reply_text.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("gym_booking.commands.seturl.SettingsRepository")
    @patch("gym_booking.commands.seturl.get_session")
    async def test_invalid_url_is_not_saved(self, mock_get_session, MockRepo, controller):
        update = make_message_update("/seturl https://example.com")

        await seturl_command(update, make_context(controller, args=["https://example.com"]))

        MockRepo.assert_not_called()
        assert controller.api_url == VALID_URL

    @pytest.mark.asyncio
    @patch("gym_booking.commands.seturl.SettingsRepository")
    @patch("gym_booking.commands.seturl.get_session")
    async def test_valid_url_is_persisted_and_loaded(
        self, mock_get_session, MockRepo, mock_client
    ):
        mock_get_session.return_value = MagicMock()
        controller = BookingSessionController("", client=mock_client)
        new_url = "https://script.google.com/macros/s/NEW/exec"
        update = make_message_update(f"/seturl {new_url}")

        await seturl_command(update, make_context(controller, args=[new_url]))

        MockRepo.return_value.set_api_url.assert_called_once_with(new_url)
        assert controller.api_url == new_url
        mock_client.list_rows.assert_awaited_once_with(new_url)


class TestApplication:
    """Tests for bot wiring"""

    def test_build_application_requires_token(self):
        from gym_booking.telegram_bot import build_application

        with pytest.raises(ValueError):
            build_application()
