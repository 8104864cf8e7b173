"""
Multi-language support for user-facing messages
Supports: Thai (TH, default) and English (EN)
"""
import logging
from typing import Optional

from gym_booking.config import get_config

logger = logging.getLogger(__name__)

THAI_MONTHS = [
    'มกราคม', 'กุมภาพันธ์', 'มีนาคม', 'เมษายน', 'พฤษภาคม', 'มิถุนายน',
    'กรกฎาคม', 'สิงหาคม', 'กันยายน', 'ตุลาคม', 'พฤศจิกายน', 'ธันวาคม',
]

# Monday first, matching date.weekday()
THAI_WEEKDAYS = ['จันทร์', 'อังคาร', 'พุธ', 'พฤหัสบดี', 'ศุกร์', 'เสาร์', 'อาทิตย์']

# Static translations for bot and controller messages
MESSAGES = {
    'welcome': {
        'th': """🏋️ <b>ระบบจองใช้เครื่องออกกำลังกาย</b>

คำสั่ง:
📝 /book - จองใช้งานเครื่อง
📋 /bookings - ตารางจอง (เฉพาะอนาคต)
🔄 /reload - โหลดตารางจองใหม่
🔗 /seturl - ตั้งค่า URL ของ Google Apps Script""",
        'en': """🏋️ <b>Gym Machine Booking</b>

Commands:
📝 /book - Book the machine
📋 /bookings - Upcoming bookings
🔄 /reload - Reload bookings
🔗 /seturl - Set the Google Apps Script URL""",
    },
    'connection_ready': {
        'th': 'สถานะ: พร้อมเชื่อมต่อ',
        'en': 'Status: ready to connect',
    },
    'connection_invalid': {
        'th': 'สถานะ: URL ยังไม่ถูกต้อง (ต้องลงท้าย /exec)',
        'en': 'Status: URL is not valid yet (must end with /exec)',
    },
    'last_fetched': {
        'th': 'โหลดล่าสุด: {time}',
        'en': 'Last loaded: {time}',
    },
    'loading': {
        'th': 'กำลังโหลดข้อมูล…',
        'en': 'Loading…',
    },
    'saving': {
        'th': 'กำลังบันทึก…',
        'en': 'Saving…',
    },
    'bookings_header': {
        'th': '<b>ตารางจอง (เฉพาะอนาคต)</b>',
        'en': '<b>Upcoming bookings</b>',
    },
    'no_bookings': {
        'th': 'ยังไม่มีการจอง',
        'en': 'No bookings yet',
    },
    'load_failed': {
        'th': 'โหลดข้อมูลล้มเหลว: {error}',
        'en': 'Loading failed: {error}',
    },
    'save_failed': {
        'th': 'บันทึกข้อมูลล้มเหลว: {error}',
        'en': 'Saving failed: {error}',
    },
    'no_future_bookings': {
        'th': 'โหลดสำเร็จแต่ไม่มีรายการอนาคตให้แสดง (ตรวจรูปแบบวันที่/เวลาในชีต)',
        'en': 'Loaded, but there are no upcoming bookings to show (check the date/time format in the sheet)',
    },
    'missing_fields': {
        'th': 'กรุณากรอกข้อมูลให้ครบ',
        'en': 'Please fill in all fields',
    },
    'slot_conflict': {
        'th': 'ช่วงเวลานี้ถูกจองแล้ว',
        'en': 'This slot is already booked',
    },
    'past_slot': {
        'th': 'เลือกช่วงเวลาที่ผ่านไปแล้วไม่ได้',
        'en': 'You cannot book a slot that has already passed',
    },
    'validation_failed': {
        'th': 'ข้อมูลการจองไม่ถูกต้อง',
        'en': 'The booking is not valid',
    },
    'slot_past_suffix': {
        'th': ' (ผ่านไปแล้ว)',
        'en': ' (passed)',
    },
    'slot_booked_suffix': {
        'th': ' (ถูกจองแล้ว)',
        'en': ' (booked)',
    },
    'ask_first_name': {
        'th': 'กรุณากรอกชื่อ:',
        'en': 'Please enter your first name:',
    },
    'ask_last_name': {
        'th': 'กรุณากรอกนามสกุล:',
        'en': 'Please enter your last name:',
    },
    'ask_member_id': {
        'th': 'กรุณากรอกเลขสมาชิก:',
        'en': 'Please enter your member ID:',
    },
    'ask_age': {
        'th': 'กรุณากรอกอายุ:',
        'en': 'Please enter your age:',
    },
    'invalid_age': {
        'th': 'กรุณากรอกอายุเป็นตัวเลข',
        'en': 'Please enter your age as a number',
    },
    'ask_machine': {
        'th': 'เลือกเครื่อง:',
        'en': 'Choose a machine:',
    },
    'ask_date': {
        'th': 'เลือกวันที่:',
        'en': 'Choose a date:',
    },
    'ask_slot': {
        'th': 'เลือกช่วงเวลา ({date}):',
        'en': 'Choose a time slot ({date}):',
    },
    'booking_saved': {
        'th': '✅ จองสำเร็จ\n{line}',
        'en': '✅ Booked\n{line}',
    },
    'booking_cancelled': {
        'th': '❌ ยกเลิกการจองแล้ว',
        'en': '❌ Booking cancelled',
    },
    'cancel_button': {
        'th': '❌ ยกเลิก',
        'en': '❌ Cancel',
    },
    'seturl_usage': {
        'th': 'วิธีใช้: /seturl https://script.google.com/macros/s/XXXXXXXX/exec',
        'en': 'Usage: /seturl https://script.google.com/macros/s/XXXXXXXX/exec',
    },
    'seturl_saved': {
        'th': '✅ บันทึก URL แล้ว',
        'en': '✅ URL saved',
    },
}


def get_text(key: str, lang: Optional[str] = None, **kwargs) -> str:
    """
    Get translated text for a message key

    Args:
        key: Message key from MESSAGES
        lang: Language code ('th' or 'en'); defaults to the configured language
        **kwargs: Values for str.format placeholders

    Returns:
        Translated message, the key itself if unknown
    """
    if lang is None:
        lang = get_config().bot_language

    message = MESSAGES.get(key)
    if message is None:
        logger.warning(f"Missing translation key: {key}")
        return key

    text = message.get(lang) or message['th']
    if kwargs:
        text = text.format(**kwargs)
    return text
