"""
Repository pattern for database access
Provides clean separation between business logic and data access
"""

from sqlmodel import Session
from typing import Optional

from gym_booking.config import get_config
from gym_booking.db_models import ClientSetting, utc_now

# Fixed key the endpoint URL is stored under
API_URL_KEY = "gym_booking_api_url_v1"


class SettingsRepository:
    """Repository for ClientSetting operations"""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> Optional[str]:
        """Get a setting value, None if it was never stored"""
        setting = self.session.get(ClientSetting, key)
        return setting.value if setting else None

    def set(self, key: str, value: str) -> ClientSetting:
        """Create or overwrite a setting"""
        setting = self.session.get(ClientSetting, key)
        if setting is None:
            setting = ClientSetting(key=key, value=value)
            self.session.add(setting)
        else:
            setting.value = value
            setting.updated_at = utc_now()
        self.session.commit()
        self.session.refresh(setting)
        return setting

    def get_api_url(self) -> str:
        """Stored endpoint URL, or the configured placeholder when none was saved"""
        return self.get(API_URL_KEY) or get_config().default_api_url

    def set_api_url(self, url: str) -> None:
        """Persist the endpoint URL"""
        self.set(API_URL_KEY, url.strip())
