from typing import List, Optional

from sqlalchemy import select

from bhn.models.system_setting_model import SettingValue, SystemSetting
from bhn.repositories.base_repo import BaseRepository


class SystemSettingRepository(BaseRepository[SystemSetting]):
    """Repository layer for key/value system settings."""

    model = SystemSetting

    async def get_by_key(self, setting_key: str) -> Optional[SystemSetting]:
        result = await self.db.execute(
            select(SystemSetting).where(SystemSetting.setting_key == setting_key)
        )
        return result.scalar_one_or_none()

    async def get_value(
        self, setting_key: str, default: SettingValue = None
    ) -> SettingValue:
        """
        Read a setting as its declared type.

        Args:
            setting_key: Setting name
            default: Returned when the setting does not exist

        Returns:
            str, int or bool according to the setting's type
        """
        setting = await self.get_by_key(setting_key)
        if setting is None:
            return default
        return setting.typed_value

    async def set_value(
        self, setting_key: str, value: SettingValue
    ) -> Optional[SystemSetting]:
        """
        Change an existing setting.

        Args:
            setting_key: Setting name
            value: New value, converted to text according to the setting's type

        Returns:
            Updated setting, or None if no setting has that key

        Raises:
            ValueError: If value does not fit the setting's type
        """
        setting = await self.get_by_key(setting_key)
        if setting is None:
            return None

        old_value = setting.setting_value
        setting.typed_value = value
        await self.update(setting)

        self.log_info(
            {
                "event_type": "system_setting_changed",
                "setting_key": setting_key,
                "old_value": old_value,
                "new_value": setting.setting_value,
            }
        )
        return setting

    async def list_public(self) -> List[SystemSetting]:
        result = await self.db.execute(
            select(SystemSetting)
            .where(SystemSetting.is_public.is_(True))
            .order_by(SystemSetting.setting_key)
        )
        return list(result.scalars().all())
