from typing import Optional, Union

from sqlalchemy import Boolean, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from bhn.db.base import Base
from bhn.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


SettingValue = Union[str, int, bool, None]

_TRUE_LABELS = ("true", "1", "yes", "on")
_FALSE_LABELS = ("false", "0", "no", "off")


class SystemSetting(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """
    Key/value application setting.

    Values are stored as text. ``setting_type`` says how to read them back:
    ``string``, ``integer`` or ``boolean``. Any other type reads as the raw
    string.
    """

    __tablename__ = "system_settings"

    setting_key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    setting_value: Mapped[Optional[str]] = mapped_column(Text)
    setting_type: Mapped[Optional[str]] = mapped_column(
        String(50), default="string", server_default="string"
    )
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_public: Mapped[Optional[bool]] = mapped_column(
        Boolean, default=False, server_default=false()
    )

    def __repr__(self) -> str:
        return f"<SystemSetting key={self.setting_key} value={self.setting_value}>"

    @property
    def typed_value(self) -> SettingValue:
        """
        Read ``setting_value`` according to ``setting_type``.

        Raises:
            ValueError: If the stored text does not parse as the declared type
        """
        raw = self.setting_value
        if raw is None:
            return None

        if self.setting_type == "integer":
            return int(raw)

        if self.setting_type == "boolean":
            label = raw.strip().lower()
            if label in _TRUE_LABELS:
                return True
            if label in _FALSE_LABELS:
                return False
            raise ValueError(
                f"Setting {self.setting_key} is boolean but holds {raw!r}"
            )

        return raw

    @typed_value.setter
    def typed_value(self, value: SettingValue) -> None:
        if value is None:
            self.setting_value = None
        elif self.setting_type == "integer":
            # True is also an int
            if isinstance(value, bool):
                raise ValueError(
                    f"Setting {self.setting_key} is integer, got {value!r}"
                )
            self.setting_value = str(int(value))
        elif isinstance(value, bool):
            self.setting_value = "true" if value else "false"
        elif self.setting_type == "boolean":
            label = str(value).strip().lower()
            if label not in _TRUE_LABELS + _FALSE_LABELS:
                raise ValueError(
                    f"Setting {self.setting_key} is boolean, got {value!r}"
                )
            self.setting_value = "true" if label in _TRUE_LABELS else "false"
        else:
            self.setting_value = str(value)
