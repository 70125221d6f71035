from __future__ import annotations

from sqlalchemy import Enum as SAEnum, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lazythumbs.database.core.main import Base
from lazythumbs.database.core.service_object import ServiceObject
from lazythumbs.domain.enums.settings_scope import SettingsScope


class EngineOption(ServiceObject, Base):
    __tablename__ = "engine_option"
    __table_args__ = (UniqueConstraint("scope", "name", name="uq_engine_option_scope_name"),)

    scope: Mapped[SettingsScope] = mapped_column(SAEnum(SettingsScope, name="settings_scope"), nullable=False)
    name: Mapped[str] = mapped_column(String(191), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
