# lazythumbs/database/repos/settings_store.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from lazythumbs.database.models.option import EngineOption
from lazythumbs.domain.enums.settings_scope import SettingsScope

AUTOGEN_FLAG = "autogenerate_images"


class SqlAlchemySettingsStore:
    """
    Boolean engine options. A multi-deployment install reads and writes the shared
    network scope; a single deployment uses its own site scope.
    Values are stored as "1"/"0". Satisfies SettingsStorePort via structural typing.
    """

    def __init__(self, session: Session, *, multi_deployment: bool = False) -> None:
        self.db = session
        self.scope = SettingsScope.network if multi_deployment else SettingsScope.site

    def _get(self, name: str) -> Optional[EngineOption]:
        stmt = select(EngineOption).where(
            EngineOption.scope == self.scope,
            EngineOption.name == name,
        ).limit(1)
        return self.db.execute(stmt).scalars().first()

    def get_flag(self, name: str, default: bool = False) -> bool:
        row = self._get(name)
        if row is None:
            return default
        return row.value == "1"

    def set_flag(self, name: str, value: bool) -> None:
        row = self._get(name)
        stored = "1" if value else "0"
        if row is None:
            self.db.add(EngineOption(scope=self.scope, name=name, value=stored))
        else:
            row.value = stored
        self.db.flush()

    def is_enabled(self, default: bool = False) -> bool:
        return self.get_flag(AUTOGEN_FLAG, default)
