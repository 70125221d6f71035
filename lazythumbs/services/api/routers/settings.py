from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from lazythumbs.common.settings import Settings
from lazythumbs.database.repos.settings_store import AUTOGEN_FLAG
from lazythumbs.services.api.deps import build_settings_store, get_app_settings, transactional_session

router = APIRouter(prefix="/settings", tags=["settings"])


class AutogenFlag(BaseModel):
    enabled: bool


@router.get("/autogen", response_model=AutogenFlag)
def read_autogen(
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> AutogenFlag:
    return AutogenFlag(enabled=build_settings_store(db, cfg).is_enabled(cfg.features.autogen_enabled))


@router.put("/autogen", response_model=AutogenFlag)
def write_autogen(
    payload: AutogenFlag,
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> AutogenFlag:
    build_settings_store(db, cfg).set_flag(AUTOGEN_FLAG, payload.enabled)
    return payload
