# lazythumbs/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lazythumbs.common.settings import Settings
from lazythumbs.services.api.deps import autogen_enabled, get_app_settings, transactional_session

router = APIRouter()

@router.get("/healthz")
def healthz(
    s: Settings = Depends(get_app_settings),
    db: Session = Depends(transactional_session),
):
    return {
        "ok": True,
        "app": s.app_name,
        "env": s.app_env,
        "autogen": autogen_enabled(db, s),
    }
