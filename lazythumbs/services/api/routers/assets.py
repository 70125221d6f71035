from __future__ import annotations

from http import HTTPStatus
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lazythumbs.common.settings import Settings
from lazythumbs.domain.dataclasses.events import DerivativeFileDescriptor
from lazythumbs.domain.entities.asset import Asset
from lazythumbs.domain.errors import AssetNotFound, SourceUnreadable
from lazythumbs.services.api.deps import (
    build_asset_repo,
    get_app_settings,
    get_ingest_service,
    transactional_session,
)
from lazythumbs.services.ingest.service import AssetIngestService
from lazythumbs.services.schemas.assets import AssetEdit, AssetRead, AssetRegister, DerivativeFileIn

router = APIRouter(prefix="/assets", tags=["assets"])


def _descriptors(items: list[DerivativeFileIn]):
    return [(d.size_name, DerivativeFileDescriptor(file=d.file, mime_type=d.mime_type)) for d in items]


def _to_read(asset: Asset, cfg: Settings) -> AssetRead:
    base = cfg.upload_base_url.rstrip("/")
    dir_url = f"{base}/{asset.rel_dir}" if asset.rel_dir else base
    dto = AssetRead.model_validate(asset)
    dto.url = asset.canonical_url(base)
    for d in dto.derivatives:
        d.url = f"{dir_url}/{d.filename}"
    return dto


@router.get("/{asset_id}", response_model=AssetRead)
def get_asset(
    asset_id: UUID,
    db: Session = Depends(transactional_session),
    cfg: Settings = Depends(get_app_settings),
) -> AssetRead:
    obj = build_asset_repo(db, cfg).get(asset_id, with_derivatives=True)
    if not obj:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Asset not found")
    return _to_read(obj, cfg)


@router.post("", response_model=AssetRead, status_code=HTTPStatus.CREATED)
def register_asset(
    payload: AssetRegister,
    svc: AssetIngestService = Depends(get_ingest_service),
    cfg: Settings = Depends(get_app_settings),
) -> AssetRead:
    try:
        obj = svc.register(payload.rel_path, derivatives=_descriptors(payload.derivatives))
    except ValueError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(e)) from e
    except SourceUnreadable as e:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except IntegrityError as e:
        raise HTTPException(
            status_code=HTTPStatus.CONFLICT,
            detail="An asset is already registered for this path",
        ) from e
    return _to_read(obj, cfg)


@router.post("/{asset_id}/edit", response_model=AssetRead)
def edit_asset(
    asset_id: UUID,
    payload: AssetEdit,
    svc: AssetIngestService = Depends(get_ingest_service),
    cfg: Settings = Depends(get_app_settings),
) -> AssetRead:
    try:
        obj = svc.edit(asset_id, payload.rel_path, derivatives=_descriptors(payload.derivatives))
    except AssetNotFound as e:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Asset not found") from e
    except ValueError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(e)) from e
    except SourceUnreadable as e:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except IntegrityError as e:
        raise HTTPException(
            status_code=HTTPStatus.CONFLICT,
            detail="Another asset is already registered for this path",
        ) from e
    return _to_read(obj, cfg)
