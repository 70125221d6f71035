from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Tuple
from uuid import UUID

from lazythumbs.common.logging import get_logger
from lazythumbs.common.path.safe import safe_join
from lazythumbs.database.repos.asset_repo import SqlAlchemyAssetRepo
from lazythumbs.domain.dataclasses.events import AssetEdited, AssetIngested, DerivativeFileDescriptor
from lazythumbs.domain.entities.asset import Asset
from lazythumbs.domain.errors import AssetNotFound, SourceUnreadable
from lazythumbs.domain.ports.probe import ImageProbePort
from lazythumbs.services.events.bus import EventBus

logger = get_logger(__name__)


class AssetIngestService:
    """
    Registers uploaded images and their edits.

    A standard upload pipeline writes a set of derivative files next to the source and
    reports them as (size_name, descriptor) pairs. They are recorded against the asset so
    the fragment fallback can find it later; the published event lets subscribers (the
    suppressor) remove the files themselves.
    """

    def __init__(self, repo: SqlAlchemyAssetRepo, probe: ImageProbePort, bus: EventBus, *, upload_root: Path):
        self.repo = repo
        self.probe = probe
        self.bus = bus
        self.upload_root = Path(upload_root)

    def register(
        self,
        rel_path: str,
        *,
        derivatives: Iterable[Tuple[str, DerivativeFileDescriptor]] = (),
    ) -> Asset:
        source = safe_join(self.upload_root, rel_path)
        probed = self.probe.probe(source)
        if not probed.readable:
            raise SourceUnreadable(f"{rel_path} is not a readable image")

        asset = self.repo.create(
            rel_path=rel_path,
            original_filename=source.name,
            mime_type=probed.mime_type,
            width=probed.width,
            height=probed.height,
            size_bytes=probed.size_bytes,
        )
        files = self._record(asset.id, derivatives)
        logger.info("Registered asset %s (%s, %dx%d)", asset.id, asset.rel_path, probed.width, probed.height)

        self.bus.publish(AssetIngested(asset_id=asset.id, source_path=source, files=files))
        return self._reload(asset.id)

    def edit(
        self,
        asset_id: UUID,
        new_rel_path: str,
        *,
        derivatives: Iterable[Tuple[str, DerivativeFileDescriptor]] = (),
    ) -> Asset:
        if self.repo.get(asset_id) is None:
            raise AssetNotFound(f"asset {asset_id} does not exist")

        source = safe_join(self.upload_root, new_rel_path)
        probed = self.probe.probe(source)
        if not probed.readable:
            raise SourceUnreadable(f"{new_rel_path} is not a readable image")

        self.repo.update_source(
            asset_id,
            rel_path=new_rel_path,
            mime_type=probed.mime_type,
            width=probed.width,
            height=probed.height,
            size_bytes=probed.size_bytes,
        )
        files = self._record(asset_id, derivatives)
        logger.info("Asset %s now points at edited source %s", asset_id, new_rel_path)

        self.bus.publish(AssetEdited(asset_id=asset_id, source_path=source, files=files))
        return self._reload(asset_id)

    # ---- internals ----
    def _record(
        self, asset_id: UUID, derivatives: Iterable[Tuple[str, DerivativeFileDescriptor]]
    ) -> Tuple[DerivativeFileDescriptor, ...]:
        files = []
        for size_name, desc in derivatives:
            files.append(desc)
            if not desc.file:
                continue
            self.repo.record_derivative(
                asset_id,
                size_name,
                desc.file,
                desc.mime_type or "",
                0,
            )
        return tuple(files)

    def _reload(self, asset_id: UUID) -> Asset:
        asset: Optional[Asset] = self.repo.get(asset_id, with_derivatives=True)
        if asset is None:
            raise AssetNotFound(f"asset {asset_id} vanished during ingest")
        return asset
