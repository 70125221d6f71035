from __future__ import annotations

from pathlib import Path
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, and_, or_, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from lazythumbs.common.logging import get_logger
from lazythumbs.common.path.safe import safe_join
from lazythumbs.database.models.asset import Asset as DBAsset, AssetDerivative as DBAssetDerivative
from lazythumbs.database.repos._mapping import to_domain_asset, to_domain_derivative
from lazythumbs.domain.entities.asset import Asset as DomainAsset, DerivativeRecord
from lazythumbs.domain.errors import AmbiguousAsset

logger = get_logger(__name__)

# dialects with INSERT .. ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _rel_dir(rel_path: str) -> str:
    return rel_path.rsplit("/", 1)[0] if "/" in rel_path else ""


class SqlAlchemyAssetRepo:
    """
    Asset repository over SQLAlchemy. Satisfies AssetRepositoryPort via structural typing.
    Writes only add/flush; the caller owns the transaction.
    """

    def __init__(self, session: Session, *, upload_root: Path, upload_base_url: str) -> None:
        self.db = session
        self.upload_root = Path(upload_root)
        self.upload_base_url = upload_base_url.rstrip("/")

    # --------- Reads ---------

    def get(self, asset_id: UUID, *, with_derivatives: bool = False) -> Optional[DomainAsset]:
        row = self.db.get(DBAsset, asset_id)
        return to_domain_asset(row, with_derivatives=with_derivatives) if row else None

    def get_by_rel_path(self, rel_path: str) -> Optional[DomainAsset]:
        stmt = select(DBAsset).where(DBAsset.rel_path == rel_path.lstrip("/")).limit(1)
        row = self.db.execute(stmt).scalars().first()
        return to_domain_asset(row) if row else None

    def find_by_canonical_url(self, url: str) -> Optional[DomainAsset]:
        prefix = self.upload_base_url + "/"
        if not url.startswith(prefix):
            return None
        return self.get_by_rel_path(url[len(prefix):])

    def find_unique_by_filename_fragment(
        self, fragment: str, *, rel_dir: Optional[str] = None
    ) -> Optional[DomainAsset]:
        """
        Asset one of whose recorded derivatives (or its pre-edit original filename) is the
        file `fragment`. Whole filenames only: "cat.jpg" never matches "bobcat.jpg".
        With `rel_dir`, only assets whose source lives in that upload directory count.
        Raises AmbiguousAsset when more than one asset qualifies.
        """
        if not fragment:
            return None
        in_derivatives = select(DBAssetDerivative.asset_id).where(
            or_(
                DBAssetDerivative.filename == fragment,
                DBAssetDerivative.filename.endswith("/" + fragment, autoescape=True),
            )
        )
        stmt = select(DBAsset).order_by(DBAsset.rel_path).where(
            or_(
                DBAsset.id.in_(in_derivatives),
                DBAsset.original_filename == fragment,
            )
        )
        rows = self.db.execute(stmt).scalars().all()
        if rel_dir is not None:
            rel_dir = rel_dir.strip("/")
            rows = [r for r in rows if _rel_dir(r.rel_path) == rel_dir]
        if len(rows) > 1:
            logger.info("Filename fragment %r matches %d assets; refusing to guess", fragment, len(rows))
            raise AmbiguousAsset(fragment, [r.id for r in rows])
        return to_domain_asset(rows[0]) if rows else None

    def get_source_file_path(self, asset_id: UUID) -> Optional[Path]:
        row = self.db.get(DBAsset, asset_id)
        if not row:
            return None
        try:
            return safe_join(self.upload_root, row.rel_path)
        except ValueError:
            logger.warning("Asset %s has a rel_path outside the upload root: %r", asset_id, row.rel_path)
            return None

    def list_derivatives(self, asset_id: UUID) -> List[DerivativeRecord]:
        stmt = (
            select(DBAssetDerivative)
            .where(DBAssetDerivative.asset_id == asset_id)
            .order_by(DBAssetDerivative.size_name.asc())
        )
        return [to_domain_derivative(r) for r in self.db.execute(stmt).scalars().all()]

    def _get_derivative(
        self, asset_id: UUID, size_name: str, *, refresh: bool = False
    ) -> Optional[DBAssetDerivative]:
        stmt = select(DBAssetDerivative).where(
            and_(
                DBAssetDerivative.asset_id == asset_id,
                DBAssetDerivative.size_name == size_name,
            )
        ).limit(1)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalars().first()

    # --------- Writes ---------

    def create(
        self,
        *,
        rel_path: str,
        original_filename: str | None = None,
        mime_type: str | None = None,
        width: int | None = None,
        height: int | None = None,
        size_bytes: int | None = None,
    ) -> DomainAsset:
        # validate through the domain entity first
        dom = DomainAsset(
            rel_path=rel_path,
            original_filename=original_filename,
            mime_type=mime_type,
            width=width,
            height=height,
            size_bytes=size_bytes,
        )
        obj = DBAsset(
            rel_path=dom.rel_path,
            original_filename=dom.original_filename,
            mime_type=dom.mime_type,
            width=dom.width,
            height=dom.height,
            size_bytes=dom.size_bytes,
        )
        self.db.add(obj)
        self.db.flush()
        return to_domain_asset(obj)

    def update_source(
        self,
        asset_id: UUID,
        *,
        rel_path: str,
        mime_type: str | None = None,
        width: int | None = None,
        height: int | None = None,
        size_bytes: int | None = None,
    ) -> DomainAsset:
        obj = self.db.get(DBAsset, asset_id)
        if not obj:
            raise ValueError("Asset not found")
        if not obj.original_filename:
            obj.original_filename = obj.rel_path.rsplit("/", 1)[-1]
        obj.rel_path = rel_path.lstrip("/")
        obj.mime_type = mime_type
        obj.width = width
        obj.height = height
        obj.size_bytes = size_bytes
        self.db.flush()
        return to_domain_asset(obj)

    def record_derivative(
        self,
        asset_id: UUID,
        size_name: str,
        filename: str,
        mime_type: str,
        byte_size: int,
        *,
        width: int | None = None,
        height: int | None = None,
    ) -> None:
        # validate through the domain record
        rec = DerivativeRecord(
            size_name=size_name,
            filename=filename,
            mime_type=mime_type,
            byte_size=byte_size,
            width=width,
            height=height,
        )
        parent = self.db.get(DBAsset, asset_id)
        if not parent:
            raise ValueError("Asset not found")

        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise ValueError(f"No derivative upsert for the {dialect} dialect")

        # concurrent first requests for one size race to insert; the loser updates instead
        self.db.flush()
        values = dict(
            filename=rec.filename,
            mime_type=rec.mime_type,
            byte_size=rec.byte_size,
            width=rec.width,
            height=rec.height,
        )
        stmt = insert(DBAssetDerivative).values(asset_id=asset_id, size_name=rec.size_name, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["asset_id", "size_name"],
            set_=dict(values, generated_at=func.now(), last_updated=func.now()),
        )
        self.db.execute(stmt)

        # the statement bypassed the unit of work; refresh what this session already holds
        self.db.expire(parent, ["derivatives"])
        self._get_derivative(asset_id, rec.size_name, refresh=True)
