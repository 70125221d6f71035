# lazythumbs/database/repos/_mapping.py
from __future__ import annotations
from lazythumbs.database.models.asset import Asset as DBAsset, AssetDerivative as DBAssetDerivative
from lazythumbs.domain.entities.asset import Asset as DomainAsset, DerivativeRecord


def to_domain_derivative(row: DBAssetDerivative) -> DerivativeRecord:
    return DerivativeRecord(
        size_name=row.size_name,
        filename=row.filename,
        mime_type=row.mime_type or "",
        byte_size=int(row.byte_size or 0),
        width=row.width,
        height=row.height,
    )


def to_domain_asset(row: DBAsset, *, with_derivatives: bool = False) -> DomainAsset:
    return DomainAsset(
        id=row.id,
        rel_path=row.rel_path,
        original_filename=row.original_filename,
        mime_type=row.mime_type,
        width=row.width,
        height=row.height,
        size_bytes=row.size_bytes,
        derivatives=[to_domain_derivative(d) for d in row.derivatives] if with_derivatives else [],
    )
