from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID as UUID_t

from sqlalchemy import (
    BigInteger, DateTime, ForeignKey, Integer, String, Text, Uuid, UniqueConstraint, Index, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lazythumbs.database.core.main import Base
from lazythumbs.database.core.service_object import ServiceObject


class Asset(ServiceObject, Base):
    __tablename__ = "asset"
    __table_args__ = (
        UniqueConstraint("rel_path", name="uq_asset_rel_path"),
    )

    # canonical source file, relative to the upload root (e.g. "2024/01/cat.jpg")
    rel_path: Mapped[str] = mapped_column(Text, nullable=False)
    # filename before any edit replaced the source
    original_filename: Mapped[Optional[str]] = mapped_column(Text)

    mime_type: Mapped[Optional[str]] = mapped_column(String(64))
    width: Mapped[Optional[int]] = mapped_column(Integer)
    height: Mapped[Optional[int]] = mapped_column(Integer)
    size_bytes: Mapped[Optional[int]] = mapped_column(BigInteger)

    derivatives: Mapped[List["AssetDerivative"]] = relationship(
        back_populates="asset",
        cascade="all,delete-orphan",
        passive_deletes=True,
        order_by="AssetDerivative.size_name",
    )


class AssetDerivative(ServiceObject, Base):
    __tablename__ = "asset_derivative"
    __table_args__ = (
        UniqueConstraint("asset_id", "size_name", name="uq_asset_derivative_asset_size"),
        Index("ix_asset_derivative_filename", "filename"),
    )

    asset_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("asset.id", ondelete="CASCADE"), nullable=False
    )
    size_name: Mapped[str] = mapped_column(String(128), nullable=False)
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[Optional[str]] = mapped_column(String(64))
    byte_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    width: Mapped[Optional[int]] = mapped_column(Integer)
    height: Mapped[Optional[int]] = mapped_column(Integer)
    generated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    asset: Mapped[Asset] = relationship(back_populates="derivatives")
