# lazythumbs/domain/dataclasses/events.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple
from uuid import UUID


@dataclass(frozen=True)
class DerivativeFileDescriptor:
    """One file an asset pipeline produced, relative to the source file's directory."""
    file: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def is_image(self) -> bool:
        return bool(self.file) and bool(self.mime_type) and self.mime_type.startswith("image")


@dataclass(frozen=True)
class AssetIngested:
    asset_id: UUID
    source_path: Path
    files: Tuple[DerivativeFileDescriptor, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AssetEdited:
    asset_id: UUID
    source_path: Path
    files: Tuple[DerivativeFileDescriptor, ...] = field(default_factory=tuple)
