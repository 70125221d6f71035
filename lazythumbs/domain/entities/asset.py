# lazythumbs/domain/entities/asset.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID


@dataclass
class DerivativeRecord:
    """
    A derivative recorded against an asset. Recording a size does not imply the file is
    still on disk; ingest pipelines record sizes whose files are later suppressed.
    """
    size_name: str = ""        # required
    filename: str = ""         # required, relative to the asset's directory
    mime_type: str = ""
    byte_size: int = 0
    width: Optional[int] = None
    height: Optional[int] = None

    def __post_init__(self):
        if not self.size_name or not self.size_name.strip():
            raise ValueError("size_name is required")
        if not self.filename or not self.filename.strip():
            raise ValueError("filename is required")
        if self.byte_size < 0:
            raise ValueError("byte_size must be >= 0")


@dataclass
class Asset:
    """
    A source image known to the system.
    `rel_path` is the canonical source file relative to the upload root (e.g. "2024/01/cat.jpg").
    """
    id: Optional[UUID] = None
    rel_path: str = ""                     # required (non-empty)
    original_filename: Optional[str] = None  # filename before any edit
    mime_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size_bytes: Optional[int] = None
    derivatives: List[DerivativeRecord] = field(default_factory=list)

    def __post_init__(self):
        if not self.rel_path or not self.rel_path.strip():
            raise ValueError("rel_path is required")
        self.rel_path = self.rel_path.strip().lstrip("/")
        if self.width is not None and self.width < 0:
            raise ValueError("width must be >= 0")
        if self.height is not None and self.height < 0:
            raise ValueError("height must be >= 0")

    @property
    def filename(self) -> str:
        return self.rel_path.rsplit("/", 1)[-1]

    @property
    def rel_dir(self) -> str:
        return self.rel_path.rsplit("/", 1)[0] if "/" in self.rel_path else ""

    def canonical_url(self, upload_base_url: str) -> str:
        return f"{upload_base_url.rstrip('/')}/{self.rel_path}"
