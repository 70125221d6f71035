from __future__ import annotations

from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class DerivativeFileIn(BaseModel):
    """One file an upload pipeline wrote next to the source, relative to its directory."""
    size_name: str
    file: Optional[str] = None
    mime_type: Optional[str] = None


class AssetRegister(BaseModel):
    rel_path: str
    derivatives: List[DerivativeFileIn] = Field(default_factory=list)


class AssetEdit(BaseModel):
    rel_path: str
    derivatives: List[DerivativeFileIn] = Field(default_factory=list)


class DerivativeRead(BaseModel):
    size_name: str
    filename: str
    mime_type: str
    byte_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AssetRead(BaseModel):
    id: UUID
    rel_path: str
    original_filename: Optional[str] = None
    mime_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    size_bytes: Optional[int] = None
    url: Optional[str] = None
    derivatives: List[DerivativeRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
