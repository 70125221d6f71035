# lazythumbs/domain/dataclasses/results.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lazythumbs.domain.entities.asset import Asset


@dataclass(frozen=True)
class ImageProbeResult:
    """Technical attributes read from an image file. Zeros mean unreadable."""
    width: int = 0
    height: int = 0
    mime_type: str = ""
    size_bytes: int = 0

    @property
    def readable(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True)
class ResolvedSource:
    asset: Asset
    path: Path
    width: int
    height: int
    mime_type: str
    size_bytes: int


@dataclass(frozen=True)
class RenderedImage:
    output_path: Path
    mime_type: str
    byte_size: int
    width: int
    height: int


@dataclass(frozen=True)
class ResolvedDerivative:
    """
    What the delivery step needs. profile_name is "" for a passthrough of the source file.
    """
    output_path: Path
    mime_type: str
    byte_size: int
    profile_name: str = ""

    @property
    def is_passthrough(self) -> bool:
        return not self.profile_name

    @property
    def is_deliverable(self) -> bool:
        return (
            self.mime_type.startswith("image/")
            and self.byte_size > 0
            and Path(self.output_path).is_file()
        )
