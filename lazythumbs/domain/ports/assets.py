from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol
from uuid import UUID

from lazythumbs.domain.entities.asset import Asset


class AssetRepositoryPort(Protocol):
    def find_by_canonical_url(self, url: str) -> Optional[Asset]: ...

    # Whole filenames only. Raises AmbiguousAsset when more than one asset matches;
    # never pick one arbitrarily. `rel_dir` limits candidates to one upload directory.
    def find_unique_by_filename_fragment(
        self, fragment: str, *, rel_dir: Optional[str] = None
    ) -> Optional[Asset]: ...

    def get_source_file_path(self, asset_id: UUID) -> Optional[Path]: ...

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
    ) -> None: ...
