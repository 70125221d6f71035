from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from lazythumbs.domain.dataclasses.results import RenderedImage


class RenderBackendPort(Protocol):
    def render(
        self,
        source_path: Path,
        target_width: int,
        target_height: int,
        crop: bool,
        *,
        dest_path: Optional[Path] = None,   # default: "<stem>-<W>x<H>.<ext>" beside the source
    ) -> RenderedImage: ...
