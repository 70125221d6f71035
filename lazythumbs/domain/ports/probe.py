from __future__ import annotations
from pathlib import Path
from typing import Protocol
from lazythumbs.domain.dataclasses.results import ImageProbeResult

class ImageProbePort(Protocol):
    def probe(self, path: Path) -> ImageProbeResult: ...
