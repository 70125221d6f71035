# lazythumbs/services/probe/image_probe.py
from __future__ import annotations

from pathlib import Path

from PIL import Image, UnidentifiedImageError

from lazythumbs.common.logging import get_logger
from lazythumbs.domain.dataclasses.results import ImageProbeResult
from lazythumbs.domain.ports.probe import ImageProbePort

logger = get_logger(__name__)


class PillowImageProbe(ImageProbePort):
    """Reads dimensions and mime type from the image header; never decodes pixels."""

    def probe(self, path: Path) -> ImageProbeResult:
        p = Path(path)
        if not p.is_file():
            return ImageProbeResult()
        try:
            with Image.open(p) as im:
                width, height = im.size
                mime = Image.MIME.get(im.format or "", "")
        except (UnidentifiedImageError, OSError) as e:
            logger.info("Unreadable image %s: %s", p, e)
            return ImageProbeResult()
        return ImageProbeResult(
            width=int(width),
            height=int(height),
            mime_type=mime,
            size_bytes=p.stat().st_size,
        )
