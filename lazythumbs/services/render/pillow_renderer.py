# lazythumbs/services/render/pillow_renderer.py
from __future__ import annotations
import os, tempfile
from pathlib import Path
from typing import Optional, Tuple
from PIL import Image, ImageOps, UnidentifiedImageError
from lazythumbs.common.logging import get_logger
from lazythumbs.domain.dataclasses.results import RenderedImage
from lazythumbs.domain.enums.file_format import ImageFormats
from lazythumbs.domain.errors import RenderError
from lazythumbs.domain.policies.resize_math import resize_dimensions
from lazythumbs.domain.ports.render import RenderBackendPort

logger = get_logger(__name__)

def _safe_replace(tmp_path: Path, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    os.replace(tmp_path, out_path)

def derivative_name(source: Path, size: Tuple[int, int]) -> str:
    return f"{source.stem}-{size[0]}x{size[1]}{source.suffix}"

class PillowRenderer(RenderBackendPort):
    """
    Rendering backend on Pillow. Sizes come from the same resize math the profile matcher
    uses, so the file it writes has exactly the dimensions that matched.
    """
    def __init__(self, *, jpeg_quality: int = 82, webp_quality: int = 80):
        self.jpeg_quality = int(jpeg_quality)
        self.webp_quality = int(webp_quality)

    def render(
        self,
        source_path: Path,
        target_width: int,
        target_height: int,
        crop: bool,
        *,
        dest_path: Optional[Path] = None,
    ) -> RenderedImage:
        src = Path(source_path)
        try:
            with Image.open(src) as im:
                im.load()
                size = resize_dimensions(im.width, im.height, target_width, target_height, crop)
                if size is None:
                    raise RenderError(
                        f"{target_width}x{target_height} (crop={crop}) does not resize {src}",
                        source_path=src,
                    )
                work = im.convert("RGBA") if im.mode in ("P", "LA", "1", "I;16") else im
                if crop:
                    out = ImageOps.fit(work, size, method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))
                else:
                    out = work.resize(size, Image.Resampling.LANCZOS)
        except (UnidentifiedImageError, OSError) as e:
            raise RenderError(f"cannot read source image {src}: {e}", source_path=src) from e

        out_path = Path(dest_path) if dest_path else src.with_name(derivative_name(src, size))
        try:
            fmt = ImageFormats.from_extension(out_path.suffix)
        except ValueError as e:
            raise RenderError(f"unsupported output format {out_path.suffix!r}", source_path=src) from e

        out_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile("wb", suffix=out_path.suffix, delete=False, dir=str(out_path.parent)) as tf:
            tmp_out = Path(tf.name)
        try:
            self._pillow_save(out, tmp_out, fmt)
            _safe_replace(tmp_out, out_path)
        except OSError as e:
            raise RenderError(f"failed writing {out_path}: {e}", source_path=src) from e
        finally:
            tmp_out.unlink(missing_ok=True)

        logger.debug("Rendered %s -> %s (%dx%d)", src, out_path, size[0], size[1])
        return RenderedImage(
            output_path=out_path,
            mime_type=fmt.mime_type,
            byte_size=out_path.stat().st_size,
            width=size[0],
            height=size[1],
        )

    def _pillow_save(self, img: Image.Image, path: Path, fmt: ImageFormats) -> None:
        if fmt == ImageFormats.PNG:
            img.save(path, format="PNG", optimize=True)
        elif fmt in (ImageFormats.JPG, ImageFormats.JPEG):
            img = img.convert("RGB")
            img.save(path, format="JPEG", quality=self.jpeg_quality, optimize=True, progressive=True)
        elif fmt == ImageFormats.WEBP:
            img.save(path, format="WEBP", quality=self.webp_quality, method=4)
        elif fmt == ImageFormats.GIF:
            img.save(path, format="GIF")
        else:
            raise ValueError(f"Unsupported format: {fmt}")
