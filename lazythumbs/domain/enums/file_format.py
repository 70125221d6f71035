# lazythumbs/domain/enums/file_format.py
from __future__ import annotations

from enum import StrEnum


class ImageFormats(StrEnum):
    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return "image/jpeg" if self in (ImageFormats.JPG, ImageFormats.JPEG) else f"image/{self.value}"

    @classmethod
    def from_extension(cls, ext: str) -> "ImageFormats":
        return cls(ext.lower().lstrip("."))
