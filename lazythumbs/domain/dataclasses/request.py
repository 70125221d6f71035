# lazythumbs/domain/dataclasses/request.py
from __future__ import annotations

from dataclasses import dataclass

from lazythumbs.domain.errors import NotAnImageRequest


def _join_rel(subpath: str, name: str) -> str:
    return f"{subpath}/{name}" if subpath else name


@dataclass(frozen=True)
class DerivativeRequest:
    """
    Classification of one inbound request path.

    Ex. "/uploads/2023/03/my-photo-300x200.jpg" parses to
      upload_subpath="2023/03", filename="my-photo-300x200", extension="jpg",
      parent_base_filename="my-photo", requested_width=300, requested_height=200
    """
    raw_path: str
    upload_subpath: str = ""
    filename: str = ""
    extension: str = ""
    is_image_candidate: bool = False
    is_derivative_candidate: bool = False
    requested_width: int = 0
    requested_height: int = 0
    parent_base_filename: str = ""

    def require_derivative(self) -> "DerivativeRequest":
        if not self.is_derivative_candidate:
            raise NotAnImageRequest(self.raw_path)
        return self

    @property
    def requested_rel_path(self) -> str:
        return _join_rel(self.upload_subpath, f"{self.filename}.{self.extension}")

    def parent_rel_path(self, suffix: str = "") -> str:
        """Relative path of the parent file, optionally with a suffix such as "-scaled"."""
        return _join_rel(self.upload_subpath, f"{self.parent_base_filename}{suffix}.{self.extension}")

    @property
    def parent_filename(self) -> str:
        return f"{self.parent_base_filename}.{self.extension}"
