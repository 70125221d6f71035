# lazythumbs/domain/errors.py
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence
from uuid import UUID

if TYPE_CHECKING:
    from lazythumbs.domain.entities.asset import Asset


class LazyThumbsError(Exception):
    """Base for every error the derivative engine raises."""


class NotAnImageRequest(LazyThumbsError):
    """The request path does not name a derivative of an upload."""

    def __init__(self, raw_path: str) -> None:
        super().__init__(f"not a derivative image request: {raw_path!r}")
        self.raw_path = raw_path


class AssetNotFound(LazyThumbsError):
    """No source asset could be identified for a derivative request."""


class AmbiguousAsset(AssetNotFound):
    """Several assets fit a filename lookup and none was picked."""

    def __init__(self, fragment: str, candidates: Sequence[UUID] = ()) -> None:
        super().__init__(f"filename {fragment!r} matches {len(candidates)} assets")
        self.fragment = fragment
        self.candidates = tuple(candidates)


class SourceUnreadable(LazyThumbsError):
    """
    The source asset is known but its file is missing or has no readable dimensions.
    `asset` is kept so callers can still report on the identified asset.
    """

    def __init__(self, message: str, *, asset: Optional["Asset"] = None) -> None:
        super().__init__(message)
        self.asset = asset


class NoMatchingProfile(LazyThumbsError):
    """Requested dimensions do not correspond to any configured profile."""

    def __init__(self, width: int, height: int) -> None:
        super().__init__(f"no profile yields {width}x{height}")
        self.width = width
        self.height = height


class RenderError(LazyThumbsError):
    """The rendering backend could not produce the derivative."""

    def __init__(self, message: str, *, source_path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.source_path = source_path
