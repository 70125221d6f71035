# lazythumbs/domain/policies/resize_math.py
from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from lazythumbs.domain.entities.profile import DerivativeProfile
from lazythumbs.domain.errors import NoMatchingProfile, SourceUnreadable

Dimensions = Tuple[int, int]


def _round(x: float) -> int:
    # half-up, not banker's rounding: 112.5 -> 113
    return int(math.floor(x + 0.5))


def constrain_dimensions(cur_w: int, cur_h: int, max_w: int = 0, max_h: int = 0) -> Dimensions:
    """
    Largest size that fits inside (max_w, max_h) keeping the aspect ratio. Never upsizes.
    A zero max leaves that axis unconstrained.
    """
    if not max_w and not max_h:
        return cur_w, cur_h

    width_ratio = height_ratio = 1.0
    did_width = did_height = False

    if max_w > 0 and cur_w > 0 and cur_w > max_w:
        width_ratio = max_w / cur_w
        did_width = True
    if max_h > 0 and cur_h > 0 and cur_h > max_h:
        height_ratio = max_h / cur_h
        did_height = True

    smaller_ratio = min(width_ratio, height_ratio)
    larger_ratio = max(width_ratio, height_ratio)

    if _round(cur_w * larger_ratio) > max_w or _round(cur_h * larger_ratio) > max_h:
        ratio = smaller_ratio
    else:
        ratio = larger_ratio

    w = max(1, _round(cur_w * ratio))
    h = max(1, _round(cur_h * ratio))

    # Rounding can land one pixel short of the box edge that drove the ratio.
    if did_width and w == max_w - 1:
        w = max_w
    if did_height and h == max_h - 1:
        h = max_h

    return w, h


def resize_dimensions(
    src_w: int, src_h: int, dst_w: int, dst_h: int, crop: bool
) -> Optional[Dimensions]:
    """
    Output size of applying a (dst_w, dst_h, crop) box to a src_w x src_h image,
    or None when the box does not produce a resize.

    - crop=False: constrained fit; a result within one pixel of the source on both axes
      counts as "no resize".
    - crop=True: exactly the target box. With one axis at zero, that axis follows the
      source aspect ratio.
    """
    if src_w <= 0 or src_h <= 0:
        return None
    if dst_w <= 0 and dst_h <= 0:
        return None

    if crop:
        if dst_w > 0 and dst_h > 0:
            return dst_w, dst_h
        aspect = src_w / src_h
        new_w = dst_w if dst_w > 0 else max(1, _round(dst_h * aspect))
        new_h = dst_h if dst_h > 0 else max(1, _round(dst_w / aspect))
        return new_w, new_h

    new_w, new_h = constrain_dimensions(src_w, src_h, dst_w, dst_h)
    if abs(new_w - src_w) <= 1 and abs(new_h - src_h) <= 1:
        return None
    return new_w, new_h


class ProfileMatcher:
    """Finds the profile whose output size equals the requested size."""

    def match(
        self,
        src_w: int,
        src_h: int,
        req_w: int,
        req_h: int,
        profiles: Iterable[DerivativeProfile],
    ) -> Optional[DerivativeProfile]:
        if src_w <= 0 or src_h <= 0:
            raise SourceUnreadable(f"source dimensions {src_w}x{src_h} are not readable")

        for profile in profiles:
            dims = resize_dimensions(src_w, src_h, profile.width, profile.height, profile.crop)
            if dims == (req_w, req_h):
                return profile
        return None

    def require_match(
        self,
        src_w: int,
        src_h: int,
        req_w: int,
        req_h: int,
        profiles: Iterable[DerivativeProfile],
    ) -> DerivativeProfile:
        profile = self.match(src_w, src_h, req_w, req_h, profiles)
        if profile is None:
            raise NoMatchingProfile(req_w, req_h)
        return profile
