# lazythumbs/domain/policies/request_parser.py
from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import unquote, urlsplit

from lazythumbs.domain.dataclasses.request import DerivativeRequest

# "<base>-<W>x<H>"; the base is greedy so "a-1x2-300x200" keeps "a-1x2" as its base
_DERIVATIVE_NAME = re.compile(r"^(.+)-([0-9]+)x([0-9]+)$")
_BAD_SEGMENTS = {"", ".", ".."}


class RequestParser:
    """
    Classifies request paths under the upload URL prefix. Pure string work, no I/O.

    Ex. with prefix "/uploads":
      "/uploads/2023/03/my-photo.jpg"          -> image, not a derivative
      "/uploads/2023/03/my-photo-300x200.jpg"  -> derivative of "my-photo" at 300x200
      "/uploads/2023/03/notes.pdf"             -> not an image
    """

    def __init__(self, upload_url_path: str, image_exts: Iterable[str]) -> None:
        self.prefix = "/" + upload_url_path.strip().strip("/")
        self.exts = {e.lower().lstrip(".") for e in image_exts if e}

    def parse(self, raw_path: str) -> DerivativeRequest:
        not_image = DerivativeRequest(raw_path=raw_path)

        path = urlsplit(raw_path or "").path
        prefix = self.prefix.rstrip("/")
        if not path.startswith(prefix + "/"):
            return not_image
        rest = path[len(prefix) + 1:]
        if not rest:
            return not_image

        raw_subpath, _, basename = rest.rpartition("/")
        stem, dot, extension = basename.rpartition(".")
        if not dot or not stem or extension.lower() not in self.exts:
            return not_image

        subpath = unquote(raw_subpath)
        if subpath and any(seg in _BAD_SEGMENTS for seg in subpath.split("/")):
            return not_image

        filename = unquote(stem)
        if "/" in filename or filename in _BAD_SEGMENTS:
            return not_image

        match = _DERIVATIVE_NAME.match(filename)
        if not match:
            return DerivativeRequest(
                raw_path=raw_path,
                upload_subpath=subpath,
                filename=filename,
                extension=extension,
                is_image_candidate=True,
            )

        return DerivativeRequest(
            raw_path=raw_path,
            upload_subpath=subpath,
            filename=filename,
            extension=extension,
            is_image_candidate=True,
            is_derivative_candidate=True,
            parent_base_filename=match.group(1),
            requested_width=int(match.group(2)),
            requested_height=int(match.group(3)),
        )
