# lazythumbs/common/path/safe.py
from __future__ import annotations

import os
from pathlib import Path


def resolve_root(root: Path | str) -> Path:
    """Resolve an upload root directory."""
    return Path(root).expanduser().resolve()


def safe_join(root: Path | str, rel: Path | str) -> Path:
    """
    Join 'root' and a relative path safely, ensuring the result stays inside 'root'.
    Symlinks are not followed for the final component so a healed link keeps its own path.
    Raises ValueError if traversal escapes the root.
    """
    r = resolve_root(root)
    p = Path(os.path.normpath(r / str(rel).lstrip("/")))
    try:
        p.relative_to(r)
    except ValueError as exc:
        raise ValueError(f"path {p} escapes root {r}") from exc
    return p
