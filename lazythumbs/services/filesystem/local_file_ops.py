from __future__ import annotations

import os
import shutil
from pathlib import Path

from lazythumbs.domain.ports.files import FileOpsPort


class LocalFileOps(FileOpsPort):
    """
    Local filesystem implementation for FileOpsPort.
    """

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def copy_file(self, src: Path, dst: Path) -> None:
        src_p = Path(src)
        dst_p = Path(dst)

        if not src_p.is_file():
            raise FileNotFoundError(f"Source file not found: {src_p}")

        self.ensure_dir(dst_p.parent)
        # Copy beside the destination, then swap in atomically
        tmp = dst_p.with_name(f".{dst_p.name}.tmp")
        try:
            shutil.copy2(src_p, tmp)
            os.replace(tmp, dst_p)
        finally:
            tmp.unlink(missing_ok=True)

    def link_file(self, src: Path, dst: Path) -> None:
        src_p = Path(src)
        dst_p = Path(dst)
        if not src_p.is_file():
            raise FileNotFoundError(f"Source file not found: {src_p}")
        # Relative target so the link survives the tree being moved
        if dst_p.is_symlink():
            dst_p.unlink()
        dst_p.symlink_to(os.path.relpath(src_p, dst_p.parent))

    def delete_file(self, path: Path) -> bool:
        p = Path(path)
        if not p.exists() and not p.is_symlink():
            return False
        p.unlink()
        return True

    def file_exists(self, path: Path) -> bool:
        return Path(path).is_file()
