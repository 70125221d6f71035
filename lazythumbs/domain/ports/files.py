from __future__ import annotations

from pathlib import Path
from typing import Protocol


class FileOpsPort(Protocol):
    def ensure_dir(self, path: Path) -> None: ...

    def copy_file(self, src: Path, dst: Path) -> None: ...

    def link_file(self, src: Path, dst: Path) -> None: ...

    def delete_file(self, path: Path) -> bool: ...

    def file_exists(self, path: Path) -> bool: ...
