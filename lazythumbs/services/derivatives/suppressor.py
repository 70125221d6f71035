# lazythumbs/services/derivatives/suppressor.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Optional

from lazythumbs.common.logging import get_logger
from lazythumbs.common.path.safe import safe_join
from lazythumbs.domain.dataclasses.events import AssetEdited, AssetIngested, DerivativeFileDescriptor
from lazythumbs.domain.dataclasses.reports import SuppressionReport
from lazythumbs.domain.ports.files import FileOpsPort
from lazythumbs.services.events.bus import EventBus
from lazythumbs.services.filesystem.local_file_ops import LocalFileOps

logger = get_logger(__name__)


class EagerDerivativeSuppressor:
    """
    Deletes the derivative files an ingest or edit pipeline wrote eagerly, so that a
    derivative only exists once somebody asks for it. Best-effort: one failed deletion
    never stops the rest of the batch.
    """

    def __init__(
        self,
        file_ops: Optional[FileOpsPort] = None,
        *,
        enabled: Callable[[], bool] = lambda: True,
    ) -> None:
        self.file_ops: FileOpsPort = file_ops or LocalFileOps()
        self.enabled = enabled

    def subscribe(self, bus: EventBus) -> None:
        bus.subscribe(AssetIngested, self.on_asset_ingested)
        bus.subscribe(AssetEdited, self.on_asset_edited)

    def on_asset_ingested(self, event: AssetIngested) -> SuppressionReport:
        return self._handle(event.source_path, event.files, subject=f"ingest:{event.asset_id}")

    def on_asset_edited(self, event: AssetEdited) -> SuppressionReport:
        return self._handle(event.source_path, event.files, subject=f"edit:{event.asset_id}")

    def _handle(self, source_path: Optional[Path], files: Iterable[DerivativeFileDescriptor], *, subject: str) -> SuppressionReport:
        rpt = SuppressionReport()
        rpt.start()
        if not self.enabled():
            rpt.stop()
            return rpt
        if not source_path:
            rpt.add_error(subject, "no source path; nothing to clean")
            rpt.stop()
            return rpt
        return self.delete_derivatives(source_path, files, report=rpt)

    def delete_derivatives(
        self,
        source_path: Path,
        files: Iterable[DerivativeFileDescriptor],
        *,
        report: Optional[SuppressionReport] = None,
    ) -> SuppressionReport:
        rpt = report or SuppressionReport()
        rpt.start()
        directory = Path(source_path).parent

        for desc in files:
            rpt.considered += 1
            if not desc.is_image:
                rpt.skipped += 1
                continue
            try:
                target = safe_join(directory, desc.file)
                if self.file_ops.delete_file(target):
                    rpt.deleted += 1
                    rpt.deleted_files.append(desc.file)
                else:
                    rpt.missing += 1
            except (OSError, ValueError) as e:
                rpt.errors += 1
                rpt.add_error(str(desc.file), str(e))
                logger.warning("Could not delete eager derivative %s beside %s: %s", desc.file, source_path, e)

        rpt.stop()
        if rpt.deleted:
            logger.info("Removed %d eager derivative(s) beside %s", rpt.deleted, source_path)
        return rpt
