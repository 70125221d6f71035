# lazythumbs/services/api/static.py
from __future__ import annotations

from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.responses import FileResponse, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from lazythumbs.common.logging import get_logger
from lazythumbs.domain.dataclasses.results import ResolvedDerivative

logger = get_logger(__name__)

DerivativeHandler = Callable[[str], Optional[ResolvedDerivative]]


def _request_path(scope: Scope) -> str:
    raw = scope.get("raw_path")
    if raw:
        return raw.decode("utf-8", errors="surrogateescape")
    return scope.get("root_path", "") + scope.get("path", "")


class DerivativeStaticFiles(StaticFiles):
    """
    Serves the upload directory. A miss is handed to the derivative engine before the 404
    goes out; if the engine produces a deliverable file it is sent with a 200 instead.
    """

    def __init__(self, *, derivative_handler: Optional[DerivativeHandler] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.derivative_handler = derivative_handler

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404 or self.derivative_handler is None:
                raise
            raw_path = _request_path(scope)
            result = await run_in_threadpool(self.derivative_handler, raw_path)
            if result is None or not result.is_deliverable:
                raise
            logger.debug("Serving generated %s for %s", result.output_path, raw_path)
            return FileResponse(
                result.output_path,
                media_type=result.mime_type,
                headers={"content-length": str(result.byte_size)},
            )
