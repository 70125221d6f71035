# lazythumbs/services/derivatives/orchestrator.py
from __future__ import annotations

import os
from typing import Optional

from lazythumbs.common.logging import get_logger
from lazythumbs.common.path.safe import safe_join
from lazythumbs.domain.dataclasses.request import DerivativeRequest
from lazythumbs.domain.dataclasses.results import ResolvedDerivative, ResolvedSource
from lazythumbs.domain.entities.profile import DerivativeProfile
from lazythumbs.domain.errors import (
    AmbiguousAsset,
    AssetNotFound,
    NoMatchingProfile,
    NotAnImageRequest,
    RenderError,
    SourceUnreadable,
)
from lazythumbs.domain.policies.request_parser import RequestParser
from lazythumbs.domain.policies.resize_math import ProfileMatcher
from lazythumbs.services.derivatives.context import EngineContext
from lazythumbs.services.resolve.asset_resolver import AssetResolver

logger = get_logger(__name__)


class DerivativeOrchestrator:
    """
    parse -> resolve -> match -> render -> record.

    Returns None whenever nothing should be served, so the caller's own "not found"
    response stands. Storage errors from the repository or filesystem still propagate.
    """

    def __init__(
        self,
        ctx: EngineContext,
        *,
        parser: Optional[RequestParser] = None,
        resolver: Optional[AssetResolver] = None,
        matcher: Optional[ProfileMatcher] = None,
    ) -> None:
        self.ctx = ctx
        self.parser = parser or RequestParser(ctx.upload_url_path, ctx.image_exts)
        self.resolver = resolver or AssetResolver(ctx)
        self.matcher = matcher or ProfileMatcher()

    def handle(self, raw_path: str) -> Optional[ResolvedDerivative]:
        try:
            request = self.parser.parse(raw_path).require_derivative()
        except NotAnImageRequest:
            return None
        return self.generate(request)

    def generate(self, request: DerivativeRequest) -> Optional[ResolvedDerivative]:
        try:
            source = self.resolver.resolve(request)
        except AmbiguousAsset as e:
            logger.warning("Not generating %s: %s", request.raw_path, e)
            return None
        except AssetNotFound as e:
            logger.info("%s", e)
            return None
        except SourceUnreadable as e:
            logger.info("%s", e)
            return None

        try:
            profile = self.matcher.require_match(
                source.width,
                source.height,
                request.requested_width,
                request.requested_height,
                self.ctx.profiles.list_profiles(),
            )
        except NoMatchingProfile:
            return self._passthrough(request, source)

        return self._render(request, source, profile)

    # ---- internals ----
    def _passthrough(self, request: DerivativeRequest, source: ResolvedSource) -> Optional[ResolvedDerivative]:
        # "photo-800x600.jpg" for an 800x600 "photo.jpg" is the original itself
        if (request.requested_width, request.requested_height) != (source.width, source.height):
            logger.info(
                "No profile yields %dx%d from %dx%d source for %s",
                request.requested_width, request.requested_height,
                source.width, source.height, request.raw_path,
            )
            return None
        return ResolvedDerivative(
            output_path=source.path,
            mime_type=source.mime_type,
            byte_size=source.size_bytes,
        )

    def _render(
        self, request: DerivativeRequest, source: ResolvedSource, profile: DerivativeProfile
    ) -> Optional[ResolvedDerivative]:
        dest = safe_join(self.ctx.upload_root, request.requested_rel_path)
        try:
            rendered = self.ctx.renderer.render(
                source.path, profile.width, profile.height, profile.crop, dest_path=dest
            )
        except RenderError as e:
            logger.warning("Rendering %s for %s failed: %s", profile.name, request.raw_path, e)
            return None

        asset = source.asset
        asset_dir = self.ctx.upload_root.resolve() / asset.rel_dir
        filename = os.path.relpath(rendered.output_path, asset_dir).replace(os.sep, "/")
        self.ctx.repository.record_derivative(
            asset.id,
            profile.name,
            filename,
            rendered.mime_type,
            rendered.byte_size,
            width=rendered.width,
            height=rendered.height,
        )

        self.ctx.optimizer.optimize_generated(asset.id, profile.name)

        logger.info("Generated %s (%s) for asset %s", rendered.output_path, profile.name, asset.id)
        return ResolvedDerivative(
            output_path=rendered.output_path,
            mime_type=rendered.mime_type,
            # re-read: the optimizer may have rewritten the file
            byte_size=rendered.output_path.stat().st_size,
            profile_name=profile.name,
        )
