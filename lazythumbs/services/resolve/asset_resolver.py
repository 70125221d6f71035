# lazythumbs/services/resolve/asset_resolver.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from lazythumbs.common.logging import get_logger
from lazythumbs.common.path.safe import safe_join
from lazythumbs.domain.dataclasses.request import DerivativeRequest
from lazythumbs.domain.dataclasses.results import ResolvedSource
from lazythumbs.domain.entities.asset import Asset
from lazythumbs.domain.enums.self_heal_policy import SelfHealPolicy
from lazythumbs.domain.errors import AssetNotFound, SourceUnreadable
from lazythumbs.domain.ports.assets import AssetRepositoryPort
from lazythumbs.services.derivatives.context import EngineContext

logger = get_logger(__name__)

SCALED_SUFFIX = "-scaled"


class ResolverStrategy(Protocol):
    name: str

    def find(self, request: DerivativeRequest) -> Optional[Asset]: ...


class CanonicalUrlStrategy:
    """Asset whose canonical URL is "<upload-url>/<subpath>/<parent>.<ext>"."""
    name = "canonical_url"
    suffix = ""

    def __init__(self, repo: AssetRepositoryPort, upload_base_url: str) -> None:
        self.repo = repo
        self.upload_base_url = upload_base_url.rstrip("/")

    def find(self, request: DerivativeRequest) -> Optional[Asset]:
        url = f"{self.upload_base_url}/{request.parent_rel_path(self.suffix)}"
        return self.repo.find_by_canonical_url(url)


class ScaledUrlStrategy(CanonicalUrlStrategy):
    """Large originals are downsized on upload and the "-scaled" file becomes canonical."""
    name = "scaled_url"
    suffix = SCALED_SUFFIX


class FilenameFragmentStrategy:
    """
    Last resort for edited images: an asset in the same upload directory whose recorded
    derivatives (or pre-edit filename) are exactly "<parent>.<ext>". Several such assets
    raise AmbiguousAsset rather than picking one.
    """
    name = "filename_fragment"

    def __init__(self, repo: AssetRepositoryPort) -> None:
        self.repo = repo

    def find(self, request: DerivativeRequest) -> Optional[Asset]:
        return self.repo.find_unique_by_filename_fragment(
            request.parent_filename, rel_dir=request.upload_subpath
        )


class AssetResolver:
    """
    Maps a derivative request to its source asset and a readable source file.

    Strategies run in order and the first hit wins. Once the asset is known, the source
    file is looked for at the canonical path, healed from a "-scaled" sibling if only that
    exists, and finally taken from the path the repository recorded for the asset.
    """

    def __init__(self, ctx: EngineContext, strategies: Optional[Sequence[ResolverStrategy]] = None) -> None:
        self.ctx = ctx
        self.strategies: List[ResolverStrategy] = list(strategies or self.default_strategies(ctx))

    @staticmethod
    def default_strategies(ctx: EngineContext) -> List[ResolverStrategy]:
        return [
            CanonicalUrlStrategy(ctx.repository, ctx.upload_base_url),
            ScaledUrlStrategy(ctx.repository, ctx.upload_base_url),
            FilenameFragmentStrategy(ctx.repository),
        ]

    def identify(self, request: DerivativeRequest) -> Asset:
        request.require_derivative()
        for strategy in self.strategies:
            asset = strategy.find(request)
            if asset is not None:
                logger.debug("Resolved %s via %s -> asset %s", request.raw_path, strategy.name, asset.id)
                return asset
        raise AssetNotFound(f"no source asset for {request.raw_path!r}")

    def resolve(self, request: DerivativeRequest) -> ResolvedSource:
        asset = self.identify(request)

        path = self._locate_source(request, asset)
        if path is None:
            raise SourceUnreadable(f"no source file on disk for asset {asset.id}", asset=asset)

        info = self.ctx.probe.probe(path)
        if not info.readable:
            raise SourceUnreadable(f"source {path} has no readable dimensions", asset=asset)

        return ResolvedSource(
            asset=asset,
            path=path,
            width=info.width,
            height=info.height,
            mime_type=info.mime_type,
            size_bytes=info.size_bytes,
        )

    # ---- internals ----
    def _locate_source(self, request: DerivativeRequest, asset: Asset) -> Optional[Path]:
        fs = self.ctx.file_ops
        try:
            canonical: Optional[Path] = safe_join(self.ctx.upload_root, request.parent_rel_path())
            scaled = safe_join(self.ctx.upload_root, request.parent_rel_path(SCALED_SUFFIX))
        except ValueError:
            canonical = None

        if canonical is not None:
            if not fs.file_exists(canonical) and fs.file_exists(scaled):
                self._heal(scaled, canonical)
            if fs.file_exists(canonical):
                return canonical

        recorded = self.ctx.repository.get_source_file_path(asset.id)
        if recorded is not None and fs.file_exists(recorded):
            return recorded
        return None

    def _heal(self, scaled: Path, canonical: Path) -> bool:
        """
        Materialize the canonical source from its "-scaled" sibling. The scaled file keeps
        the original aspect ratio, so derivatives cut from it come out the same size.
        """
        try:
            if self.ctx.self_heal_policy == SelfHealPolicy.symlink:
                self.ctx.file_ops.link_file(scaled, canonical)
            else:
                self.ctx.file_ops.copy_file(scaled, canonical)
        except OSError as e:
            logger.warning("Could not restore %s from %s: %s", canonical, scaled, e)
            return False
        logger.info("Restored missing source %s from %s (%s)", canonical, scaled, self.ctx.self_heal_policy)
        return True
