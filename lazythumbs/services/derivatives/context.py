# lazythumbs/services/derivatives/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from lazythumbs.common.settings import Settings
from lazythumbs.domain.enums.self_heal_policy import SelfHealPolicy
from lazythumbs.domain.ports.assets import AssetRepositoryPort
from lazythumbs.domain.ports.files import FileOpsPort
from lazythumbs.domain.ports.probe import ImageProbePort
from lazythumbs.domain.ports.profiles import ProfileRegistryPort
from lazythumbs.domain.ports.render import RenderBackendPort
from lazythumbs.services.filesystem.local_file_ops import LocalFileOps
from lazythumbs.services.optimizer.gate import OptimizerGate
from lazythumbs.services.probe.image_probe import PillowImageProbe
from lazythumbs.services.profiles.registry import StaticProfileRegistry
from lazythumbs.services.render.pillow_renderer import PillowRenderer


@dataclass
class EngineContext:
    """
    Everything the derivative engine collaborates with, passed in explicitly.
    Build one per unit of work (usually per request, around a DB session).
    """
    upload_root: Path
    upload_base_url: str
    upload_url_path: str
    image_exts: Sequence[str]
    repository: AssetRepositoryPort
    renderer: RenderBackendPort
    profiles: ProfileRegistryPort
    probe: ImageProbePort = field(default_factory=PillowImageProbe)
    file_ops: FileOpsPort = field(default_factory=LocalFileOps)
    optimizer: OptimizerGate = field(default_factory=OptimizerGate)
    self_heal_policy: SelfHealPolicy = SelfHealPolicy.copy

    @classmethod
    def from_settings(
        cls,
        cfg: Settings,
        *,
        repository: AssetRepositoryPort,
        renderer: Optional[RenderBackendPort] = None,
        profiles: Optional[ProfileRegistryPort] = None,
        optimizer: Optional[OptimizerGate] = None,
    ) -> "EngineContext":
        return cls(
            upload_root=Path(cfg.upload_root),
            upload_base_url=cfg.upload_base_url,
            upload_url_path=cfg.upload_url_path,
            image_exts=tuple(cfg.image_exts),
            repository=repository,
            renderer=renderer or PillowRenderer(jpeg_quality=cfg.jpeg_quality, webp_quality=cfg.webp_quality),
            profiles=profiles or StaticProfileRegistry.from_settings(cfg),
            optimizer=optimizer or OptimizerGate(),
            self_heal_policy=cfg.self_heal_policy,
        )
