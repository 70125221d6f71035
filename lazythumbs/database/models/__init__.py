from lazythumbs.database.core.main import Base
from .asset import Asset, AssetDerivative
from .option import EngineOption

__all__ = [
    "Base",
    "Asset",
    "AssetDerivative",
    "EngineOption",
]
