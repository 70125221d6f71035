from lazythumbs.services.schemas.assets import (
    AssetEdit,
    AssetRead,
    AssetRegister,
    DerivativeFileIn,
    DerivativeRead,
)

__all__ = [
    "AssetEdit",
    "AssetRead",
    "AssetRegister",
    "DerivativeFileIn",
    "DerivativeRead",
]
