from lazythumbs.domain.enums.file_format import ImageFormats
from lazythumbs.domain.enums.self_heal_policy import SelfHealPolicy
from lazythumbs.domain.enums.settings_scope import SettingsScope
__all__ = [
    "ImageFormats",
    "SelfHealPolicy",
    "SettingsScope",
]
