from .config_manager import ConfigManager
from .light_manager import LightManager
from .mapping_manager import MappingManager

__all__ = ["ConfigManager", "LightManager", "MappingManager"]
