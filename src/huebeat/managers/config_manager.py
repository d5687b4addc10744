"""
Config Manager

Main configuration manager with include system support.
Loads modular YAML files and initializes sub-managers.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from huebeat.managers.light_manager import LightManager
from huebeat.managers.mapping_manager import MappingManager
from huebeat.models.config import EngineConfig
from huebeat.models.enums import LogCategory
from huebeat.schemas.config import EngineConfigSchema
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)

CONFIG_DIR = Path(__file__).parent.parent / "config"


class ConfigManager:
    """
    Main configuration manager with include system support

    Loads config.yaml and processes the include: directive to load modular
    YAML files (engine, lights, mappings, scenes). Falls back to
    factory_defaults.yaml when the main configuration cannot be read.

    Example:
        config = ConfigManager()
        config.load()

        config.engine                         # EngineConfig
        config.light_manager.get_all_lights() # List[LightInfo]
        config.mapping_manager.rules          # List[MappingRule]
    """

    def __init__(
        self,
        config_path: Union[str, Path, None] = None,
        defaults_path: Union[str, Path, None] = None,
    ):
        """
        Args:
            config_path: Main config.yaml (default: packaged config)
            defaults_path: Factory defaults fallback (default: packaged)
        """
        self.config_path = Path(config_path) if config_path else CONFIG_DIR / "config.yaml"
        self.factory_defaults_path = Path(defaults_path) if defaults_path else CONFIG_DIR / "factory_defaults.yaml"
        self.data: Dict = {}
        self.using_defaults = False

        # Initialized in load()
        self.engine: EngineConfig = EngineConfig()
        self.light_manager: LightManager
        self.mapping_manager: MappingManager

    def load(self) -> Dict:
        """
        Load YAML configuration with include system support

        Process:
        1. Load main config.yaml
        2. If it has 'include:' list, load and merge those files
        3. Otherwise treat it as a monolithic config
        4. Fall back to factory defaults on failure
        5. Initialize sub-managers

        Returns:
            Merged config data dict
        """
        try:
            main_config = self._read_yaml(self.config_path)
            if not isinstance(main_config, dict):
                raise ValueError(f"{self.config_path.name} must contain a mapping")

            if "include" in main_config:
                log.info("Using include-based configuration")
                self.data = self._load_with_includes(main_config["include"], self.config_path.parent)
                for key, value in main_config.items():
                    if key != "include":
                        self.data[key] = value
            else:
                log.info("Using monolithic configuration")
                self.data = main_config
            self.using_defaults = False

        except (OSError, yaml.YAMLError, ValueError) as ex:
            log.error("Failed to load config.yaml", error=str(ex), error_type=type(ex).__name__)
            log.warn("Falling back to factory defaults")
            self.data = self._read_yaml(self.factory_defaults_path) or {}
            self.using_defaults = True

        self._initialize_managers()
        return self.data

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict:
        """
        Load and merge multiple YAML files from include list

        Args:
            include_list: Filenames to load (e.g. ["engine.yaml", "lights.yaml"])
            config_dir: Directory containing config files

        Returns:
            Merged config dict (later files override earlier top-level keys)

        Raises:
            ValueError: an included file is missing or malformed
        """
        if not isinstance(include_list, list):
            raise ValueError("'include' must be a list of filenames")

        merged: Dict = {}
        for filename in include_list:
            filepath = config_dir / filename
            try:
                file_data = self._read_yaml(filepath)
            except FileNotFoundError as ex:
                raise ValueError(f"Included file not found: {filename}") from ex
            except yaml.YAMLError as ex:
                raise ValueError(f"Included file is not valid YAML: {filename}") from ex

            if file_data is None:
                log.warn(f"{filename} is empty")
                continue
            if not isinstance(file_data, dict):
                raise ValueError(f"{filename} must contain a mapping")

            merged.update(file_data)
            log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))

        return merged

    @staticmethod
    def _read_yaml(path: Path) -> Optional[Dict]:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    def _initialize_managers(self) -> None:
        """
        Initialize sub-managers from loaded config

        Invalid single entries are skipped inside each manager; an invalid
        engine section falls back to built-in defaults.
        """
        try:
            self.engine = EngineConfigSchema(**(self.data.get("engine") or {})).to_domain()
        except ValidationError as ex:
            log.error("Invalid engine configuration, using defaults", errors=ex.error_count(), exception=ex)
            self.engine = EngineConfig()

        self.light_manager = LightManager(self.data)
        self.mapping_manager = MappingManager(self.data)

        log.info(
            "Configuration ready",
            lights=len(self.light_manager.lights),
            mappings=len(self.mapping_manager.rules),
            scenes=len(self.mapping_manager.scenes),
            fps=self.engine.fps,
            defaults=self.using_defaults,
        )
