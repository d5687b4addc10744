"""
Light Manager - provides access to light capability metadata
"""

from typing import Dict, List, Optional

from pydantic import ValidationError

from huebeat.models.enums import LogCategory
from huebeat.models.light import LightInfo
from huebeat.schemas.config import LightInfoSchema
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)


class LightManager:
    """
    Parses the 'lights' section into LightInfo values.

    Invalid entries and duplicate ids are skipped with an error log.
    """

    def __init__(self, data: dict):
        self.lights: Dict[str, LightInfo] = {}
        self._process_data(data)

    def _process_data(self, data: dict) -> None:
        for index, raw in enumerate(data.get("lights") or []):
            try:
                light = LightInfoSchema(**raw).to_domain()
            except (ValidationError, TypeError) as ex:
                log.error(f"Skipping invalid light #{index}", exception=ex)
                continue

            if light.id in self.lights:
                log.error(f"Skipping duplicate light '{light.id}'")
                continue
            self.lights[light.id] = light

        log.debug(f"Loaded {len(self.lights)} lights")

    def get_light(self, light_id: str) -> Optional[LightInfo]:
        return self.lights.get(light_id)

    def get_all_lights(self) -> List[LightInfo]:
        return list(self.lights.values())
