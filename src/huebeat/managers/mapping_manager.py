"""
Mapping Manager - parses mapping rules and scenes

Rule order is preserved from the file: it is the tie-break between rules of
equal scope (last defined wins).
"""

from typing import Dict, List, Optional

from pydantic import ValidationError

from huebeat.models.enums import LogCategory
from huebeat.models.mapping import MappingRule
from huebeat.models.scene import Scene
from huebeat.schemas.mapping import MappingRuleSchema
from huebeat.schemas.scene import SceneSchema
from huebeat.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)


class MappingManager:
    """
    Validates the 'mappings' and 'scenes' sections.

    Each entry is validated on its own: one bad rule never discards the
    rest of the file.
    """

    def __init__(self, data: dict):
        self.rules: List[MappingRule] = []
        self.scenes: Dict[str, Scene] = {}
        self._process_scenes(data.get("scenes") or [])
        self._process_rules(data.get("mappings") or [])

    def _process_rules(self, entries: list) -> None:
        seen = set()
        for index, raw in enumerate(entries):
            try:
                rule = MappingRuleSchema(**raw).to_domain()
            except (ValidationError, ValueError, TypeError) as ex:
                rule_id = raw.get("id", f"#{index}") if isinstance(raw, dict) else f"#{index}"
                log.error(f"Skipping invalid mapping {rule_id}", exception=ex)
                continue

            if rule.id in seen:
                log.error(f"Skipping duplicate mapping '{rule.id}'")
                continue
            seen.add(rule.id)
            self.rules.append(rule)

        log.debug(f"Loaded {len(self.rules)} mappings")

    def _process_scenes(self, entries: list) -> None:
        for index, raw in enumerate(entries):
            try:
                scene = SceneSchema(**raw).to_domain()
            except (ValidationError, ValueError, TypeError) as ex:
                scene_id = raw.get("id", f"#{index}") if isinstance(raw, dict) else f"#{index}"
                log.error(f"Skipping invalid scene {scene_id}", exception=ex)
                continue

            if scene.id in self.scenes:
                log.error(f"Skipping duplicate scene '{scene.id}'")
                continue
            self.scenes[scene.id] = scene

        log.debug(f"Loaded {len(self.scenes)} scenes")

    def get_rule(self, rule_id: str) -> Optional[MappingRule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def get_scene(self, scene_id: str) -> Optional[Scene]:
        return self.scenes.get(scene_id)
