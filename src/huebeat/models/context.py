"""
Performance context - versioned snapshot of live state

The performance service owns the single current Context and replaces it on
every change; the resolver only ever receives a snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Optional


@dataclass(frozen=True)
class Context:
    """
    Attributes:
        current_preset: Last Program Change number (None until one arrives)
        current_snapshot: Last snapshot CC value (None until one arrives)
        encountered_presets: Every preset seen this session
        version: Incremented on every change
    """

    current_preset: Optional[int] = None
    current_snapshot: Optional[int] = None
    encountered_presets: FrozenSet[int] = field(default_factory=frozenset)
    version: int = 0

    def with_preset(self, preset: int) -> 'Context':
        if preset == self.current_preset and preset in self.encountered_presets:
            return self
        return replace(
            self,
            current_preset=preset,
            encountered_presets=self.encountered_presets | {preset},
            version=self.version + 1,
        )

    def with_snapshot(self, snapshot: int) -> 'Context':
        if snapshot == self.current_snapshot:
            return self
        return replace(self, current_snapshot=snapshot, version=self.version + 1)

    def sorted_presets(self) -> List[int]:
        return sorted(self.encountered_presets)
