"""
Explicit cascade context passed through the save pipeline.

Every stage receives the context of the save it runs in instead of
consulting process-wide "already running" flags. Nested saves (a translation
clone, a location re-push) get a derived context via nested().
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict


MAX_CASCADE_DEPTH = 3


@dataclass(frozen=True)
class SaveContext:
    """
    Attributes:
        submitted: Field values submitted with this save, possibly not yet
            committed; stages prefer them over stored values
        suppress_translations: Skip TranslationSync (set while cloning)
        suppress_location_cascade: Skip re-pushing a location onto its events
        depth: Nesting level of this save inside a cascade
    """

    submitted: Dict[str, Any] = field(default_factory=dict)
    suppress_translations: bool = False
    suppress_location_cascade: bool = False
    depth: int = 0

    def nested(self, **overrides) -> "SaveContext":
        """Context for a save triggered from inside this one."""
        overrides.setdefault("submitted", {})
        return dataclasses.replace(self, depth=self.depth + 1, **overrides)

    def has_submitted(self, name: str) -> bool:
        return name in self.submitted
