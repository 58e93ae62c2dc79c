from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

WIF = "wif"
CONTENTS = "contents"
WEAVING = "weaving"
WARP = "warp"
WEFT = "weft"
THREADING = "threading"
TIEUP = "tieup"
TREADLING = "treadling"

PATTERN_SECTIONS = (THREADING, TIEUP, TREADLING)

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class Draft(BaseModel):
    """A weaving draft: named WIF sections, each a key/value mapping.

    Drafts are never changed in place. Editing produces a new ``Draft`` that
    reuses every section it did not touch.
    """

    model_config = ConfigDict(frozen=True)

    sections: dict[str, Any] = Field(default_factory=dict)

    def section(self, name: str) -> Mapping[str, Any]:
        value = self.sections.get(name)
        if isinstance(value, Mapping):
            return value
        return _EMPTY

    def has_section(self, name: str) -> bool:
        return name in self.sections

    def with_section(self, name: str, value: dict[str, Any]) -> "Draft":
        """Return a copy of this draft with one section replaced."""
        sections = dict(self.sections)
        sections[name] = value
        return self.model_copy(update={"sections": sections})

    @property
    def version(self) -> Any:
        return self.section(WIF).get("version")


__all__ = [
    "Draft",
    "WIF",
    "CONTENTS",
    "WEAVING",
    "WARP",
    "WEFT",
    "THREADING",
    "TIEUP",
    "TREADLING",
    "PATTERN_SECTIONS",
]
