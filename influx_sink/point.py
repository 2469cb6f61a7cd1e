from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class PointBuilder(Protocol):
    """
    Outbound time-series point under construction.

    `tag()` may mutate and return self or return a new handle; callers must
    continue with the returned handle.
    """

    def tag(self, key: str, value: str) -> "PointBuilder":
        ...


@dataclass
class PointDraft:
    """
    In-memory point builder. Later tags with the same key overwrite earlier ones.
    """

    measurement: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)

    def tag(self, key: str, value: str) -> "PointDraft":
        self.tags[str(key)] = str(value)
        return self


__all__ = ["PointBuilder", "PointDraft"]
