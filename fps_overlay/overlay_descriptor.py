from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

WRAP_CONTENT = -2


class Anchor(str, Enum):
    TOP_LEFT = "top_left"


@dataclass(frozen=True)
class OverlayDescriptor:
    """Layout intent for the overlay surface; only ``y`` changes at runtime."""

    width: int = WRAP_CONTENT
    height: int = WRAP_CONTENT
    anchor: Anchor = Anchor.TOP_LEFT
    x: int = 0
    y: int = 0
    focusable: bool = False
    touchable: bool = False
    translucent: bool = True

    def with_offset(self, y: int) -> "OverlayDescriptor":
        return replace(self, y=max(0, int(y)))


@dataclass(frozen=True)
class LayoutChange:
    """Screen layout snapshot delivered with a configuration change."""

    top_inset: Optional[int] = None
    orientation: Optional[str] = None
