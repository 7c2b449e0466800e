"""Debug flag resolution for overlay tracing."""

from __future__ import annotations

import os
from typing import Optional

DEV_MODE_ENV_VAR = "FPS_OVERLAY_DEV_MODE"

_TRUE_TOKENS = {"1", "true", "yes", "on"}
_FALSE_TOKENS = {"0", "false", "no", "off"}


def is_dev_build(value: Optional[str] = None) -> bool:
    if value is None:
        value = os.getenv(DEV_MODE_ENV_VAR)
    if value is None:
        return False
    token = value.strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return False


DEBUG_CONFIG_ENABLED = is_dev_build()
