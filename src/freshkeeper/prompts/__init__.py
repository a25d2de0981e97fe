from __future__ import annotations

from freshkeeper.prompts.reconcile import (
    DEFAULT_MODULE_INSTRUCTIONS,
    MODULE_INSTRUCTIONS,
    OUTPUT_CONTRACT,
    RECONCILE_SYSTEM_PROMPT,
)

__all__ = [
    "DEFAULT_MODULE_INSTRUCTIONS",
    "MODULE_INSTRUCTIONS",
    "OUTPUT_CONTRACT",
    "RECONCILE_SYSTEM_PROMPT",
]
