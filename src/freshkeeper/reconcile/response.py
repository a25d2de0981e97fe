"""Output contract for the reconciliation step.

The generative service is untrusted: its answer is parsed and validated in full before
anything is written, so a malformed answer can never leave the store half-updated.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from freshkeeper.errors import ResponseContractError
from freshkeeper.logging import get_logger
from freshkeeper.utils.json_blocks import find_json_objects

logger = get_logger(__name__)

CONTRACT_KEYS = frozenset({"updates", "newItems", "removals", "notes"})


class ProposedEntry(BaseModel):
    """One proposed write from the ``updates`` or ``newItems`` bucket."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content_key: str | None = Field(default=None, alias="contentKey")
    section: str | None = None
    data: Any = None
    confidence: float | None = None
    change_notes: str | None = Field(default=None, alias="changeNotes")

    @field_validator("content_key", "section", "change_notes", mode="before")
    @classmethod
    def _text_or_none(cls, v: Any) -> str | None:
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float | None:
        # Advisory only: out-of-range values are clamped, unusable ones dropped.
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        if math.isnan(v):
            return None
        return min(1.0, max(0.0, float(v)))

    @property
    def is_complete(self) -> bool:
        return self.content_key is not None and self.data is not None


class ReconciliationResponse(BaseModel):
    """The three-bucket answer: updates, new items and removals, plus free-text notes."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    updates: list[ProposedEntry] = Field(default_factory=list)
    new_items: list[ProposedEntry] = Field(default_factory=list, alias="newItems")
    removals: list[str] = Field(default_factory=list)
    notes: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _has_contract_keys(cls, v: Any) -> Any:
        # An explicit null bucket counts; an object with none of the keys is not an answer.
        if isinstance(v, dict) and not CONTRACT_KEYS.intersection(v):
            raise ValueError(f"none of {sorted(CONTRACT_KEYS)} present")
        return v

    @field_validator("updates", "new_items", "removals", mode="before")
    @classmethod
    def _null_bucket(cls, v: Any) -> Any:
        return [] if v is None else v


def parse_reconciliation_response(text: str) -> ReconciliationResponse:
    """Parse a raw model answer.

    Raises:
        ResponseContractError: when the answer is empty, holds zero or several JSON objects,
            or the object does not match the bucket schema.
    """

    if not text or not text.strip():
        raise ResponseContractError("AI response contained no text content")

    objects = find_json_objects(text)
    if not objects:
        raise ResponseContractError("AI response contained no valid JSON")
    if len(objects) > 1:
        raise ResponseContractError(f"AI response contained {len(objects)} JSON objects; expected exactly one")

    try:
        return ReconciliationResponse.model_validate(objects[0])
    except ValidationError as e:
        logger.warning("Reconciliation response failed validation: %s", e.errors()[:3])
        raise ResponseContractError(f"AI response violated the output contract: {e.error_count()} error(s)") from e
