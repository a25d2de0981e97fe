"""Reconciliation engine.

One cycle per module: summarise current content, gather evidence, ask the generative service
for a three-bucket answer, validate it, then apply updates, new items and removals in that
order. Every cycle ends with exactly one audit entry, whatever happened.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass

from freshkeeper.config import Settings
from freshkeeper.errors import GenerationTimeoutError, ReconciliationError, ResponseContractError
from freshkeeper.evidence.gatherer import EvidenceGatherer
from freshkeeper.llm.client import ChatMessage, Completer, Completion
from freshkeeper.logging import get_logger, log_exception, refresh_context
from freshkeeper.models.content import ContentItem, ContentMeta
from freshkeeper.models.refresh import ModuleRefreshResult
from freshkeeper.prompts import (
    DEFAULT_MODULE_INSTRUCTIONS,
    MODULE_INSTRUCTIONS,
    OUTPUT_CONTRACT,
    RECONCILE_SYSTEM_PROMPT,
)
from freshkeeper.reconcile.response import ProposedEntry, ReconciliationResponse, parse_reconciliation_response
from freshkeeper.recording.audit import RefreshLog, log_refresh
from freshkeeper.store.content_store import ContentStore

logger = get_logger(__name__)

REFRESH_TYPE = "ai-research"
UPDATE_CONFIDENCE = 0.7
NEW_ITEM_CONFIDENCE = 0.6
TRUNCATION_SUFFIX = "...[truncated]"
EMPTY_STATE_TEXT = "No existing data in database for this module."


def summarize_content(items: list[ContentItem], max_chars: int) -> str:
    """Render current items for the prompt, truncating each payload to ``max_chars``.

    Lossy by construction; stored data is never touched.
    """

    if not items:
        return EMPTY_STATE_TEXT

    blocks: list[str] = []
    for it in items:
        data_str = json.dumps(it.data, ensure_ascii=False, default=str)
        if len(data_str) > max_chars:
            data_str = data_str[:max_chars] + TRUNCATION_SUFFIX
        blocks.append(f"[{it.content_key}] (section: {it.section})\n{data_str}")
    return "\n\n".join(blocks)


def build_reconcile_messages(
    *,
    module: str,
    current_state: str,
    evidence: str,
    days_back: int,
) -> list[ChatMessage]:
    instructions = MODULE_INSTRUCTIONS.get(module) or DEFAULT_MODULE_INSTRUCTIONS.format(module=module)

    lines: list[str] = []
    lines.append(f"## Module: {module}")
    lines.append("")
    lines.append("## Task")
    lines.append(instructions)
    lines.append("")
    lines.append("## Current Data in Our Database")
    lines.append(current_state)
    lines.append("")
    lines.append(f"## Recent Relevant News (Last {days_back} Days)")
    lines.append(evidence)
    lines.append("")
    lines.append("## Instructions")
    lines.append("1. Review each existing data item for accuracy based on your knowledge and the news above")
    lines.append("2. Update any values that have changed (dates, counts, statuses, personnel, etc.)")
    lines.append("3. Add significant NEW items that should be tracked")
    lines.append("4. List content keys for removal if they are no longer relevant")
    lines.append(
        "5. For each update, set a confidence score: 1.0 = confirmed fact, 0.8 = very likely, "
        "0.6 = probable, 0.4 = uncertain"
    )
    lines.append(f'6. Every contentKey must start with "{module}:"')
    lines.append("")
    lines.append(OUTPUT_CONTRACT.format(module=module))

    return [
        ChatMessage(role="system", content=RECONCILE_SYSTEM_PROMPT),
        ChatMessage(role="user", content="\n".join(lines)),
    ]


@dataclass
class ReconciliationEngine:
    """Drive one reconciliation cycle per module."""

    store: ContentStore
    gatherer: EvidenceGatherer
    llm: Completer
    audit_log: RefreshLog
    settings: Settings

    async def refresh_module(self, module: str) -> ModuleRefreshResult:
        """Run one cycle for ``module``.

        Never raises: failures are reported through the result (``notes`` is
        ``"Error: <message>"``) and a failed audit entry.
        """

        started = time.monotonic()
        result = ModuleRefreshResult(module=module)
        items_checked = 0

        with refresh_context(module=module):
            try:
                current = self.store.get_module_content(module)
                items_checked = len(current)
                state = summarize_content(current, self.settings.reconcile_summary_max_chars)

                days_back = self.settings.evidence_days_back
                evidence = await asyncio.to_thread(self.gatherer.get_relevant_news, module, days_back)

                messages = build_reconcile_messages(
                    module=module,
                    current_state=state,
                    evidence=evidence,
                    days_back=days_back,
                )
                parsed = await self._generate(messages, result)
                self._apply(module, parsed, result)
                result.notes = parsed.notes or "AI research completed"
            except Exception as e:
                message = str(e) or e.__class__.__name__
                result.status = "failed"
                result.error = message
                result.notes = f"Error: {message}"
                log_exception(logger, "AI research failed", module=module, tokens=result.tokens_used)

            duration_ms = int((time.monotonic() - started) * 1000)
            self._record(result, items_checked=items_checked, duration_ms=duration_ms)

            if result.status == "success":
                logger.info(
                    "AI research complete for %s: updated=%d created=%d removed=%d tokens=%d",
                    module,
                    result.items_updated,
                    result.items_created,
                    result.items_removed,
                    result.tokens_used,
                )
        return result

    def refresh_module_sync(self, module: str) -> ModuleRefreshResult:
        """Synchronous wrapper around :meth:`refresh_module`."""

        return asyncio.run(self.refresh_module(module))

    async def _generate(self, messages: list[ChatMessage], result: ModuleRefreshResult) -> ReconciliationResponse:
        """Call the model and parse its answer.

        A malformed answer earns one more attempt while the token ceiling allows it.
        Timeouts and provider errors propagate immediately.
        """

        max_attempts = self.settings.reconcile_max_attempts
        ceiling = self.settings.reconcile_token_ceiling

        for attempt in range(1, max_attempts + 1):
            completion = await self._invoke(messages)
            result.tokens_used += completion.total_tokens
            try:
                return parse_reconciliation_response(completion.text)
            except ResponseContractError as e:
                if attempt >= max_attempts or result.tokens_used >= ceiling:
                    raise
                logger.warning(
                    "Malformed AI response (attempt %d/%d, %d tokens so far): %s; retrying",
                    attempt,
                    max_attempts,
                    result.tokens_used,
                    e,
                )

        raise ReconciliationError("no generation attempt was made")

    async def _invoke(self, messages: list[ChatMessage]) -> Completion:
        timeout_s = self.settings.openai_timeout_s
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    self.llm.complete,
                    messages,
                    temperature=0.2,
                    max_tokens=self.settings.openai_max_tokens,
                ),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(f"generative call exceeded {timeout_s:.0f}s") from e

    def _apply(self, module: str, parsed: ReconciliationResponse, result: ModuleRefreshResult) -> None:
        """Apply buckets in order: updates, new items, removals.

        Each write is its own transaction; the first failing write stops the cycle and the
        counts reflect what was committed before it.
        """

        for entry in parsed.updates:
            key = self._accept(module, entry, result)
            if key is not None:
                self._write(module, key, entry, UPDATE_CONFIDENCE, result)
                result.items_updated += 1

        for entry in parsed.new_items:
            key = self._accept(module, entry, result)
            if key is not None:
                self._write(module, key, entry, NEW_ITEM_CONFIDENCE, result)
                result.items_created += 1

        for key in parsed.removals:
            if self.store.deactivate_content(key, module):
                result.items_removed += 1

    def _accept(self, module: str, entry: ProposedEntry, result: ModuleRefreshResult) -> str | None:
        """Return the key to write, or None when the proposal is skipped."""

        key = entry.content_key
        if key is None or entry.data is None:
            result.items_skipped += 1
            logger.warning("Skipping proposal without contentKey or data in %s", module)
            return None

        if key != module and not key.startswith(f"{module}:"):
            result.items_skipped += 1
            logger.warning("Skipping out-of-module key %s for %s", key, module)
            return None

        existing = self.store.get_content_item(key, include_inactive=True)
        if existing is not None and existing.module != module:
            result.items_skipped += 1
            logger.warning("Skipping key %s owned by module %s", key, existing.module)
            return None
        return key

    def _write(
        self,
        module: str,
        key: str,
        entry: ProposedEntry,
        default_confidence: float,
        result: ModuleRefreshResult,
    ) -> None:
        meta = ContentMeta(
            source_type="ai-research",
            confidence=entry.confidence if entry.confidence is not None else default_confidence,
            notes=entry.change_notes,
        )
        try:
            self.store.upsert_content(key, module, entry.section, entry.data, meta)
        except Exception as e:
            applied = result.items_updated + result.items_created
            raise ReconciliationError(f"partial apply: stopped at {key} after {applied} write(s): {e}") from e

    def _record(self, result: ModuleRefreshResult, *, items_checked: int, duration_ms: int) -> None:
        try:
            log_refresh(
                self.audit_log,
                result.module,
                REFRESH_TYPE,
                result.status,
                items_checked=items_checked,
                items_updated=result.items_updated,
                items_created=result.items_created,
                tokens_used=result.tokens_used,
                duration_ms=duration_ms,
                error_message=result.error,
                details={
                    "notes": result.notes,
                    "removed": result.items_removed,
                    "skipped": result.items_skipped,
                },
            )
        except Exception:
            log_exception(logger, "Failed to write refresh log entry", module=result.module)
