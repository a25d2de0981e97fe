"""Logging setup.

Every record carries the refresh run id and the content module it concerns, so a single
refresh run can be followed across the orchestrator, the engine and the store.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any, Iterator

from rich.logging import RichHandler

_HANDLER_NAME = "freshkeeper"
# The OpenAI SDK logs every HTTP request at INFO through these.
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai")

_run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("freshkeeper_run_id", default="-")
_module_var: contextvars.ContextVar[str] = contextvars.ContextVar("freshkeeper_module", default="-")


class RefreshContextFilter(logging.Filter):
    """Stamp records with the bound run id and content module."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.run_id = _run_id_var.get()  # type: ignore[attr-defined]
        record.content_module = _module_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def refresh_context(*, run_id: str | None = None, module: str | None = None) -> Iterator[None]:
    """Bind a run id and/or content module for the duration of the block.

    Values left as None keep whatever the enclosing context bound.
    """

    tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []
    if run_id is not None:
        tokens.append((_run_id_var, _run_id_var.set(run_id)))
    if module is not None:
        tokens.append((_module_var, _module_var.set(module)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def configure_logging(level: str = "INFO") -> None:
    """Install the freshkeeper handler on the root logger.

    Calling it again replaces the handler installed earlier, so the CLI, the API factory and
    tests can all call it.
    """

    root = logging.getLogger()
    root.setLevel(level.upper())
    for h in list(root.handlers):
        if h.get_name() == _HANDLER_NAME:
            root.removeHandler(h)

    # RichHandler renders time and level itself.
    handler = RichHandler(rich_tracebacks=True, show_path=False, markup=False)
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(RefreshContextFilter())
    handler.setFormatter(logging.Formatter("[%(run_id)s %(content_module)s] %(name)s: %(message)s"))
    root.addHandler(handler)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log the active exception with ``key=value`` context appended."""

    if not context:
        logger.exception(msg)
        return
    pairs = " ".join(f"{k}={v!r}" for k, v in sorted(context.items()))
    logger.exception("%s (%s)", msg, pairs)
