"""Exception hierarchy."""

from __future__ import annotations


class FreshkeeperError(RuntimeError):
    pass


class PolicyConfigError(FreshkeeperError):
    """A policy file could not be loaded or validated."""


class ContentStoreError(FreshkeeperError):
    pass


class VersionConflictError(ContentStoreError):
    """Compare-and-swap upsert found a different version than expected."""

    def __init__(self, content_key: str, expected: int, actual: int) -> None:
        super().__init__(
            f"version conflict on {content_key}: expected {expected}, found {actual}"
        )
        self.content_key = content_key
        self.expected = expected
        self.actual = actual


class PartialWriteError(ContentStoreError):
    """A sequential write stopped part-way; earlier items remain committed."""

    def __init__(self, applied: int, failed_key: str, cause: BaseException) -> None:
        super().__init__(f"stopped after {applied} item(s) at {failed_key}: {cause}")
        self.applied = applied
        self.failed_key = failed_key
        self.cause = cause


class EvidenceError(FreshkeeperError):
    pass


class ReconciliationError(FreshkeeperError):
    pass


class ResponseContractError(ReconciliationError):
    """The generative response did not satisfy the output contract."""


class GenerationTimeoutError(ReconciliationError):
    pass
