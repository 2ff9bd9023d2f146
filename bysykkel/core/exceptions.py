from __future__ import annotations
from enum import Enum
from typing import Dict


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"
    NETWORK = "NETWORK"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    FETCH_FAILED = "FETCH_FAILED"
    MERGE_FAILED = "MERGE_FAILED"
    INTERNAL = "INTERNAL"


class PipelineError(Exception):
    """Base class for all download / merge pipeline errors."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code: ErrorCode = code
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, msg={self.message})"


class DataNotFoundError(PipelineError):
    """Nothing is published at *url* (system not running yet, month not uploaded)."""

    def __init__(self, url: str) -> None:
        super().__init__(ErrorCode.NOT_FOUND, f"No data published at {url}")
        self.url = url


class FetchError(PipelineError):
    def __init__(self, url: str, reason: str, code: ErrorCode = ErrorCode.HTTP_ERROR) -> None:
        super().__init__(code, f"Fetching {url} failed: {reason}")
        self.url = url
        self.reason = reason


class TransientNetworkError(FetchError):
    """Timeout, connection reset or 5xx that survived every retry."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(url, reason, code=ErrorCode.NETWORK)


class SchemaMismatchError(PipelineError):
    def __init__(self, source: str, detail: str) -> None:
        super().__init__(ErrorCode.SCHEMA_MISMATCH, f"Unexpected layout in {source}: {detail}")
        self.source = source
        self.detail = detail


class FetchFailedError(PipelineError):
    """One or more slices failed after all sibling slices were attempted."""

    def __init__(self, failures: Dict[str, PipelineError]) -> None:
        lines = [f"  {url}: {exc.message}" for url, exc in sorted(failures.items())]
        super().__init__(
            ErrorCode.FETCH_FAILED,
            f"{len(failures)} download(s) failed:\n" + "\n".join(lines),
        )
        self.failures = failures


class MergeError(PipelineError):
    def __init__(self, msg: str) -> None:
        super().__init__(ErrorCode.MERGE_FAILED, msg)
