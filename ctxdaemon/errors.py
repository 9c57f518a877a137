"""Structured error boundary: classified errors, status codes and client envelopes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from ctxdaemon.correlation import current

logger = logging.getLogger(__name__)


class ErrorClass(str, Enum):
    """Closed set of failure classifications."""

    NOT_INDEXED = "not_indexed"
    COLLECTION_MISSING = "collection_missing"
    COLLECTION_NOT_READY = "collection_not_ready"
    SEARCH_RESULT_INCOMPLETE = "search_result_incomplete"
    MILVUS_UNAVAILABLE = "milvus_unavailable"
    EMBEDDER_UNREACHABLE = "embedder_unreachable"
    INVALID_PATH = "invalid_path"
    INVALID_ARGUMENT = "invalid_argument"
    CONFLICTING_JOB = "conflicting_job"
    JOB_NOT_FOUND = "job_not_found"
    INTERNAL = "internal_error"

    def __str__(self) -> str:
        return self.value


class StatusCode(IntEnum):
    """RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


_CODES = {
    ErrorClass.NOT_INDEXED: StatusCode.NOT_FOUND,
    ErrorClass.JOB_NOT_FOUND: StatusCode.NOT_FOUND,
    ErrorClass.COLLECTION_MISSING: StatusCode.FAILED_PRECONDITION,
    ErrorClass.COLLECTION_NOT_READY: StatusCode.FAILED_PRECONDITION,
    ErrorClass.CONFLICTING_JOB: StatusCode.FAILED_PRECONDITION,
    ErrorClass.MILVUS_UNAVAILABLE: StatusCode.UNAVAILABLE,
    ErrorClass.EMBEDDER_UNREACHABLE: StatusCode.UNAVAILABLE,
    ErrorClass.INVALID_PATH: StatusCode.INVALID_ARGUMENT,
    ErrorClass.INVALID_ARGUMENT: StatusCode.INVALID_ARGUMENT,
    ErrorClass.SEARCH_RESULT_INCOMPLETE: StatusCode.INTERNAL,
    ErrorClass.INTERNAL: StatusCode.INTERNAL,
}


def code_for(error_class) -> StatusCode:
    """Map an error class to its status code; unknown classes map to UNKNOWN."""
    try:
        return _CODES.get(ErrorClass(error_class), StatusCode.UNKNOWN)
    except ValueError:
        return StatusCode.UNKNOWN


class AdapterError(Exception):
    """A classified error returned from a daemon boundary."""

    def __init__(
        self,
        error_class: ErrorClass,
        message: str = "",
        code: str = "",
        hint: str = "",
        cause: Optional[BaseException] = None,
        safe_for_client: bool = False,
    ) -> None:
        self.error_class = ErrorClass(error_class)
        self.message = message
        self.code = code
        self.hint = hint
        self.cause = cause
        self.safe_for_client = safe_for_client
        super().__init__(str(self))
        self.__cause__ = cause

    def __str__(self) -> str:
        text = f"{self.error_class.value}: {self.message}"
        if self.cause is not None:
            text += f": {self.cause}"
        return text

    def matches(self, other: object) -> bool:
        """Report whether ``other`` is an AdapterError of the same class."""
        return isinstance(other, AdapterError) and other.error_class == self.error_class


@dataclass
class MCPError(Exception):
    """Client-facing error carrying structured routing fields."""

    error_class: ErrorClass
    code: str
    message: str
    trace_id: str = ""
    job_id: str = ""

    def __str__(self) -> str:
        return self.message


class StatusError(Exception):
    """An error with an RPC status code and a client-safe message."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message}"


def _chain(error: Optional[BaseException]):
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        yield error
        error = error.__cause__


def matches_class(error: Optional[BaseException], error_class) -> bool:
    """Report whether any error in the cause chain has ``error_class``."""
    wanted = ErrorClass(error_class)
    return any(
        isinstance(link, AdapterError) and link.error_class == wanted for link in _chain(error)
    )


def _quote(value: str) -> str:
    return f'"{value}"'


def new_not_indexed(path: str, cause: Optional[BaseException] = None) -> AdapterError:
    """Operation against a codebase the daemon does not track."""
    return AdapterError(
        ErrorClass.NOT_INDEXED,
        message=f"codebase {_quote(path)} is not indexed",
        code="not_indexed",
        hint="run the index_codebase tool against this path first",
        cause=cause,
        safe_for_client=True,
    )


def new_embedder_unreachable(cause: Optional[BaseException] = None) -> AdapterError:
    """Failure reaching the configured embedding endpoint."""
    return AdapterError(
        ErrorClass.EMBEDDER_UNREACHABLE,
        message="embedding endpoint is unreachable",
        code="embedder_unreachable",
        hint="verify OPENAI_BASE_URL and that the endpoint serves the OpenAI embeddings API",
        cause=cause,
        safe_for_client=True,
    )


def new_invalid_path(message: str, cause: Optional[BaseException] = None) -> AdapterError:
    """A path argument that fails validation."""
    return AdapterError(
        ErrorClass.INVALID_PATH,
        message=message,
        code="invalid_path",
        hint="pass an absolute path to a directory",
        cause=cause,
        safe_for_client=True,
    )


def new_missing_argument(name: str) -> AdapterError:
    """A required argument that was left empty or omitted."""
    return AdapterError(
        ErrorClass.INVALID_ARGUMENT,
        message=f"missing required argument {_quote(name)}",
        code="invalid_argument",
        hint=f"supply a non-empty {name}",
        safe_for_client=True,
    )


def new_conflicting_job(message: str, cause: Optional[BaseException] = None) -> AdapterError:
    """A duplicate indexing request rejected in favour of an in-flight job."""
    return AdapterError(
        ErrorClass.CONFLICTING_JOB,
        message=message,
        code="conflicting_job",
        hint="wait for the existing job to complete or cancel it before retrying",
        cause=cause,
        safe_for_client=True,
    )


def new_job_not_found(job_id: str) -> AdapterError:
    """Operation against an unknown job id."""
    return AdapterError(
        ErrorClass.JOB_NOT_FOUND,
        message=f"job {_quote(job_id)} not found",
        code="job_not_found",
        hint="list jobs with list_indexing_jobs to find the current id",
        safe_for_client=True,
    )


def new_internal(message: str, cause: Optional[BaseException] = None) -> AdapterError:
    """Wrap an unknown error; its message is never shown to the client."""
    return AdapterError(
        ErrorClass.INTERNAL,
        message=message,
        code="internal_error",
        cause=cause,
        safe_for_client=False,
    )


def classify(error: BaseException) -> AdapterError:
    """Find the AdapterError in the cause chain, or wrap ``error`` as internal."""
    for link in _chain(error):
        if isinstance(link, AdapterError):
            return link
    return new_internal(str(error), error)


def _diag_refs() -> str:
    corr = current()
    refs = []
    if corr.trace_id:
        refs.append(f"trace_id={corr.trace_id}")
    job_id = corr.identity_attribute_value("job_id")
    if job_id:
        refs.append(f"job_id={job_id}")
    return f"[{' '.join(refs)}]" if refs else ""


def _format_known(adapter_error: AdapterError) -> str:
    base = adapter_error.message
    if adapter_error.hint:
        base = f"{adapter_error.message}; {adapter_error.hint}"
    refs = _diag_refs()
    return f"{base} {refs}" if refs else base


def _format_unknown() -> str:
    refs = _diag_refs()
    return f"internal error; see daemon logs {refs}" if refs else "internal error"


def _client_message(adapter_error: AdapterError) -> str:
    return _format_known(adapter_error) if adapter_error.safe_for_client else _format_unknown()


def _log_respond(adapter_error: AdapterError) -> None:
    fields = {
        "class": adapter_error.error_class.value,
        "code": adapter_error.code,
        "safe_for_client": adapter_error.safe_for_client,
        "trace_id": current().trace_id,
    }
    if adapter_error.hint:
        fields["hint"] = adapter_error.hint
    if adapter_error.message:
        fields["message"] = adapter_error.message
    if adapter_error.cause is not None:
        fields["cause"] = str(adapter_error.cause)
    level = logging.ERROR if adapter_error.error_class is ErrorClass.INTERNAL else logging.WARNING
    logger.log(level, "adapter.error.responded %s", fields)


def respond(error: Optional[BaseException]) -> tuple[StatusCode, str]:
    """Classify and log ``error``; return the status code and client message."""
    if error is None:
        return StatusCode.OK, ""
    adapter_error = classify(error)
    _log_respond(adapter_error)
    return code_for(adapter_error.error_class), _client_message(adapter_error)


def respond_mcp(error: Optional[BaseException]) -> Optional[MCPError]:
    """Classify and log ``error``; return the MCP-shaped error, or None."""
    if error is None:
        return None
    adapter_error = classify(error)
    _log_respond(adapter_error)
    corr = current()
    return MCPError(
        error_class=adapter_error.error_class,
        code=adapter_error.code,
        message=_client_message(adapter_error),
        trace_id=corr.trace_id,
        job_id=corr.identity_attribute_value("job_id"),
    )


def status_error(error: Optional[BaseException]) -> Optional[StatusError]:
    """Build the status error a boundary raises for ``error``, or None."""
    if error is None:
        return None
    code, message = respond(error)
    return StatusError(code, message)