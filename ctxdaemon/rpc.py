"""Helpers shared by the daemon's RPC handlers."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Iterable, Optional, Union

from ctxdaemon.correlation import current
from ctxdaemon.errors import (
    AdapterError,
    new_conflicting_job,
    new_invalid_path,
    new_missing_argument,
    new_not_indexed,
    status_error,
)

_REF_MARKER = "\U0001f50e"


class CodebaseStatus(str, Enum):
    """Lifecycle state of a tracked codebase."""

    NOT_INDEXED = "not_indexed"
    INDEXING = "indexing"
    INDEXED = "indexed"
    FAILED = "failed"
    STALE = "stale"

    def __str__(self) -> str:
        return self.value


def append_correlation_ref(display_text: str, *args: str) -> str:
    """Append a greppable diagnostics line to ``display_text``.

    ``args`` are key/value pairs for ids the active trace does not carry;
    pairs with an empty value are skipped, as is an unpaired trailing key.
    The active trace id, when present, leads the line.
    """
    refs = []
    trace_id = current().trace_id
    if trace_id:
        refs.append(f"trace_id={trace_id}")
    for key, value in zip(args[0::2], args[1::2]):
        if value:
            refs.append(f"{key}={value}")
    if not refs:
        return display_text
    return f"{display_text}\n{_REF_MARKER} {' '.join(refs)}"


def _contains_adapter_error(error: BaseException) -> bool:
    seen: set[int] = set()
    link: Optional[BaseException] = error
    while link is not None and id(link) not in seen:
        if isinstance(link, AdapterError):
            return True
        seen.add(id(link))
        link = link.__cause__
    return False


def classify_manager_error(
    path: str, error: Optional[BaseException]
) -> Optional[BaseException]:
    """Promote a raw manager error to a classified one by its message.

    Errors that already carry a classification, and errors with no known
    message, are returned unchanged.
    """
    if error is None:
        return None
    if _contains_adapter_error(error):
        return error
    text = str(error)
    if "conflicting active job" in text:
        return new_conflicting_job(text, error)
    if "codebase not tracked" in text:
        return new_not_indexed(path, error)
    if "invalid file extensions in extensionFilter" in text:
        return new_invalid_path(text, error)
    if "index data for '" in text:
        return new_invalid_path(text, error)
    return error


def require_non_empty(value: Optional[str], argument: str, path_like: bool) -> str:
    """Return ``value`` unchanged, or raise an INVALID_ARGUMENT status error.

    A value that is empty or only whitespace is rejected; ``path_like``
    selects the path-specific message over the generic missing-argument one.
    """
    if value is not None and value.strip():
        return value
    if path_like:
        raise status_error(new_invalid_path("codebase path is required"))
    raise status_error(new_missing_argument(argument))


def count_codebase_states(
    statuses: Iterable[Union[CodebaseStatus, str]],
) -> tuple[int, int]:
    """Return how many codebases are indexed and how many are indexing."""
    counts = Counter(CodebaseStatus(status) for status in statuses)
    return counts[CodebaseStatus.INDEXED], counts[CodebaseStatus.INDEXING]