import pytest

from ctxdaemon.correlation import new_correlation, use_correlation
from ctxdaemon.errors import (
    AdapterError,
    ErrorClass,
    StatusCode,
    StatusError,
    new_embedder_unreachable,
)
from ctxdaemon.rpc import (
    CodebaseStatus,
    append_correlation_ref,
    classify_manager_error,
    count_codebase_states,
    require_non_empty,
)


@pytest.mark.parametrize(
    "value, argument, path_like",
    [
        ("", "absolutePath", True),
        ("   ", "absolutePath", True),
        ("", "query", False),
        ("", "job_id", False),
    ],
)
def test_require_non_empty_returns_invalid_argument(value, argument, path_like):
    with pytest.raises(StatusError) as info:
        require_non_empty(value, argument, path_like)
    assert info.value.code is StatusCode.INVALID_ARGUMENT


def test_require_non_empty_allows_value():
    assert require_non_empty("/Users/x/repo", "absolutePath", True) == "/Users/x/repo"


def test_require_non_empty_none_rejected():
    with pytest.raises(StatusError) as info:
        require_non_empty(None, "job_id", False)
    assert info.value.code is StatusCode.INVALID_ARGUMENT


def test_require_non_empty_path_message():
    with pytest.raises(StatusError) as info:
        require_non_empty("\t", "absolutePath", True)
    assert info.value.message == (
        "codebase path is required; pass an absolute path to a directory"
    )


def test_require_non_empty_argument_message():
    with pytest.raises(StatusError) as info:
        require_non_empty("", "query", False)
    assert info.value.message == 'missing required argument "query"; supply a non-empty query'


def test_append_ref_without_ids_leaves_text():
    assert append_correlation_ref("done", "job_id", "") == "done"


def test_append_ref_with_extras_only():
    result = append_correlation_ref("done", "codebase_id", "cb1", "job_id", "j1")
    assert result == "done\n\U0001f50e codebase_id=cb1 job_id=j1"


def test_append_ref_skips_empty_values_and_odd_tail():
    result = append_correlation_ref("ok", "codebase_id", "", "job_id", "j2", "dangling")
    assert result == "ok\n\U0001f50e job_id=j2"


def test_append_ref_leads_with_trace_id():
    corr = new_correlation("req-1")
    with use_correlation(corr):
        result = append_correlation_ref("line one", "job_id", "j3")
    assert result == f"line one\n\U0001f50e trace_id={corr.trace_id} job_id=j3"
    assert result.splitlines()[0] == "line one"


def test_classify_none():
    assert classify_manager_error("/repo", None) is None


def test_classify_conflicting_job():
    raw = RuntimeError("conflicting active job job-1")
    result = classify_manager_error("/repo", raw)
    assert isinstance(result, AdapterError)
    assert result.error_class is ErrorClass.CONFLICTING_JOB
    assert result.message == "conflicting active job job-1"
    assert result.cause is raw


def test_classify_not_tracked():
    result = classify_manager_error("/repo", RuntimeError("codebase not tracked"))
    assert isinstance(result, AdapterError)
    assert result.error_class is ErrorClass.NOT_INDEXED
    assert result.message == 'codebase "/repo" is not indexed'


@pytest.mark.parametrize(
    "text",
    [
        "invalid file extensions in extensionFilter: .x",
        "index data for '/repo' is missing",
    ],
)
def test_classify_invalid_path(text):
    result = classify_manager_error("/repo", ValueError(text))
    assert isinstance(result, AdapterError)
    assert result.error_class is ErrorClass.INVALID_PATH
    assert result.message == text


def test_classify_keeps_adapter_error():
    known = new_embedder_unreachable(OSError("refused"))
    assert classify_manager_error("/repo", known) is known


def test_classify_keeps_wrapped_adapter_error():
    known = new_embedder_unreachable()
    try:
        raise RuntimeError("conflicting active job") from known
    except RuntimeError as wrapped:
        assert classify_manager_error("/repo", wrapped) is wrapped


def test_classify_passes_unknown():
    raw = RuntimeError("disk full")
    assert classify_manager_error("/repo", raw) is raw


def test_count_codebase_states():
    statuses = [
        CodebaseStatus.INDEXED,
        CodebaseStatus.INDEXING,
        CodebaseStatus.INDEXED,
        CodebaseStatus.FAILED,
        "stale",
        "not_indexed",
        "indexing",
    ]
    assert count_codebase_states(statuses) == (2, 2)


def test_count_codebase_states_empty():
    assert count_codebase_states([]) == (0, 0)


def test_count_codebase_states_rejects_unknown():
    with pytest.raises(ValueError):
        count_codebase_states(["bogus"])