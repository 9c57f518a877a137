# ctxdaemon

Building blocks for a local daemon that keeps a semantic code index in step
with the files on disk. The package has no third-party dependencies and
supports Python 3.10 and later.

## Modules

### `ctxdaemon.errors`

The structured error boundary.

- `ErrorClass` is the closed set of failure classes (`NOT_INDEXED`,
  `COLLECTION_MISSING`, `COLLECTION_NOT_READY`, `SEARCH_RESULT_INCOMPLETE`,
  `MILVUS_UNAVAILABLE`, `EMBEDDER_UNREACHABLE`, `INVALID_PATH`,
  `INVALID_ARGUMENT`, `CONFLICTING_JOB`, `JOB_NOT_FOUND`, `INTERNAL`).
- `StatusCode` holds the RPC status codes; `code_for(error_class)` maps a
  class to its code and anything unrecognised to `StatusCode.UNKNOWN`.
- `AdapterError` is the exception every known failure is raised as. It
  carries `error_class`, `message`, `code`, `hint`, `cause` and
  `safe_for_client`; `matches(other)` compares classes, and
  `matches_class(error, error_class)` searches a whole `__cause__` chain.
- Constructors for known failures: `new_not_indexed`,
  `new_embedder_unreachable`, `new_invalid_path`, `new_missing_argument`,
  `new_conflicting_job`, `new_job_not_found`. `new_internal` wraps anything
  else and is never shown to a client verbatim.
- `classify(error)` returns the first `AdapterError` in the cause chain, or
  wraps the error as internal.
- `respond(error)` logs the error and returns `(StatusCode, message)`;
  `respond_mcp(error)` returns an `MCPError` with class, code, message,
  trace id and job id; `status_error(error)` returns a `StatusError` ready to
  raise. All three return an OK/empty result or `None` for `None`.

Known errors are reported as their message and hint; unknown ones only as
`internal error`. In both cases the active trace id and job id are appended
as `[trace_id=… job_id=…]` when they are set.

### `ctxdaemon.correlation`

Trace identifiers that travel with the current task through a context
variable. `new_correlation(request_id)` starts a trace, `use_correlation(c)`
installs one for a `with` block, and `current()` returns the active one (an
empty `Correlation` when none is installed). A `Correlation` can open a
`child()` span, add identity attributes with
`with_identity_attributes(job_id=..., ...)` and read them back with
`identity_attribute_value(key)`.

### `ctxdaemon.rpc`

Helpers for RPC handlers: `require_non_empty(value, argument, path_like)`
raises an `INVALID_ARGUMENT` `StatusError` for empty or whitespace values,
`classify_manager_error(path, error)` turns known manager error messages
into classified errors, `append_correlation_ref(text, key, value, ...)` adds
a trace reference line to display text, and
`count_codebase_states(statuses)` counts indexed and indexing entries of
`CodebaseStatus`.

### `ctxdaemon.background`

Pieces of background sync: `ConvergeSlots` (one running converge per
codebase, via `begin`/`end`), `TriggerWatcher` (creates the context root and
reports from `poll()` when its `.sync-trigger` file's modification time has
moved on), `sync_interval_seconds` (clamps the sweep interval to at least one
second), `is_sync_conflict` and `synthetic_job_id`.

### `ctxdaemon.converge`

Pure decisions used when converging changed paths: `order_paths_by_presence`
puts files present on disk before removed ones, each group sorted;
`pick_rename_source` finds a previously recorded path with the same content
hash; `should_update_inode_stamp` decides whether a recorded `InodeRef` is
stale; `file_exists` checks with `lstat`.

### `ctxdaemon.cli`

Argument handling for an operator command line. `parse_args(argv)` reads the
global `-socket`, `-json` and `-output` flags and returns the socket path,
output mode, command and remaining arguments. `build_request(command, args,
pid)` turns a `Command` and its arguments into an `RpcRequest` (method name
and fields), or `None` for `version`. `usage()`, `blank()` and
`safe_search_limit()` are exposed as well. Invalid input raises `ValueError`.

## Example

```python
from ctxdaemon.correlation import new_correlation, use_correlation
from ctxdaemon.errors import ErrorClass, code_for, new_not_indexed, respond

assert code_for(ErrorClass.NOT_INDEXED).name == "NOT_FOUND"

with use_correlation(new_correlation("req-1")):
    code, message = respond(new_not_indexed("/srv/repo"))
    print(code.name, message)
```

```python
from ctxdaemon.cli import build_request, parse_args

invocation = parse_args(["-json", "search", "-limit", "5", "/srv/repo", "parser"])
request = build_request(invocation.command, invocation.args)
print(request.method, request.fields["limit"])  # SearchCode 5
```

## What this package does not do

It contains no running daemon: there is no RPC server or transport, no
indexing, embedding or vector storage, no loading of settings from the
environment or a settings file, and no queue that collects file-change
events. The command-line module builds requests but does not connect to a
daemon or print responses, and no console command is installed.