"""Argument handling for the operator command line that drives the daemon."""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, NamedTuple, Optional, Sequence, Union

MAX_INT32 = 2**31 - 1
DEFAULT_SEARCH_LIMIT = 10
CLIENT_NAME = "cli"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class Command(str, Enum):
    """Top-level commands the CLI accepts."""

    VERSION = "version"
    DAEMON = "daemon"
    LIST = "list"
    JOBS = "jobs"
    DOCTOR = "doctor"
    STATUS = "status"
    JOB = "job"
    INDEX = "index"
    SYNC = "sync"
    SEARCH = "search"
    CLEAR = "clear"
    CANCEL = "cancel"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RpcRequest:
    """A daemon call: the RPC method name and its request fields."""

    method: str
    fields: Mapping[str, Any] = field(default_factory=dict)


class _Invocation(NamedTuple):
    socket_path: Optional[str]
    output_mode: str
    command: str
    args: list


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _parse_bool(value: str) -> Optional[bool]:
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    return None


def _parse_int(value: str) -> int:
    try:
        return int(value, 0)
    except ValueError:
        digits = value.lstrip("+-")
        if len(digits) > 1 and digits.startswith("0"):
            return int(value, 8)
        raise


def _parse_flags(
    args: Sequence[str], spec: Mapping[str, tuple[str, Any]]
) -> tuple[dict[str, Any], list[str]]:
    """Parse single- or double-dash flags up to the first positional argument.

    ``spec`` maps a flag name to its kind ("bool", "string", "int" or "list")
    and default. Returns the flag values and the remaining arguments.
    """
    values = {
        name: list(default) if kind == "list" else default
        for name, (kind, default) in spec.items()
    }
    rest = list(args)
    while rest:
        arg = rest[0]
        if len(arg) < 2 or not arg.startswith("-"):
            break
        rest.pop(0)
        name = arg[1:]
        if name.startswith("-"):
            name = name[1:]
            if not name:
                break
        if not name or name[0] in "-=":
            raise ValueError(f"bad flag syntax: {arg}")
        name, has_value, value = name.partition("=")
        if name not in spec:
            raise ValueError(f"flag provided but not defined: -{name}")
        kind, _ = spec[name]
        if kind == "bool":
            parsed = True
            if has_value:
                parsed = _parse_bool(value)
                if parsed is None:
                    raise ValueError(f"invalid boolean value {_quote(value)} for -{name}")
            values[name] = parsed
            continue
        if not has_value:
            if not rest:
                raise ValueError(f"flag needs an argument: -{name}")
            value = rest.pop(0)
        if kind == "int":
            try:
                values[name] = _parse_int(value)
            except ValueError:
                raise ValueError(
                    f"invalid value {_quote(value)} for flag -{name}: parse error"
                ) from None
        elif kind == "list":
            values[name].append(value)
        else:
            values[name] = value
    return values, rest


def usage() -> str:
    """Return the one-line usage summary."""
    return (
        "usage: claude-context [--socket PATH] [--json|--output MODE] "
        "<version|daemon|list|jobs|doctor|status|job|index|sync|search|clear|cancel> [arg]"
    )


def blank(args: Sequence[str], index: int) -> bool:
    """Report whether the positional argument at ``index`` is missing or only whitespace."""
    return index >= len(args) or not args[index].strip()


def safe_search_limit(limit: int) -> int:
    """Return ``limit`` when it is non-negative and fits a 32-bit signed integer."""
    if limit < 0:
        raise ValueError("limit must be non-negative")
    if limit > MAX_INT32:
        raise ValueError(f"limit {limit} exceeds int32")
    return limit


def parse_args(argv: Optional[Sequence[str]] = None) -> _Invocation:
    """Parse the global flags and split off the command and its arguments.

    A ``socket_path`` of None means the configured default socket.
    """
    arguments = sys.argv[1:] if argv is None else list(argv)
    values, rest = _parse_flags(
        arguments,
        {
            "socket": ("string", None),
            "json": ("bool", False),
            "output": ("string", "human"),
        },
    )
    if not rest:
        raise ValueError(f"command required: {usage()}")
    mode = "json" if values["json"] else values["output"]
    return _Invocation(values["socket"], mode, rest[0], rest[1:])


def _client_info(pid: Optional[int]) -> dict[str, Any]:
    process_id = os.getpid() if pid is None else pid
    if process_id < 0 or process_id > MAX_INT32:
        raise ValueError(f"process id {process_id} does not fit in int32")
    return {"name": CLIENT_NAME, "pid": process_id}


def _daemon_request(args: Sequence[str]) -> RpcRequest:
    if not args:
        raise ValueError("daemon subcommand required")
    if args[0] == "status":
        return RpcRequest("Version")
    if args[0] == "stop":
        return RpcRequest("Shutdown")
    raise ValueError(f"unsupported daemon subcommand {_quote(args[0])}")


def _index_request(args: Sequence[str], pid: Optional[int]) -> RpcRequest:
    try:
        values, remaining = _parse_flags(
            args,
            {
                "force": ("bool", False),
                "splitter": ("string", ""),
                "extension": ("list", []),
                "ignore": ("list", []),
            },
        )
    except ValueError as error:
        raise ValueError(f"parse index flags: {error}") from error
    if blank(remaining, 0):
        raise ValueError("index requires a path")
    fields: dict[str, Any] = {
        "path": remaining[0],
        "force": values["force"],
        "custom_extensions": values["extension"],
        "ignore_patterns": values["ignore"],
        "client": _client_info(pid),
    }
    if values["splitter"]:
        fields["splitter"] = {"type": values["splitter"]}
    return RpcRequest("StartIndex", fields)


def _search_request(args: Sequence[str]) -> RpcRequest:
    try:
        values, remaining = _parse_flags(
            args,
            {"limit": ("int", DEFAULT_SEARCH_LIMIT), "extension": ("list", [])},
        )
    except ValueError as error:
        raise ValueError(f"parse search flags: {error}") from error
    if blank(remaining, 0) or blank(remaining, 1):
        raise ValueError("search requires a path and query")
    return RpcRequest(
        "SearchCode",
        {
            "path": remaining[0],
            "query": remaining[1],
            "limit": safe_search_limit(values["limit"]),
            "extension_filter": values["extension"],
        },
    )


def build_request(
    command: Union[Command, str], args: Sequence[str], pid: Optional[int] = None
) -> Optional[RpcRequest]:
    """Translate a command and its arguments into the daemon call it makes.

    Returns None for ``version``, which is answered locally. ``pid`` is the
    process id reported as the client; None means the current process.
    """
    try:
        selected = Command(command)
    except ValueError:
        raise ValueError(f"unsupported command {_quote(str(command))}: {usage()}") from None
    args = list(args)

    if selected is Command.VERSION:
        return None
    if selected is Command.DAEMON:
        return _daemon_request(args)
    if selected is Command.LIST:
        return RpcRequest("ListIndexes")
    if selected is Command.JOBS:
        return RpcRequest("ListJobs", {"codebase_id": args[0]} if args else {})
    if selected is Command.DOCTOR:
        return RpcRequest("Doctor")
    if selected is Command.STATUS:
        if blank(args, 0):
            raise ValueError("status requires a path")
        return RpcRequest("GetIndex", {"path": args[0]})
    if selected is Command.JOB:
        if blank(args, 0):
            raise ValueError("job requires an id")
        return RpcRequest("GetJob", {"job_id": args[0]})
    if selected is Command.INDEX:
        return _index_request(args, pid)
    if selected is Command.SYNC:
        if blank(args, 0):
            raise ValueError("sync requires a path")
        return RpcRequest("SyncIndex", {"path": args[0], "client": _client_info(pid)})
    if selected is Command.SEARCH:
        return _search_request(args)
    if selected is Command.CLEAR:
        if blank(args, 0):
            raise ValueError("clear requires a path")
        return RpcRequest("ClearIndex", {"path": args[0], "client": _client_info(pid)})
    if blank(args, 0):
        raise ValueError("cancel requires a job id")
    return RpcRequest("CancelJob", {"job_id": args[0], "client": _client_info(pid)})