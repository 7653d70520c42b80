"""Tools that inspect files without changing them."""

from __future__ import annotations

import json
import os
import stat
from datetime import datetime
from pathlib import Path
from typing import Any

from .tooling import Payload, ToolDefinition, ToolError, object_schema, parse_input

_MAX_SCAN_LINE = 64 * 1024


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ToolError(f"failed to parse input: field {key} must be a string")
    return value


def _int_field(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ToolError(f"failed to parse input: field {key} must be an integer")
    return value


def _bool_field(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ToolError(f"failed to parse input: field {key} must be a boolean")
    return value


def _to_json(value: Any) -> str:
    text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return (
        text.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def read_file(payload: Payload) -> str:
    """Return a file's contents, or only the lines between start_line and end_line."""
    data = parse_input(payload)
    path = _str_field(data, "path")
    start = _int_field(data, "start_line")
    end = _int_field(data, "end_line")

    if not path:
        raise ToolError("path is required")

    try:
        content = Path(path).read_bytes().decode("utf-8", errors="replace")
    except OSError as exc:
        raise ToolError(f"failed to read file: {exc}") from exc

    if start is None and end is None:
        return content

    lines = content.split("\n")
    total = len(lines)

    if start is not None and start < 1:
        raise ToolError("start_line must be >= 1")
    if end is not None and end < 1:
        raise ToolError("end_line must be >= 1")

    start_line = 1 if start is None else start
    end_line = total if end is None else end

    if start_line > end_line:
        raise ToolError("start_line cannot be greater than end_line")
    if start_line > total:
        raise ToolError(f"start_line ({start_line}) exceeds total lines ({total})")

    return "\n".join(lines[start_line - 1 : min(end_line, total)])


def _sorted_entries(directory: str) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: os.fsencode(entry.name))


def _walk(root: str, max_depth: int) -> list[str]:
    found: list[str] = []

    def visit(directory: str, prefix: tuple[str, ...]) -> None:
        for entry in _sorted_entries(directory):
            rel = os.path.join(*prefix, entry.name)
            is_dir = entry.is_dir(follow_symlinks=False)
            if max_depth >= 0 and rel.count(os.sep) > max_depth:
                continue
            found.append(rel + "/" if is_dir else rel)
            if is_dir:
                visit(entry.path, (*prefix, entry.name))

    if stat.S_ISDIR(os.lstat(root).st_mode):
        visit(root, ())
    return found


def list_files(payload: Payload) -> str:
    """List a directory's entries as a JSON array, directories ending in '/'."""
    data = parse_input(payload)
    directory = _str_field(data, "path") or "."
    recursive = _bool_field(data, "recursive")
    max_depth = _int_field(data, "max_depth")

    if not recursive:
        try:
            entries = _sorted_entries(directory)
        except OSError as exc:
            raise ToolError(f"failed to read directory: {exc}") from exc
        files = [
            entry.name + "/" if entry.is_dir(follow_symlinks=False) else entry.name
            for entry in entries
        ]
    else:
        try:
            files = _walk(directory, -1 if max_depth is None else max_depth)
        except OSError as exc:
            raise ToolError(f"failed to walk directory: {exc}") from exc

    return _to_json(files or None)


def _mode_string(mode: int) -> str:
    flags = (
        ("d", stat.S_ISDIR(mode)),
        ("L", stat.S_ISLNK(mode)),
        ("D", stat.S_ISBLK(mode) or stat.S_ISCHR(mode)),
        ("p", stat.S_ISFIFO(mode)),
        ("S", stat.S_ISSOCK(mode)),
        ("u", bool(mode & stat.S_ISUID)),
        ("g", bool(mode & stat.S_ISGID)),
        ("c", stat.S_ISCHR(mode)),
        ("t", bool(mode & stat.S_ISVTX)),
    )
    kind = "".join(letter for letter, present in flags if present) or "-"
    perms = "".join(
        letter if mode & (1 << (8 - offset)) else "-"
        for offset, letter in enumerate("rwxrwxrwx")
    )
    return kind + perms


def _line_count(path: str) -> int | None:
    try:
        with open(path, "rb") as handle:
            count = 0
            for line in handle:
                if len(line.rstrip(b"\n")) >= _MAX_SCAN_LINE:
                    return None
                count += 1
            return count
    except OSError:
        return None


def get_file_info(payload: Payload) -> str:
    """Describe a file or directory as a JSON object."""
    data = parse_input(payload)
    path = _str_field(data, "path")
    if not path:
        raise ToolError("path is required")

    info: dict[str, Any] = {
        "path": path,
        "is_directory": False,
        "size": 0,
        "mode": "",
        "mod_time": "",
    }
    try:
        st = os.stat(path)
    except FileNotFoundError:
        info["exists"] = False
        return _to_json(info)
    except OSError as exc:
        raise ToolError(f"failed to stat file: {exc}") from exc

    is_dir = stat.S_ISDIR(st.st_mode)
    info["is_directory"] = is_dir
    info["size"] = st.st_size
    info["mode"] = _mode_string(st.st_mode)
    info["mod_time"] = datetime.fromtimestamp(st.st_mtime).strftime("%Y-%m-%d %H:%M:%S")

    if not is_dir and st.st_size > 0:
        count = _line_count(path)
        if count is not None:
            info["line_count"] = count

    info["exists"] = True
    return _to_json(info)


READ_FILE_DEFINITION = ToolDefinition(
    name="read_file",
    description=(
        "Read the contents of a given relative file path. Use this when you want to see "
        "what's inside a file. Do not use this with directory names."
    ),
    input_schema=object_schema(
        {
            "path": ("string", "The relative path of a file in the working directory."),
            "start_line": (
                "integer",
                "Optional starting line number (1-based). If provided, only reads from this line onwards.",
            ),
            "end_line": (
                "integer",
                "Optional ending line number (1-based). If provided with start_line, reads only the specified range.",
            ),
        }
    ),
    function=read_file,
)

LIST_FILES_DEFINITION = ToolDefinition(
    name="list_files",
    description=(
        "List files and directories at a given path. If no path is provided, lists files "
        "in the current directory."
    ),
    input_schema=object_schema(
        {
            "path": (
                "string",
                "Optional relative path to list files from. Defaults to current directory if not provided.",
            ),
            "recursive": ("boolean", "Whether to list files recursively. Defaults to true."),
            "max_depth": (
                "integer",
                "Maximum depth to recurse. Only applies if recursive is true.",
            ),
        }
    ),
    function=list_files,
)

GET_FILE_INFO_DEFINITION = ToolDefinition(
    name="get_file_info",
    description=(
        "Get information about a file or directory (size, permissions, modification time, etc.)."
    ),
    input_schema=object_schema(
        {"path": ("string", "The path to get information about.")}
    ),
    function=get_file_info,
)