"""Tools that create and change files."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from .file_reading import _bool_field, _int_field, _str_field
from .tooling import Payload, ToolDefinition, ToolError, object_schema, parse_input


class EditMode(str, Enum):
    """The ways edit_file can change a file."""

    REPLACE = "replace"
    INSERT_AFTER = "insert_after"
    INSERT_BEFORE = "insert_before"
    APPEND = "append"
    PREPEND = "prepend"
    DELETE_LINE = "delete_line"


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent and parent != ".":
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as exc:
            raise ToolError(f"failed to create directory: {exc}") from exc


def _read_text(path: str) -> str:
    try:
        return Path(path).read_bytes().decode("utf-8", errors="surrogateescape")
    except OSError as exc:
        raise ToolError(f"failed to read file: {exc}") from exc


def _write_text(path: str, text: str) -> None:
    try:
        Path(path).write_bytes(text.encode("utf-8", errors="surrogateescape"))
    except OSError as exc:
        raise ToolError(f"failed to write file: {exc}") from exc


def create_file(payload: Payload) -> str:
    """Create a file with the given content, refusing to replace one unless asked."""
    data = parse_input(payload)
    path = _str_field(data, "path")
    content = _str_field(data, "content")
    overwrite = _bool_field(data, "overwrite")

    if not path:
        raise ToolError("path is required")

    if os.path.exists(path) and not overwrite:
        raise ToolError(f"file already exists: {path} (use overwrite=true to replace)")

    _ensure_parent(path)
    try:
        Path(path).write_bytes(content.encode("utf-8", errors="surrogateescape"))
    except OSError as exc:
        raise ToolError(f"failed to create file: {exc}") from exc

    return f"Successfully created file: {path}"


def _replace_once(content: str, old: str, new: str) -> str:
    if not old or not new:
        raise ToolError("both old_str and new_str are required for replace mode")
    if old == new:
        raise ToolError("old_str and new_str must be different")
    occurrences = content.count(old)
    if occurrences == 0:
        raise ToolError("old_str not found in file")
    if occurrences > 1:
        raise ToolError(
            f"old_str found {occurrences} times, expected exactly 1 occurrence for safety"
        )
    return content.replace(old, new)


def _target_line(lines: list[str], old: str, line_number: int | None, mode: EditMode) -> int:
    if line_number is not None:
        if not 1 <= line_number <= len(lines):
            raise ToolError(f"line_number {line_number} is out of range (1-{len(lines)})")
        return line_number - 1

    if not old:
        raise ToolError(f"either old_str or line_number is required for {mode.value} mode")

    matches = [index for index, line in enumerate(lines) if old in line]
    if not matches:
        raise ToolError("old_str not found in file")
    if len(matches) > 1:
        raise ToolError(f"old_str found in {len(matches)} lines, expected exactly 1 for safety")
    return matches[0]


def edit_file(payload: Payload) -> str:
    """Change an existing file according to the requested edit mode."""
    data = parse_input(payload)
    path = _str_field(data, "path")
    mode_name = _str_field(data, "mode")
    old = _str_field(data, "old_str")
    new = _str_field(data, "new_str")
    line_number = _int_field(data, "line_number")

    if not path:
        raise ToolError("path is required")
    if not mode_name:
        raise ToolError("mode is required")
    try:
        mode = EditMode(mode_name)
    except ValueError:
        valid = ", ".join(m.value for m in EditMode)
        raise ToolError(f"invalid mode: {mode_name}. Valid modes are: {valid}") from None

    content = _read_text(path)

    if mode is EditMode.REPLACE:
        _write_text(path, _replace_once(content, old, new))
        return "Successfully replaced text in file"

    lines = content.split("\n")

    if mode is EditMode.APPEND:
        if not new:
            raise ToolError("new_str is required for append mode")
        lines.append(new)
    elif mode is EditMode.PREPEND:
        if not new:
            raise ToolError("new_str is required for prepend mode")
        lines.insert(0, new)
    else:
        if not new and mode is not EditMode.DELETE_LINE:
            raise ToolError(f"new_str is required for {mode.value} mode")
        target = _target_line(lines, old, line_number, mode)
        if mode is EditMode.INSERT_AFTER:
            lines.insert(target + 1, new)
        elif mode is EditMode.INSERT_BEFORE:
            lines.insert(target, new)
        else:
            del lines[target]

    _write_text(path, "\n".join(lines))
    return f"Successfully edited file using {mode.value} mode"


def append_to_file(payload: Payload) -> str:
    """Append content to a file, creating it and its directories when missing."""
    data = parse_input(payload)
    path = _str_field(data, "path")
    content = _str_field(data, "content")
    add_newline = _bool_field(data, "newline")

    if not path:
        raise ToolError("path is required")

    _ensure_parent(path)

    try:
        handle = open(path, "a+b")
    except OSError as exc:
        raise ToolError(f"failed to open file: {exc}") from exc

    with handle:
        if add_newline:
            try:
                size = os.fstat(handle.fileno()).st_size
                if size > 0:
                    handle.seek(-1, os.SEEK_END)
                    if handle.read(1) != b"\n":
                        handle.write(b"\n")
                handle.seek(0, os.SEEK_END)
            except OSError as exc:
                raise ToolError(f"failed to write newline: {exc}") from exc
        try:
            handle.write(content.encode("utf-8", errors="surrogateescape"))
        except OSError as exc:
            raise ToolError(f"failed to append content: {exc}") from exc

    return f"Successfully appended content to: {path}"


CREATE_FILE_DEFINITION = ToolDefinition(
    name="create_file",
    description=(
        "Create a new file with the specified content. If the file already exists, it will "
        "return an error unless overwrite is true."
    ),
    input_schema=object_schema(
        {
            "path": ("string", "The path where the file should be created."),
            "content": ("string", "The content to write to the file."),
            "overwrite": (
                "boolean",
                "Whether to overwrite the file if it already exists. Defaults to false.",
            ),
        }
    ),
    function=create_file,
)

EDIT_FILE_DEFINITION = ToolDefinition(
    name="edit_file",
    description=(
        "Make edits to an existing file using various modes:\n"
        "\t- 'replace': Replace old_str with new_str (must match exactly once)\n"
        "\t- 'insert_after': Insert new_str after the line containing old_str\n"
        "\t- 'insert_before': Insert new_str before the line containing old_str\n"
        "\t- 'append': Append new_str to the end of the file\n"
        "\t- 'prepend': Prepend new_str to the beginning of the file\n"
        "\t- 'delete_line': Delete the line containing old_str\n"
        "\t"
    ),
    input_schema=object_schema(
        {
            "path": ("string", "The path to the file to edit."),
            "mode": (
                "string",
                "Edit mode: 'replace', 'insert_after', 'insert_before', 'append', "
                "'prepend', or 'delete_line'.",
            ),
            "old_str": (
                "string",
                "Text to search for (required for replace, insert_after, insert_before, "
                "delete_line modes).",
            ),
            "new_str": (
                "string",
                "Text to insert/replace with (required for replace, insert_after, "
                "insert_before, append, prepend modes).",
            ),
            "line_number": (
                "integer",
                "Specific line number for insert operations (1-based, optional alternative "
                "to old_str).",
            ),
        }
    ),
    function=edit_file,
)

APPEND_TO_FILE_DEFINITION = ToolDefinition(
    name="append_to_file",
    description=(
        "Append content to the end of an existing file. Creates the file if it doesn't exist."
    ),
    input_schema=object_schema(
        {
            "path": ("string", "The path to the file to append to."),
            "content": ("string", "The content to append to the file."),
            "newline": (
                "boolean",
                "Whether to add a newline before the content. Defaults to true.",
            ),
        }
    ),
    function=append_to_file,
)