"""The full set of tools offered to the model."""

from __future__ import annotations

from .file_editing import (
    APPEND_TO_FILE_DEFINITION,
    CREATE_FILE_DEFINITION,
    EDIT_FILE_DEFINITION,
)
from .file_reading import (
    GET_FILE_INFO_DEFINITION,
    LIST_FILES_DEFINITION,
    READ_FILE_DEFINITION,
)
from .tooling import ToolDefinition


def get_all_tools() -> list[ToolDefinition]:
    """Return every available tool, in the order they are offered."""
    return [
        READ_FILE_DEFINITION,
        LIST_FILES_DEFINITION,
        CREATE_FILE_DEFINITION,
        EDIT_FILE_DEFINITION,
        APPEND_TO_FILE_DEFINITION,
        GET_FILE_INFO_DEFINITION,
    ]