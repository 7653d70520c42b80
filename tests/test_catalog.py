import json

import pytest

from codeagent.catalog import get_all_tools
from codeagent.tooling import ToolError


def _tool(name):
    return next(tool for tool in get_all_tools() if tool.name == name)


def test_tools_are_listed_in_order():
    assert [tool.name for tool in get_all_tools()] == [
        "read_file",
        "list_files",
        "create_file",
        "edit_file",
        "append_to_file",
        "get_file_info",
    ]


def test_tool_names_are_unique():
    names = [tool.name for tool in get_all_tools()]
    assert len(names) == len(set(names))


def test_each_call_returns_a_fresh_list():
    first = get_all_tools()
    first.clear()
    assert len(get_all_tools()) == 6


def test_every_schema_is_an_object():
    for tool in get_all_tools():
        api = tool.to_api()
        assert api["name"] == tool.name
        assert api["input_schema"]["type"] == "object"
        assert api["input_schema"]["properties"]


def test_edit_file_schema_properties():
    schema = _tool("edit_file").to_api()["input_schema"]
    assert set(schema["properties"]) == {"path", "mode", "old_str", "new_str", "line_number"}
    assert schema["properties"]["line_number"]["type"] == "integer"


def test_create_and_append_schema_properties():
    assert set(_tool("create_file").input_schema["properties"]) == {"path", "content", "overwrite"}
    assert set(_tool("append_to_file").input_schema["properties"]) == {"path", "content", "newline"}


def test_tools_run_through_catalog(tmp_path):
    target = tmp_path / "made.txt"
    created = _tool("create_file").run(json.dumps({"path": str(target), "content": "one\ntwo"}))
    assert created == f"Successfully created file: {target}"
    read_back = _tool("read_file").run(json.dumps({"path": str(target), "start_line": 2}))
    assert read_back == "two"


def test_tool_errors_propagate(tmp_path):
    with pytest.raises(ToolError, match="path is required"):
        _tool("edit_file").run(json.dumps({"mode": "append"}))