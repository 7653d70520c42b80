import json
import os
import re

import pytest

from codeagent.file_reading import (
    GET_FILE_INFO_DEFINITION,
    LIST_FILES_DEFINITION,
    READ_FILE_DEFINITION,
    get_file_info,
    list_files,
    read_file,
)
from codeagent.tooling import ToolError


@pytest.fixture
def sample(tmp_path):
    path = tmp_path / "sample.txt"
    path.write_text("one\ntwo\nthree")
    return path


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a" / "b").mkdir(parents=True)
    (tmp_path / "a" / "b" / "c.txt").write_text("c")
    (tmp_path / "a" / "x.txt").write_text("x")
    (tmp_path / "top.txt").write_text("t")
    return tmp_path


def test_read_whole_file(sample):
    assert read_file(json.dumps({"path": str(sample)})) == "one\ntwo\nthree"


def test_read_line_range(sample):
    assert read_file(json.dumps({"path": str(sample), "start_line": 2, "end_line": 3})) == "two\nthree"


def test_read_from_start_line(sample):
    assert read_file(json.dumps({"path": str(sample), "start_line": 3})) == "three"


def test_read_end_line_clamped(sample):
    result = read_file(json.dumps({"path": str(sample), "end_line": 100}))
    assert result == sample.read_text()


def test_read_requires_path():
    with pytest.raises(ToolError, match="path is required"):
        read_file("{}")


def test_read_missing_file(tmp_path):
    with pytest.raises(ToolError, match="failed to read file"):
        read_file(json.dumps({"path": str(tmp_path / "missing.txt")}))


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"start_line": 0}, "start_line must be >= 1"),
        ({"end_line": 0}, "end_line must be >= 1"),
        ({"start_line": 3, "end_line": 2}, "start_line cannot be greater than end_line"),
        ({"start_line": 10}, "exceeds total lines"),
    ],
)
def test_read_range_errors(sample, fields, message):
    with pytest.raises(ToolError, match=message):
        read_file(json.dumps({"path": str(sample), **fields}))


def test_read_rejects_wrong_field_type(sample):
    with pytest.raises(ToolError, match="failed to parse input"):
        read_file(json.dumps({"path": str(sample), "start_line": "2"}))


def test_list_non_recursive(tree):
    result = json.loads(list_files(json.dumps({"path": str(tree)})))
    assert result == ["a/", "top.txt"]


def test_list_defaults_to_current_directory(tree, monkeypatch):
    monkeypatch.chdir(tree)
    assert json.loads(list_files("{}")) == ["a/", "top.txt"]


def test_list_recursive(tree):
    result = json.loads(list_files(json.dumps({"path": str(tree), "recursive": True})))
    assert result == [
        "a/",
        os.path.join("a", "b") + "/",
        os.path.join("a", "b", "c.txt"),
        os.path.join("a", "x.txt"),
        "top.txt",
    ]


def test_list_recursive_depth_limit(tree):
    payload = {"path": str(tree), "recursive": True, "max_depth": 0}
    assert json.loads(list_files(json.dumps(payload))) == ["a/", "top.txt"]


def test_list_recursive_depth_one_excludes_deeper(tree):
    payload = {"path": str(tree), "recursive": True, "max_depth": 1}
    result = json.loads(list_files(json.dumps(payload)))
    assert os.path.join("a", "b", "c.txt") not in result
    assert all(entry.rstrip("/").count(os.sep) <= 1 for entry in result)
    assert os.path.join("a", "x.txt") in result


def test_list_empty_directory_is_null(tmp_path):
    assert list_files(json.dumps({"path": str(tmp_path)})) == "null"


def test_list_missing_directory(tmp_path):
    with pytest.raises(ToolError, match="failed to read directory"):
        list_files(json.dumps({"path": str(tmp_path / "nope")}))


def test_list_missing_directory_recursive(tmp_path):
    with pytest.raises(ToolError, match="failed to walk directory"):
        list_files(json.dumps({"path": str(tmp_path / "nope"), "recursive": True}))


def test_info_for_missing_path(tmp_path):
    path = str(tmp_path / "missing")
    info = json.loads(get_file_info(json.dumps({"path": path})))
    assert info == {
        "path": path,
        "is_directory": False,
        "size": 0,
        "mode": "",
        "mod_time": "",
        "exists": False,
    }


def test_info_for_file(sample):
    info = json.loads(get_file_info(json.dumps({"path": str(sample)})))
    assert info["exists"] is True
    assert info["is_directory"] is False
    assert info["size"] == sample.stat().st_size
    assert info["line_count"] == len(sample.read_text().splitlines())
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", info["mod_time"])
    assert list(info) == [
        "path",
        "is_directory",
        "size",
        "mode",
        "mod_time",
        "line_count",
        "exists",
    ]


def test_info_trailing_newline_not_counted(tmp_path):
    path = tmp_path / "lines.txt"
    path.write_text("a\nb\n")
    info = json.loads(get_file_info(json.dumps({"path": str(path)})))
    assert info["line_count"] == len(path.read_text().splitlines())


def test_info_mode_string(sample):
    os.chmod(sample, 0o644)
    info = json.loads(get_file_info(json.dumps({"path": str(sample)})))
    assert info["mode"] == "-rw-r--r--"


def test_info_for_directory(tmp_path):
    info = json.loads(get_file_info(json.dumps({"path": str(tmp_path)})))
    assert info["is_directory"] is True
    assert info["mode"].startswith("d")
    assert "line_count" not in info


def test_info_empty_file_has_no_line_count(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("")
    info = json.loads(get_file_info(json.dumps({"path": str(path)})))
    assert "line_count" not in info
    assert info["size"] == 0


def test_info_overlong_line_has_no_line_count(tmp_path):
    path = tmp_path / "long.txt"
    path.write_text("x" * (64 * 1024) + "\n")
    info = json.loads(get_file_info(json.dumps({"path": str(path)})))
    assert "line_count" not in info
    assert info["exists"] is True


def test_info_requires_path():
    with pytest.raises(ToolError, match="path is required"):
        get_file_info("{}")


def test_definitions_dispatch(sample):
    payload = json.dumps({"path": str(sample)})
    assert READ_FILE_DEFINITION.run(payload) == sample.read_text()
    assert READ_FILE_DEFINITION.name == "read_file"
    assert LIST_FILES_DEFINITION.name == "list_files"
    assert GET_FILE_INFO_DEFINITION.name == "get_file_info"
    assert json.loads(GET_FILE_INFO_DEFINITION.run(payload))["exists"] is True


def test_definition_schemas_list_fields(sample, tree):
    assert set(READ_FILE_DEFINITION.input_schema["properties"]) == {"path", "start_line", "end_line"}
    assert set(LIST_FILES_DEFINITION.input_schema["properties"]) == {"path", "recursive", "max_depth"}
    assert set(GET_FILE_INFO_DEFINITION.input_schema["properties"]) == {"path"}

    read_payload = json.dumps({"path": str(sample), "start_line": 1, "end_line": 2})
    assert READ_FILE_DEFINITION.run(read_payload) == "one\ntwo"

    list_payload = json.dumps({"path": str(tree), "recursive": True, "max_depth": 0})
    assert json.loads(LIST_FILES_DEFINITION.run(list_payload)) == ["a/", "top.txt"]

    info_payload = json.dumps({"path": str(sample)})
    assert json.loads(GET_FILE_INFO_DEFINITION.run(info_payload))["path"] == str(sample)