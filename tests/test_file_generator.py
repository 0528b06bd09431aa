import json

import pytest

from errors import ResponseParseError, ResponseValidationError, ValidationError
from logic.file_generator import (
    PROJECT_NAME_PATTERN,
    PROJECT_SCHEMA,
    parse_project_response,
    response_format,
    strip_code_fence,
)


def make_response(**overrides):
    data = {
        "projectName": "blinky",
        "files": [
            {"filename": "blinky.ino", "content": "void setup() {}\nvoid loop() {}\n"},
            {"filename": "LedManager.h", "content": "#pragma once\n"},
        ],
    }
    data.update(overrides)
    return json.dumps(data)


def test_parse_keeps_arrival_order():
    project = parse_project_response(make_response())
    assert project.project_name == "blinky"
    assert [f.filename for f in project.files] == ["blinky.ino", "LedManager.h"]
    assert project.files[0].content == "void setup() {}\nvoid loop() {}\n"


def test_fenced_json_parses_like_bare_json():
    bare = parse_project_response(make_response())
    fenced = parse_project_response("```json\n" + make_response() + "\n```")
    plain_fence = parse_project_response("```\n" + make_response() + "```")
    assert fenced == bare
    assert plain_fence == bare


def test_strip_code_fence_leaves_plain_text_alone():
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_invalid_json_is_a_parse_failure():
    with pytest.raises(ResponseParseError):
        parse_project_response("Sure! Here is your project: {")
    with pytest.raises(ResponseParseError):
        parse_project_response("   ")


def test_missing_name_or_files_is_a_validation_failure():
    with pytest.raises(ResponseValidationError):
        parse_project_response(make_response(projectName=""))
    with pytest.raises(ResponseValidationError):
        parse_project_response(make_response(files=[]))
    with pytest.raises(ResponseValidationError):
        parse_project_response(json.dumps({"files": [{"filename": "a.ino", "content": ""}]}))
    with pytest.raises(ResponseValidationError):
        parse_project_response(json.dumps(["not", "an", "object"]))


def test_file_entries_need_both_fields():
    with pytest.raises(ResponseValidationError):
        parse_project_response(make_response(files=[{"filename": "a.ino"}]))
    with pytest.raises(ResponseValidationError):
        parse_project_response(make_response(files=[{"filename": "a.ino", "content": 3}]))


def test_duplicate_and_unsafe_filenames_are_rejected():
    dup = [{"filename": "a.ino", "content": "x"}, {"filename": "a.ino", "content": "y"}]
    with pytest.raises(ResponseValidationError):
        parse_project_response(make_response(files=dup))
    for bad in ("../evil.h", "/etc/passwd", "  "):
        with pytest.raises(ResponseValidationError):
            parse_project_response(make_response(files=[{"filename": bad, "content": "x"}]))


def test_validation_errors_share_one_family():
    assert issubclass(ResponseParseError, ValidationError)
    assert issubclass(ResponseValidationError, ValidationError)


def test_response_format_requests_strict_schema():
    fmt = response_format()
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["strict"] is True
    schema = fmt["json_schema"]["schema"]
    assert schema is PROJECT_SCHEMA
    assert schema["required"] == ["projectName", "files"]
    assert schema["properties"]["files"]["items"]["required"] == ["filename", "content"]
    assert schema["additionalProperties"] is False


def test_project_name_must_be_identifier_safe():
    for bad in ('My Project: v2*?"<>|', "my project", "9lives", "a" * 65, "..", "led/strip"):
        with pytest.raises(ResponseValidationError):
            parse_project_response(make_response(projectName=bad))
    for good in ("blinky", "_servo", "traffic-light", "LedMatrix8x8", "a" * 64):
        assert parse_project_response(make_response(projectName=good)).project_name == good


def test_schema_carries_the_same_project_name_pattern():
    name_schema = PROJECT_SCHEMA["properties"]["projectName"]
    assert name_schema["pattern"] == PROJECT_NAME_PATTERN


def test_filenames_differing_only_by_case_are_duplicates():
    files = [{"filename": "wiring.txt", "content": "a"}, {"filename": "Wiring.txt", "content": "b"}]
    with pytest.raises(ResponseValidationError):
        parse_project_response(make_response(files=files))
