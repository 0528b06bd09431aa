"""Request contract for project generation and validation of the model's answer."""
import json
import re
from pathlib import PurePosixPath
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from errors import ResponseParseError, ResponseValidationError
from state import GeneratedProject, ProjectFile

WIRING_FILENAME = "wiring.txt"
BLANK_PROMPT_MESSAGE = "Please enter a description for your Arduino project."
SCHEMA_NAME = "arduino_project"
PROJECT_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_-]{0,63}$"

SYSTEM_INSTRUCTION = f"""You are an expert Arduino programmer and firmware engineer.
Generate a complete, multi-file Arduino project from the user's description.

Project layout:
- The main sketch is named exactly after the project: '<projectName>.ino'.
- Put classes and reusable drivers in separate '.h' and '.cpp' pairs where that keeps the sketch readable.
- Keep the code clean and commented, following Arduino conventions (setup/loop, const pin numbers, non-blocking timing where practical).

Wiring:
- If the project uses any external hardware (LEDs, resistors, sensors, buttons, displays, motors, ...), also produce a file named '{WIRING_FILENAME}' with a clear ASCII art diagram showing how each component connects to the board.
- Projects that only use the board's built-in LED (pin 13) and no other components do not need a wiring diagram.

Respond with a single JSON object that matches the provided schema and nothing else."""

PROJECT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "projectName": {
            "type": "string",
            "description": (
                "Short camelCase identifier for the project. Used for the main .ino file "
                "and for the archive name."
            ),
            "pattern": PROJECT_NAME_PATTERN,
        },
        "files": {
            "type": "array",
            "description": (
                "Every file of the project. Includes a 'wiring.txt' ASCII diagram when "
                "external components are used."
            ),
            "items": {
                "type": "object",
                "properties": {
                    "filename": {
                        "type": "string",
                        "description": (
                            "File name with extension, e.g. 'blinky.ino', 'LedManager.h', "
                            "'LedManager.cpp' or 'wiring.txt'."
                        ),
                    },
                    "content": {
                        "type": "string",
                        "description": "Complete raw contents of the file.",
                    },
                },
                "required": ["filename", "content"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["projectName", "files"],
    "additionalProperties": False,
}

_PROJECT_NAME = re.compile(PROJECT_NAME_PATTERN)
_FENCE_OPEN = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")


def response_format() -> Dict[str, Any]:
    """``response_format`` argument requesting schema-constrained output."""
    return {
        "type": "json_schema",
        "json_schema": {"name": SCHEMA_NAME, "strict": True, "schema": PROJECT_SCHEMA},
    }


class FilePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    filename: StrictStr
    content: StrictStr

    @field_validator("filename")
    @classmethod
    def _safe_filename(cls, value: str) -> str:
        name = value.strip().replace("\\", "/")
        if not name:
            raise ValueError("filename is empty")
        path = PurePosixPath(name)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(f"unsafe filename {value!r}")
        return name


class ProjectPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    project_name: StrictStr = Field(alias="projectName")
    files: List[FilePayload] = Field(min_length=1)

    @field_validator("project_name")
    @classmethod
    def _usable_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("projectName is empty")
        if not _PROJECT_NAME.match(name):
            raise ValueError(
                f"projectName {value!r} must be an identifier of letters, digits, '_' or '-' (at most 64)"
            )
        return name

    @model_validator(mode="after")
    def _unique_filenames(self) -> "ProjectPayload":
        # names must stay distinct on case-insensitive filesystems
        seen = set()
        for item in self.files:
            key = item.filename.casefold()
            if key in seen:
                raise ValueError(f"duplicate filename {item.filename!r}")
            seen.add(key)
        return self


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence some models add around JSON."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_project_response(text: str) -> GeneratedProject:
    """Decode and validate the model's answer into a ``GeneratedProject``."""
    if not text or not text.strip():
        raise ResponseParseError("The model returned an empty response.")
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as exc:
        raise ResponseParseError("The model's response was not valid JSON.") from exc
    try:
        payload = ProjectPayload.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "response"
        raise ResponseValidationError(
            f"Invalid project structure returned by the model ({where}: {first.get('msg')})."
        ) from exc
    return GeneratedProject(
        project_name=payload.project_name,
        files=tuple(ProjectFile(f.filename, f.content) for f in payload.files),
    )


__all__ = [
    "SYSTEM_INSTRUCTION",
    "PROJECT_SCHEMA",
    "WIRING_FILENAME",
    "PROJECT_NAME_PATTERN",
    "BLANK_PROMPT_MESSAGE",
    "response_format",
    "strip_code_fence",
    "parse_project_response",
    "FilePayload",
    "ProjectPayload",
]
