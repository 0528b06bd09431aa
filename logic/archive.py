"""Packaging of a generated project into a downloadable ZIP archive."""
import io
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

from errors import PackagingError
from logging_bus import emit
from state import ProjectFile

PROMPT_FILENAME = "prompt.txt"


class ArchiveBuilder(Protocol):
    def build(self, folder: str, files: Dict[str, str]) -> bytes: ...


class FileSaver(Protocol):
    def save(self, data: bytes, suggested_name: str) -> Optional[str]: ...


class ZipArchiveBuilder:
    """Writes every file under a single top-level folder of a deflated ZIP."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def build(self, folder: str, files: Dict[str, str]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, mode="w", compression=self.compression) as zf:
            for name, content in files.items():
                zf.writestr(f"{folder}/{name}", content)
        return buffer.getvalue()


class DirectoryFileSaver:
    """Saves archives into a fixed directory."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def save(self, data: bytes, suggested_name: str) -> Optional[str]:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / suggested_name
        path.write_bytes(data)
        return str(path)


class ArchivePackager:
    def __init__(self, builder: ArchiveBuilder, saver: FileSaver):
        self.builder = builder
        self.saver = saver

    def package(self, files: Iterable[ProjectFile], project_name: str, prompt: str) -> Optional[str]:
        """Build ``<project_name>.zip`` and hand it to the saver.

        Returns where the archive was saved, or ``None`` when the saver was
        cancelled.
        """
        if not project_name or not project_name.strip():
            raise PackagingError("Cannot package a project without a name.")
        entries: Dict[str, str] = {}
        for f in files:
            if f.filename.casefold() == PROMPT_FILENAME:
                emit("WARN", "ARCHIVE", "Skipping generated file with reserved name", filename=f.filename)
                continue
            entries[f.filename] = f.content
        entries[PROMPT_FILENAME] = prompt

        archive_name = f"{project_name}.zip"
        try:
            data = self.builder.build(project_name, entries)
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            emit("ERROR", "ARCHIVE", "Archive build failed", error=str(exc))
            raise PackagingError("An error occurred while creating the ZIP file.") from exc
        try:
            location = self.saver.save(data, archive_name)
        except OSError as exc:
            emit("ERROR", "ARCHIVE", "Archive save failed", error=str(exc))
            raise PackagingError(f"Could not save {archive_name}: {exc.strerror or exc}") from exc

        if location is None:
            emit("INFO", "ARCHIVE", "Save cancelled", archive=archive_name)
        else:
            emit("INFO", "ARCHIVE", "Archive saved", path=location, files=len(entries), size=len(data))
        return location


__all__ = [
    "ArchiveBuilder",
    "FileSaver",
    "ZipArchiveBuilder",
    "DirectoryFileSaver",
    "ArchivePackager",
    "PROMPT_FILENAME",
]
