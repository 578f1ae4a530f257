# editagent: File tools exposed to the model: read_file, list_files and edit_file.
# Paths are resolved against the process working directory and checked with fs.is_unsafe_path before any I/O.

import codecs
import shutil
from typing import Any, Dict, Optional

from .errors import InvalidParametersError, ToolExecutionError
from .fs import PATH_NOT_ALLOWED, count_lines, format_size, is_unsafe_path, resolve_tool_path
from .tools import ERROR_PREFIX, Tool

MAX_FILE_SIZE = 1024 * 1024  # 1 MiB
BACKUP_SUFFIX = ".backup"


def _check_path(raw: str) -> None:
    if is_unsafe_path(raw):
        raise ToolExecutionError(PATH_NOT_ALLOWED)


class ReadFileTool(Tool):
    name = "read_file"
    description = (
        "Reads file contents from the filesystem. Supports both absolute and relative paths "
        "and text encodings; files larger than 1 MB are refused."
    )
    param_overrides = {
        "path": {"description": "The file path to read (absolute or relative to the current working directory)"},
        "encoding": {"description": "The character encoding to use (default: utf-8)"},
    }

    def validate(self, parameters: Optional[Dict[str, Any]]) -> None:
        super().validate(parameters)
        encoding = parameters.get("encoding")
        if encoding and encoding.strip():
            try:
                codecs.lookup(encoding)
            except LookupError:
                raise InvalidParametersError(f"Invalid encoding: {encoding}")

    def run(self, path: str, encoding: str = "utf-8") -> str:
        _check_path(path)
        target = resolve_tool_path(path)
        if not target.exists():
            raise ToolExecutionError(f"File not found: {path}")
        if not target.is_file():
            raise ToolExecutionError(f"Path is not a regular file: {path}")
        size = target.stat().st_size
        if size > MAX_FILE_SIZE:
            raise ToolExecutionError(
                f"File is too large ({size} bytes). Maximum supported file size is {MAX_FILE_SIZE} bytes."
            )
        try:
            with target.open("r", encoding=encoding.strip() or "utf-8", newline="") as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise ToolExecutionError(f"Could not decode {path} as {encoding}: {e.reason}")
        self.ctx.log(f"read_file: {target} ({count_lines(content)} lines)")
        return content


class ListFilesTool(Tool):
    name = "list_files"
    description = "Lists the contents of a directory, including files and subdirectories"
    param_overrides = {
        "path": {"description": "The directory path to list. Defaults to current directory if not provided"},
        "show_hidden": {"description": "Whether to show hidden files (files starting with dot). Defaults to false"},
    }

    def run(self, path: str = ".", show_hidden: bool = False) -> str:
        _check_path(path)
        target = resolve_tool_path(path or ".")
        if not target.exists():
            raise ToolExecutionError(f"Directory not found: {path}")
        if not target.is_dir():
            raise ToolExecutionError(f"Path is not a directory: {path}")

        entries = sorted(
            (p for p in target.iterdir() if show_hidden or not p.name.startswith(".")),
            key=lambda p: p.name.lower(),
        )
        lines = [f"Directory: {target}", ""]
        if not entries:
            lines.append("(empty)")
        for entry in entries:
            if entry.is_dir():
                lines.append(f"{entry.name} [directory]")
                continue
            line = f"{entry.name} [file]"
            try:
                line += f" - {format_size(entry.stat().st_size)}"
            except OSError:
                # size is optional in the listing
                pass
            lines.append(line)
        return "\n".join(lines) + "\n"


class EditFileTool(Tool):
    """
    Plain text replacement of every occurrence of search_text.

    The original file is copied to `<file>.backup` before the new content is
    written. Nothing is written when search_text does not occur.
    """

    name = "edit_file"
    description = (
        "Performs simple text replacement in files. Creates a backup before editing "
        "and validates that search text exists."
    )
    param_overrides = {
        "path": {"description": "The path to the file to edit"},
        "search_text": {"description": "The text to search for and replace"},
        "replace_text": {"description": "The text to replace the search text with"},
    }
    empty_allowed = ("replace_text",)

    def run(self, path: str, search_text: str, replace_text: str) -> str:
        _check_path(path)
        target = resolve_tool_path(path)
        if not target.exists():
            raise ToolExecutionError(f"File not found: {path}")
        if not target.is_file():
            raise ToolExecutionError(f"Path is not a regular file: {path}")

        try:
            with target.open("r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ToolExecutionError(f"Failed to read file: {e}")

        occurrences = content.count(search_text)
        if occurrences == 0:
            self.ctx.log(f"edit_file: search text not found in {target}")
            return f"{ERROR_PREFIX}Text '{search_text}' not found in file"

        backup = target.with_name(target.name + BACKUP_SUFFIX)
        try:
            shutil.copy2(target, backup)
        except OSError as e:
            raise ToolExecutionError(f"Failed to create backup file: {e}")
        self.ctx.log(f"edit_file: created backup {backup}")

        try:
            with target.open("w", encoding="utf-8", newline="") as f:
                f.write(content.replace(search_text, replace_text))
        except OSError as e:
            raise ToolExecutionError(f"Failed to write to file: {e}")
        self.ctx.log(f"edit_file: {target} ({occurrences} occurrences replaced)")

        return (
            f"File edited successfully! Replaced {occurrences} occurrences of '{search_text}' "
            f"with '{replace_text}' in {path}. Backup created at {path}{BACKUP_SUFFIX}"
        )
