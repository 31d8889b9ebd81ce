# Project file tools: list, read, search and create files under res://.
# Author: AI Dock contributors
# Date: 2025-07-03
# Version: 0.2.0

import base64
from pydantic import BaseModel, Field
from typing import List, Type
from .base_tool import BaseTool, ToolArgs
from aidock.services.editor_host import HostError, RES_PREFIX, join_res_path, parent_res_path
from aidock.utils.logger import console

TEXT_FILE_LIMIT = 10240

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "webp", "svg", "bmp", "tga"}


def image_mime_subtype(extension: str) -> str:
    if extension == "svg":
        return "svg+xml"
    if extension == "jpg":
        return "jpeg"
    return extension


def _extension(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


# --- Tool 1: List Directory ---

class ListDirectoryInput(BaseModel):
    path: str = Field(..., description="The path to list (e.g., 'res://scripts/')")

class ListDirectoryTool(BaseTool):
    """Lists the entries of one project directory, tagged [DIR] or [FILE]."""
    name: str = "list_directory"
    description: str = "List files and folders in a specific directory within the project (res://)."
    args_schema: Type[BaseModel] = ListDirectoryInput

    def execute(self, args: ToolArgs) -> str:
        path = args["path"]
        try:
            entries = self.host.list_dir(path)
        except HostError as e:
            return f"Error: Could not open directory {path}. {e}"
        return "\n".join(f"[DIR] {entry.name}" if entry.is_dir else f"[FILE] {entry.name}" for entry in entries)


# --- Tool 2: Read File ---

class ReadFileInput(BaseModel):
    path: str = Field(..., description="The full path of the file to read (e.g., 'res://main.gd')")

class ReadFileTool(BaseTool):
    """
    Reads a project file. Text files are returned as-is up to TEXT_FILE_LIMIT bytes;
    images are returned as a base64 data URI whatever their size.
    """
    name: str = "read_file"
    description: str = "Read the content of a specific file. Images are returned as a base64 data URI."
    args_schema: Type[BaseModel] = ReadFileInput

    def execute(self, args: ToolArgs) -> str:
        path = args["path"]
        try:
            if not self.host.file_exists(path):
                return "Error: File not found."
            length = self.host.file_size(path)
            extension = _extension(path)
            is_image = extension in IMAGE_EXTENSIONS

            if not is_image and length > TEXT_FILE_LIMIT:
                return f"Error: File is too large ({length} bytes). Text file limit is 10KB."

            data = self.host.read_bytes(path)
        except HostError as e:
            return f"Error: Could not open file. {e}"

        if is_image:
            encoded = base64.b64encode(data).decode("ascii")
            return f"data:image/{image_mime_subtype(extension)};base64,{encoded}"
        return data.decode("utf-8", errors="replace")


# --- Tool 3: Search Files ---

class SearchFilesInput(BaseModel):
    keyword: str = Field(..., description="The partial filename to search for.")

class SearchFilesTool(BaseTool):
    """Recursive, case-insensitive filename search over the whole project."""
    name: str = "search_files"
    description: str = "Search for files where the filename contains a specific name keyword."
    args_schema: Type[BaseModel] = SearchFilesInput

    def execute(self, args: ToolArgs) -> str:
        keyword = args["keyword"].lower()
        results: List[str] = []
        self._search(RES_PREFIX, keyword, results)
        return "\n".join(results).strip()

    def _search(self, directory: str, keyword: str, results: List[str]) -> None:
        try:
            entries = self.host.list_dir(directory)
        except HostError:
            return
        for entry in entries:
            if entry.name in (".", ".."):
                continue
            full_path = join_res_path(directory, entry.name)
            if entry.is_dir:
                self._search(full_path, keyword, results)
            elif keyword in entry.name.lower():
                results.append(full_path)


# --- Tool 4: Create File ---

class CreateFileInput(BaseModel):
    path: str = Field(..., description="The full path (e.g., 'res://scripts/my_script.gd').")
    content: str = Field(..., description="The text content to write into the file.")

class CreateFileTool(BaseTool):
    """Creates or overwrites a text file, creating missing directories first."""
    name: str = "create_file"
    description: str = "Create or overwrite a text file (e.g., .gd, .tscn, .txt) at a specific path. " \
    "If the directory does not exist, this tool will create it recursively. " \
    "Please check the directory before using this tool to ensure that files are not accidentally overwritten."
    args_schema: Type[BaseModel] = CreateFileInput

    def execute(self, args: ToolArgs) -> str:
        path = args["path"]
        if not path:
            return "Error: No file path given."
        directory = parent_res_path(path)
        try:
            if directory and not self.host.dir_exists(directory):
                self.host.make_dir_recursive(directory)
        except HostError as e:
            return f"Error creating directory '{directory}': {e}"

        try:
            self.host.write_text(path, args["content"])
        except HostError as e:
            return f"Error: Could not open file '{path}' for writing. {e}"

        self.host.refresh_index()
        console.success(f"Tool '{self.name}' wrote '{path}'.")
        return f"Success: File created/overwritten at '{path}'."
